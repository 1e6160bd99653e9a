"""Authorization helpers.

``require_roles(*roles)`` authenticates the bearer token and checks the caller's
role. Missing or invalid tokens raise SessionError (401), a role outside the
allowed set raises AuthzError (403). With no roles given any authenticated
user passes.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from flask import current_app, request

from .app_sessions import SessionData, SessionError, get_session, persist_claims, require_session
from .jwt_utils import JWTError, decode as jwt_decode
from .roles import ADMIN, RoleLike, to_canonical

P = ParamSpec("P")
R = TypeVar("R")


class AuthzError(Exception):
    """Signals an authorization (403) failure to be caught by centralized handlers."""

    required: str | None

    def __init__(self, message: str = "forbidden", required: str | None = None):
        super().__init__(message)
        self.required = required


def verification_secrets() -> list[str]:
    cfg = current_app.config
    secrets_list = [s for s in (cfg.get("JWT_SECRETS") or []) if s]
    if not secrets_list and cfg.get("SECRET_KEY"):
        secrets_list = [cfg["SECRET_KEY"]]
    return secrets_list


def authenticate() -> SessionData:
    """Resolve the caller from ``Authorization: Bearer <token>``."""
    sess = get_session()
    if sess is not None:
        return sess
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.lower().startswith("bearer "):
        raise SessionError("authentication required")
    token = auth_header.split(None, 1)[1].strip()
    cfg = current_app.config
    try:
        claims = jwt_decode(
            token,
            secrets_list=verification_secrets(),
            issuer=cfg.get("JWT_ISSUER"),
            audience=cfg.get("JWT_AUDIENCE"),
            leeway=cfg.get("JWT_LEEWAY_SECONDS", 60),
        )
    except JWTError as e:
        current_app.logger.debug({"jwt_reject": str(e)})
        raise SessionError("invalid token") from e
    return persist_claims(claims)


def require_roles(*roles: RoleLike) -> Callable[[Callable[P, R]], Callable[P, R]]:
    canonical_allowed = [to_canonical(r) for r in roles]

    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        @wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            sess = authenticate()
            if canonical_allowed and to_canonical(sess["role"]) not in canonical_allowed:
                raise AuthzError("forbidden", required=canonical_allowed[0])
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def current_user_id() -> str | None:
    sess = get_session()
    return sess["user_id"] if sess else None


def current_role() -> str | None:
    sess = get_session()
    return to_canonical(sess["role"]) if sess else None


def is_admin() -> bool:
    return current_role() == ADMIN


def enforce_owner(owner_id: str | None) -> None:
    """Admins pass; everyone else must own the resource."""
    sess = require_session()
    if to_canonical(sess["role"]) == ADMIN:
        return
    if owner_id is None or owner_id != sess["user_id"]:
        raise AuthzError("forbidden")


__all__ = [
    "require_roles",
    "authenticate",
    "verification_secrets",
    "current_user_id",
    "current_role",
    "is_admin",
    "enforce_owner",
    "AuthzError",
]
