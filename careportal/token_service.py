"""Access/refresh token issuance for authenticated users."""

from __future__ import annotations

import logging
from datetime import datetime

from flask import current_app

from .jwt_utils import generate_refresh_token, issue_access_token, select_signing_secret
from .models import User

log = logging.getLogger(__name__)


class TokenConfigError(RuntimeError):
    """No signing secret configured."""


def _signing_secret() -> str:
    cfg = current_app.config
    secrets_list = [s for s in (cfg.get("JWT_SECRETS") or []) if s]
    try:
        return select_signing_secret(None, secrets_list or [cfg.get("SECRET_KEY") or ""])
    except Exception as e:
        raise TokenConfigError("JWT secret key not configured") from e


def build_claims(user: User) -> dict[str, str]:
    return {
        "sub": user.id,
        "userId": user.id,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "role": user.role,
    }


def generate_access_token(user: User) -> str:
    cfg = current_app.config
    token, _jti = issue_access_token(
        build_claims(user),
        secret=_signing_secret(),
        ttl=int(cfg.get("JWT_EXPIRES_MINUTES", 60)) * 60,
        issuer=cfg.get("JWT_ISSUER") or "CarePortal",
        audience=cfg.get("JWT_AUDIENCE") or "CarePortal",
    )
    return token


def generate_refresh() -> str:
    return generate_refresh_token()


def save_refresh_token(user_id: str, refresh_token: str, expires_at: datetime) -> None:
    # Refresh tokens are not persisted; rotation/validation is out of scope
    log.debug("refresh token issued for user %s (expires %s)", user_id, expires_at.isoformat())


def invalidate_refresh_tokens(user_id: str) -> None:
    log.debug("refresh tokens invalidated for user %s", user_id)


__all__ = [
    "TokenConfigError",
    "build_claims",
    "generate_access_token",
    "generate_refresh",
    "save_refresh_token",
    "invalidate_refresh_tokens",
]
