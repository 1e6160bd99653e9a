"""Request-scoped identity derived from the bearer token.

The API is stateless: ``app_authz`` decodes the Authorization header and stores
the resulting SessionData on ``flask.g`` for the rest of the request.
"""
from __future__ import annotations

from typing import TypedDict

from flask import g, has_request_context

from .jwt_utils import AccessTokenPayload


class SessionData(TypedDict):
    user_id: str
    role: str
    email: str
    full_name: str


def persist_claims(claims: AccessTokenPayload) -> SessionData:
    """Store decoded token claims as the current request identity."""
    data: SessionData = {
        "user_id": claims["sub"],
        "role": claims["role"],
        "email": claims["email"],
        "full_name": f"{claims['firstName']} {claims['lastName']}".strip(),
    }
    g.session_data = data
    return data


def get_session() -> SessionData | None:
    if not has_request_context():
        return None
    return g.get("session_data")


def require_session() -> SessionData:
    data = get_session()
    if data is None:
        raise SessionError("authentication required")
    return data


class SessionError(Exception):
    """Signals a 401 unauthorized due to missing/invalid bearer token."""
    def __init__(self, message: str = "authentication required"):
        super().__init__(message)


__all__ = [
    "SessionData",
    "persist_claims",
    "get_session",
    "require_session",
    "SessionError",
]
