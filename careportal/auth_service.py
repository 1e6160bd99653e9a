"""Login / refresh / logout.

Results are ``{success, message, data?}`` envelopes rather than exceptions so
the blueprint can choose 200 vs 401 without leaking which check failed.
"""
from __future__ import annotations

import logging
from datetime import timedelta

from werkzeug.security import check_password_hash

from .api_types import AuthResponse
from .audit import log_event
from .models import utcnow
from .telemetry import track_event
from .token_service import (
    generate_access_token,
    generate_refresh,
    invalidate_refresh_tokens,
    save_refresh_token,
)
from .unit_of_work import UnitOfWork
from .user_service import to_user_dto

log = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
REFRESH_NOT_IMPLEMENTED = "Refresh token validation not implemented in this example"
REFRESH_TOKEN_TTL = timedelta(minutes=60)


def login(uow: UnitOfWork, *, email: str, password: str) -> AuthResponse:
    user = uow.users.by_email(email)
    if user is None or not user.is_active or not check_password_hash(user.password_hash, password):
        track_event("login", outcome="failure")
        log_event("login_failed", email=email)
        return {"success": False, "message": INVALID_CREDENTIALS}

    user.last_login_at = utcnow()
    uow.save_changes()
    token = generate_access_token(user)
    refresh_token = generate_refresh()
    save_refresh_token(user.id, refresh_token, utcnow() + REFRESH_TOKEN_TTL)
    track_event("login", outcome="success")
    log_event("login", actor_user_id=user.id, actor_role=user.role)
    log.info("login ok user=%s", user.id)
    return {
        "success": True,
        "message": "Login successful",
        "data": {"token": token, "refreshToken": refresh_token, "user": to_user_dto(user)},
    }


def refresh_token(token: str) -> AuthResponse:
    return {"success": False, "message": REFRESH_NOT_IMPLEMENTED}


def logout(user_id: str) -> AuthResponse:
    try:
        invalidate_refresh_tokens(user_id)
    except Exception:
        log.exception("logout failed for user %s", user_id)
        return {"success": False, "message": "An error occurred during logout"}
    log_event("logout", actor_user_id=user_id)
    return {"success": True, "message": "Logout successful"}


__all__ = ["login", "refresh_token", "logout", "INVALID_CREDENTIALS", "REFRESH_NOT_IMPLEMENTED"]
