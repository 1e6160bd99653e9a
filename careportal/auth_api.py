"""Authentication endpoints: login, refresh-token, logout."""

from __future__ import annotations

from flask import Blueprint, jsonify

from . import auth_service
from .app_authz import require_roles
from .app_sessions import require_session
from .unit_of_work import UnitOfWork
from .validation import get_email, get_str, json_body

bp = Blueprint("auth_api", __name__, url_prefix="/api/Auth")


@bp.post("/login")
def login():
    data = json_body()
    email = get_email(data, "email", required=True)
    # Validated but not stripped; whitespace is part of the password
    get_str(data, "password", required=True)
    with UnitOfWork() as uow:
        result = auth_service.login(uow, email=email or "", password=data["password"])
    return jsonify(result), 200 if result["success"] else 401


@bp.post("/refresh-token")
def refresh_token():
    data = json_body()
    token = get_str(data, "refreshToken", required=True)
    result = auth_service.refresh_token(token or "")
    return jsonify(result), 200 if result["success"] else 401


@bp.post("/logout")
@require_roles()
def logout():
    sess = require_session()
    result = auth_service.logout(sess["user_id"])
    return jsonify(result), 200 if result["success"] else 500
