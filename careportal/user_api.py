"""User administration endpoints.

Staff may read their own profile and change their own password; everything
else is Admin only.
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from . import user_service
from .app_authz import AuthzError, current_user_id, is_admin, require_roles
from .audit import log_event
from .errors import NotFoundError, ValidationError
from .pagination import parse_page_params
from .roles import ADMIN, STAFF
from .telemetry import track_event
from .unit_of_work import UnitOfWork
from .validation import get_bool, get_email, get_str, json_body

bp = Blueprint("user_api", __name__, url_prefix="/api/User")

USER_NOT_FOUND = "User not found"


def _raw_password(data: dict, key: str) -> str:
    raw = data.get(key)
    if not isinstance(raw, str) or not raw:
        raise ValidationError(f"{key} is required", field=key)
    return raw


@bp.get("")
@require_roles(ADMIN)
def list_users():
    page = parse_page_params(request.args)
    with UnitOfWork() as uow:
        return jsonify(user_service.get_all(uow, page=page, search=request.args.get("search")))


@bp.get("/roles")
@require_roles(ADMIN)
def list_roles():
    with UnitOfWork() as uow:
        return jsonify(user_service.get_user_roles(uow))


@bp.get("/<user_id>")
@require_roles(ADMIN, STAFF)
def get_user(user_id: str):
    # Staff always receive their own profile
    target = user_id if is_admin() else current_user_id()
    with UnitOfWork() as uow:
        user = user_service.get_by_id(uow, target or "")
    if user is None:
        raise NotFoundError(USER_NOT_FOUND)
    return jsonify(user)


@bp.post("")
@require_roles(ADMIN)
def create_user():
    data = json_body("User data is required")
    first_name = get_str(data, "firstName", required=True, max_len=100)
    last_name = get_str(data, "lastName", required=True, max_len=100)
    email = get_email(data, "email", required=True)
    password = _raw_password(data, "password")
    role = get_str(data, "role", max_len=256)
    is_active = get_bool(data, "isActive")
    with UnitOfWork() as uow:
        user = user_service.create(
            uow,
            first_name=first_name or "",
            last_name=last_name or "",
            email=email or "",
            password=password,
            role=role,
            is_active=True if is_active is None else is_active,
            current_user_id=current_user_id(),
        )
    track_event("create", entity="user")
    log_event("user_create", user_id=user["id"], role=user["role"])
    resp = jsonify(user)
    resp.status_code = 201
    resp.headers["Location"] = f"{bp.url_prefix}/{user['id']}"
    return resp


@bp.put("/<user_id>")
@require_roles(ADMIN)
def update_user(user_id: str):
    data = json_body("Update data is required")
    fields = dict(
        first_name=get_str(data, "firstName", max_len=100),
        last_name=get_str(data, "lastName", max_len=100),
        email=get_email(data, "email"),
        role=get_str(data, "role", max_len=256),
        is_active=get_bool(data, "isActive"),
    )
    with UnitOfWork() as uow:
        user = user_service.update(uow, user_id, **fields, current_user_id=current_user_id())
    track_event("update", entity="user")
    return jsonify(user)


@bp.delete("/<user_id>")
@require_roles(ADMIN)
def delete_user(user_id: str):
    with UnitOfWork() as uow:
        if not user_service.delete(uow, user_id):
            raise NotFoundError(USER_NOT_FOUND)
    track_event("delete", entity="user")
    log_event("user_delete", user_id=user_id)
    return "", 204


@bp.post("/<user_id>/toggle-active")
@require_roles(ADMIN)
def toggle_active(user_id: str):
    with UnitOfWork() as uow:
        if not user_service.toggle_active(uow, user_id, current_user_id=current_user_id()):
            raise NotFoundError(USER_NOT_FOUND)
    return "", 204


@bp.post("/<user_id>/change-password")
@require_roles(ADMIN, STAFF)
def change_password(user_id: str):
    if not is_admin() and current_user_id() != user_id:
        raise AuthzError("forbidden")
    data = json_body("Password data is required")
    try:
        with UnitOfWork() as uow:
            user_service.change_password(
                uow,
                user_id,
                current_password=str(data.get("currentPassword") or ""),
                new_password=str(data.get("newPassword") or ""),
                current_user_id=current_user_id(),
            )
    except user_service.InvalidPasswordError as e:
        track_event("change_password", entity="user", outcome="failure")
        return jsonify({"message": str(e)}), 400
    track_event("change_password", entity="user", outcome="success")
    log_event("password_change", user_id=user_id)
    return "", 204
