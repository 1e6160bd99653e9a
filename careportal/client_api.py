"""Client endpoints.

Admins see and manage every client; staff only read the clients assigned to
them.
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from . import client_service
from .app_authz import AuthzError, current_user_id, is_admin, require_roles
from .audit import log_event
from .errors import NotFoundError, ValidationError
from .pagination import make_page_response, parse_page_params
from .roles import ADMIN, STAFF
from .telemetry import track_event
from .unit_of_work import UnitOfWork
from .validation import get_bool, get_date, get_email, get_str, json_body

bp = Blueprint("client_api", __name__, url_prefix="/api/Client")

INVALID_ID = "Invalid client ID"


def _check_id(client_id: int) -> None:
    if client_id <= 0:
        raise ValidationError(INVALID_ID, field="id")


@bp.get("")
@require_roles(ADMIN, STAFF)
def list_clients():
    page = parse_page_params(request.args)
    with UnitOfWork() as uow:
        if is_admin():
            return jsonify(client_service.get_all(uow, page=page, search=request.args.get("search")))
        clients = client_service.get_by_staff(uow, current_user_id() or "")
    resp = make_page_response("clients", clients, {"page_number": 1, "page_size": len(clients)}, len(clients))
    return jsonify(resp)


@bp.get("/<int(signed=True):client_id>")
@require_roles(ADMIN, STAFF)
def get_client(client_id: int):
    _check_id(client_id)
    with UnitOfWork() as uow:
        client = client_service.get_by_id(uow, client_id)
    if client is None:
        raise NotFoundError("Client not found")
    if not is_admin() and client["assignedStaffId"] != current_user_id():
        raise AuthzError("forbidden")
    return jsonify(client)


@bp.post("")
@require_roles(ADMIN)
def create_client():
    data = json_body("Client data is required")
    fields = dict(
        first_name=get_str(data, "firstName", required=True, max_len=100),
        last_name=get_str(data, "lastName", required=True, max_len=100),
        date_of_birth=get_date(data, "dateOfBirth", required=True),
        address=get_str(data, "address", max_len=500),
        phone_number=get_str(data, "phoneNumber", max_len=20),
        email=get_email(data, "email"),
        assigned_staff_id=get_str(data, "assignedStaffId"),
    )
    is_active = get_bool(data, "isActive")
    with UnitOfWork() as uow:
        client = client_service.create(
            uow, **fields, is_active=True if is_active is None else is_active, current_user_id=current_user_id()
        )
    track_event("create", entity="client")
    resp = jsonify(client)
    resp.status_code = 201
    resp.headers["Location"] = f"{bp.url_prefix}/{client['id']}"
    return resp


@bp.put("/<int(signed=True):client_id>")
@require_roles(ADMIN)
def update_client(client_id: int):
    _check_id(client_id)
    data = json_body("Update data is required")
    fields = dict(
        first_name=get_str(data, "firstName", max_len=100),
        last_name=get_str(data, "lastName", max_len=100),
        date_of_birth=get_date(data, "dateOfBirth"),
        address=get_str(data, "address", max_len=500),
        phone_number=get_str(data, "phoneNumber", max_len=20),
        email=get_email(data, "email"),
        assigned_staff_id=get_str(data, "assignedStaffId"),
        is_active=get_bool(data, "isActive"),
    )
    with UnitOfWork() as uow:
        client = client_service.update(uow, client_id, **fields, current_user_id=current_user_id())
    track_event("update", entity="client")
    return jsonify(client)


@bp.delete("/<int(signed=True):client_id>")
@require_roles(ADMIN)
def delete_client(client_id: int):
    _check_id(client_id)
    with UnitOfWork() as uow:
        if not client_service.delete(uow, client_id):
            raise NotFoundError("Client not found")
    track_event("delete", entity="client")
    log_event("client_delete", client_id=client_id)
    return "", 204


@bp.post("/<int(signed=True):client_id>/toggle-active")
@require_roles(ADMIN)
def toggle_active(client_id: int):
    _check_id(client_id)
    with UnitOfWork() as uow:
        if not client_service.toggle_active(uow, client_id, current_user_id=current_user_id()):
            raise NotFoundError("Client not found")
    return "", 204
