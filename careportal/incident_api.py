"""Incident endpoints (Admin only). Deletes are soft."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from . import incident_service
from .app_authz import current_user_id, require_roles
from .audit import log_event
from .enums import IncidentSeverity, IncidentStatus
from .errors import NotFoundError
from .pagination import parse_page_params
from .roles import ADMIN
from .telemetry import track_event
from .unit_of_work import UnitOfWork
from .validation import get_bool, get_date, get_enum, get_int, get_str, get_time, json_body

bp = Blueprint("incident_api", __name__, url_prefix="/api/Incident")

INCIDENT_NOT_FOUND = "Incident not found"


@bp.get("")
@require_roles(ADMIN)
def list_incidents():
    page = parse_page_params(request.args)
    status = get_enum(request.args, "status", IncidentStatus)
    severity = get_enum(request.args, "severity", IncidentSeverity)
    with UnitOfWork() as uow:
        return jsonify(incident_service.get_all(uow, page=page, status=status, severity=severity))


@bp.get("/<int:incident_id>")
@require_roles(ADMIN)
def get_incident(incident_id: int):
    with UnitOfWork() as uow:
        incident = incident_service.get_by_id(uow, incident_id)
    if incident is None:
        raise NotFoundError(INCIDENT_NOT_FOUND)
    return jsonify(incident)


@bp.post("")
@require_roles(ADMIN)
def create_incident():
    data = json_body("Incident data is required")
    fields = dict(
        client_id=get_int(data, "clientId", required=True),
        staff_id=get_str(data, "staffId", required=True),
        title=get_str(data, "title", required=True, max_len=200),
        description=get_str(data, "description", max_len=2000),
        incident_date=get_date(data, "incidentDate", required=True),
        incident_time=get_time(data, "incidentTime", required=True),
        location=get_str(data, "location", max_len=500),
        file_name=get_str(data, "fileName", max_len=500),
    )
    is_active = get_bool(data, "isActive")
    status = get_enum(data, "status", IncidentStatus) or IncidentStatus.Open
    severity = get_enum(data, "severity", IncidentSeverity) or IncidentSeverity.Low
    with UnitOfWork() as uow:
        incident = incident_service.create(
            uow,
            **fields,
            is_active=True if is_active is None else is_active,
            status=status,
            severity=severity,
            current_user_id=current_user_id(),
        )
    track_event("create", entity="incident")
    resp = jsonify(incident)
    resp.status_code = 201
    resp.headers["Location"] = f"{bp.url_prefix}/{incident['id']}"
    return resp


@bp.put("/<int:incident_id>")
@require_roles(ADMIN)
def update_incident(incident_id: int):
    data = json_body("Update data is required")
    fields = dict(
        title=get_str(data, "title", max_len=200),
        description=get_str(data, "description", max_len=2000),
        incident_date=get_date(data, "incidentDate"),
        incident_time=get_time(data, "incidentTime"),
        location=get_str(data, "location", max_len=500),
        file_name=get_str(data, "fileName", max_len=500),
        is_active=get_bool(data, "isActive"),
        status=get_enum(data, "status", IncidentStatus),
        severity=get_enum(data, "severity", IncidentSeverity),
    )
    with UnitOfWork() as uow:
        incident = incident_service.update(uow, incident_id, **fields, current_user_id=current_user_id())
    track_event("update", entity="incident")
    return jsonify(incident)


@bp.delete("/<int:incident_id>")
@require_roles(ADMIN)
def delete_incident(incident_id: int):
    with UnitOfWork() as uow:
        if not incident_service.delete(uow, incident_id):
            raise NotFoundError(INCIDENT_NOT_FOUND)
    track_event("delete", entity="incident")
    log_event("incident_delete", incident_id=incident_id)
    return "", 204
