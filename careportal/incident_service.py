"""Incident service."""
from __future__ import annotations

import logging
from datetime import datetime, time

from .api_types import IncidentDto
from .enums import IncidentSeverity, IncidentStatus, display_name
from .errors import NotFoundError, ValidationError
from .models import Incident, utcnow
from .pagination import PageRequest, make_page_response, paginate_sequence
from .unit_of_work import UnitOfWork
from .validation import iso

log = logging.getLogger(__name__)

UNKNOWN_CLIENT = "Unknown Client"
UNKNOWN_STAFF = "Unknown Staff"


def to_incident_dto(incident: Incident) -> IncidentDto:
    return {
        "id": incident.id,
        "clientId": incident.client_id,
        "clientName": incident.client.full_name if incident.client else UNKNOWN_CLIENT,
        "staffId": incident.staff_id,
        "staffName": incident.staff.full_name if incident.staff else UNKNOWN_STAFF,
        "title": incident.title,
        "description": incident.description,
        "incidentDate": iso(incident.incident_date),
        "incidentTime": incident.incident_time.strftime("%H:%M:%S") if incident.incident_time else None,
        "location": incident.location,
        "fileName": incident.file_name,
        "isActive": bool(incident.is_active),
        "status": int(incident.status),
        "severity": int(incident.severity),
        "statusDisplayName": display_name(IncidentStatus, incident.status),
        "severityDisplayName": display_name(IncidentSeverity, incident.severity),
        "createdAt": iso(incident.created_at),
        "updatedAt": iso(incident.updated_at),
    }


def _check_refs(uow: UnitOfWork, client_id: int | None, staff_id: str | None) -> None:
    if client_id is not None and uow.clients.get(client_id) is None:
        raise ValidationError("Client not found", field="clientId")
    if staff_id is not None and uow.users.get(staff_id) is None:
        raise ValidationError("Staff member not found", field="staffId")


def get_by_id(uow: UnitOfWork, incident_id: int) -> IncidentDto | None:
    incident = uow.incidents.with_details(incident_id)
    return to_incident_dto(incident) if incident else None


def get_all(
    uow: UnitOfWork,
    *,
    page: PageRequest,
    status: IncidentStatus | None = None,
    severity: IncidentSeverity | None = None,
) -> dict:
    if status is not None or severity is not None:
        matches = uow.incidents.filtered(
            status=int(status) if status is not None else None,
            severity=int(severity) if severity is not None else None,
        )
        total = len(matches)
        items = paginate_sequence(matches, page)
    else:
        total = uow.incidents.active_count()
        items = uow.incidents.paged_with_details(page["page_number"], page["page_size"])
    return make_page_response("incidents", [to_incident_dto(i) for i in items], page, total)


def get_by_client(uow: UnitOfWork, client_id: int) -> list[IncidentDto]:
    return [to_incident_dto(i) for i in uow.incidents.by_client(client_id)]


def get_by_staff(uow: UnitOfWork, staff_id: str) -> list[IncidentDto]:
    return [to_incident_dto(i) for i in uow.incidents.by_staff(staff_id)]


def create(
    uow: UnitOfWork,
    *,
    client_id: int,
    staff_id: str,
    title: str,
    incident_date: datetime,
    incident_time: time,
    description: str | None = None,
    location: str | None = None,
    file_name: str | None = None,
    is_active: bool = True,
    status: IncidentStatus = IncidentStatus.Open,
    severity: IncidentSeverity = IncidentSeverity.Low,
    current_user_id: str | None = None,
) -> IncidentDto:
    _check_refs(uow, client_id, staff_id)
    incident = Incident(
        client_id=client_id,
        staff_id=staff_id,
        title=title,
        description=description,
        incident_date=incident_date,
        incident_time=incident_time,
        location=location,
        file_name=file_name or None,
        is_active=is_active,
        status=int(status),
        severity=int(severity),
        created_at=utcnow(),
        created_by=current_user_id,
    )
    uow.incidents.add(incident)
    uow.save_changes()
    log.info("incident created id=%s client=%s severity=%s", incident.id, client_id, int(severity))
    return to_incident_dto(incident)


def update(
    uow: UnitOfWork,
    incident_id: int,
    *,
    title: str | None = None,
    description: str | None = None,
    incident_date: datetime | None = None,
    incident_time: time | None = None,
    location: str | None = None,
    file_name: str | None = None,
    is_active: bool | None = None,
    status: IncidentStatus | None = None,
    severity: IncidentSeverity | None = None,
    current_user_id: str | None = None,
) -> IncidentDto:
    incident = uow.incidents.get(incident_id)
    if incident is None:
        raise NotFoundError("Incident not found")
    if title:
        incident.title = title
    if description:
        incident.description = description
    if incident_date is not None:
        incident.incident_date = incident_date
    if incident_time is not None:
        incident.incident_time = incident_time
    if location:
        incident.location = location
    if file_name:
        incident.file_name = file_name
    if is_active is not None:
        incident.is_active = is_active
    if status is not None:
        incident.status = int(status)
    if severity is not None:
        incident.severity = int(severity)
    incident.updated_at = utcnow()
    incident.updated_by = current_user_id
    uow.save_changes()
    return to_incident_dto(incident)


def delete(uow: UnitOfWork, incident_id: int) -> bool:
    incident = uow.incidents.get(incident_id)
    if incident is None:
        return False
    uow.incidents.soft_delete(incident)
    uow.save_changes()
    return True


__all__ = [
    "to_incident_dto",
    "get_by_id",
    "get_all",
    "get_by_client",
    "get_by_staff",
    "create",
    "update",
    "delete",
    "UNKNOWN_CLIENT",
    "UNKNOWN_STAFF",
]
