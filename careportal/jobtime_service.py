"""Job time logging service.

A job time is "completed" once it has an end time; its duration is rendered as
``HH:MM:SS`` (hours may exceed 24).
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta

from .api_types import JobTimeDto
from .enums import ActivityType, display_name
from .errors import NotFoundError, ValidationError
from .models import JobTime, utcnow
from .pagination import PageRequest, make_page_response, paginate_sequence
from .unit_of_work import UnitOfWork
from .validation import iso

log = logging.getLogger(__name__)

UNKNOWN_CLIENT = "Unknown Client"
UNKNOWN_STAFF = "Unknown Staff"


def format_duration(delta: timedelta | None) -> str | None:
    if delta is None:
        return None
    total = int(delta.total_seconds())
    hours, rem = divmod(total, 3600)
    minutes, seconds = divmod(rem, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def to_job_time_dto(job: JobTime) -> JobTimeDto:
    return {
        "id": job.id,
        "clientId": job.client_id,
        "clientName": job.client.full_name if job.client else UNKNOWN_CLIENT,
        "staffId": job.staff_id,
        "staffName": job.staff.full_name if job.staff else UNKNOWN_STAFF,
        "startTime": iso(job.start_time),
        "endTime": iso(job.end_time),
        "activityType": int(job.activity_type),
        "activityTypeDisplayName": display_name(ActivityType, job.activity_type),
        "notes": job.notes,
        "createdAt": iso(job.created_at),
        "updatedAt": iso(job.updated_at),
        "isActive": bool(job.is_active),
        "duration": format_duration(job.duration),
        "isCompleted": job.is_completed,
    }


def _check_window(start: datetime, end: datetime | None) -> None:
    if end is not None and end < start:
        raise ValidationError("endTime must not be before startTime", field="endTime")


def _stats(jobs: list[JobTime]) -> dict[str, int]:
    return {
        "totalJobTimes": len(jobs),
        "activeJobTimes": sum(1 for j in jobs if j.is_active),
        "completedJobTimes": sum(1 for j in jobs if j.is_completed),
        "ongoingJobTimes": sum(1 for j in jobs if j.is_active and not j.is_completed),
    }


# --- Queries ---
def get_entity(uow: UnitOfWork, job_time_id: int) -> JobTime | None:
    return uow.job_times.with_details(job_time_id)


def get_by_id(uow: UnitOfWork, job_time_id: int) -> JobTimeDto | None:
    job = uow.job_times.with_details(job_time_id)
    return to_job_time_dto(job) if job else None


def get_all(
    uow: UnitOfWork,
    *,
    page: PageRequest,
    staff_id: str | None = None,
    client_id: int | None = None,
) -> dict:
    if staff_id or client_id is not None:
        matches = uow.job_times.filtered(staff_id=staff_id or None, client_id=client_id)
        total = len(matches)
        items = paginate_sequence(matches, page)
    else:
        total = uow.job_times.active_count()
        items = uow.job_times.paged_with_details(page["page_number"], page["page_size"])
    return make_page_response("jobTimes", [to_job_time_dto(j) for j in items], page, total)


def get_by_client(uow: UnitOfWork, client_id: int) -> list[JobTimeDto]:
    return [to_job_time_dto(j) for j in uow.job_times.by_client(client_id)]


def get_by_staff(uow: UnitOfWork, staff_id: str) -> list[JobTimeDto]:
    return [to_job_time_dto(j) for j in uow.job_times.by_staff(staff_id)]


def get_by_date_range(uow: UnitOfWork, start: datetime, end: datetime) -> list[JobTimeDto]:
    return [to_job_time_dto(j) for j in uow.job_times.by_date_range(start, end)]


def get_stats(uow: UnitOfWork) -> dict[str, int]:
    total = uow.job_times.count()
    active = uow.job_times.active_count()
    completed = uow.job_times.completed_count()
    return {
        "totalJobTimes": total,
        "activeJobTimes": active,
        "completedJobTimes": completed,
        "ongoingJobTimes": max(active - completed, 0),
    }


def get_stats_by_staff(uow: UnitOfWork, staff_id: str) -> dict[str, int]:
    return _stats(uow.job_times.by_staff(staff_id))


def get_stats_by_client(uow: UnitOfWork, client_id: int) -> dict[str, int]:
    return _stats(uow.job_times.by_client(client_id))


# --- Commands ---
def create(
    uow: UnitOfWork,
    *,
    client_id: int,
    staff_id: str,
    start_time: datetime,
    activity_type: ActivityType,
    end_time: datetime | None = None,
    notes: str | None = None,
    is_active: bool = True,
    current_user_id: str | None = None,
) -> JobTimeDto:
    _check_window(start_time, end_time)
    if uow.clients.get(client_id) is None:
        raise ValidationError("Client not found", field="clientId")
    if uow.users.get(staff_id) is None:
        raise ValidationError("Staff member not found", field="staffId")
    job = JobTime(
        client_id=client_id,
        staff_id=staff_id,
        start_time=start_time,
        end_time=end_time,
        activity_type=int(activity_type),
        notes=notes,
        is_active=is_active,
        created_at=utcnow(),
        created_by=current_user_id,
    )
    uow.job_times.add(job)
    uow.save_changes()
    log.info("job time logged id=%s staff=%s client=%s", job.id, staff_id, client_id)
    return to_job_time_dto(job)


def update(
    uow: UnitOfWork,
    job_time_id: int,
    *,
    start_time: datetime | None = None,
    end_time: datetime | None = None,
    activity_type: ActivityType | None = None,
    notes: str | None = None,
    is_active: bool | None = None,
    current_user_id: str | None = None,
) -> JobTimeDto:
    job = uow.job_times.get(job_time_id)
    if job is None:
        raise NotFoundError("Job time not found")
    new_start = start_time if start_time is not None else job.start_time
    new_end = end_time if end_time is not None else job.end_time
    _check_window(new_start, new_end)
    job.start_time = new_start
    job.end_time = new_end
    if activity_type is not None:
        job.activity_type = int(activity_type)
    if notes:
        job.notes = notes
    if is_active is not None:
        job.is_active = is_active
    job.updated_at = utcnow()
    job.updated_by = current_user_id
    uow.save_changes()
    return to_job_time_dto(job)


def complete(uow: UnitOfWork, job_time_id: int, *, end_time: datetime, current_user_id: str | None = None) -> bool:
    job = uow.job_times.get(job_time_id)
    if job is None:
        return False
    _check_window(job.start_time, end_time)
    job.end_time = end_time
    job.updated_at = utcnow()
    job.updated_by = current_user_id
    uow.save_changes()
    return True


def delete(uow: UnitOfWork, job_time_id: int) -> bool:
    job = uow.job_times.get(job_time_id)
    if job is None:
        return False
    uow.job_times.delete(job)
    uow.save_changes()
    return True


__all__ = [
    "format_duration",
    "to_job_time_dto",
    "get_entity",
    "get_by_id",
    "get_all",
    "get_by_client",
    "get_by_staff",
    "get_by_date_range",
    "get_stats",
    "get_stats_by_staff",
    "get_stats_by_client",
    "create",
    "update",
    "complete",
    "delete",
]
