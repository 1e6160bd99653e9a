"""Job time endpoints.

Admins see every entry. Staff only see, log and edit their own time.
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from . import jobtime_service
from .app_authz import current_user_id, enforce_owner, is_admin, require_roles
from .enums import ActivityType
from .errors import NotFoundError
from .models import utcnow
from .pagination import parse_page_params
from .roles import ADMIN, STAFF
from .telemetry import track_event
from .unit_of_work import UnitOfWork
from .validation import get_bool, get_datetime, get_enum, get_int, get_str

bp = Blueprint("jobtime_api", __name__, url_prefix="/api/JobTime")

JOB_TIME_NOT_FOUND = "Job time not found"


def _body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _owned(uow: UnitOfWork, job_time_id: int):
    job = jobtime_service.get_entity(uow, job_time_id)
    if job is None:
        raise NotFoundError(JOB_TIME_NOT_FOUND)
    enforce_owner(job.staff_id)
    return job


@bp.get("")
@require_roles()
def list_job_times():
    page = parse_page_params(request.args)
    client_id = get_int(request.args, "clientId")
    staff_id = None if is_admin() else current_user_id()
    with UnitOfWork() as uow:
        return jsonify(jobtime_service.get_all(uow, page=page, staff_id=staff_id, client_id=client_id))


@bp.get("/<int:job_time_id>")
@require_roles()
def get_job_time(job_time_id: int):
    with UnitOfWork() as uow:
        job = jobtime_service.get_by_id(uow, job_time_id)
    if job is None:
        raise NotFoundError(JOB_TIME_NOT_FOUND)
    enforce_owner(job["staffId"])
    return jsonify(job)


@bp.post("")
@require_roles(ADMIN, STAFF)
def create_job_time():
    data = _body()
    staff_id = get_str(data, "staffId", required=True)
    enforce_owner(staff_id)
    fields = dict(
        client_id=get_int(data, "clientId", required=True),
        start_time=get_datetime(data, "startTime", required=True),
        end_time=get_datetime(data, "endTime"),
        activity_type=get_enum(data, "activityType", ActivityType, required=True),
        notes=get_str(data, "notes", max_len=2000),
    )
    is_active = get_bool(data, "isActive")
    with UnitOfWork() as uow:
        job = jobtime_service.create(
            uow,
            staff_id=staff_id or "",
            **fields,
            is_active=True if is_active is None else is_active,
            current_user_id=current_user_id(),
        )
    track_event("create", entity="job_time")
    resp = jsonify(job)
    resp.status_code = 201
    resp.headers["Location"] = f"{bp.url_prefix}/{job['id']}"
    return resp


@bp.put("/<int:job_time_id>")
@require_roles(ADMIN, STAFF)
def update_job_time(job_time_id: int):
    data = _body()
    fields = dict(
        start_time=get_datetime(data, "startTime"),
        end_time=get_datetime(data, "endTime"),
        activity_type=get_enum(data, "activityType", ActivityType),
        notes=get_str(data, "notes", max_len=2000),
        is_active=get_bool(data, "isActive"),
    )
    with UnitOfWork() as uow:
        _owned(uow, job_time_id)
        job = jobtime_service.update(uow, job_time_id, **fields, current_user_id=current_user_id())
    track_event("update", entity="job_time")
    return jsonify(job)


@bp.delete("/<int:job_time_id>")
@require_roles(ADMIN, STAFF)
def delete_job_time(job_time_id: int):
    with UnitOfWork() as uow:
        _owned(uow, job_time_id)
        if not jobtime_service.delete(uow, job_time_id):
            raise NotFoundError(JOB_TIME_NOT_FOUND)
    track_event("delete", entity="job_time")
    return "", 204


@bp.post("/<int:job_time_id>/complete")
@require_roles(ADMIN, STAFF)
def complete_job_time(job_time_id: int):
    end_time = get_datetime(_body(), "endTime") or utcnow()
    with UnitOfWork() as uow:
        _owned(uow, job_time_id)
        jobtime_service.complete(uow, job_time_id, end_time=end_time, current_user_id=current_user_id())
        job = jobtime_service.get_by_id(uow, job_time_id)
    track_event("complete", entity="job_time")
    return jsonify(job)
