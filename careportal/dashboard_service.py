"""Dashboard aggregates and the recent-activity feed."""
from __future__ import annotations

from datetime import datetime, timedelta

from .api_types import Dashboard, DashboardStats, RecentActivity
from .enums import DOC_STATUS_PENDING, ActivityType, IncidentStatus, display_name
from .models import Client, Incident, JobTime, utcnow
from .unit_of_work import UnitOfWork
from .validation import iso

UNKNOWN_CLIENT = "Unknown Client"
UNKNOWN_STAFF = "Unknown Staff"
DEFAULT_ACTIVITY_COUNT = 10


def _today_start(now: datetime) -> datetime:
    return datetime(now.year, now.month, now.day)


def week_start(now: datetime | None = None) -> datetime:
    """Most recent Sunday 00:00 (UTC)."""
    today = _today_start(now or utcnow())
    # weekday(): Monday=0 .. Sunday=6
    return today - timedelta(days=(today.weekday() + 1) % 7)


def get_stats(uow: UnitOfWork) -> DashboardStats:
    now = utcnow()
    today = _today_start(now)
    tomorrow = today + timedelta(days=1)
    total_job_times = uow.job_times.count()
    hours = sum(
        (j.end_time - j.start_time).total_seconds() / 3600.0
        for j in uow.job_times.completed_since(week_start(now))
        if j.end_time is not None
    )
    return {
        "totalClients": uow.clients.count(),
        "activeClients": uow.clients.active_count(),
        "totalUsers": uow.users.count(),
        "activeUsers": uow.users.active_count(),
        "totalJobTimes": total_job_times,
        "todayJobTimes": uow.job_times.count(JobTime.start_time >= today, JobTime.start_time < tomorrow),
        "totalIncidents": uow.incidents.count(),
        "openIncidents": uow.incidents.count(Incident.status == int(IncidentStatus.Open)),
        "totalDocuments": uow.documents.count(),
        "pendingDocuments": uow.documents.count_status(DOC_STATUS_PENDING),
        "totalHoursThisWeek": hours,
        "averageHoursPerDay": hours / 7 if total_job_times > 0 else 0.0,
    }


def _client_name(client: Client | None) -> str:
    return f"{client.first_name} {client.last_name}" if client else UNKNOWN_CLIENT


def get_recent_activities(uow: UnitOfWork, count: int = DEFAULT_ACTIVITY_COUNT) -> list[RecentActivity]:
    rows: list[tuple[datetime, RecentActivity]] = []
    half, quarter = count // 2, count // 4

    for job in uow.job_times.recent(half) if half > 0 else []:
        activity = display_name(ActivityType, job.activity_type)
        client = job.client
        rows.append((job.created_at, {
            "id": str(job.id),
            "type": "job_time",
            "title": f"Job logged for {client.first_name if client else ''} {client.last_name if client else ''}",
            "description": activity,
            "createdAt": iso(job.created_at),
            "createdBy": job.staff.full_name if job.staff else UNKNOWN_STAFF,
            "relatedEntityName": _client_name(client),
            "activityTypeDisplayName": activity,
        }))

    for incident in uow.incidents.recent(half) if half > 0 else []:
        rows.append((incident.created_at, {
            "id": str(incident.id),
            "type": "incident",
            "title": incident.title,
            "description": incident.description or "",
            "createdAt": iso(incident.created_at),
            "createdBy": incident.staff.full_name if incident.staff else UNKNOWN_STAFF,
            "relatedEntityName": _client_name(incident.client),
            "activityTypeDisplayName": None,
        }))

    for doc in uow.documents.recent(quarter) if quarter > 0 else []:
        rows.append((doc.created_at, {
            "id": str(doc.id),
            "type": "document",
            "title": f"Document uploaded: {doc.title}",
            "description": doc.description or "",
            "createdAt": iso(doc.created_at),
            "createdBy": doc.uploaded_by,
            "relatedEntityName": _client_name(doc.client),
            "activityTypeDisplayName": None,
        }))

    for client in uow.clients.paged(1, quarter, (Client.created_at.desc(),)) if quarter > 0 else []:
        rows.append((client.created_at, {
            "id": str(client.id),
            "type": "client",
            "title": f"New client added: {client.first_name} {client.last_name}",
            "description": f"Client created with email: {client.email or ''}",
            "createdAt": iso(client.created_at),
            "createdBy": "System",
            "relatedEntityName": _client_name(client),
            "activityTypeDisplayName": None,
        }))

    rows.sort(key=lambda r: r[0], reverse=True)
    return [activity for _, activity in rows[: max(count, 0)]]


def get_dashboard(uow: UnitOfWork) -> Dashboard:
    return {"stats": get_stats(uow), "recentActivities": get_recent_activities(uow)}


def get_dashboard_by_staff(uow: UnitOfWork, staff_id: str) -> Dashboard:
    activities = [
        a for a in get_recent_activities(uow) if staff_id in a["createdBy"] or a["type"] == "job_time"
    ]
    return {"stats": get_stats(uow), "recentActivities": activities[:DEFAULT_ACTIVITY_COUNT]}


def get_dashboard_by_client(uow: UnitOfWork, client_id: int) -> Dashboard:
    key = str(client_id)
    activities = [a for a in get_recent_activities(uow) if key in (a["relatedEntityName"] or "")]
    return {"stats": get_stats(uow), "recentActivities": activities[:DEFAULT_ACTIVITY_COUNT]}


__all__ = [
    "week_start",
    "get_stats",
    "get_recent_activities",
    "get_dashboard",
    "get_dashboard_by_staff",
    "get_dashboard_by_client",
]
