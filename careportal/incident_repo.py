"""Incident repository. Newest incidents first throughout."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import joinedload

from .base_repo import BaseRepo
from .models import Incident

_NEWEST_FIRST = (Incident.incident_date.desc(), Incident.incident_time.desc())


class IncidentRepo(BaseRepo[Incident]):
    model = Incident

    def _details(self, *criteria):
        return self._live(*criteria).options(joinedload(Incident.client), joinedload(Incident.staff)).order_by(*_NEWEST_FIRST)

    def by_client(self, client_id: int) -> list[Incident]:
        return self._all(self._details(Incident.client_id == client_id))

    def by_staff(self, staff_id: str) -> list[Incident]:
        return self._all(self._details(Incident.staff_id == staff_id))

    def by_status(self, status: int) -> list[Incident]:
        return self._all(self._details(Incident.status == status))

    def by_severity(self, severity: int) -> list[Incident]:
        return self._all(self._details(Incident.severity == severity))

    def filtered(self, *, status: int | None = None, severity: int | None = None) -> list[Incident]:
        criteria = []
        if status is not None:
            criteria.append(Incident.status == status)
        if severity is not None:
            criteria.append(Incident.severity == severity)
        return self._all(self._details(*criteria))

    def by_date_range(self, start: datetime, end: datetime) -> list[Incident]:
        return self._all(self._details(Incident.incident_date >= start, Incident.incident_date <= end))

    def with_details(self, incident_id: int) -> Incident | None:
        return self.db.execute(self._details(Incident.id == incident_id)).scalars().first()

    def paged_with_details(self, page_number: int, page_size: int) -> list[Incident]:
        stmt = self._details().offset((page_number - 1) * page_size).limit(page_size)
        return self._all(stmt)

    def recent(self, limit: int) -> list[Incident]:
        stmt = self._live().options(joinedload(Incident.client), joinedload(Incident.staff))
        return self._all(stmt.order_by(Incident.created_at.desc()).limit(limit))

    def active_count(self) -> int:
        return self.count(Incident.is_active.is_(True))


__all__ = ["IncidentRepo"]
