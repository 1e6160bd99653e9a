"""JobTime repository. Ordered by start time, newest first."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import joinedload

from .base_repo import BaseRepo
from .models import JobTime


class JobTimeRepo(BaseRepo[JobTime]):
    model = JobTime

    def _details(self, *criteria):
        return (
            self._live(*criteria)
            .options(joinedload(JobTime.client), joinedload(JobTime.staff))
            .order_by(JobTime.start_time.desc())
        )

    def by_client(self, client_id: int) -> list[JobTime]:
        return self._all(self._details(JobTime.client_id == client_id))

    def by_staff(self, staff_id: str) -> list[JobTime]:
        return self._all(self._details(JobTime.staff_id == staff_id))

    def filtered(self, *, staff_id: str | None = None, client_id: int | None = None) -> list[JobTime]:
        criteria = []
        if staff_id is not None:
            criteria.append(JobTime.staff_id == staff_id)
        if client_id is not None:
            criteria.append(JobTime.client_id == client_id)
        return self._all(self._details(*criteria))

    def by_date_range(self, start: datetime, end: datetime) -> list[JobTime]:
        return self._all(self._details(JobTime.start_time >= start, JobTime.start_time <= end))

    def with_details(self, job_time_id: int) -> JobTime | None:
        return self.db.execute(self._details(JobTime.id == job_time_id)).scalars().first()

    def paged_with_details(self, page_number: int, page_size: int) -> list[JobTime]:
        stmt = self._details().offset((page_number - 1) * page_size).limit(page_size)
        return self._all(stmt)

    def recent(self, limit: int) -> list[JobTime]:
        stmt = self._live().options(joinedload(JobTime.client), joinedload(JobTime.staff))
        return self._all(stmt.order_by(JobTime.created_at.desc()).limit(limit))

    def completed_since(self, start: datetime) -> list[JobTime]:
        return self.find(JobTime.start_time >= start, JobTime.end_time.is_not(None))

    def active_count(self) -> int:
        return self.count(JobTime.is_active.is_(True))

    def completed_count(self) -> int:
        return self.count(JobTime.end_time.is_not(None))


__all__ = ["JobTimeRepo"]
