"""Client document repository."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import joinedload
from sqlalchemy.sql import Select

from .base_repo import BaseRepo
from .enums import DOC_STATUS_PENDING
from .models import ClientDocument


class DocumentRepo(BaseRepo[ClientDocument]):
    model = ClientDocument

    def query(self, *criteria) -> Select:
        """Base statement (client eagerly loaded) for the filtered list."""
        return self._live(*criteria).options(joinedload(ClientDocument.client))

    def by_client(self, client_id: int) -> list[ClientDocument]:
        stmt = self.query(ClientDocument.client_id == client_id).order_by(ClientDocument.created_at.desc())
        return self._all(stmt)

    def pending(self) -> list[ClientDocument]:
        return self._all(self.query(ClientDocument.status == DOC_STATUS_PENDING).order_by(ClientDocument.deadline))

    def overdue(self, today_start: datetime) -> list[ClientDocument]:
        """Documents whose deadline fell before ``today_start``."""
        return self._all(self.query(ClientDocument.deadline < today_start).order_by(ClientDocument.deadline))

    def with_details(self, document_id: int) -> ClientDocument | None:
        return self.db.execute(self.query(ClientDocument.id == document_id)).scalars().first()

    def count_status(self, status: str) -> int:
        """Count by stored status column."""
        return self.count(ClientDocument.status == status)

    def recent(self, limit: int) -> list[ClientDocument]:
        return self._all(self.query().order_by(ClientDocument.created_at.desc()).limit(limit))


__all__ = ["DocumentRepo"]
