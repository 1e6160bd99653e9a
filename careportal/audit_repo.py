"""Audit repository: persistence + query."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select

from .db import get_new_session
from .models import AuditEvent


class AuditRepo:
    def insert(
        self,
        *,
        event: str,
        actor_user_id: str | None,
        actor_role: str | None,
        payload: dict | None,
        request_id: str | None,
    ) -> None:
        # Own session so an audit row never rides on (or rolls back with) the caller's unit of work
        db = get_new_session()
        try:
            db.add(
                AuditEvent(
                    event=event,
                    actor_user_id=actor_user_id,
                    actor_role=actor_role,
                    payload=payload,
                    request_id=request_id,
                )
            )
            db.commit()
        finally:
            db.close()

    def recent(self, *, event: str | None = None, since: datetime | None = None, limit: int = 100) -> list[AuditEvent]:
        """Newest-first audit rows, optionally narrowed to one event name."""
        db = get_new_session()
        try:
            stmt = select(AuditEvent)
            if event:
                stmt = stmt.where(AuditEvent.event == event)
            if since:
                stmt = stmt.where(AuditEvent.ts >= since)
            stmt = stmt.order_by(AuditEvent.ts.desc(), AuditEvent.id.desc()).limit(limit)
            return list(db.execute(stmt).scalars().all())
        finally:
            db.close()


__all__ = ["AuditRepo"]
