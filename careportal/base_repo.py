"""Generic soft-delete aware repository.

Every read hides rows whose ``is_deleted`` flag is set. Writes only stage
changes on the session; committing is the unit of work's job.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from .models import Base, utcnow

M = TypeVar("M", bound=Base)


class BaseRepo(Generic[M]):
    model: type[M]

    def __init__(self, db: Session, model: type[M] | None = None) -> None:
        self.db = db
        if model is not None:
            self.model = model

    # --- query building ---
    def _live(self, *criteria: Any) -> Select:
        stmt = select(self.model)
        if hasattr(self.model, "is_deleted"):
            stmt = stmt.where(self.model.is_deleted.is_(False))  # type: ignore[attr-defined]
        if criteria:
            stmt = stmt.where(*criteria)
        return stmt

    def _all(self, stmt: Select) -> list[M]:
        return list(self.db.execute(stmt).scalars().all())

    # --- reads ---
    def get(self, entity_id: Any) -> M | None:
        obj = self.db.get(self.model, entity_id)
        if obj is None or getattr(obj, "is_deleted", False):
            return None
        return obj

    def all(self) -> list[M]:
        return self._all(self._live())

    def find(self, *criteria: Any) -> list[M]:
        return self._all(self._live(*criteria))

    def first(self, *criteria: Any) -> M | None:
        return self.db.execute(self._live(*criteria).limit(1)).scalars().first()

    def count(self, *criteria: Any) -> int:
        stmt = self._live(*criteria)
        return int(self.db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one())

    def exists(self, *criteria: Any) -> bool:
        return self.first(*criteria) is not None

    def paged(self, page_number: int, page_size: int, order_by: Sequence[Any] = (), *criteria: Any) -> list[M]:
        stmt = self._live(*criteria)
        if order_by:
            stmt = stmt.order_by(*order_by)
        stmt = stmt.offset((page_number - 1) * page_size).limit(page_size)
        return self._all(stmt)

    # --- writes ---
    def add(self, entity: M) -> M:
        self.db.add(entity)
        return entity

    def add_range(self, entities: Iterable[M]) -> None:
        self.db.add_all(list(entities))

    def update(self, entity: M) -> M:
        # Attached instances are tracked already; merge covers detached ones
        return entity if entity in self.db else self.db.merge(entity)

    def delete(self, entity: M) -> None:
        self.db.delete(entity)

    def soft_delete(self, entity: M) -> None:
        entity.is_deleted = True  # type: ignore[attr-defined]
        if hasattr(entity, "updated_at"):
            entity.updated_at = utcnow()  # type: ignore[attr-defined]


__all__ = ["BaseRepo"]
