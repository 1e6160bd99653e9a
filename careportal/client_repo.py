"""Client repository."""

from __future__ import annotations

from sqlalchemy import func, or_
from sqlalchemy.orm import joinedload

from .base_repo import BaseRepo
from .models import Client

_NAME_ORDER = (Client.first_name, Client.last_name)


class ClientRepo(BaseRepo[Client]):
    model = Client

    def active_clients(self) -> list[Client]:
        """Active clients ordered by first then last name."""
        return self._all(self._live(Client.is_active.is_(True)).order_by(*_NAME_ORDER))

    def by_staff(self, staff_id: str) -> list[Client]:
        """Clients assigned to one staff member."""
        return self._all(self._live(Client.assigned_staff_id == staff_id).order_by(*_NAME_ORDER))

    def search(self, term: str) -> list[Client]:
        """Case-insensitive substring match over name, email and phone."""
        like = f"%{term.lower()}%"
        stmt = self._live(
            or_(
                func.lower(Client.first_name).like(like),
                func.lower(Client.last_name).like(like),
                func.lower(func.coalesce(Client.email, "")).like(like),
                func.coalesce(Client.phone_number, "").like(like),
            )
        ).order_by(*_NAME_ORDER)
        return self._all(stmt)

    def with_details(self, client_id: int) -> Client | None:
        stmt = self._live(Client.id == client_id).options(joinedload(Client.assigned_staff))
        return self.db.execute(stmt).scalars().first()

    def active_count(self) -> int:
        return self.count(Client.is_active.is_(True))

    def paged_by_name(self, page_number: int, page_size: int) -> list[Client]:
        return self.paged(page_number, page_size, _NAME_ORDER)


__all__ = ["ClientRepo"]
