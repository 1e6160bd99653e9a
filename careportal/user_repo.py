"""User and role repositories."""

from __future__ import annotations

from sqlalchemy import func, or_

from .base_repo import BaseRepo
from .models import Role, User, utcnow
from .roles import role_description

_NAME_ORDER = (User.first_name, User.last_name)


class UserRepo(BaseRepo[User]):
    model = User

    def by_email(self, email: str) -> User | None:
        """Lookup is case-insensitive; emails are stored as entered."""
        return self.first(func.lower(User.email) == email.strip().lower())

    def by_user_name(self, user_name: str) -> User | None:
        return self.first(func.lower(User.user_name) == user_name.strip().lower())

    def by_role(self, role: str) -> list[User]:
        return self._all(self._live(User.role == role).order_by(*_NAME_ORDER))

    def active_users(self) -> list[User]:
        return self._all(self._live(User.is_active.is_(True)).order_by(*_NAME_ORDER))

    def search(self, term: str) -> list[User]:
        like = f"%{term.lower()}%"
        stmt = self._live(
            or_(
                func.lower(User.first_name).like(like),
                func.lower(User.last_name).like(like),
                func.lower(User.email).like(like),
                func.lower(User.user_name).like(like),
            )
        ).order_by(*_NAME_ORDER)
        return self._all(stmt)

    def active_count(self) -> int:
        return self.count(User.is_active.is_(True))

    def paged_by_name(self, page_number: int, page_size: int) -> list[User]:
        return self.paged(page_number, page_size, _NAME_ORDER)

    def update_last_login(self, user_id: str) -> None:
        user = self.get(user_id)
        if user is not None:
            user.last_login_at = utcnow()


class RoleRepo(BaseRepo[Role]):
    model = Role

    def by_name(self, name: str) -> Role | None:
        return self.first(func.lower(Role.name) == name.strip().lower())

    def exists_named(self, name: str) -> bool:
        return self.by_name(name) is not None

    def ensure(self, name: str, description: str | None = None) -> Role:
        """Return the role, creating it (flushed, not committed) when missing."""
        role = self.by_name(name)
        if role is None:
            role = Role(name=name, description=description or role_description(name), created_at=utcnow())
            self.add(role)
            self.db.flush()
        return role

    def active_roles(self) -> list[Role]:
        return self._all(self._live(Role.is_active.is_(True)).order_by(Role.name))


__all__ = ["UserRepo", "RoleRepo"]
