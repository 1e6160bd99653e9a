"""User management service.

Users carry a single role name. Assigning a role that has no ``roles`` row yet
creates that row on the fly ("{role} role for CarePortal").
"""
from __future__ import annotations

import logging

from werkzeug.security import check_password_hash, generate_password_hash

from .api_types import UserDto
from .enums import UserRole
from .errors import ConflictError, NotFoundError, ValidationError
from .models import User, utcnow
from .pagination import PageRequest, make_page_response, paginate_sequence
from .roles import DEFAULT_ROLE, role_description, to_canonical
from .unit_of_work import UnitOfWork
from .validation import iso

log = logging.getLogger(__name__)

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 100


class InvalidPasswordError(ValueError):
    """Password change rejected; the message is safe to show to the caller."""


def role_display_name(role: str) -> str:
    try:
        return UserRole[role].display_name
    except KeyError:
        return role


def to_user_dto(user: User) -> UserDto:
    role = user.role or DEFAULT_ROLE
    return {
        "id": user.id,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "role": role,
        "roleDisplayName": role_display_name(role),
        "isActive": bool(user.is_active),
        "createdAt": iso(user.created_at),
        "lastLoginAt": iso(user.last_login_at),
        "fullName": user.full_name,
    }


def password_problems(password: str) -> list[str]:
    problems = []
    if len(password) < PASSWORD_MIN_LENGTH:
        problems.append(f"Passwords must be at least {PASSWORD_MIN_LENGTH} characters.")
    if len(password) > PASSWORD_MAX_LENGTH:
        problems.append(f"Passwords must be at most {PASSWORD_MAX_LENGTH} characters.")
    return problems


def _assign_role(uow: UnitOfWork, user: User, role: str) -> None:
    role = to_canonical(role) or DEFAULT_ROLE
    uow.roles.ensure(role, role_description(role))
    user.role = role


def _require(uow: UnitOfWork, user_id: str) -> User:
    user = uow.users.get(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


# --- Queries ---
def get_by_id(uow: UnitOfWork, user_id: str) -> UserDto | None:
    user = uow.users.get(user_id)
    return to_user_dto(user) if user else None


def get_by_email(uow: UnitOfWork, email: str) -> UserDto | None:
    user = uow.users.by_email(email)
    return to_user_dto(user) if user else None


def get_all(uow: UnitOfWork, *, page: PageRequest, search: str | None = None) -> dict:
    """Paged user list; ``search`` matches first name, last name or email."""
    if search and search.strip():
        matches = uow.users.search(search.strip())
        items = paginate_sequence(matches, page)
        total = len(matches)
    else:
        total = uow.users.count()
        items = uow.users.paged_by_name(page["page_number"], page["page_size"])
    return make_page_response("users", [to_user_dto(u) for u in items], page, total)


def get_by_role(uow: UnitOfWork, role: str) -> list[UserDto]:
    return [to_user_dto(u) for u in uow.users.by_role(to_canonical(role))]


# --- Commands ---
def create(
    uow: UnitOfWork,
    *,
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    role: str | None = None,
    is_active: bool = True,
    current_user_id: str | None = None,
) -> UserDto:
    if uow.users.by_email(email) is not None:
        raise ConflictError(f"A user with email {email} already exists")
    problems = password_problems(password)
    if problems:
        raise ValidationError(f"Failed to create user: {' '.join(problems)}", field="password")
    user = User(
        user_name=email,
        email=email,
        first_name=first_name,
        last_name=last_name,
        password_hash=generate_password_hash(password),
        is_active=is_active,
        created_at=utcnow(),
        created_by=current_user_id,
    )
    _assign_role(uow, user, role or DEFAULT_ROLE)
    uow.users.add(user)
    uow.save_changes()
    log.info("user created id=%s role=%s", user.id, user.role)
    return to_user_dto(user)


def update(
    uow: UnitOfWork,
    user_id: str,
    *,
    first_name: str | None = None,
    last_name: str | None = None,
    email: str | None = None,
    role: str | None = None,
    is_active: bool | None = None,
    current_user_id: str | None = None,
) -> UserDto:
    user = _require(uow, user_id)
    if first_name:
        user.first_name = first_name
    if last_name:
        user.last_name = last_name
    if email:
        other = uow.users.by_email(email)
        if other is not None and other.id != user.id:
            raise ConflictError(f"A user with email {email} already exists")
        user.email = email
        user.user_name = email
    if is_active is not None:
        user.is_active = is_active
    if role and to_canonical(role) != user.role:
        _assign_role(uow, user, role)
    user.updated_at = utcnow()
    user.updated_by = current_user_id
    uow.save_changes()
    return to_user_dto(user)


def delete(uow: UnitOfWork, user_id: str) -> bool:
    user = uow.users.get(user_id)
    if user is None:
        return False
    uow.users.soft_delete(user)
    uow.save_changes()
    return True


def toggle_active(uow: UnitOfWork, user_id: str, *, current_user_id: str | None = None) -> bool:
    user = uow.users.get(user_id)
    if user is None:
        return False
    user.is_active = not user.is_active
    user.updated_at = utcnow()
    user.updated_by = current_user_id
    uow.save_changes()
    return True


def change_password(
    uow: UnitOfWork,
    user_id: str,
    *,
    current_password: str,
    new_password: str,
    current_user_id: str | None = None,
) -> None:
    """Raises InvalidPasswordError with a user-facing message on every rejection."""
    user = uow.users.get(user_id)
    if user is None:
        raise InvalidPasswordError("User not found")
    if not check_password_hash(user.password_hash, current_password or ""):
        raise InvalidPasswordError("Current password is incorrect")
    problems = password_problems(new_password or "")
    if problems:
        raise InvalidPasswordError(f"Password validation failed: {', '.join(problems)}")
    user.password_hash = generate_password_hash(new_password)
    user.updated_at = utcnow()
    user.updated_by = current_user_id
    uow.save_changes()


def reset_password(uow: UnitOfWork, email: str, new_password: str, *, current_user_id: str | None = None) -> bool:
    user = uow.users.by_email(email)
    if user is None or password_problems(new_password):
        return False
    user.password_hash = generate_password_hash(new_password)
    user.updated_at = utcnow()
    user.updated_by = current_user_id
    uow.save_changes()
    return True


# --- Roles ---
def get_all_roles(uow: UnitOfWork) -> list[str]:
    return [r.name for r in uow.roles.all()]


def get_user_roles(uow: UnitOfWork) -> list[dict]:
    """Roles that correspond to a UserRole member, as {value, name, displayName}."""
    out = []
    for role in uow.roles.all():
        try:
            member = UserRole[role.name]
        except KeyError:
            continue
        out.append({"value": int(member), "name": role.name, "displayName": member.display_name})
    return sorted(out, key=lambda r: r["value"])


def role_exists(uow: UnitOfWork, name: str) -> bool:
    return uow.roles.exists_named(name)


def create_role(uow: UnitOfWork, name: str, description: str | None = None) -> bool:
    if uow.roles.exists_named(name):
        return False
    uow.roles.ensure(name, description or role_description(name))
    uow.save_changes()
    return True


def delete_role(uow: UnitOfWork, name: str) -> bool:
    role = uow.roles.by_name(name)
    if role is None:
        return False
    uow.roles.delete(role)
    uow.save_changes()
    return True


__all__ = [
    "InvalidPasswordError",
    "to_user_dto",
    "role_display_name",
    "password_problems",
    "get_by_id",
    "get_by_email",
    "get_all",
    "get_by_role",
    "create",
    "update",
    "delete",
    "toggle_active",
    "change_password",
    "reset_password",
    "get_all_roles",
    "get_user_roles",
    "role_exists",
    "create_role",
    "delete_role",
]
