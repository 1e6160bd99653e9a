"""Client service: CRUD, staff assignment and listing."""
from __future__ import annotations

import logging
from datetime import datetime

from .api_types import ClientDto
from .errors import NotFoundError, ValidationError
from .models import Client, utcnow
from .pagination import PageRequest, make_page_response, paginate_sequence
from .unit_of_work import UnitOfWork
from .validation import iso

log = logging.getLogger(__name__)


def to_client_dto(client: Client) -> ClientDto:
    staff = client.assigned_staff
    return {
        "id": client.id,
        "firstName": client.first_name,
        "lastName": client.last_name,
        "fullName": client.full_name,
        "dateOfBirth": iso(client.date_of_birth),
        "age": client.age,
        "address": client.address,
        "phoneNumber": client.phone_number,
        "email": client.email,
        "createdAt": iso(client.created_at),
        "updatedAt": iso(client.updated_at),
        "isActive": bool(client.is_active),
        "assignedStaffId": client.assigned_staff_id,
        "assignedStaffName": staff.full_name if staff is not None else None,
    }


def _check_staff(uow: UnitOfWork, staff_id: str | None) -> None:
    if staff_id and uow.users.get(staff_id) is None:
        raise ValidationError("Assigned staff member not found", field="assignedStaffId")


def get_by_id(uow: UnitOfWork, client_id: int) -> ClientDto | None:
    client = uow.clients.with_details(client_id)
    return to_client_dto(client) if client else None


def get_all(uow: UnitOfWork, *, page: PageRequest, search: str | None = None) -> dict:
    """Search pages the filtered set in memory; the unfiltered list counts active clients only."""
    if search and search.strip():
        matches = uow.clients.search(search.strip())
        total = len(matches)
        items = paginate_sequence(matches, page)
    else:
        total = uow.clients.active_count()
        items = uow.clients.paged_by_name(page["page_number"], page["page_size"])
    return make_page_response("clients", [to_client_dto(c) for c in items], page, total)


def get_by_staff(uow: UnitOfWork, staff_id: str) -> list[ClientDto]:
    return [to_client_dto(c) for c in uow.clients.by_staff(staff_id)]


def get_active_clients(uow: UnitOfWork) -> list[ClientDto]:
    return [to_client_dto(c) for c in uow.clients.active_clients()]


def get_total_count(uow: UnitOfWork) -> int:
    return uow.clients.count()


def get_active_count(uow: UnitOfWork) -> int:
    return uow.clients.active_count()


def create(
    uow: UnitOfWork,
    *,
    first_name: str,
    last_name: str,
    date_of_birth: datetime,
    address: str | None = None,
    phone_number: str | None = None,
    email: str | None = None,
    assigned_staff_id: str | None = None,
    is_active: bool = True,
    current_user_id: str | None = None,
) -> ClientDto:
    _check_staff(uow, assigned_staff_id)
    client = Client(
        first_name=first_name,
        last_name=last_name,
        date_of_birth=date_of_birth,
        address=address,
        phone_number=phone_number,
        email=email,
        assigned_staff_id=assigned_staff_id or None,
        is_active=is_active,
        created_at=utcnow(),
        created_by=current_user_id,
    )
    uow.clients.add(client)
    uow.save_changes()
    log.info("client created id=%s", client.id)
    return to_client_dto(client)


def update(
    uow: UnitOfWork,
    client_id: int,
    *,
    first_name: str | None = None,
    last_name: str | None = None,
    date_of_birth: datetime | None = None,
    address: str | None = None,
    phone_number: str | None = None,
    email: str | None = None,
    assigned_staff_id: str | None = None,
    is_active: bool | None = None,
    current_user_id: str | None = None,
) -> ClientDto:
    """Partial update: empty strings and missing values leave the field untouched."""
    client = uow.clients.get(client_id)
    if client is None:
        raise NotFoundError("Client not found")
    if first_name:
        client.first_name = first_name
    if last_name:
        client.last_name = last_name
    if date_of_birth is not None:
        client.date_of_birth = date_of_birth
    if address:
        client.address = address
    if phone_number:
        client.phone_number = phone_number
    if email:
        client.email = email
    if assigned_staff_id is not None:
        _check_staff(uow, assigned_staff_id)
        client.assigned_staff_id = assigned_staff_id or None
    if is_active is not None:
        client.is_active = is_active
    client.updated_at = utcnow()
    client.updated_by = current_user_id
    uow.save_changes()
    # Reload so assigned_staff reflects a changed FK
    uow.db.expire(client, ["assigned_staff"])
    return to_client_dto(client)


def delete(uow: UnitOfWork, client_id: int) -> bool:
    client = uow.clients.get(client_id)
    if client is None:
        return False
    uow.clients.soft_delete(client)
    uow.save_changes()
    return True


def toggle_active(uow: UnitOfWork, client_id: int, *, current_user_id: str | None = None) -> bool:
    client = uow.clients.get(client_id)
    if client is None:
        return False
    client.is_active = not client.is_active
    client.updated_at = utcnow()
    client.updated_by = current_user_id
    uow.save_changes()
    return True


__all__ = [
    "to_client_dto",
    "get_by_id",
    "get_all",
    "get_by_staff",
    "get_active_clients",
    "get_total_count",
    "get_active_count",
    "create",
    "update",
    "delete",
    "toggle_active",
]
