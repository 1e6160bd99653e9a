"""Client document service.

The status reported for a document is always recomputed from its deadline and
attached file; the stored ``status`` column is what the list filters match on.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import joinedload

from .api_types import DocumentDto
from .enums import DOC_STATUS_OVERDUE, DOC_STATUS_PENDING, DOC_STATUS_UPLOAD
from .errors import NotFoundError, ValidationError
from .file_upload_service import FileUploadService
from .models import Client, ClientDocument, utcnow
from .pagination import PageRequest, make_page_response
from .unit_of_work import UnitOfWork
from .validation import iso

log = logging.getLogger(__name__)

SYSTEM_UPLOADER = "System"
UNKNOWN_CLIENT = "Unknown Client"


def _today() -> date:
    return datetime.now(timezone.utc).date()


def _day_bounds(today: date) -> tuple[datetime, datetime]:
    start = datetime(today.year, today.month, today.day)
    return start, start + timedelta(days=1)


def determine_status(deadline: datetime, file_name: str | None, today: date | None = None) -> str:
    today = today or _today()
    due = deadline.date()
    if due < today:
        return DOC_STATUS_OVERDUE
    if due == today and file_name:
        return DOC_STATUS_UPLOAD
    return DOC_STATUS_PENDING


def _uploader_name(uow: UnitOfWork, uploaded_by: str | None) -> str:
    if not uploaded_by or uploaded_by == SYSTEM_UPLOADER:
        return uploaded_by or SYSTEM_UPLOADER
    user = uow.users.get(uploaded_by)
    return user.full_name if user is not None else uploaded_by


def to_document_dto(uow: UnitOfWork, doc: ClientDocument) -> DocumentDto:
    client = doc.client
    return {
        "id": doc.id,
        "clientId": doc.client_id,
        "clientName": f"{client.first_name} {client.last_name}" if client else UNKNOWN_CLIENT,
        "title": doc.title,
        "description": doc.description,
        "fileName": doc.file_name or "",
        "fileType": doc.file_type or "",
        "createdAt": iso(doc.created_at),
        "uploadedBy": _uploader_name(uow, doc.uploaded_by),
        "isActive": bool(doc.is_active),
        "deadline": iso(doc.deadline),
        "status": determine_status(doc.deadline, doc.file_name),  # type: ignore[typeddict-item]
    }


def _status_criterion(status: str, today: date):
    start, end = _day_bounds(today)
    has_file = and_(ClientDocument.file_name.is_not(None), ClientDocument.file_name != "")
    no_file = or_(ClientDocument.file_name.is_(None), ClientDocument.file_name == "")
    due_today = and_(ClientDocument.deadline >= start, ClientDocument.deadline < end)
    key = status.strip().lower()
    if key == "pending":
        return or_(
            ClientDocument.deadline >= end,
            and_(due_today, no_file, ClientDocument.status == DOC_STATUS_PENDING),
        )
    if key == "uploaded":
        return and_(has_file, due_today, ClientDocument.status == DOC_STATUS_UPLOAD)
    if key == "overdue":
        return and_(ClientDocument.deadline < start, ClientDocument.status == DOC_STATUS_OVERDUE)
    return None


def _search_criterion(term: str):
    like = f"%{term.lower()}%"
    first = func.lower(Client.first_name)
    last = func.lower(Client.last_name)
    return or_(
        func.lower(ClientDocument.title).like(like),
        first.like(like),
        last.like(like),
        (first + " " + last).like(like),
    )


# --- Queries ---
def get_entity(uow: UnitOfWork, document_id: int) -> ClientDocument | None:
    return uow.documents.with_details(document_id)


def get_by_id(uow: UnitOfWork, document_id: int) -> DocumentDto | None:
    doc = uow.documents.with_details(document_id)
    return to_document_dto(uow, doc) if doc else None


def get_all(
    uow: UnitOfWork,
    *,
    page: PageRequest,
    client_id: int | None = None,
    status: str | None = None,
    search: str | None = None,
) -> dict:
    criteria = []
    if client_id is not None:
        criteria.append(ClientDocument.client_id == client_id)
    if status:
        crit = _status_criterion(status, _today())
        if crit is not None:
            criteria.append(crit)
    base = select(ClientDocument).where(ClientDocument.is_deleted.is_(False), *criteria)
    if search and search.strip():
        base = base.outerjoin(Client, ClientDocument.client_id == Client.id).where(_search_criterion(search.strip()))
    total = int(uow.db.execute(select(func.count()).select_from(base.subquery())).scalar_one())
    stmt = (
        base.options(joinedload(ClientDocument.client))
        .order_by(ClientDocument.created_at.desc(), ClientDocument.id.desc())
        .offset((page["page_number"] - 1) * page["page_size"])
        .limit(page["page_size"])
    )
    items = uow.db.execute(stmt).unique().scalars().all()
    return make_page_response("documents", [to_document_dto(uow, d) for d in items], page, total)


def get_by_client(uow: UnitOfWork, client_id: int) -> list[DocumentDto]:
    return [to_document_dto(uow, d) for d in uow.documents.by_client(client_id)]


def get_by_status(uow: UnitOfWork, status: str) -> list[DocumentDto]:
    """Same business filter as the list endpoint; unknown statuses match everything."""
    crit = _status_criterion(status, _today())
    stmt = uow.documents.query(*([crit] if crit is not None else [])).order_by(ClientDocument.created_at.desc())
    return [to_document_dto(uow, d) for d in uow.db.execute(stmt).unique().scalars().all()]



def get_overdue(uow: UnitOfWork) -> list[DocumentDto]:
    start, _ = _day_bounds(_today())
    out = []
    for doc in uow.documents.overdue(start):
        dto = to_document_dto(uow, doc)
        dto["status"] = DOC_STATUS_OVERDUE  # type: ignore[typeddict-item]
        out.append(dto)
    return out


def _stats(docs: list[ClientDocument]) -> dict[str, int]:
    today = _today()
    statuses = [determine_status(d.deadline, d.file_name, today) for d in docs]
    return {
        "totalDocuments": len(docs),
        "pendingDocuments": statuses.count(DOC_STATUS_PENDING),
        "uploadDocuments": statuses.count(DOC_STATUS_UPLOAD),
        "overdueDocuments": statuses.count(DOC_STATUS_OVERDUE),
    }


def get_stats(uow: UnitOfWork) -> dict[str, int]:
    return _stats(uow.documents.all())


def get_stats_by_client(uow: UnitOfWork, client_id: int) -> dict[str, int]:
    return _stats(uow.documents.by_client(client_id))


def get_status_summary(uow: UnitOfWork) -> dict[str, int]:
    stats = get_stats(uow)
    return {
        "total": stats["totalDocuments"],
        "pending": stats["pendingDocuments"],
        "upload": stats["uploadDocuments"],
        "overdue": stats["overdueDocuments"],
    }


# --- Commands ---
def create(
    uow: UnitOfWork,
    *,
    client_id: int,
    title: str,
    deadline: datetime,
    description: str | None = None,
    is_active: bool = True,
    current_user_id: str | None = None,
) -> DocumentDto:
    if uow.clients.get(client_id) is None:
        raise ValidationError("Client not found", field="clientId")
    now = utcnow()
    doc = ClientDocument(
        client_id=client_id,
        title=title,
        description=description,
        file_name="",
        file_type="",
        uploaded_by=current_user_id or SYSTEM_UPLOADER,
        deadline=deadline,
        status=determine_status(deadline, ""),
        is_active=is_active,
        created_at=now,
        created_by=current_user_id,
        updated_at=now,
        updated_by=current_user_id,
    )
    uow.documents.add(doc)
    uow.save_changes()
    log.info("document created id=%s client=%s", doc.id, client_id)
    return to_document_dto(uow, uow.documents.with_details(doc.id) or doc)


def update(
    uow: UnitOfWork,
    document_id: int,
    *,
    title: str | None = None,
    description: str | None = None,
    deadline: datetime | None = None,
    status: str | None = None,
    is_active: bool | None = None,
    file_name: str | None = None,
    file_type: str | None = None,
    current_user_id: str | None = None,
) -> DocumentDto:
    doc = uow.documents.get(document_id)
    if doc is None:
        raise NotFoundError("Document not found")
    if title:
        doc.title = title
    if description:
        doc.description = description
    if file_name:
        doc.file_name = file_name
    if file_type:
        doc.file_type = file_type
    if deadline is not None:
        doc.deadline = deadline
        doc.status = determine_status(deadline, doc.file_name)
    if status:
        doc.status = status
    if is_active is not None:
        doc.is_active = is_active
    doc.updated_at = utcnow()
    doc.updated_by = current_user_id
    uow.save_changes()
    return to_document_dto(uow, doc)


def delete(uow: UnitOfWork, document_id: int, *, files: FileUploadService | None = None) -> bool:
    doc = uow.documents.get(document_id)
    if doc is None:
        return False
    if doc.file_name and files is not None:
        files.delete_any(doc.file_name)
    uow.documents.delete(doc)
    uow.save_changes()
    return True


def upload_document(
    uow: UnitOfWork,
    document_id: int,
    *,
    file_name: str,
    file_size: int,
    file_type: str,
    files: FileUploadService | None = None,
    current_user_id: str | None = None,
) -> DocumentDto:
    doc = uow.documents.get(document_id)
    if doc is None:
        raise NotFoundError("Document not found")
    if doc.file_name and files is not None:
        files.delete_any(doc.file_name)
    doc.file_name = file_name
    doc.file_type = file_type
    doc.status = determine_status(doc.deadline, file_name)
    doc.uploaded_by = current_user_id or SYSTEM_UPLOADER
    doc.updated_at = utcnow()
    doc.updated_by = current_user_id
    uow.save_changes()
    log.info("document %s file attached %s (%d bytes)", document_id, file_name, file_size)
    return to_document_dto(uow, doc)


__all__ = [
    "determine_status",
    "to_document_dto",
    "get_entity",
    "get_by_id",
    "get_all",
    "get_by_client",
    "get_by_status",
    "get_overdue",
    "get_stats",
    "get_stats_by_client",
    "get_status_summary",
    "create",
    "update",
    "delete",
    "upload_document",
]
