"""Client document endpoints (Admin only)."""

from __future__ import annotations

import os

from flask import Blueprint, jsonify, request

from . import document_service
from .app_authz import current_user_id, require_roles
from .audit import log_event
from .errors import NotFoundError, ValidationError
from .file_upload_service import FileValidationError, get_file_upload_service
from .pagination import parse_page_params
from .roles import ADMIN
from .telemetry import track_event
from .unit_of_work import UnitOfWork
from .validation import get_bool, get_datetime, get_int, get_str, json_body

bp = Blueprint("document_api", __name__, url_prefix="/api/Document")

DOCUMENT_NOT_FOUND = "Document not found"


@bp.get("")
@require_roles(ADMIN)
def list_documents():
    page = parse_page_params(request.args)
    client_id = get_int(request.args, "clientId")
    with UnitOfWork() as uow:
        return jsonify(
            document_service.get_all(
                uow,
                page=page,
                client_id=client_id,
                status=request.args.get("status"),
                search=request.args.get("search"),
            )
        )


@bp.get("/status-summary")
@require_roles(ADMIN)
def status_summary():
    with UnitOfWork() as uow:
        return jsonify(document_service.get_status_summary(uow))


@bp.get("/<int:document_id>")
@require_roles(ADMIN)
def get_document(document_id: int):
    with UnitOfWork() as uow:
        doc = document_service.get_by_id(uow, document_id)
    if doc is None:
        raise NotFoundError(DOCUMENT_NOT_FOUND)
    return jsonify(doc)


@bp.post("")
@require_roles(ADMIN)
def create_document():
    data = json_body("Document data is required")
    client_id = get_int(data, "clientId", required=True)
    title = get_str(data, "title", required=True, max_len=200)
    description = get_str(data, "description", max_len=1000)
    deadline = get_datetime(data, "deadline", required=True)
    is_active = get_bool(data, "isActive")
    with UnitOfWork() as uow:
        doc = document_service.create(
            uow,
            client_id=client_id,  # type: ignore[arg-type]
            title=title or "",
            deadline=deadline,  # type: ignore[arg-type]
            description=description,
            is_active=True if is_active is None else is_active,
            current_user_id=current_user_id(),
        )
    track_event("create", entity="document")
    resp = jsonify(doc)
    resp.status_code = 201
    resp.headers["Location"] = f"{bp.url_prefix}/{doc['id']}"
    return resp


@bp.put("/<int:document_id>")
@require_roles(ADMIN)
def update_document(document_id: int):
    data = json_body("Update data is required")
    fields = dict(
        title=get_str(data, "title", max_len=200),
        description=get_str(data, "description", max_len=1000),
        deadline=get_datetime(data, "deadline"),
        status=get_str(data, "status", max_len=50),
        is_active=get_bool(data, "isActive"),
        file_name=get_str(data, "fileName", max_len=500),
        file_type=get_str(data, "fileType", max_len=50),
    )
    with UnitOfWork() as uow:
        doc = document_service.update(uow, document_id, **fields, current_user_id=current_user_id())
    track_event("update", entity="document")
    return jsonify(doc)


@bp.delete("/<int:document_id>")
@require_roles(ADMIN)
def delete_document(document_id: int):
    with UnitOfWork() as uow:
        if not document_service.delete(uow, document_id, files=get_file_upload_service()):
            raise NotFoundError(DOCUMENT_NOT_FOUND)
    track_event("delete", entity="document")
    log_event("document_delete", document_id=document_id)
    return "", 204


@bp.post("/<int:document_id>/upload")
@require_roles(ADMIN)
def upload_document(document_id: int):
    files = get_file_upload_service()
    with UnitOfWork() as uow:
        if document_service.get_entity(uow, document_id) is None:
            raise NotFoundError(DOCUMENT_NOT_FOUND)
        upload = request.files.get("file")
        if upload is None:
            raise ValidationError("File is required", field="file")
        try:
            stored = files.upload_file(upload, "document")
        except FileValidationError as e:
            raise ValidationError(str(e), field="file") from None
        doc = document_service.upload_document(
            uow,
            document_id,
            file_name=stored,
            file_size=os.path.getsize(files.full_path(stored, "document") or stored),
            file_type=os.path.splitext(upload.filename or stored)[1].lower(),
            files=files,
            current_user_id=current_user_id(),
        )
    track_event("file_upload", entity="document", outcome="success")
    return jsonify(doc)
