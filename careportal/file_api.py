"""Raw file upload / download / delete for the document and incident stores."""

from __future__ import annotations

import logging
import os

from flask import Blueprint, jsonify, request, send_file

from .app_authz import require_roles
from .file_upload_service import (
    INVALID_UPLOAD_TYPE,
    FileValidationError,
    content_type_for,
    get_file_upload_service,
    normalize_upload_type,
)
from .http_errors import bad_request, not_found, problem
from .models import utcnow
from .roles import ADMIN
from .telemetry import track_event
from .validation import iso

bp = Blueprint("file_api", __name__, url_prefix="/api/File")

log = logging.getLogger(__name__)


@bp.post("/upload")
@require_roles(ADMIN)
def upload_file():
    upload_type = normalize_upload_type(request.args.get("uploadType"))
    if upload_type is None:
        return bad_request(INVALID_UPLOAD_TYPE)
    files = get_file_upload_service()
    upload = request.files.get("file")
    if upload is None:
        track_event("file_upload", entity=upload_type, outcome="failure")
        return bad_request("File is required")
    try:
        size = files.file_size(upload)
        stored = files.upload_file(upload, upload_type)
    except FileValidationError as e:
        track_event("file_upload", entity=upload_type, outcome="failure")
        return bad_request(str(e))
    except OSError:
        log.exception("upload failed type=%s", upload_type)
        return problem(500, f"An error occurred while uploading the {upload_type} file")
    now = iso(utcnow())
    track_event("file_upload", entity=upload_type, outcome="success")
    return jsonify(
        {
            "fileName": stored,
            "originalFileName": upload.filename,
            "fileSize": size,
            "fileType": os.path.splitext(upload.filename or "")[1].lower(),
            "uploadType": upload_type,
            "createdAt": now,
            "lastModified": now,
        }
    )


@bp.get("/download")
@require_roles(ADMIN)
def download_file():
    upload_type = normalize_upload_type(request.args.get("uploadType"))
    if upload_type is None:
        return bad_request(INVALID_UPLOAD_TYPE)
    file_name = request.args.get("fileName") or ""
    path = get_file_upload_service().download_path(file_name, upload_type)
    if path is None:
        return not_found(f"{upload_type} file not found")
    return send_file(
        path,
        mimetype=content_type_for(file_name),
        as_attachment=True,
        download_name=file_name,
    )


@bp.delete("/<file_name>")
@require_roles(ADMIN)
def delete_file(file_name: str):
    upload_type = normalize_upload_type(request.args.get("uploadType"))
    if upload_type is None:
        return bad_request(INVALID_UPLOAD_TYPE)
    try:
        deleted = get_file_upload_service().delete_file(file_name, upload_type)
    except OSError:
        log.exception("delete failed file=%s type=%s", file_name, upload_type)
        return problem(500, f"An error occurred while deleting the {upload_type} file")
    if not deleted:
        return not_found(f"{upload_type} file not found")
    track_event("file_delete", entity=upload_type)
    return "", 204
