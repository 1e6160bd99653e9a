"""Disk storage for uploaded document and incident files.

Each upload type has its own directory. Stored names are ``{uuid4}{ext}`` so
client-supplied names never reach the filesystem.
"""
from __future__ import annotations

import logging
import os
import uuid
from collections.abc import Mapping
from typing import Any, Literal

from flask import current_app
from werkzeug.datastructures import FileStorage

log = logging.getLogger(__name__)

UploadType = Literal["document", "incident"]
UPLOAD_TYPES: tuple[UploadType, ...] = ("document", "incident")
INVALID_UPLOAD_TYPE = "Invalid upload type. Valid types are 'document' and 'incident'"

CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
}


class FileValidationError(ValueError):
    """Rejected upload; the message is returned to the caller verbatim."""


def content_type_for(file_name: str) -> str:
    return CONTENT_TYPES.get(os.path.splitext(file_name)[1].lower(), "application/octet-stream")


def normalize_upload_type(raw: str | None) -> UploadType | None:
    val = (raw or "document").strip().lower()
    return val if val in UPLOAD_TYPES else None  # type: ignore[return-value]


def _safe_name(file_name: str) -> bool:
    return bool(file_name) and file_name not in (".", "..") and os.path.basename(file_name) == file_name and "\\" not in file_name


class FileUploadService:
    def __init__(
        self,
        *,
        document_path: str,
        incident_path: str,
        base_url: str = "/uploads",
        max_file_size_mb: int = 50,
        allowed_extensions: list[str] | None = None,
    ) -> None:
        self.paths: dict[str, str] = {"document": document_path, "incident": incident_path}
        self.base_url = base_url.rstrip("/")
        self.max_file_size_mb = max_file_size_mb
        self.max_file_size = max_file_size_mb * 1024 * 1024
        self.allowed_extensions = [e.lower() for e in (allowed_extensions or list(CONTENT_TYPES))]
        for kind, path in self.paths.items():
            if os.path.isdir(path):
                log.info("%s upload directory already exists: %s", kind, path)
                continue
            try:
                os.makedirs(path, exist_ok=True)
            except OSError:
                log.error("Failed to create %s upload directory: %s", kind, path)
                raise
            log.info("Created %s upload directory: %s", kind, path)

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any], instance_path: str) -> FileUploadService:
        base = os.path.join(instance_path, "uploads")
        return cls(
            document_path=cfg.get("UPLOAD_DOCUMENT_PATH") or os.path.join(base, "documents"),
            incident_path=cfg.get("UPLOAD_INCIDENT_PATH") or os.path.join(base, "incidents"),
            base_url=cfg.get("UPLOAD_BASE_URL") or "/uploads",
            max_file_size_mb=int(cfg.get("UPLOAD_MAX_FILE_SIZE_MB") or 50),
            allowed_extensions=cfg.get("UPLOAD_ALLOWED_EXTENSIONS"),
        )

    # --- validation ---
    @staticmethod
    def file_size(file: FileStorage) -> int:
        stream = file.stream
        pos = stream.tell()
        stream.seek(0, os.SEEK_END)
        size = stream.tell()
        stream.seek(pos)
        return size

    def validate(self, file: FileStorage | None) -> tuple[str, int]:
        """Return (lower-case extension, size) or raise FileValidationError."""
        if file is None or not file.filename:
            raise FileValidationError("File is required")
        size = self.file_size(file)
        if size == 0:
            raise FileValidationError("File is required")
        ext = os.path.splitext(file.filename)[1].lower()
        if ext not in self.allowed_extensions:
            raise FileValidationError(f"Invalid file type. Allowed types: {', '.join(self.allowed_extensions)}")
        if size > self.max_file_size:
            raise FileValidationError(f"File size too large. Maximum size is {self.max_file_size_mb}MB.")
        return ext, size

    # --- storage ---
    def upload_file(self, file: FileStorage | None, upload_type: UploadType = "document") -> str:
        if file is None:
            raise FileValidationError("File is required")
        ext, size = self.validate(file)
        stored = f"{uuid.uuid4()}{ext}"
        target = os.path.join(self.paths[upload_type], stored)
        file.stream.seek(0)
        file.save(target)
        log.info("stored %s file %s (%d bytes)", upload_type, stored, size)
        return stored

    def full_path(self, file_name: str, upload_type: UploadType) -> str | None:
        if not _safe_name(file_name):
            return None
        return os.path.join(self.paths[upload_type], file_name)

    def download_path(self, file_name: str, upload_type: UploadType) -> str | None:
        """Absolute path of an existing stored file, else None."""
        path = self.full_path(file_name, upload_type)
        return path if path and os.path.isfile(path) else None

    def file_exists(self, file_name: str, upload_type: UploadType | None = None) -> bool:
        kinds = (upload_type,) if upload_type else UPLOAD_TYPES
        return any(self.download_path(file_name, k) for k in kinds)

    def delete_file(self, file_name: str, upload_type: UploadType) -> bool:
        path = self.download_path(file_name, upload_type)
        if path is None:
            return False
        os.remove(path)
        log.info("deleted %s file %s", upload_type, file_name)
        return True

    def delete_any(self, file_name: str) -> bool:
        """Delete from whichever directory holds the file (incident first)."""
        for kind in ("incident", "document"):
            if self.delete_file(file_name, kind):  # type: ignore[arg-type]
                return True
        return False

    def file_url(self, file_name: str, upload_type: UploadType = "document") -> str:
        folder = "incidents" if upload_type == "incident" else "documents"
        return f"{self.base_url}/{folder}/{file_name}"


def get_file_upload_service() -> FileUploadService:
    return current_app.file_upload_service  # type: ignore[attr-defined]


__all__ = [
    "FileUploadService",
    "FileValidationError",
    "UploadType",
    "UPLOAD_TYPES",
    "INVALID_UPLOAD_TYPE",
    "content_type_for",
    "normalize_upload_type",
    "get_file_upload_service",
]
