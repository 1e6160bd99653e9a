"""Domain error system + JSON error handler registration."""
from __future__ import annotations

import traceback
import uuid
from collections.abc import Callable
from typing import Any

from flask import request
from werkzeug.wrappers.response import Response

from .app_authz import AuthzError
from .app_sessions import SessionError
from .audit import log_event
from .http_errors import (
    bad_request,
    conflict,
    forbidden,
    internal_server_error,
    not_found,
    payload_too_large,
    problem,
    unauthorized,
)
from .pagination import PaginationError


class DomainError(Exception):
    def __init__(self, status: int, code: str, detail: str | None = None, **extra: Any):
        self.status = status
        self.code = code
        self.detail = detail or code
        self.extra = extra
        super().__init__(self.detail)


class ValidationError(DomainError):
    """Invalid input (400). ``field`` names the offending payload key when known."""

    def __init__(self, detail: str = "validation_error", *, field: str | None = None, errors: list[dict[str, str]] | None = None, **extra: Any):
        if errors is None:
            errors = [{"field": field, "message": detail}] if field else []
        super().__init__(400, "validation_error", detail, errors=errors, **extra)
        self.errors = errors
        self.field = field


class NotFoundError(DomainError):
    def __init__(self, detail: str = "Not found", **extra: Any):
        super().__init__(404, "not_found", detail, **extra)


class ConflictError(DomainError):
    def __init__(self, detail: str = "Conflict", **extra: Any):
        super().__init__(409, "conflict", detail, **extra)


_STATUS_HELPERS: dict[int, Callable[..., Response]] = {
    400: bad_request,
    401: unauthorized,
    403: forbidden,
    404: not_found,
    409: conflict,
    413: payload_too_large,
}


def register_error_handlers(app: Any) -> None:
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(SessionError)
    def _h_session(err: SessionError) -> Response:
        return unauthorized()

    @app.errorhandler(AuthzError)
    def _h_authz(err: AuthzError) -> Response:
        required = getattr(err, "required", None)
        extra = {"requiredRole": required} if required else {}
        return forbidden(detail=str(err) or "forbidden", **extra)

    @app.errorhandler(DomainError)
    def _h_domain(err: DomainError) -> Response:
        helper = _STATUS_HELPERS.get(err.status)
        if helper:
            return helper(detail=err.detail, **err.extra)
        return problem(err.status, err.detail, **err.extra)

    @app.errorhandler(HTTPException)
    def _h_http(ex: HTTPException) -> Response:
        status = ex.code or 500
        helper = _STATUS_HELPERS.get(status)
        if helper:
            return helper(detail=ex.description or ex.name)
        if status >= 500:
            return internal_server_error()
        return problem(status, ex.description or ex.name)

    @app.errorhandler(PaginationError)
    def _h_pagination(err: PaginationError) -> Response:
        return bad_request(detail=str(err) or "bad_request")

    @app.errorhandler(Exception)
    def _h_exception(ex: Exception) -> Response:
        incident_id = str(uuid.uuid4())
        app.logger.error("Unhandled exception incident_id=%s path=%s\n%s", incident_id, request.path, traceback.format_exc())
        log_event("incident", incident_id=incident_id, path=request.path, error=type(ex).__name__)
        return internal_server_error(incident_id=incident_id)


__all__ = [
    "DomainError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "register_error_handlers",
]
