"""Shared JSON error envelope helpers for consistent error responses.

Every error body has an ``error`` message; extra keys are added when not None
and the request id is echoed in both body and header.
"""
from __future__ import annotations

import uuid

from flask import g, has_request_context, jsonify
from werkzeug.wrappers.response import Response


def problem(status: int, error: str, **extra: object) -> Response:
    payload: dict[str, object] = {"error": error}
    rid = getattr(g, "request_id", None) if has_request_context() else None
    if rid:
        payload["requestId"] = rid
    for k, v in extra.items():
        if v is not None:
            payload[k] = v
    resp = jsonify(payload)
    resp.status_code = status
    if rid and "X-Request-Id" not in resp.headers:
        resp.headers["X-Request-Id"] = rid
    return resp


def bad_request(detail: str = "Bad request", **extra: object) -> Response:
    return problem(400, detail, **extra)


def unauthorized(detail: str = "Unauthorized access", www_auth: str | None = "Bearer", **extra: object) -> Response:
    resp = problem(401, detail, **extra)
    if www_auth:
        resp.headers["WWW-Authenticate"] = www_auth
    return resp


def forbidden(detail: str = "forbidden", **extra: object) -> Response:
    return problem(403, detail, **extra)


def not_found(detail: str = "Not found", **extra: object) -> Response:
    return problem(404, detail, **extra)


def conflict(detail: str = "Conflict", **extra: object) -> Response:
    return problem(409, detail, **extra)


def payload_too_large(detail: str = "Payload too large", **extra: object) -> Response:
    return problem(413, detail, **extra)


def internal_server_error(detail: str = "An unexpected error occurred", incident_id: str | None = None, **extra: object) -> Response:
    if not incident_id:
        incident_id = str(uuid.uuid4())
    return problem(500, detail, incidentId=incident_id, **extra)


__all__ = [
    "problem",
    "bad_request",
    "unauthorized",
    "forbidden",
    "not_found",
    "conflict",
    "payload_too_large",
    "internal_server_error",
]
