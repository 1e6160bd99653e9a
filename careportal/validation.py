"""Payload parsing helpers shared by the API blueprints.

Each helper reads one key from a JSON dict and raises ValidationError naming
that key when the value is unusable. ``None`` is returned for absent optional
keys so update paths can tell "not sent" from "sent empty".
"""
from __future__ import annotations

import re
from datetime import UTC, date, datetime, time
from enum import IntEnum
from typing import Any, TypeVar

from flask import request

from .errors import ValidationError

E = TypeVar("E", bound=IntEnum)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def get_str(data: dict[str, Any], key: str, *, required: bool = False, max_len: int | None = None) -> str | None:
    raw = data.get(key)
    if raw is None:
        if required:
            raise ValidationError(f"{key} is required", field=key)
        return None
    if not isinstance(raw, str):
        raise ValidationError(f"{key} must be a string", field=key)
    val = raw.strip()
    if required and not val:
        raise ValidationError(f"{key} is required", field=key)
    if max_len is not None and len(val) > max_len:
        raise ValidationError(f"{key} must be at most {max_len} characters", field=key)
    return val


def get_email(data: dict[str, Any], key: str = "email", *, required: bool = False, max_len: int = 100) -> str | None:
    val = get_str(data, key, required=required, max_len=max_len)
    if val and not _EMAIL_RE.match(val):
        raise ValidationError(f"{key} is not a valid email address", field=key)
    return val


def get_int(data: dict[str, Any], key: str, *, required: bool = False) -> int | None:
    raw = data.get(key)
    if raw is None or raw == "":
        if required:
            raise ValidationError(f"{key} is required", field=key)
        return None
    if isinstance(raw, bool):
        raise ValidationError(f"{key} must be an integer", field=key)
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be an integer", field=key) from None


def get_bool(data: dict[str, Any], key: str) -> bool | None:
    raw = data.get(key)
    if raw is None:
        return None
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.lower() in ("true", "false", "1", "0"):
        return raw.lower() in ("true", "1")
    raise ValidationError(f"{key} must be a boolean", field=key)


def parse_datetime(raw: str, key: str = "value") -> datetime:
    """ISO-8601 to naive UTC. A trailing ``Z`` and offsets are honoured."""
    try:
        val = raw.strip()
        if val.endswith("Z"):
            val = val[:-1] + "+00:00"
        dt = datetime.fromisoformat(val)
    except (AttributeError, ValueError):
        raise ValidationError(f"{key} is not a valid date/time", field=key) from None
    if dt.tzinfo is not None:
        dt = dt.astimezone(UTC).replace(tzinfo=None)
    return dt


def get_datetime(data: dict[str, Any], key: str, *, required: bool = False) -> datetime | None:
    raw = data.get(key)
    if raw is None or raw == "":
        if required:
            raise ValidationError(f"{key} is required", field=key)
        return None
    return parse_datetime(raw, key)


def get_date(data: dict[str, Any], key: str, *, required: bool = False) -> datetime | None:
    """Date-only fields are stored as midnight datetimes; full timestamps are truncated."""
    dt = get_datetime(data, key, required=required)
    if dt is None:
        return None
    return datetime.combine(dt.date(), time.min)


def get_time(data: dict[str, Any], key: str, *, required: bool = False) -> time | None:
    raw = data.get(key)
    if raw is None or raw == "":
        if required:
            raise ValidationError(f"{key} is required", field=key)
        return None
    try:
        return time.fromisoformat(str(raw).strip())
    except ValueError:
        raise ValidationError(f"{key} is not a valid time of day", field=key) from None


def parse_enum(enum_cls: type[E], raw: Any, key: str) -> E:
    """Accept the integer value or the member name (case-insensitive)."""
    if isinstance(raw, bool):
        raise ValidationError(f"{key} is not a valid {enum_cls.__name__}", field=key)
    if isinstance(raw, int) or (isinstance(raw, str) and raw.strip().lstrip("-").isdigit()):
        try:
            return enum_cls(int(raw))
        except ValueError:
            pass
    elif isinstance(raw, str):
        wanted = raw.strip().lower()
        for member in enum_cls:
            if member.name.lower() == wanted:
                return member
    raise ValidationError(f"{key} is not a valid {enum_cls.__name__}", field=key)


def get_enum(data: dict[str, Any], key: str, enum_cls: type[E], *, required: bool = False) -> E | None:
    raw = data.get(key)
    if raw is None or raw == "":
        if required:
            raise ValidationError(f"{key} is required", field=key)
        return None
    return parse_enum(enum_cls, raw, key)


def json_body(required_message: str = "Request body is required") -> dict[str, Any]:
    """The request's JSON object; anything else is a 400."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError(required_message)
    return data


def iso(value: datetime | date | None) -> str | None:
    return value.isoformat() if value is not None else None


__all__ = [
    "get_str",
    "get_email",
    "get_int",
    "get_bool",
    "get_datetime",
    "get_date",
    "get_time",
    "get_enum",
    "parse_datetime",
    "parse_enum",
    "json_body",
    "iso",
]
