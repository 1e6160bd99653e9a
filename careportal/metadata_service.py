"""Enum metadata for UI dropdowns, cached per process."""
from __future__ import annotations

import copy
import threading
import time
from enum import IntEnum

from .api_types import MetadataGroup
from .enums import (
    ActivityType,
    DocumentStatus,
    DocumentType,
    IncidentSeverity,
    IncidentStatus,
    UserRole,
    display_name,
)

DEFAULT_TTL_SECONDS = 300

_GROUPS: tuple[tuple[str, type[IntEnum]], ...] = (
    ("ACTIVITY_TYPE", ActivityType),
    ("INCIDENT_STATUS", IncidentStatus),
    ("INCIDENT_SEVERITY", IncidentSeverity),
    ("USER_ROLE", UserRole),
    ("DOCUMENT_TYPE", DocumentType),
    ("DOCUMENT_STATUS", DocumentStatus),
)

_lock = threading.Lock()
_cached: list[MetadataGroup] | None = None
_cached_at = 0.0


def _group(kind: str, enum_cls: type[IntEnum]) -> MetadataGroup:
    return {
        "type": kind,
        "metadata": [
            {"paramKey": m.name, "paramValue": display_name(enum_cls, m.value), "paramValueInt": int(m.value)}
            for m in enum_cls
        ],
    }


def get_metadata(ttl_seconds: float = DEFAULT_TTL_SECONDS) -> list[MetadataGroup]:
    """Each call gets its own copy of the cached groups."""
    global _cached, _cached_at
    with _lock:
        now = time.monotonic()
        if _cached is None or now - _cached_at >= ttl_seconds:
            _cached = [_group(kind, cls) for kind, cls in _GROUPS]
            _cached_at = now
        return copy.deepcopy(_cached)


def clear_cache() -> None:
    global _cached, _cached_at
    with _lock:
        _cached = None
        _cached_at = 0.0


__all__ = ["get_metadata", "clear_cache", "DEFAULT_TTL_SECONDS"]
