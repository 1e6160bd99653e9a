"""Lightweight application telemetry helpers.

Provides an optional OpenTelemetry counter ``careportal.events_total`` capturing
domain-level events (logins, uploads, record changes). Gracefully degrades to
no-op when the OTEL API isn't installed.
"""
from __future__ import annotations

from collections import Counter
from typing import Any

try:  # pragma: no cover - optional dependency
    from opentelemetry.metrics import get_meter  # type: ignore
    _METER = get_meter("careportal.app")
    _EVENTS = _METER.create_counter(
        name="careportal.events_total",
        description="Domain events (labels: action, entity, outcome)",
    )
except Exception:  # pragma: no cover
    _METER = None
    _EVENTS = None

# Local in-process event counts (visible without a metrics backend)
LOCAL_EVENTS: Counter[str] = Counter()


def track_event(action: str, *, entity: str | None = None, outcome: str | None = None) -> None:
    """Record a domain event.

    Parameters
    ----------
    action: str
        The event action key (e.g., "login", "file_upload").
    entity: Optional[str]
        Entity label if relevant ("client", "incident", ...).
    outcome: Optional[str]
        "success" / "failure" style qualifier if relevant.
    """
    LOCAL_EVENTS[action] += 1
    if _EVENTS:
        labels: dict[str, Any] = {"action": action}
        if entity:
            labels["entity"] = entity
        if outcome:
            labels["outcome"] = outcome
        try:  # pragma: no cover - defensive against SDK misconfiguration
            _EVENTS.add(1, labels)  # type: ignore[arg-type]
        except Exception:
            pass


__all__ = ["track_event", "LOCAL_EVENTS"]
