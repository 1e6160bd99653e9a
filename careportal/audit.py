"""Audit helpers.

Two concerns live here:
 - ``log_event``: append a domain event (login, deletions, password changes)
   to the audit_events table.
 - ``install_audit_stamping``: a session ``before_flush`` hook that fills the
   created/updated audit columns from the current request user.
"""
from __future__ import annotations

import logging

from flask import g, has_request_context
from sqlalchemy import event
from sqlalchemy.orm import Session

from .app_sessions import get_session as get_request_session
from .audit_repo import AuditRepo
from .models import AuditMixin, utcnow

log = logging.getLogger(__name__)


def _actor() -> tuple[str | None, str | None]:
    sess = get_request_session()
    if sess is None:
        return None, None
    return sess["user_id"], sess["role"]


def log_event(name: str, **fields) -> None:
    """Persist generic audit event.

    Fields accepted are free-form; actor context is inferred from the request
    when present. Never raises: an audit failure is logged, not surfaced.
    """
    try:
        actor_user_id, actor_role = _actor()
        actor_user_id = fields.pop("actor_user_id", None) or actor_user_id
        actor_role = fields.pop("actor_role", None) or actor_role
        request_id = getattr(g, "request_id", None) if has_request_context() else None
        AuditRepo().insert(
            event=name,
            actor_user_id=actor_user_id,
            actor_role=str(actor_role) if actor_role else None,
            payload=fields or None,
            request_id=request_id,
        )
    except Exception:
        log.warning("audit event %s not recorded", name, exc_info=True)


def _stamp_audit_columns(session: Session, flush_context, instances) -> None:
    user_id, _ = _actor()
    now = utcnow()
    for obj in session.new:
        if isinstance(obj, AuditMixin):
            if obj.created_at is None:
                obj.created_at = now
            if obj.created_by is None and user_id:
                obj.created_by = user_id
    for obj in session.dirty:
        if isinstance(obj, AuditMixin) and session.is_modified(obj, include_collections=False):
            obj.updated_at = now
            if user_id:
                obj.updated_by = user_id


def install_audit_stamping() -> None:
    """Register the stamping hook once for every Session in the process."""
    if not event.contains(Session, "before_flush", _stamp_audit_columns):
        event.listen(Session, "before_flush", _stamp_audit_columns)


__all__ = ["log_event", "install_audit_stamping"]
