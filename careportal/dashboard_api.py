from __future__ import annotations

from flask import Blueprint, jsonify, request

from . import dashboard_service
from .app_authz import current_user_id, is_admin, require_roles
from .errors import ValidationError
from .roles import ADMIN, STAFF
from .unit_of_work import UnitOfWork

bp = Blueprint("dashboard_api", __name__, url_prefix="/api/Dashboard")


@bp.get("")
@require_roles(ADMIN, STAFF)
def get_dashboard():
    with UnitOfWork() as uow:
        if is_admin():
            return jsonify(dashboard_service.get_dashboard(uow))
        return jsonify(dashboard_service.get_dashboard_by_staff(uow, current_user_id() or ""))


@bp.get("/stats")
@require_roles(ADMIN, STAFF)
def get_stats():
    # Staff receive their dashboard rather than the global stats
    with UnitOfWork() as uow:
        if is_admin():
            return jsonify(dashboard_service.get_stats(uow))
        return jsonify(dashboard_service.get_dashboard_by_staff(uow, current_user_id() or ""))


@bp.get("/recent-activities")
@require_roles(ADMIN)
def recent_activities():
    try:
        count = int(request.args.get("count", dashboard_service.DEFAULT_ACTIVITY_COUNT))
    except ValueError:
        raise ValidationError("count must be an integer", field="count") from None
    with UnitOfWork() as uow:
        return jsonify(dashboard_service.get_recent_activities(uow, count))
