from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from . import metadata_service
from .app_authz import require_roles
from .roles import ADMIN

bp = Blueprint("metadata_api", __name__, url_prefix="/api/Metadata")


@bp.get("/get-metadata")
@require_roles(ADMIN)
def get_metadata():
    ttl = current_app.config.get("METADATA_CACHE_SECONDS", metadata_service.DEFAULT_TTL_SECONDS)
    return jsonify(metadata_service.get_metadata(ttl_seconds=ttl))
