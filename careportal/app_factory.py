"""Flask application factory.

Provides:
 - App factory with configuration override (lowercase keys patch Config,
   uppercase keys go straight into app.config)
 - DB engine initialization and per-request session cleanup
 - Request id / timing headers and one structured access log line per request
 - JSON error envelope {error, requestId, ...}
 - Blueprint registration for the /api/{Controller} endpoints
"""

from __future__ import annotations

import logging
import os
import time
import uuid
from typing import Any

from dotenv import load_dotenv
from flask import Flask, g, request, send_from_directory
from werkzeug.wrappers.response import Response

from .app_authz import require_roles
from .audit import install_audit_stamping
from .auth_api import bp as auth_api_bp
from .client_api import bp as client_api_bp
from .config import Config
from .dashboard_api import bp as dashboard_api_bp
from .db import create_all, init_engine, remove_session
from .document_api import bp as document_api_bp
from .errors import NotFoundError, register_error_handlers
from .file_api import bp as file_api_bp
from .file_upload_service import FileUploadService
from .health_api import bp as health_bp
from .incident_api import bp as incident_api_bp
from .jobtime_api import bp as jobtime_api_bp
from .logging_setup import install_logging
from .metadata_api import bp as metadata_api_bp
from .security import init_security
from .seed import init_seed_cli, run_seed
from .user_api import bp as user_api_bp

_UPLOAD_FOLDERS = {"documents": "document", "incidents": "incident"}


def create_app(config_override: dict[str, Any] | None = None) -> Flask:
    load_dotenv()
    app = Flask(__name__)

    # --- Configuration ---
    cfg = Config.from_env()
    if config_override:
        known = {k: v for k, v in config_override.items() if hasattr(cfg, k)}
        if known:
            cfg.override(known)
    # Default SQLite file lives in the instance folder
    if not os.getenv("DATABASE_URL") and cfg.database_url == "sqlite:///careportal.db":
        os.makedirs(app.instance_path, exist_ok=True)
        cfg.database_url = f"sqlite:///{os.path.join(app.instance_path, 'careportal.db')}"
    app.config.update(cfg.to_flask_dict())
    if config_override:
        for k, v in config_override.items():
            if k.isupper():
                app.config[k] = v

    install_logging(app)
    log = logging.getLogger("careportal.access")

    # --- DB setup ---
    db_url = app.config["SQLALCHEMY_DATABASE_URI"]
    init_engine(db_url, force=bool(app.config.get("FORCE_DB_REINIT")))
    install_audit_stamping()
    app.logger.info("DB_URL=%s", db_url)

    # --- Domain services ---
    app.file_upload_service = FileUploadService.from_config(app.config, app.instance_path)  # type: ignore[attr-defined]

    # --- Security middleware (CORS, headers) ---
    init_security(app)

    @app.before_request
    def _before_req() -> None:
        g._t0 = time.perf_counter()
        g.request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())

    @app.after_request
    def _after_req(resp: Response) -> Response:
        dur_ms = int((time.perf_counter() - getattr(g, "_t0", time.perf_counter())) * 1000)
        rid = getattr(g, "request_id", None) or str(uuid.uuid4())
        resp.headers["X-Request-Id"] = rid
        resp.headers["X-Request-Duration-ms"] = str(dur_ms)
        if "Cache-Control" not in resp.headers:
            resp.headers["Cache-Control"] = "no-store"
        sess = g.get("session_data")
        log.info(
            {
                "request_id": rid,
                "user_id": sess["user_id"] if sess else None,
                "method": request.method,
                "path": request.path,
                "status": resp.status_code,
                "duration_ms": dur_ms,
            }
        )
        return resp

    @app.teardown_appcontext
    def _cleanup_session(exc: BaseException | None) -> None:
        remove_session()

    # --- Error handling ---
    register_error_handlers(app)

    # --- Register blueprints ---
    app.register_blueprint(auth_api_bp)
    app.register_blueprint(client_api_bp)
    app.register_blueprint(dashboard_api_bp)
    app.register_blueprint(document_api_bp)
    app.register_blueprint(file_api_bp)
    app.register_blueprint(incident_api_bp)
    app.register_blueprint(jobtime_api_bp)
    app.register_blueprint(metadata_api_bp)
    app.register_blueprint(user_api_bp)
    app.register_blueprint(health_bp)

    # Stored uploads under the public URL returned by file_url()
    base_url = app.config.get("UPLOAD_BASE_URL") or "/uploads"

    @app.get(f"{base_url.rstrip('/')}/<folder>/<path:file_name>")
    @require_roles()
    def uploaded_file(folder: str, file_name: str):
        kind = _UPLOAD_FOLDERS.get(folder)
        if kind is None:
            raise NotFoundError("file not found")
        return send_from_directory(app.file_upload_service.paths[kind], file_name)  # type: ignore[attr-defined]

    # --- Schema + seed ---
    init_seed_cli(app)
    if app.config.get("DEV_CREATE_ALL"):
        create_all()
        app.logger.info("DEV_CREATE_ALL: schema ensured")
    with app.app_context():
        run_seed(app)

    return app


__all__ = ["create_app"]
