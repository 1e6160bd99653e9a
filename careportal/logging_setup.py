"""Logging configuration.

Every record emitted inside a request carries ``request_id``, ``path`` and
``user_id`` attributes so formatters (and log shippers) can correlate lines.
"""

from __future__ import annotations

import logging

from flask import Flask, g, has_request_context, request

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s %(path)s] %(message)s"


class RequestContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if has_request_context():
            sess = g.get("session_data")
            record.request_id = getattr(g, "request_id", "-")
            record.path = request.path
            record.user_id = sess["user_id"] if sess else "-"
        else:
            record.request_id = "-"
            record.path = "-"
            record.user_id = "-"
        return True


def install_logging(app: Flask) -> None:
    """Attach one request-aware stream handler to the ``careportal`` logger tree."""
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    root = logging.getLogger("careportal")
    root.setLevel(level)
    # Avoid duplicate attachment when several apps are created in one process (tests)
    if not any(isinstance(f, RequestContextFilter) for h in root.handlers for f in h.filters):
        h = logging.StreamHandler()
        h.addFilter(RequestContextFilter())
        h.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(h)
    app.logger.setLevel(level)
    if not any(isinstance(f, RequestContextFilter) for f in app.logger.filters):
        app.logger.addFilter(RequestContextFilter())


__all__ = ["RequestContextFilter", "install_logging", "LOG_FORMAT"]
