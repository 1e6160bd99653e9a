"""Security middleware.

Features:
 - CORS allow-list (CORS_ALLOW_ORIGINS); preflight answered for any path.
 - Security headers (HSTS outside test/debug, CSP, Referrer-Policy, Permissions-Policy).

The API authenticates with bearer tokens only, so there is no cookie-based
CSRF exposure to defend.
"""

from __future__ import annotations

from flask import Flask, make_response, request


def _validate_cors(app: Flask, resp):
    allowed: list[str] = app.config.get("CORS_ALLOWED_ORIGINS", []) or []
    if not allowed:
        return resp  # CORS disabled
    origin = request.headers.get("Origin")
    if not origin:
        return resp
    if origin in allowed or "*" in allowed:
        resp.headers.setdefault("Vary", "Origin")
        resp.headers["Access-Control-Allow-Origin"] = origin
        resp.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,PATCH,DELETE,OPTIONS"
        req_hdrs = request.headers.get("Access-Control-Request-Headers")
        resp.headers["Access-Control-Allow-Headers"] = req_hdrs or "Authorization,Content-Type"
        resp.headers["Access-Control-Allow-Credentials"] = "true"
        resp.headers["Access-Control-Expose-Headers"] = "X-Request-Id,Content-Disposition"
        resp.headers["Access-Control-Max-Age"] = "600"
    return resp


def init_security(app: Flask):
    @app.after_request
    def _security_after_request(resp):
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        resp.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
        if not app.config.get("TESTING") and not app.config.get("DEBUG"):
            resp.headers.setdefault(
                "Strict-Transport-Security", "max-age=63072000; includeSubDomains; preload"
            )
        resp.headers.setdefault(
            "Content-Security-Policy",
            "default-src 'self'; object-src 'none'; base-uri 'self'; frame-ancestors 'none'",
        )
        # Apply CORS last
        return _validate_cors(app, resp)

    # Handle preflight quickly
    @app.route("/", methods=["OPTIONS"], defaults={"path": ""})
    @app.route("/<path:path>", methods=["OPTIONS"])
    def _cors_preflight(path=""):
        resp = make_response("", 204)
        return _validate_cors(app, resp)

    return app


__all__ = ["init_security"]
