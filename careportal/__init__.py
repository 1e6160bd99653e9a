"""CarePortal: care-management REST API (clients, staff time, incidents, documents)."""

from .app_factory import create_app

__all__ = ["create_app"]
