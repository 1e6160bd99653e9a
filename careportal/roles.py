"""Role adapter.

CanonicalRole: the two role names stored on users and carried in tokens.
RoleLike: anything accepted at the API boundary; converted via to_canonical().
"""

from __future__ import annotations

from typing import Literal

CanonicalRole = Literal["Admin", "Staff"]
RoleLike = CanonicalRole | str

ADMIN: CanonicalRole = "Admin"
STAFF: CanonicalRole = "Staff"
DEFAULT_ROLE: CanonicalRole = STAFF

# Case-insensitive lookups -> canonical spelling
ROLE_MAP: dict[str, CanonicalRole] = {
    "admin": ADMIN,
    "staff": STAFF,
}


def to_canonical(role: RoleLike | None) -> str:
    """Normalize known roles to their canonical spelling; unknown names pass through trimmed."""
    if not role:
        return ""
    raw = str(role).strip()
    return ROLE_MAP.get(raw.lower(), raw)


def role_description(role: str) -> str:
    return f"{role} role for CarePortal"


__all__ = [
    "CanonicalRole",
    "RoleLike",
    "ADMIN",
    "STAFF",
    "DEFAULT_ROLE",
    "ROLE_MAP",
    "to_canonical",
    "role_description",
]
