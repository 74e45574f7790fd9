"""Authorization policy applied before every faculty operation."""

from __future__ import annotations

from src.core.auth import Role
from src.domain.errors import Forbidden, Unauthenticated
from src.domain.models import Principal

FACULTY_CAPABLE_ROLES: frozenset[str] = frozenset(
    {Role.FACULTY.value, Role.ADMIN.value, Role.SUPERADMIN.value}
)


def ensure_faculty(principal: Principal | None) -> Principal:
    """Return the principal when it may act as faculty, raise otherwise."""
    if principal is None or not principal.user_id:
        raise Unauthenticated("Faculty ID missing. Authentication failed.")
    if principal.role not in FACULTY_CAPABLE_ROLES:
        raise Forbidden("Insufficient role privileges")
    return principal


# Reads and writes share one capability set today.
ensure_can_write = ensure_faculty
ensure_can_read = ensure_faculty
