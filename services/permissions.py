"""
Permission rules for the three roles.

Every authorization decision in the routers and services goes through one of
these functions.
"""

from models import Role

MANAGER_ROLES = frozenset({Role.ADMIN, Role.HR})


def is_admin(role: Role) -> bool:
    return role == Role.ADMIN


def can_manage_employees(role: Role) -> bool:
    """Create, list and edit employee profiles."""
    return role in MANAGER_ROLES


def can_delete_employees(role: Role) -> bool:
    return is_admin(role)


def can_review_leave(role: Role) -> bool:
    return is_admin(role)


def can_write_payroll(role: Role) -> bool:
    return is_admin(role)


def can_view_all_records(role: Role) -> bool:
    """Read anyone's attendance, leave, payroll and profile rows."""
    return role in MANAGER_ROLES


def can_track_attendance(role: Role) -> bool:
    """Check in/out and request leave for oneself."""
    return role == Role.EMPLOYEE


def can_access(role: Role, actor_id: int, owner_id: int) -> bool:
    """Ownership rule: yourself, or anyone when you can view all records."""
    return actor_id == owner_id or can_view_all_records(role)


def landing_page(role: Role) -> str:
    if role == Role.ADMIN:
        return "/admin"
    if role == Role.HR:
        return "/hr"
    return "/dashboard"
