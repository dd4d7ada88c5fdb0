import logging
from datetime import datetime
from typing import Callable

from fastapi import Depends, Request
from fastapi.security import APIKeyCookie
from sqlalchemy.orm import Session

import config
from auth import Principal, verify_session_token
from db import get_db
from exceptions import AuthenticationRequired, AuthorizationDenied, PageRedirect
from models import Role, User
from services import permissions
from utils import utc_now

logger = logging.getLogger(__name__)

# auto_error=False: a missing cookie is reported as our own 401
session_cookie = APIKeyCookie(name=config.SESSION_COOKIE_NAME, auto_error=False)


def get_clock() -> Callable[[], datetime]:
    """Source of 'now' for attendance and leave rules; overridden in tests."""
    return utc_now


def get_optional_principal(token: str | None = Depends(session_cookie)) -> Principal | None:
    return verify_session_token(token)


def get_current_user(
    principal: Principal | None = Depends(get_optional_principal),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the session to a live user row.

    A token whose user has since been deleted counts as no session.
    """
    if principal is None:
        raise AuthenticationRequired()
    user = db.get(User, principal.user_id)
    if user is None:
        logger.warning(f"Session for missing user id={principal.user_id}")
        raise AuthenticationRequired()
    if user.role != principal.role.value:
        logger.warning(f"Role mismatch for user {user.id}: token={principal.role.value}, db={user.role}")
        raise AuthenticationRequired()
    return user


def get_current_principal(user: User = Depends(get_current_user)) -> Principal:
    return Principal(user_id=user.id, role=user.role_enum)


class RoleChecker:
    def __init__(self, check: Callable[[Role], bool], detail: str):
        self.check = check
        self.detail = detail

    def __call__(self, principal: Principal = Depends(get_current_principal)) -> Principal:
        if not self.check(principal.role):
            logger.warning(
                f"Unauthorized access attempt: user {principal.user_id} ({principal.role.value}) - {self.detail}"
            )
            raise AuthorizationDenied(self.detail)
        return principal


allow_employee_managers = RoleChecker(permissions.can_manage_employees, "Admin/HR access only")
allow_admin_or_hr = RoleChecker(permissions.can_view_all_records, "Admin/HR access only")
allow_employee_deletion = RoleChecker(permissions.can_delete_employees, "Admin access only")
allow_leave_review = RoleChecker(permissions.can_review_leave, "Admin access only")
allow_payroll_write = RoleChecker(permissions.can_write_payroll, "Admin access only")
allow_employee = RoleChecker(permissions.can_track_attendance, "Employee access only")


def ensure_can_access(principal: Principal, owner_id: int) -> None:
    """Employees may only touch their own rows; Admin/HR may touch any."""
    if not permissions.can_access(principal.role, principal.user_id, owner_id):
        logger.warning(f"User {principal.user_id} denied access to records of user {owner_id}")
        raise AuthorizationDenied("Access denied")


def scope_to_user(principal: Principal, requested_user_id: int | None) -> int | None:
    """
    User filter for list endpoints.

    Employees are pinned to themselves; Admin/HR get what they asked for,
    where None means every user.
    """
    if permissions.can_view_all_records(principal.role):
        return requested_user_id
    if requested_user_id is not None and requested_user_id != principal.user_id:
        logger.warning(f"User {principal.user_id} denied listing of user {requested_user_id}")
        raise AuthorizationDenied("Access denied")
    return principal.user_id


# ============================================================================
# PAGE GATES (redirect instead of JSON errors)
# ============================================================================

class PageGate:
    def __init__(self, check: Callable[[Role], bool] | None = None):
        self.check = check

    def __call__(
        self,
        request: Request,
        principal: Principal | None = Depends(get_optional_principal),
        db: Session = Depends(get_db),
    ) -> Principal:
        if principal is None or db.get(User, principal.user_id) is None:
            raise PageRedirect(f"/auth/login?redirect={request.url.path}")
        if self.check is not None and not self.check(principal.role):
            raise PageRedirect("/dashboard")
        return principal


require_page_session = PageGate()
require_admin_page = PageGate(permissions.is_admin)
require_hr_page = PageGate(permissions.can_manage_employees)
