"""
Employee Service
================
Handles: Account registration, HR-created employees, login lookup,
profile edits, deletion, and the daily status board
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import case, func, or_
from sqlalchemy.orm import Session

from auth import hash_password, verify_password
from exceptions import ConflictError, NotFoundError, ValidationError
from models import Attendance, AttendanceStatus, LeaveRequest, LeaveStatus, Payroll, Role, User
from services import identity_service

logger = logging.getLogger(__name__)

# Field sets for PUT /employees/{id}; keys are model attribute names
SELF_EDITABLE_FIELDS = ("name", "phone")
MANAGER_EDITABLE_FIELDS = (
    "name",
    "email",
    "phone",
    "department",
    "designation",
    "joining_date",
    "address",
    "salary",
    "login_id",
)


@dataclass
class ProvisionedEmployee:
    user: User
    system_password: str


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()


def _ensure_email_free(db: Session, email: str, exclude_user_id: int | None = None) -> None:
    existing = get_user_by_email(db, email)
    if existing is not None and existing.id != exclude_user_id:
        raise ConflictError("Email already registered")


def _ensure_login_id_free(db: Session, login_id: str, exclude_user_id: int | None = None) -> None:
    existing = db.query(User).filter(User.login_id == login_id).first()
    if existing is not None and existing.id != exclude_user_id:
        raise ConflictError("Employee ID already exists")


# ============================================================================
# ACCOUNT CREATION
# ============================================================================

def register_user(
    db: Session,
    name: str,
    email: str,
    password: str,
    role: Role,
    company_name: str,
    today: date,
    phone: Optional[str] = None,
    login_id: Optional[str] = None,
) -> User:
    """
    Self-service registration.

    Employees get a login ID: the supplied one if free, otherwise one
    generated for the current year. Admin and HR accounts have none.
    """
    _ensure_email_free(db, email)

    final_login_id = None
    if role == Role.EMPLOYEE:
        supplied = (login_id or "").strip()
        if supplied:
            _ensure_login_id_free(db, supplied)
            final_login_id = supplied
        else:
            final_login_id = identity_service.allocate_login_id(db, company_name, name, today.year)

    user = User(
        name=name,
        email=email.strip().lower(),
        hashed_password=hash_password(password),
        phone=phone,
        role=role.value,
        login_id=final_login_id,
        joining_date=today,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"Registered {role.value} user {user.id} ({user.email}), login_id={final_login_id}")
    return user


def create_employee(
    db: Session,
    company_name: str,
    name: str,
    email: str,
    joining_date: date,
    phone: Optional[str] = None,
    department: Optional[str] = None,
    position: Optional[str] = None,
) -> ProvisionedEmployee:
    """
    Create an Employee account with a generated login ID and system password.

    The plain password is only ever returned here.
    """
    _ensure_email_free(db, email)

    login_id = identity_service.allocate_login_id(db, company_name, name, joining_date.year)
    system_password = identity_service.generate_system_password()

    user = User(
        name=name,
        email=email.strip().lower(),
        hashed_password=hash_password(system_password),
        phone=phone,
        role=Role.EMPLOYEE.value,
        login_id=login_id,
        joining_date=joining_date,
        department=department,
        designation=position,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"Created employee {user.id} ({user.email}) with login ID {login_id}")
    return ProvisionedEmployee(user=user, system_password=system_password)


# ============================================================================
# AUTHENTICATION
# ============================================================================

def authenticate(db: Session, identifier: str, password: str) -> Optional[User]:
    """Look a user up by email or login ID and check the password."""
    identifier = identifier.strip()
    user = db.query(User).filter(
        or_(func.lower(User.email) == identifier.lower(), User.login_id == identifier)
    ).first()
    if user is None or not verify_password(password, user.hashed_password):
        logger.info(f"Failed login attempt for '{identifier}'")
        return None
    return user


# ============================================================================
# DIRECTORY
# ============================================================================

def list_employees(db: Session) -> List[User]:
    return db.query(User).filter(User.role == Role.EMPLOYEE.value).order_by(User.name).all()


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def get_employee(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None or user.role != Role.EMPLOYEE.value:
        raise NotFoundError("Employee not found")
    return user


def update_employee(db: Session, user: User, changes: dict, allowed_fields) -> User:
    """
    Apply the allowed, non-None fields of `changes` to `user`.

    Raises:
        ValidationError: nothing applicable to update
        ConflictError: email or login ID taken by someone else
    """
    updates = {k: v for k, v in changes.items() if k in allowed_fields and v is not None}
    if not updates:
        raise ValidationError("No valid fields to update")

    if "email" in updates:
        updates["email"] = updates["email"].strip().lower()
        _ensure_email_free(db, updates["email"], exclude_user_id=user.id)
    if "login_id" in updates:
        updates["login_id"] = updates["login_id"].strip()
        _ensure_login_id_free(db, updates["login_id"], exclude_user_id=user.id)

    for field, value in updates.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)

    logger.info(f"Updated user {user.id}: {', '.join(sorted(updates))}")
    return user


def delete_employee(db: Session, user_id: int, actor_id: int) -> None:
    """Delete a user together with every row they own."""
    if user_id == actor_id:
        raise ValidationError("You cannot delete your own account")

    user = get_user(db, user_id)
    email = user.email
    db.delete(user)
    db.commit()
    logger.info(f"User {user_id} ({email}) deleted by user {actor_id}")


# ============================================================================
# STATUS BOARD / DASHBOARD
# ============================================================================

def statuses_for_day(db: Session, day: date) -> Dict[int, str]:
    """
    Attendance status of every employee on `day`.

    An approved leave covering the day wins over the attendance row;
    employees with neither are Absent.
    """
    employee_ids = db.query(User.id).filter(User.role == Role.EMPLOYEE.value).order_by(User.id).all()
    statuses = {user_id: AttendanceStatus.ABSENT.value for (user_id,) in employee_ids}

    rows = db.query(Attendance.user_id, Attendance.status).filter(
        Attendance.date == day,
        Attendance.user_id.in_(list(statuses)),
    )
    for user_id, status in rows:
        statuses[user_id] = status

    on_leave = db.query(LeaveRequest.user_id).filter(
        LeaveRequest.status == LeaveStatus.APPROVED.value,
        LeaveRequest.start_date <= day,
        LeaveRequest.end_date >= day,
        LeaveRequest.user_id.in_(list(statuses)),
    )
    for (user_id,) in on_leave:
        statuses[user_id] = AttendanceStatus.LEAVE.value

    return statuses


def dashboard_summary(db: Session, user_id: int, today: date) -> dict:
    attendance_today = db.query(Attendance.status).filter(
        Attendance.user_id == user_id,
        Attendance.date == today,
    ).scalar()

    total, pending = db.query(
        func.count(LeaveRequest.id),
        func.sum(case((LeaveRequest.status == LeaveStatus.PENDING.value, 1), else_=0)),
    ).filter(LeaveRequest.user_id == user_id).one()

    monthly_salary = db.query(Payroll.net_pay).filter(
        Payroll.user_id == user_id,
        Payroll.month == today.month,
        Payroll.year == today.year,
    ).scalar()

    return {
        "attendance_today": attendance_today,
        "leave_requests": total or 0,
        "pending_leaves": pending or 0,
        "monthly_salary": monthly_salary,
    }
