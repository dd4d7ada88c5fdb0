"""
Payroll Service
===============
Handles: Monthly payroll records per employee
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from exceptions import ConflictError, NotFoundError, ValidationError
from models import Payroll, User
from services import notification_service

logger = logging.getLogger(__name__)

MAX_PAYROLL_ROWS = 12

EDITABLE_FIELDS = ("salary_structure", "deductions", "net_pay")


def find_payroll(db: Session, user_id: int, month: int, year: int) -> Optional[Payroll]:
    return db.query(Payroll).filter(
        Payroll.user_id == user_id,
        Payroll.month == month,
        Payroll.year == year,
    ).first()


def create_payroll(
    db: Session,
    user_id: int,
    month: int,
    year: int,
    net_pay: float,
    salary_structure: Optional[str] = None,
    deductions: float = 0.0,
) -> Payroll:
    if db.get(User, user_id) is None:
        raise NotFoundError("Employee not found")
    if find_payroll(db, user_id, month, year) is not None:
        raise ConflictError("Payroll record already exists for this period")

    payroll = Payroll(
        user_id=user_id,
        month=month,
        year=year,
        salary_structure=salary_structure,
        deductions=deductions,
        net_pay=net_pay,
    )
    db.add(payroll)
    db.flush()
    notification_service.notify_payroll_created(db, payroll)
    db.commit()
    db.refresh(payroll)

    logger.info(f"Payroll {payroll.id} created for user {user_id} ({month:02d}/{year})")
    return payroll


def update_payroll(db: Session, payroll_id: int, changes: dict) -> Payroll:
    """Apply the non-None editable fields in `changes`."""
    updates = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS and v is not None}
    if not updates:
        raise ValidationError("No fields to update")

    payroll = db.get(Payroll, payroll_id)
    if payroll is None:
        raise NotFoundError("Payroll record not found")

    for field, value in updates.items():
        setattr(payroll, field, value)
    db.commit()
    db.refresh(payroll)

    logger.info(f"Payroll {payroll_id} updated: {', '.join(sorted(updates))}")
    return payroll


def list_payroll(
    db: Session,
    user_id: Optional[int] = None,
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> List[Payroll]:
    """Latest period first, capped at MAX_PAYROLL_ROWS."""
    query = db.query(Payroll)
    if user_id is not None:
        query = query.filter(Payroll.user_id == user_id)
    if month is not None:
        query = query.filter(Payroll.month == month)
    if year is not None:
        query = query.filter(Payroll.year == year)
    return (
        query.order_by(Payroll.year.desc(), Payroll.month.desc(), Payroll.id.desc())
        .limit(MAX_PAYROLL_ROWS)
        .all()
    )
