"""
Attendance Service
==================
Handles: Daily check-in/check-out state machine and attendance listing

One row per (user, calendar day). States of a day:

    none --checkin--> Present --checkout--> Present | Half-day
    Leave (from an approved leave) --checkin--> Present
"""

import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

import config
from exceptions import ConflictError, ValidationError
from models import Attendance, AttendanceStatus
from utils import hours_between, local_date, to_local

logger = logging.getLogger(__name__)

HALF_DAY_THRESHOLD_HOURS = 4
MAX_ATTENDANCE_ROWS = 100

CHECK_IN = "checkin"
CHECK_OUT = "checkout"


def classify_day(check_in: datetime, check_out: datetime, current: str) -> str:
    """Status after check-out: short days become Half-day, others keep their status."""
    if hours_between(check_in, check_out) < HALF_DAY_THRESHOLD_HOURS:
        return AttendanceStatus.HALF_DAY.value
    return current


def _ensure_business_hours(now: datetime) -> None:
    if not config.ATTENDANCE_ENFORCE_BUSINESS_HOURS:
        return
    hour = to_local(now).hour
    if hour < config.ATTENDANCE_START_HOUR or hour > config.ATTENDANCE_END_HOUR:
        raise ValidationError(
            f"Check-in is only allowed between {config.ATTENDANCE_START_HOUR}:00 "
            f"and {config.ATTENDANCE_END_HOUR}:00"
        )


def get_day_record(db: Session, user_id: int, day: date) -> Optional[Attendance]:
    return db.query(Attendance).filter(Attendance.user_id == user_id, Attendance.date == day).first()


def check_in(db: Session, user_id: int, now: datetime) -> Attendance:
    """
    Record today's check-in.

    Raises:
        ConflictError: today already has a check-in
        ValidationError: outside business hours (when enforced)
    """
    _ensure_business_hours(now)
    today = local_date(now)

    record = get_day_record(db, user_id, today)
    if record is not None and record.check_in is not None:
        raise ConflictError("Already checked in today")

    if record is None:
        record = Attendance(user_id=user_id, date=today)
        db.add(record)
    record.check_in = now
    record.status = AttendanceStatus.PRESENT.value

    try:
        db.commit()
    except IntegrityError:
        # Lost the race against a parallel check-in for the same day
        db.rollback()
        raise ConflictError("Already checked in today")

    db.refresh(record)
    logger.info(f"User {user_id} checked in for {today} at {now.isoformat()}")
    return record


def check_out(db: Session, user_id: int, now: datetime) -> Attendance:
    """
    Record today's check-out and settle the day's status.

    Raises:
        ValidationError: no check-in today
        ConflictError: already checked out today
    """
    today = local_date(now)
    record = get_day_record(db, user_id, today)

    if record is None or record.check_in is None:
        raise ValidationError("Please check in first")
    if record.check_out is not None:
        raise ConflictError("Already checked out today")

    record.check_out = now
    record.status = classify_day(record.check_in, now, record.status)
    db.commit()
    db.refresh(record)

    logger.info(
        f"User {user_id} checked out for {today}: {hours_between(record.check_in, now):.2f}h, status={record.status}"
    )
    return record


def record_action(db: Session, user_id: int, action: str, now: datetime) -> Attendance:
    if action == CHECK_IN:
        return check_in(db, user_id, now)
    if action == CHECK_OUT:
        return check_out(db, user_id, now)
    raise ValidationError("Invalid action")


def list_attendance(
    db: Session,
    user_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = MAX_ATTENDANCE_ROWS,
) -> List[Attendance]:
    """Newest day first; user_id=None means every user."""
    query = db.query(Attendance).options(joinedload(Attendance.user))
    if user_id is not None:
        query = query.filter(Attendance.user_id == user_id)
    if start_date is not None:
        query = query.filter(Attendance.date >= start_date)
    if end_date is not None:
        query = query.filter(Attendance.date <= end_date)
    return (
        query.order_by(Attendance.date.desc(), Attendance.id.desc())
        .limit(min(limit, MAX_ATTENDANCE_ROWS))
        .all()
    )
