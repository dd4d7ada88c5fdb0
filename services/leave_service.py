"""
Leave Service - Request, review and attendance fan-out
"""

import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session, joinedload

import config
from exceptions import ConflictError, NotFoundError, ValidationError
from models import Attendance, AttendanceStatus, LeaveRequest, LeaveStatus, LeaveType
from services import notification_service
from utils import daterange

logger = logging.getLogger(__name__)

# Minimum days between the request and the first day off
NOTICE_PERIOD_DAYS = {
    LeaveType.PAID: 2,
    LeaveType.SICK: 1,
}


# VALIDATION
# ============================================================================

def find_overlapping_leave(db: Session, user_id: int, start_date: date, end_date: date) -> Optional[LeaveRequest]:
    """First approved leave of the user intersecting [start_date, end_date]."""
    return db.query(LeaveRequest).filter(
        LeaveRequest.user_id == user_id,
        LeaveRequest.status == LeaveStatus.APPROVED.value,
        LeaveRequest.start_date <= end_date,
        LeaveRequest.end_date >= start_date,
    ).first()


def check_notice_period(leave_type: LeaveType, start_date: date, today: date) -> None:
    required = NOTICE_PERIOD_DAYS.get(leave_type, 0)
    if required and (start_date - today).days < required:
        raise ValidationError(f"{leave_type.value} leave requires {required} day(s) advance notice")


# REQUEST
# ============================================================================

def create_leave_request(
    db: Session,
    user_id: int,
    leave_type: LeaveType,
    start_date: date,
    end_date: date,
    reason: Optional[str],
    today: date,
) -> LeaveRequest:
    if start_date > end_date:
        raise ValidationError("Start date must be before end date")

    if config.LEAVE_ENFORCE_NOTICE_PERIOD:
        check_notice_period(leave_type, start_date, today)

    if config.LEAVE_ENFORCE_OVERLAP:
        existing = find_overlapping_leave(db, user_id, start_date, end_date)
        if existing is not None:
            raise ValidationError(
                f"Leave dates overlap with an approved leave "
                f"({existing.start_date.isoformat()} to {existing.end_date.isoformat()})"
            )

    leave = LeaveRequest(
        user_id=user_id,
        leave_type=leave_type.value,
        start_date=start_date,
        end_date=end_date,
        reason=reason,
        status=LeaveStatus.PENDING.value,
    )
    db.add(leave)
    db.commit()
    db.refresh(leave)

    logger.info(f"Leave request {leave.id} created by user {user_id}: {leave_type.value} {start_date}..{end_date}")
    return leave


# REVIEW
# ============================================================================

def mark_days_as_leave(db: Session, user_id: int, start_date: date, end_date: date, now: datetime) -> int:
    """
    Insert-or-update one Leave attendance row per day in the window.

    Runs in the caller's transaction. Returns the number of days touched.
    """
    days = 0
    for day in daterange(start_date, end_date):
        stmt = sqlite_insert(Attendance).values(
            user_id=user_id,
            date=day,
            status=AttendanceStatus.LEAVE.value,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "date"],
            set_={"status": AttendanceStatus.LEAVE.value, "updated_at": now},
        )
        db.execute(stmt)
        days += 1
    return days


def review_leave_request(
    db: Session,
    leave_id: int,
    status: LeaveStatus,
    reviewer_id: int,
    admin_comment: Optional[str],
    now: datetime,
) -> tuple[LeaveRequest, int]:
    """
    Approve or reject a pending request.

    The status change, the attendance rows and the requester's notification
    are committed together or not at all.

    Returns:
        (leave, attendance_days_updated)
    """
    if status not in (LeaveStatus.APPROVED, LeaveStatus.REJECTED):
        raise ValidationError("Invalid status")

    leave = db.get(LeaveRequest, leave_id)
    if leave is None:
        raise NotFoundError("Leave request not found")
    if leave.status != LeaveStatus.PENDING.value:
        raise ConflictError(f"Leave request already {leave.status.lower()}")

    days_updated = 0
    try:
        # Pending -> reviewed in one statement; a concurrent review matches no row
        claimed = db.query(LeaveRequest).filter(
            LeaveRequest.id == leave_id,
            LeaveRequest.status == LeaveStatus.PENDING.value,
        ).update(
            {
                LeaveRequest.status: status.value,
                LeaveRequest.admin_comment: admin_comment,
                LeaveRequest.reviewed_by: reviewer_id,
                LeaveRequest.updated_at: now,
            },
            synchronize_session="fetch",
        )
        if not claimed:
            raise ConflictError("Leave request has already been reviewed")

        if status == LeaveStatus.APPROVED:
            days_updated = mark_days_as_leave(db, leave.user_id, leave.start_date, leave.end_date, now)

        notification_service.notify_leave_reviewed(db, leave)
        db.commit()
    except ConflictError:
        db.rollback()
        logger.warning(f"Leave request {leave_id} was reviewed concurrently")
        raise
    except Exception:
        db.rollback()
        logger.exception(f"Failed to review leave request {leave_id}")
        raise

    db.refresh(leave)
    logger.info(
        f"Leave request {leave_id} {status.value.lower()} by user {reviewer_id} "
        f"({days_updated} attendance days marked)"
    )
    return leave, days_updated


# QUERIES
# ============================================================================

def get_leave_request(db: Session, leave_id: int) -> LeaveRequest:
    leave = (
        db.query(LeaveRequest)
        .options(joinedload(LeaveRequest.user))
        .filter(LeaveRequest.id == leave_id)
        .first()
    )
    if leave is None:
        raise NotFoundError("Leave request not found")
    return leave


def list_leave_requests(db: Session, user_id: Optional[int] = None, status: Optional[LeaveStatus] = None) -> List[LeaveRequest]:
    """Newest first; user_id=None means every user."""
    query = db.query(LeaveRequest).options(joinedload(LeaveRequest.user))
    if user_id is not None:
        query = query.filter(LeaveRequest.user_id == user_id)
    if status is not None:
        query = query.filter(LeaveRequest.status == status.value)
    return query.order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc()).all()


def list_pending_requests(db: Session) -> List[LeaveRequest]:
    return list_leave_requests(db, status=LeaveStatus.PENDING)
