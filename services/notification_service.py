"""
Notification Service
====================
Handles: In-app notifications for leave reviews and payroll postings
"""

import logging
from typing import List

from sqlalchemy.orm import Session

from exceptions import NotFoundError
from models import LeaveRequest, LeaveStatus, Notification, NotificationType, Payroll

logger = logging.getLogger(__name__)


def create_notification(
    db: Session,
    user_id: int,
    ntype: NotificationType,
    title: str,
    message: str | None = None,
    link: str | None = None,
) -> Notification:
    """
    Queue an in-app notification for a user.

    The row joins the caller's transaction; the caller commits.

    Args:
        db: Database session
        user_id: Target user ID
        ntype: Notification type
        title: Notification title
        message: Notification message
        link: Page the notification points at
    """
    notification = Notification(
        user_id=user_id,
        type=ntype.value,
        title=title,
        message=message,
        link=link,
        is_read=False,
    )
    db.add(notification)
    return notification


def notify_leave_reviewed(db: Session, leave: LeaveRequest) -> Notification:
    """Tell the requester their leave was approved or rejected."""
    verdict = "approved" if leave.status == LeaveStatus.APPROVED.value else "rejected"
    message = (
        f"Your {leave.leave_type} leave from {leave.start_date.isoformat()} "
        f"to {leave.end_date.isoformat()} has been {verdict}."
    )
    if leave.admin_comment:
        message += f" Comment: {leave.admin_comment}"
    return create_notification(
        db,
        user_id=leave.user_id,
        ntype=NotificationType.LEAVE_UPDATE,
        title=f"Leave request {verdict}",
        message=message,
        link="/dashboard",
    )


def notify_payroll_created(db: Session, payroll: Payroll) -> Notification:
    return create_notification(
        db,
        user_id=payroll.user_id,
        ntype=NotificationType.PAYROLL_UPDATE,
        title="Payslip available",
        message=f"Your payroll for {payroll.month:02d}/{payroll.year} has been posted. Net pay: {payroll.net_pay:.2f}",
        link="/dashboard",
    )


def list_notifications(db: Session, user_id: int, unread_only: bool = False, limit: int = 50) -> List[Notification]:
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()


def mark_as_read(db: Session, notification_id: int, user_id: int) -> Notification:
    notification = db.get(Notification, notification_id)
    # Someone else's notification is reported as missing
    if notification is None or notification.user_id != user_id:
        raise NotFoundError("Notification not found")
    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_as_read(db: Session, user_id: int) -> int:
    count = db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.is_read.is_(False),
    ).update({Notification.is_read: True}, synchronize_session=False)
    db.commit()
    logger.info(f"Marked {count} notifications as read for user {user_id}")
    return count
