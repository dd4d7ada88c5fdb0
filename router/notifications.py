"""
Notifications Router - In-App Notification Management
======================================================
Leave review and payroll notices for the signed-in user.
"""

from typing import List

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from db import get_db
from dependencies import get_current_user
from models import User
from schemas import NotificationOut, SuccessResponse
from services.notification_service import list_notifications, mark_all_as_read, mark_as_read

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=List[NotificationOut])
def get_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Get notifications for current user, newest first.

    Query params:
    - unreadOnly: Show only unread notifications
    - limit: Max results (default 50)
    """
    return list_notifications(db, current_user.id, unread_only=unread_only, limit=limit)


@router.patch("/{notification_id}/read", response_model=NotificationOut)
def read_notification(
    notification_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return mark_as_read(db, notification_id, current_user.id)


@router.post("/mark-all-read", response_model=SuccessResponse)
def read_all_notifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    mark_all_as_read(db, current_user.id)
    return SuccessResponse()
