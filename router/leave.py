from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from auth import Principal
from db import get_db
from dependencies import (
    allow_admin_or_hr,
    allow_employee,
    allow_leave_review,
    ensure_can_access,
    get_clock,
    get_current_principal,
    scope_to_user,
)
from models import LeaveRequest, LeaveStatus
from schemas import (
    LeaveCreateResponse,
    LeaveListResponse,
    LeaveRequestCreate,
    LeaveRequestOut,
    LeaveReviewRequest,
    LeaveReviewResponse,
)
from services import leave_service
from utils import local_date

router = APIRouter(prefix="/leave", tags=["Leave"])


def to_leave_out(leave: LeaveRequest) -> LeaveRequestOut:
    out = LeaveRequestOut.model_validate(leave)
    if leave.user is not None:
        out.employee_name = leave.user.name
        out.employee_email = leave.user.email
        out.employee_id = leave.user.login_id
    return out


# ============================================================================
# EMPLOYEE ENDPOINTS
# ============================================================================

@router.post("", response_model=LeaveCreateResponse)
def request_leave(
    payload: LeaveRequestCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(allow_employee),
    clock=Depends(get_clock),
):
    leave = leave_service.create_leave_request(
        db,
        user_id=principal.user_id,
        leave_type=payload.leave_type,
        start_date=payload.start_date,
        end_date=payload.end_date,
        reason=payload.reason,
        today=local_date(clock()),
    )
    return LeaveCreateResponse(leave_id=leave.id)


@router.get("", response_model=LeaveListResponse)
def list_leaves(
    user_id: Optional[int] = Query(None, alias="userId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    leaves = leave_service.list_leave_requests(db, user_id=scope_to_user(principal, user_id))
    return LeaveListResponse(leaves=[to_leave_out(leave) for leave in leaves])


# ============================================================================
# ADMIN / HR ENDPOINTS
# ============================================================================

@router.get("/pending", response_model=LeaveListResponse, dependencies=[Depends(allow_admin_or_hr)])
def list_pending_leaves(db: Session = Depends(get_db)):
    leaves = leave_service.list_pending_requests(db)
    return LeaveListResponse(leaves=[to_leave_out(leave) for leave in leaves])


@router.get("/{leave_id}", response_model=LeaveRequestOut)
def read_leave(
    leave_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    leave = leave_service.get_leave_request(db, leave_id)
    ensure_can_access(principal, leave.user_id)
    return to_leave_out(leave)


@router.put("/{leave_id}", response_model=LeaveReviewResponse)
def review_leave(
    leave_id: int,
    payload: LeaveReviewRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(allow_leave_review),
    clock=Depends(get_clock),
):
    """
    Approve or reject a pending leave request (Admin only).

    Approval marks every day of the leave as 'Leave' in attendance.
    """
    leave, days_updated = leave_service.review_leave_request(
        db,
        leave_id=leave_id,
        status=LeaveStatus(payload.status),
        reviewer_id=principal.user_id,
        admin_comment=payload.admin_comment,
        now=clock(),
    )
    return LeaveReviewResponse(leave=to_leave_out(leave), attendance_days_updated=days_updated)
