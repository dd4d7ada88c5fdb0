from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from auth import Principal
from db import get_db
from dependencies import allow_employee, get_clock, get_current_principal, scope_to_user
from models import Attendance
from schemas import AttendanceAction, AttendanceActionResponse, AttendanceListResponse, AttendanceOut
from services import attendance_service

router = APIRouter(prefix="/attendance", tags=["Attendance"])


def to_attendance_out(record: Attendance) -> AttendanceOut:
    out = AttendanceOut.model_validate(record)
    if record.user is not None:
        out.employee_name = record.user.name
        out.employee_email = record.user.email
    return out


@router.post("", response_model=AttendanceActionResponse)
def record_attendance(
    payload: AttendanceAction,
    db: Session = Depends(get_db),
    principal: Principal = Depends(allow_employee),
    clock=Depends(get_clock),
):
    """Check in or check out for today (employees only, always for self)"""
    record = attendance_service.record_action(db, principal.user_id, payload.action, clock())
    return AttendanceActionResponse(record=to_attendance_out(record))


@router.get("", response_model=AttendanceListResponse)
def read_attendance(
    user_id: Optional[int] = Query(None, alias="userId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    records = attendance_service.list_attendance(
        db,
        user_id=scope_to_user(principal, user_id),
        start_date=start_date,
        end_date=end_date,
    )
    return AttendanceListResponse(records=[to_attendance_out(r) for r in records])
