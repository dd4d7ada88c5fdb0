from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from auth import Principal
from db import get_db
from dependencies import allow_payroll_write, get_current_principal, scope_to_user
from schemas import PayrollCreate, PayrollCreateResponse, PayrollListResponse, PayrollOut, PayrollUpdate
from services import payroll_service

router = APIRouter(prefix="/payroll", tags=["Payroll"])


@router.post("", response_model=PayrollCreateResponse, dependencies=[Depends(allow_payroll_write)])
def create_payroll(payload: PayrollCreate, db: Session = Depends(get_db)):
    payroll = payroll_service.create_payroll(
        db,
        user_id=payload.user_id,
        month=payload.month,
        year=payload.year,
        net_pay=payload.net_pay,
        salary_structure=payload.salary_structure,
        deductions=payload.deductions,
    )
    return PayrollCreateResponse(payroll_id=payroll.id)


@router.get("", response_model=PayrollListResponse)
def list_payroll(
    user_id: Optional[int] = Query(None, alias="userId"),
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Latest 12 periods; employees only ever see their own payslips"""
    records = payroll_service.list_payroll(
        db,
        user_id=scope_to_user(principal, user_id),
        month=month,
        year=year,
    )
    return PayrollListResponse(records=[PayrollOut.model_validate(r) for r in records])


@router.put("/{payroll_id}", response_model=PayrollOut, dependencies=[Depends(allow_payroll_write)])
def update_payroll(payroll_id: int, update: PayrollUpdate, db: Session = Depends(get_db)):
    return payroll_service.update_payroll(db, payroll_id, update.model_dump(exclude_unset=True))
