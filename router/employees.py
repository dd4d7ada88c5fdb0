# employees.py
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from auth import Principal
from db import get_db
from dependencies import (
    allow_admin_or_hr,
    allow_employee,
    allow_employee_deletion,
    allow_employee_managers,
    ensure_can_access,
    get_clock,
    get_current_principal,
    get_current_user,
)
from models import User
from schemas import (
    CreatedEmployee,
    EmployeeCreate,
    EmployeeCreateResponse,
    EmployeeDashboardOut,
    EmployeeOut,
    EmployeeStatusResponse,
    EmployeeStatusRow,
    EmployeeUpdate,
    SuccessResponse,
)
from services import employee_service
from services.permissions import can_manage_employees
from utils import local_date

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["Employees"])


@router.post("/create", response_model=EmployeeCreateResponse)
def create_employee(
    payload: EmployeeCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(allow_employee_managers),
):
    provisioned = employee_service.create_employee(
        db,
        company_name=payload.company_name,
        name=payload.name,
        email=payload.email,
        joining_date=payload.joining_date,
        phone=payload.phone,
        department=payload.department,
        position=payload.position,
    )
    user = provisioned.user
    logger.info(f"Employee {user.id} provisioned by user {principal.user_id}")
    return EmployeeCreateResponse(
        employee=CreatedEmployee(
            id=user.id,
            name=user.name,
            email=user.email,
            employee_id=user.login_id,
            system_password=provisioned.system_password,
            department=user.department,
            position=user.designation,
            joining_date=user.joining_date,
        )
    )


@router.get("", response_model=List[EmployeeOut], dependencies=[Depends(allow_employee_managers)])
def list_employees(db: Session = Depends(get_db)):
    """All Employee-role users ordered by name (Admin/HR only)"""
    return employee_service.list_employees(db)


@router.get("/me", response_model=EmployeeOut)
def my_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.get("/me/dashboard", response_model=EmployeeDashboardOut)
def my_dashboard(
    db: Session = Depends(get_db),
    principal: Principal = Depends(allow_employee),
    clock=Depends(get_clock),
):
    return employee_service.dashboard_summary(db, principal.user_id, local_date(clock()))


@router.get("/status", response_model=EmployeeStatusResponse, dependencies=[Depends(allow_admin_or_hr)])
def todays_statuses(db: Session = Depends(get_db), clock=Depends(get_clock)):
    statuses = employee_service.statuses_for_day(db, local_date(clock()))
    rows = [EmployeeStatusRow(user_id=user_id, status=status) for user_id, status in statuses.items()]
    return EmployeeStatusResponse(statuses=rows, total=len(rows))


@router.get("/{user_id}", response_model=EmployeeOut)
def read_employee(
    user_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    ensure_can_access(principal, user_id)
    return employee_service.get_employee(db, user_id)


@router.put("/{user_id}", response_model=EmployeeOut)
def update_employee(
    user_id: int,
    update: EmployeeUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """
    Employees may edit their own name and phone; Admin/HR may edit
    the full profile of any employee.
    """
    ensure_can_access(principal, user_id)
    employee = employee_service.get_employee(db, user_id)

    allowed = (
        employee_service.MANAGER_EDITABLE_FIELDS
        if can_manage_employees(principal.role)
        else employee_service.SELF_EDITABLE_FIELDS
    )
    changes = update.model_dump(exclude_unset=True)
    # Wire name employeeId maps onto the login_id column
    if "employee_id" in changes:
        changes["login_id"] = changes.pop("employee_id")

    return employee_service.update_employee(db, employee, changes, allowed)


@router.delete("/{user_id}", response_model=SuccessResponse)
def delete_employee(
    user_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(allow_employee_deletion),
):
    employee_service.delete_employee(db, user_id, actor_id=principal.user_id)
    return SuccessResponse()
