from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_serializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

from models import LeaveStatus, LeaveType, Role


class APIModel(BaseModel):
    """camelCase on the wire, snake_case accepted on input."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class SuccessResponse(APIModel):
    success: bool = True


# ============================================================================
# AUTH SCHEMAS
# ============================================================================

class RegisterRequest(APIModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(..., min_length=6)
    user_type: Role
    phone: Optional[str] = None
    # Optional manually assigned login ID (employees only)
    employee_id: Optional[str] = Field(None, max_length=32)

    @field_validator("user_type", mode="before")
    @classmethod
    def parse_role(cls, v):
        if isinstance(v, Role):
            return v
        return Role.parse(str(v))

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "name": "John Doe",
                "email": "john@company.com",
                "password": "SecurePass123!",
                "userType": "Employee",
            }
        }


class LoginRequest(APIModel):
    email: Optional[str] = None
    login_id: Optional[str] = None
    password: str

    @model_validator(mode="after")
    def require_identifier(self):
        if not (self.email or self.login_id):
            raise ValueError("Email or login ID is required")
        return self


class UserOut(APIModel):
    id: int
    name: str
    email: str
    role: Role
    login_id: Optional[str] = None


class AuthResponse(APIModel):
    success: bool = True
    user: UserOut
    redirect_url: str


class MeResponse(APIModel):
    user: "EmployeeOut"


# ============================================================================
# EMPLOYEE SCHEMAS
# ============================================================================

class EmployeeCreate(APIModel):
    company_name: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    joining_date: date

    @field_validator("company_name", "name")
    @classmethod
    def not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class CreatedEmployee(APIModel):
    id: int
    name: str
    email: str
    employee_id: str
    system_password: str
    department: Optional[str] = None
    position: Optional[str] = None
    joining_date: date


class EmployeeCreateResponse(APIModel):
    success: bool = True
    employee: CreatedEmployee


class EmployeeOut(APIModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    role: Role
    employee_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("login_id", "employeeId", "employee_id"),
        serialization_alias="employeeId",
    )
    department: Optional[str] = None
    designation: Optional[str] = None
    joining_date: Optional[date] = None
    address: Optional[str] = None
    salary: Optional[float] = None
    created_at: datetime


class EmployeeUpdate(APIModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    designation: Optional[str] = None
    joining_date: Optional[date] = None
    address: Optional[str] = None
    salary: Optional[float] = Field(None, ge=0)
    employee_id: Optional[str] = Field(None, max_length=32)


class EmployeeStatusRow(APIModel):
    user_id: int
    status: str


class EmployeeStatusResponse(APIModel):
    statuses: List[EmployeeStatusRow]
    total: int


class EmployeeDashboardOut(APIModel):
    attendance_today: Optional[str] = None
    leave_requests: int = 0
    pending_leaves: int = 0
    monthly_salary: Optional[float] = None


# ============================================================================
# ATTENDANCE SCHEMAS
# ============================================================================

class AttendanceAction(APIModel):
    action: str

    @field_validator("action")
    @classmethod
    def normalize(cls, v):
        return v.strip().lower()


class AttendanceOut(APIModel):
    id: int
    user_id: int
    date: date
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    status: str
    work_hours: Optional[float] = None
    created_at: datetime
    updated_at: datetime
    employee_name: Optional[str] = None
    employee_email: Optional[str] = None


class AttendanceActionResponse(APIModel):
    success: bool = True
    record: AttendanceOut


class AttendanceListResponse(APIModel):
    records: List[AttendanceOut]


# ============================================================================
# LEAVE SCHEMAS
# ============================================================================

class LeaveRequestCreate(APIModel):
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: Optional[str] = Field(None, max_length=1000)

    @model_validator(mode="after")
    def validate_window(self):
        if self.start_date > self.end_date:
            raise ValueError("Start date must be before end date")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "leaveType": "Paid",
                "startDate": "2024-03-01",
                "endDate": "2024-03-03",
                "reason": "Family function",
            }
        }


class LeaveCreateResponse(APIModel):
    success: bool = True
    leave_id: int


class LeaveReviewRequest(APIModel):
    status: Literal["Approved", "Rejected"]
    admin_comment: Optional[str] = Field(None, max_length=1000)


class LeaveRequestOut(APIModel):
    id: int
    user_id: int
    leave_type: str
    start_date: date
    end_date: date
    reason: Optional[str] = None
    status: LeaveStatus
    admin_comment: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    employee_name: Optional[str] = None
    employee_email: Optional[str] = None
    employee_id: Optional[str] = None


class LeaveReviewResponse(APIModel):
    success: bool = True
    leave: LeaveRequestOut
    attendance_days_updated: int = 0


class LeaveListResponse(APIModel):
    leaves: List[LeaveRequestOut]


# ============================================================================
# PAYROLL SCHEMAS
# ============================================================================

class PayrollCreate(APIModel):
    user_id: int
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1900, le=9999)
    salary_structure: Optional[str] = Field(None, max_length=255)
    deductions: float = Field(0.0, ge=0)
    net_pay: float = Field(..., ge=0)


class PayrollUpdate(APIModel):
    salary_structure: Optional[str] = Field(None, max_length=255)
    deductions: Optional[float] = Field(None, ge=0)
    net_pay: Optional[float] = Field(None, ge=0)


class PayrollOut(APIModel):
    id: int
    user_id: int
    month: int
    year: int
    salary_structure: Optional[str] = None
    deductions: float
    net_pay: float
    created_at: datetime
    updated_at: datetime


class PayrollCreateResponse(APIModel):
    success: bool = True
    payroll_id: int


class PayrollListResponse(APIModel):
    records: List[PayrollOut]


# ============================================================================
# NOTIFICATION SCHEMAS
# ============================================================================

class NotificationOut(APIModel):
    id: int
    type: str
    title: str
    message: Optional[str] = None
    link: Optional[str] = None
    read: bool = Field(..., validation_alias=AliasChoices("is_read", "read"), serialization_alias="read")
    created_at: datetime

    @field_serializer("created_at")
    def serialize_created(self, value):
        return value.isoformat() if value else None


MeResponse.model_rebuild()
