from enum import Enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, relationship
from datetime import datetime, timezone

# TIMESTAMP NOTES:
# - DateTime columns store UTC as naive datetime
# - Date columns (attendance.date, leave windows) are calendar days in APP_TIMEZONE


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


# ============================================================================
# ENUMERATIONS
# ============================================================================

class Role(str, Enum):
    EMPLOYEE = "Employee"
    HR = "HR"
    ADMIN = "Admin"

    @classmethod
    def parse(cls, value: str) -> "Role":
        """Accept 'Employee', 'EMPLOYEE', 'employee', 'hr', ..."""
        normalized = (value or "").strip().lower()
        for role in cls:
            if role.value.lower() == normalized:
                return role
        raise ValueError(f"Invalid role '{value}'. Must be Employee, HR or Admin")


class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    ABSENT = "Absent"
    HALF_DAY = "Half-day"
    LEAVE = "Leave"


class LeaveType(str, Enum):
    PAID = "Paid"
    SICK = "Sick"
    UNPAID = "Unpaid"


class LeaveStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class NotificationType(str, Enum):
    LEAVE_UPDATE = "LEAVE_UPDATE"
    ATTENDANCE_REMINDER = "ATTENDANCE_REMINDER"
    PAYROLL_UPDATE = "PAYROLL_UPDATE"
    SYSTEM = "SYSTEM"


def _in_check(column: str, enum_cls) -> str:
    values = ", ".join(f"'{member.value}'" for member in enum_cls)
    return f"{column} IN ({values})"


# ============================================================================
# USER MODEL (identity + employee profile)
# ============================================================================

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    phone = Column(String(50), nullable=True)
    role = Column(String(20), nullable=False, default=Role.EMPLOYEE.value, index=True)

    # Human-facing login identifier, e.g. DXJODO20240001
    login_id = Column(String(32), unique=True, index=True, nullable=True)

    department = Column(String(100), nullable=True)
    designation = Column(String(100), nullable=True)
    joining_date = Column(Date, nullable=True)
    salary = Column(Float, nullable=True)
    address = Column(String(500), nullable=True)

    created_at = Column(DateTime, nullable=False, default=_utcnow)
    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    attendance_records = relationship(
        "Attendance", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    leave_requests = relationship(
        "LeaveRequest",
        back_populates="user",
        foreign_keys="LeaveRequest.user_id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    payroll_records = relationship(
        "Payroll", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    notifications = relationship(
        "Notification", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint(_in_check("role", Role), name="ck_users_role"),
    )

    @property
    def role_enum(self) -> Role:
        return Role(self.role)

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"


# ============================================================================
# ATTENDANCE MODEL
# ============================================================================

class Attendance(Base):
    __tablename__ = "attendance"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    check_in = Column(DateTime, nullable=True)
    check_out = Column(DateTime, nullable=True)
    status = Column(String(20), nullable=False)
    created_at = Column(DateTime, nullable=False, default=_utcnow)
    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    user = relationship("User", back_populates="attendance_records")

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_attendance_user_date"),
        CheckConstraint(_in_check("status", AttendanceStatus), name="ck_attendance_status"),
        Index("idx_attendance_date", "date"),
    )

    @property
    def work_hours(self) -> float | None:
        if self.check_in and self.check_out:
            return round((self.check_out - self.check_in).total_seconds() / 3600, 2)
        return None


# ============================================================================
# LEAVE REQUEST MODEL
# ============================================================================

class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    leave_type = Column(String(20), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=LeaveStatus.PENDING.value, index=True)
    admin_comment = Column(Text, nullable=True)
    reviewed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)
    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    user = relationship("User", foreign_keys=[user_id], back_populates="leave_requests")
    reviewer = relationship("User", foreign_keys=[reviewed_by])

    __table_args__ = (
        CheckConstraint(_in_check("leave_type", LeaveType), name="ck_leave_type"),
        CheckConstraint(_in_check("status", LeaveStatus), name="ck_leave_status"),
        CheckConstraint("start_date <= end_date", name="ck_leave_window"),
    )

    @property
    def total_days(self) -> int:
        return (self.end_date - self.start_date).days + 1


# ============================================================================
# PAYROLL MODEL
# ============================================================================

class Payroll(Base):
    __tablename__ = "payroll"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    salary_structure = Column(String(255), nullable=True)
    deductions = Column(Float, nullable=False, default=0.0)
    net_pay = Column(Float, nullable=False)
    created_at = Column(DateTime, nullable=False, default=_utcnow)
    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    user = relationship("User", back_populates="payroll_records")

    __table_args__ = (
        UniqueConstraint("user_id", "month", "year", name="uq_payroll_user_period"),
        CheckConstraint("month >= 1 AND month <= 12", name="ck_payroll_month"),
        Index("idx_payroll_period", "year", "month"),
    )


# ============================================================================
# NOTIFICATION MODEL
# ============================================================================

class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(30), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(String(1000), nullable=True)
    link = Column(String(255), nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=_utcnow)

    user = relationship("User", back_populates="notifications")

    __table_args__ = (
        CheckConstraint(_in_check("type", NotificationType), name="ck_notification_type"),
        Index("idx_notifications_user", "user_id", "is_read"),
    )


# ============================================================================
# LOGIN ID COUNTER (one row per joining year)
# ============================================================================

class LoginIdCounter(Base):
    __tablename__ = "login_id_counters"

    year = Column(Integer, primary_key=True, autoincrement=False)
    last_serial = Column(Integer, nullable=False, default=0)
