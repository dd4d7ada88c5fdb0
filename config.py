import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/dayflow.db")

SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    raise RuntimeError("SECRET_KEY environment variable not set")

SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "session")
SESSION_EXPIRE_MINUTES = int(os.getenv("SESSION_EXPIRE_MINUTES", str(24 * 60)))
SESSION_COOKIE_SECURE = _env_bool("SESSION_COOKIE_SECURE", False)

ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")

# Used for login IDs of self-registered employees
COMPANY_NAME = os.getenv("COMPANY_NAME", "Dayflow")

# Calendar day boundaries for attendance ("today")
APP_TIMEZONE = os.getenv("APP_TIMEZONE", "UTC")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Leave policy switches
LEAVE_ENFORCE_OVERLAP = _env_bool("LEAVE_ENFORCE_OVERLAP", True)
LEAVE_ENFORCE_NOTICE_PERIOD = _env_bool("LEAVE_ENFORCE_NOTICE_PERIOD", False)

# Attendance policy switches
ATTENDANCE_ENFORCE_BUSINESS_HOURS = _env_bool("ATTENDANCE_ENFORCE_BUSINESS_HOURS", False)
ATTENDANCE_START_HOUR = int(os.getenv("ATTENDANCE_START_HOUR", "9"))
ATTENDANCE_END_HOUR = int(os.getenv("ATTENDANCE_END_HOUR", "18"))

# Bootstrap admin (create_admin.py)
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@dayflow.local")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
