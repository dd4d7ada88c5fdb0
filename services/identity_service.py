"""
Identity Provisioning
=====================
Login ID and one-time system password generation for new accounts.

Login ID layout (always 14 characters):

    DX   JO   DO   2024   0001
    |    |    |    |      +-- serial within the joining year, zero-padded
    |    |    |    +--------- joining year
    |    |    +-------------- first two letters of the last name
    |    +------------------- first two letters of the first name
    +------------------------ company initials, padded with X
"""

import logging
import secrets
import string
from datetime import date

from sqlalchemy import func
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from exceptions import ConflictError
from models import LoginIdCounter, Role, User

logger = logging.getLogger(__name__)

MAX_LOGIN_ID_ATTEMPTS = 10
MAX_SERIAL = 9999
SYSTEM_PASSWORD_LENGTH = 12
SPECIAL_CHARACTERS = "!@#$%^&*"
PASSWORD_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits + SPECIAL_CHARACTERS


def company_initials(company_name: str) -> str:
    initials = "".join(word[0].upper() for word in company_name.split())
    return initials[:2].ljust(2, "X")


def extract_name_parts(full_name: str) -> tuple[str, str]:
    """
    Split a full name into (first, last).

    Everything after the first token is the last name; a single-token name
    is reused as its own last name.
    """
    parts = full_name.strip().split()
    first_name = parts[0] if parts else ""
    last_name = " ".join(parts[1:]) or first_name
    return first_name, last_name


def generate_login_id(
    company_name: str,
    first_name: str,
    last_name: str,
    joining_year: int,
    serial_number: int,
) -> str:
    if not 1 <= serial_number <= MAX_SERIAL:
        raise ConflictError(f"Login ID serials for {joining_year} are exhausted")
    name_part = (first_name[:2].upper() + last_name[:2].upper()).ljust(4, "X")
    return f"{company_initials(company_name)}{name_part}{joining_year:04d}{serial_number:04d}"


def generate_system_password(length: int = SYSTEM_PASSWORD_LENGTH) -> str:
    """
    Random password with at least one uppercase letter, lowercase letter,
    digit and special character.
    """
    if length < 4:
        raise ValueError("Password length must be at least 4")

    rng = secrets.SystemRandom()
    chars = [
        secrets.choice(string.ascii_uppercase),
        secrets.choice(string.ascii_lowercase),
        secrets.choice(string.digits),
        secrets.choice(SPECIAL_CHARACTERS),
    ]
    chars.extend(secrets.choice(PASSWORD_ALPHABET) for _ in range(length - 4))
    rng.shuffle(chars)
    return "".join(chars)


def _count_employees_joined_in(db: Session, year: int) -> int:
    return db.query(func.count(User.id)).filter(
        User.role == Role.EMPLOYEE.value,
        User.joining_date >= date(year, 1, 1),
        User.joining_date <= date(year, 12, 31),
    ).scalar() or 0


def reserve_serial(db: Session, year: int) -> int:
    """
    Reserve the next serial for a joining year.

    The counter row is created on first use, seeded with the number of
    employees already joined that year. The increment runs inside the
    caller's transaction, so a rollback releases the serial.
    """
    if db.get(LoginIdCounter, year) is None:
        seed = _count_employees_joined_in(db, year)
        # A concurrent request may have created the row in the meantime
        db.execute(
            sqlite_insert(LoginIdCounter)
            .values(year=year, last_serial=seed)
            .on_conflict_do_nothing(index_elements=["year"])
        )

    db.query(LoginIdCounter).filter(LoginIdCounter.year == year).update(
        {LoginIdCounter.last_serial: LoginIdCounter.last_serial + 1}
    )
    return db.query(LoginIdCounter.last_serial).filter(LoginIdCounter.year == year).scalar()


def login_id_exists(db: Session, login_id: str) -> bool:
    return db.query(User.id).filter(User.login_id == login_id).first() is not None


def allocate_login_id(db: Session, company_name: str, full_name: str, joining_year: int) -> str:
    first_name, last_name = extract_name_parts(full_name)

    for attempt in range(1, MAX_LOGIN_ID_ATTEMPTS + 1):
        serial = reserve_serial(db, joining_year)
        candidate = generate_login_id(company_name, first_name, last_name, joining_year, serial)
        if not login_id_exists(db, candidate):
            return candidate
        logger.warning(f"Login ID {candidate} already taken (attempt {attempt}/{MAX_LOGIN_ID_ATTEMPTS})")

    raise ConflictError("Could not allocate a unique login ID. Please try again.")
