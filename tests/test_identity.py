from datetime import date

import pytest

from exceptions import ConflictError
from models import LoginIdCounter, Role, User
from services.identity_service import (
    MAX_LOGIN_ID_ATTEMPTS,
    MAX_SERIAL,
    PASSWORD_ALPHABET,
    SPECIAL_CHARACTERS,
    allocate_login_id,
    company_initials,
    extract_name_parts,
    generate_login_id,
    generate_system_password,
)


def _employee(login_id: str, joined: date, email: str) -> User:
    return User(
        name="Existing Person",
        email=email,
        hashed_password="x",
        role=Role.EMPLOYEE.value,
        login_id=login_id,
        joining_date=joined,
    )


def test_company_initials():
    assert company_initials("Dayflow") == "DX"
    assert company_initials("Odoo India") == "OI"
    assert company_initials("acme widget corp") == "AW"


def test_extract_name_parts():
    assert extract_name_parts("John Doe") == ("John", "Doe")
    assert extract_name_parts("Mary Jane Watson") == ("Mary", "Jane Watson")
    assert extract_name_parts("Madonna") == ("Madonna", "Madonna")


def test_login_id_layout_is_fixed_width_and_deterministic():
    login_id = generate_login_id("Dayflow", "John", "Doe", 2024, 1)
    assert login_id == "DXJODO20240001"
    assert len(login_id) == 14
    assert generate_login_id("Dayflow", "John", "Doe", 2024, 1) == login_id

    # Short names are padded with X
    assert generate_login_id("D", "J", "D", 2024, 7) == "DXJDXX20240007"
    assert generate_login_id("Odoo India", "Madonna", "Madonna", 2025, 42) == "OIMAMA20250042"


def test_system_password_rules():
    for _ in range(50):
        password = generate_system_password()
        assert len(password) == 12
        assert any(c.isupper() for c in password)
        assert any(c.islower() for c in password)
        assert any(c.isdigit() for c in password)
        assert any(c in SPECIAL_CHARACTERS for c in password)
        assert all(c in PASSWORD_ALPHABET for c in password)


def test_serial_starts_after_existing_employees_of_the_year(session_scope):
    with session_scope() as db:
        db.add(_employee("XX1", date(2024, 2, 1), "a@example.com"))
        db.add(_employee("XX2", date(2024, 5, 1), "b@example.com"))
        db.add(_employee("XX3", date(2023, 5, 1), "c@example.com"))
        db.commit()

        assert allocate_login_id(db, "Dayflow", "John Doe", 2024) == "DXJODO20240003"


def test_serial_is_monotonic_per_year(session_scope):
    with session_scope() as db:
        first = allocate_login_id(db, "Dayflow", "John Doe", 2024)
        second = allocate_login_id(db, "Dayflow", "John Doe", 2024)
        other_year = allocate_login_id(db, "Dayflow", "John Doe", 2025)
        db.commit()

        assert (first, second, other_year) == ("DXJODO20240001", "DXJODO20240002", "DXJODO20250001")
        assert db.get(LoginIdCounter, 2024).last_serial == 2


def test_collision_advances_serial(session_scope):
    with session_scope() as db:
        # Manually assigned ID occupying the next generated one; joined another year
        db.add(_employee("DXJODO20240001", date(2023, 6, 1), "taken@example.com"))
        db.commit()

        assert allocate_login_id(db, "Dayflow", "John Doe", 2024) == "DXJODO20240002"


def test_gives_up_after_max_attempts(session_scope):
    with session_scope() as db:
        for serial in range(1, MAX_LOGIN_ID_ATTEMPTS + 1):
            login_id = generate_login_id("Dayflow", "John", "Doe", 2024, serial)
            db.add(_employee(login_id, date(2023, 6, 1), f"e{serial}@example.com"))
        db.commit()

        with pytest.raises(ConflictError):
            allocate_login_id(db, "Dayflow", "John Doe", 2024)


def test_serial_beyond_four_digits_is_refused():
    assert generate_login_id("Dayflow", "John", "Doe", 2024, MAX_SERIAL) == "DXJODO20249999"
    with pytest.raises(ConflictError):
        generate_login_id("Dayflow", "John", "Doe", 2024, MAX_SERIAL + 1)


def test_exhausted_year_conflicts(session_scope):
    with session_scope() as db:
        db.add(LoginIdCounter(year=2024, last_serial=MAX_SERIAL))
        db.commit()

        with pytest.raises(ConflictError):
            allocate_login_id(db, "Dayflow", "John Doe", 2024)
