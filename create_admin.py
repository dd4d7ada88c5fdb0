"""Create the bootstrap Admin account from ADMIN_EMAIL / ADMIN_PASSWORD."""

import logging
import sys

import config
from auth import hash_password
from db import create_db_engine, create_session_factory, init_db
from models import Role, User
from services.employee_service import get_user_by_email

logger = logging.getLogger(__name__)


def create_admin(db, email: str, password: str, name: str = "System Administrator") -> User | None:
    """Returns the new admin, or None when the email is already taken."""
    if get_user_by_email(db, email) is not None:
        return None

    admin = User(
        name=name,
        email=email.strip().lower(),
        hashed_password=hash_password(password),
        role=Role.ADMIN.value,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


def main() -> int:
    logging.basicConfig(level=logging.INFO)

    if not config.ADMIN_PASSWORD:
        print("ADMIN_PASSWORD is not set")
        return 1

    engine = create_db_engine(config.DATABASE_URL)
    init_db(engine)
    db = create_session_factory(engine)()

    try:
        admin = create_admin(db, config.ADMIN_EMAIL, config.ADMIN_PASSWORD)
        if admin is None:
            print("Admin user already exists")
            print(f"Email: {config.ADMIN_EMAIL}")
        else:
            print("Admin user created successfully!")
            print(f"Email: {admin.email}")
            print("Change password after first login!")
    except Exception:
        db.rollback()
        logger.exception("Failed to create admin user")
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
