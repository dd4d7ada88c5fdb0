import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

import config
from models import Role

logger = logging.getLogger(__name__)

SECRET_KEY = config.SECRET_KEY
ALGORITHM = "HS256"
SESSION_EXPIRE_MINUTES = config.SESSION_EXPIRE_MINUTES


@dataclass(frozen=True)
class Principal:
    """Who is making the request, as proven by the session token."""
    user_id: int
    role: Role


def hash_password(password: str) -> str:
    # Hash a plaintext password using bcrypt.
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    # Verify a plaintext password against a hashed password.
    if not hashed_password:
        return False
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def create_session_token(user_id: int, role: Role, expires_delta: timedelta | None = None) -> str:
    now = datetime.now(timezone.utc)

    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=SESSION_EXPIRE_MINUTES)

    to_encode = {
        "sub": str(user_id),
        "role": role.value,
        "exp": expire,
        "iat": now,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def verify_session_token(token: str | None) -> Principal | None:
    """
    Single place where a session token is checked.

    Returns the Principal for a valid, unexpired token and None otherwise.
    """
    if not token:
        return None
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        logger.info("Expired session token presented")
        return None
    except JWTError as e:
        logger.warning(f"Session token rejected: {e}")
        return None

    sub = payload.get("sub")
    role = payload.get("role")
    if sub is None or role is None:
        logger.warning("Invalid session payload: missing sub or role")
        return None
    try:
        return Principal(user_id=int(sub), role=Role(role))
    except ValueError:
        logger.warning(f"Invalid session payload: sub={sub!r} role={role!r}")
        return None
