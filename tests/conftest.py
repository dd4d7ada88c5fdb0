import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ["DATABASE_URL"] = "sqlite://"

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime

import pytest
from fastapi.testclient import TestClient

from auth import hash_password
from dependencies import get_clock
from main import create_app
from models import Role, User

DEFAULT_PASSWORD = "Passw0rd!"
# Hashed once; bcrypt is slow
DEFAULT_HASH = hash_password(DEFAULT_PASSWORD)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, *args) -> None:
        self.now = datetime(*args)


@dataclass
class Actor:
    id: int
    email: str
    client: TestClient


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 4, 9, 0))


@pytest.fixture
def app(clock):
    application = create_app("sqlite://")
    application.dependency_overrides[get_clock] = lambda: clock
    yield application
    application.dependency_overrides.clear()
    application.state.engine.dispose()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def session_scope(app):
    @contextmanager
    def _scope():
        session = app.state.session_factory()
        try:
            yield session
        finally:
            session.close()

    return _scope


@pytest.fixture
def make_user(session_scope):
    def _make(
        name: str,
        email: str,
        role: Role = Role.EMPLOYEE,
        login_id: str | None = None,
        joining_date: date | None = date(2024, 1, 15),
    ) -> int:
        with session_scope() as db:
            user = User(
                name=name,
                email=email,
                hashed_password=DEFAULT_HASH,
                role=role.value,
                login_id=login_id,
                joining_date=joining_date,
            )
            db.add(user)
            db.commit()
            return user.id

    return _make


@pytest.fixture
def login(app):
    def _login(email: str, password: str = DEFAULT_PASSWORD) -> TestClient:
        c = TestClient(app)
        r = c.post("/auth/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        return c

    return _login


def _actor(make_user, login, name, email, role, login_id=None) -> Actor:
    user_id = make_user(name, email, role=role, login_id=login_id)
    return Actor(id=user_id, email=email, client=login(email))


@pytest.fixture
def admin(make_user, login):
    return _actor(make_user, login, "Ada Admin", "admin@dayflow.io", Role.ADMIN)


@pytest.fixture
def hr(make_user, login):
    return _actor(make_user, login, "Harriet Resources", "hr@dayflow.io", Role.HR)


@pytest.fixture
def alice(make_user, login):
    return _actor(make_user, login, "Alice Anders", "alice@dayflow.io", Role.EMPLOYEE, "DXALAN20240001")


@pytest.fixture
def bob(make_user, login):
    return _actor(make_user, login, "Bob Brown", "bob@dayflow.io", Role.EMPLOYEE, "DXBOBR20240002")
