import logging
import os

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def _is_memory_url(database_url: str) -> bool:
    return database_url in ("sqlite://", "sqlite:///:memory:")


def create_db_engine(database_url: str) -> Engine:
    """
    Build the SQLite engine for one application instance.

    Foreign keys are switched on per connection (cascade deletes depend on it)
    and file databases run in WAL mode.
    """
    if not database_url.startswith("sqlite"):
        raise RuntimeError(f"Unsupported DATABASE_URL (SQLite only): {database_url}")

    if _is_memory_url(database_url):
        # One shared connection so every session sees the same in-memory DB
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )
    else:
        db_path = database_url.split("///", 1)[-1]
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            pool_pre_ping=True,
            echo=False,
        )

    memory = _is_memory_url(database_url)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragmas(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if not memory:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    from models import Base

    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready")


def test_connection(engine: Engine) -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection test failed: {e}")
        return False


def get_db(request: Request):
    """
    Dependency to get a SQLAlchemy session.
    The session factory lives on app.state, set up by main.create_app().
    """
    db: Session = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
