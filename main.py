import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.exc import IntegrityError

import config
from db import create_db_engine, create_session_factory, init_db, test_connection
from exceptions import HRMError, PageRedirect
from router import attendance, auth, employees, leave, notifications, pages, payroll

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def _error(status_code: int, detail: str, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail, "code": code})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HRMError)
    async def handle_hrm_error(request: Request, exc: HRMError):
        return _error(exc.status_code, exc.message, exc.code)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        detail = f"{field}: {message}" if field else message
        return _error(400, detail, "VALIDATION_ERROR")

    @app.exception_handler(IntegrityError)
    async def handle_integrity_error(request: Request, exc: IntegrityError):
        logger.warning(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
        return _error(409, "Resource already exists or conflicts with existing data", "CONFLICT")

    @app.exception_handler(PageRedirect)
    async def handle_page_redirect(request: Request, exc: PageRedirect):
        return RedirectResponse(exc.location, status_code=303)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _error(500, "Internal server error", "INTERNAL_ERROR")


def create_app(database_url: str | None = None) -> FastAPI:
    """
    Build the application around its own database engine.

    Tests pass "sqlite://" for a private in-memory database.
    """
    database_url = database_url or config.DATABASE_URL
    engine = create_db_engine(database_url)
    init_db(engine)

    app = FastAPI(title="Dayflow HRM API", version="1.0.0")
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(employees.router)
    app.include_router(attendance.router)
    app.include_router(leave.router)
    app.include_router(payroll.router)
    app.include_router(notifications.router)
    app.include_router(pages.router)

    @app.get("/health", tags=["Health"])
    def health(request: Request):
        if test_connection(request.app.state.engine):
            return {"status": "ok", "database": "connected"}
        return JSONResponse(status_code=503, content={"status": "error", "database": "unavailable"})

    logger.info(f"Dayflow HRM started (database={database_url})")
    return app


app = create_app()
