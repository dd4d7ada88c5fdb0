import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

import config
from auth import create_session_token
from db import get_db
from dependencies import get_clock, get_current_user
from exceptions import AuthenticationRequired
from models import User
from schemas import AuthResponse, EmployeeOut, LoginRequest, MeResponse, RegisterRequest, SuccessResponse, UserOut
from services import employee_service
from services.permissions import landing_page
from utils import local_date

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def _set_session_cookie(response: Response, user: User) -> None:
    token = create_session_token(user.id, user.role_enum)
    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=token,
        max_age=config.SESSION_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=config.SESSION_COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        user=UserOut.model_validate(user),
        redirect_url=landing_page(user.role_enum),
    )


@router.post("/register", response_model=AuthResponse)
def register(
    payload: RegisterRequest,
    response: Response,
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
):
    user = employee_service.register_user(
        db,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role=payload.user_type,
        company_name=config.COMPANY_NAME,
        today=local_date(clock()),
        phone=payload.phone,
        login_id=payload.employee_id,
    )
    _set_session_cookie(response, user)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, response: Response, db: Session = Depends(get_db)):
    identifier = payload.email or payload.login_id
    user = employee_service.authenticate(db, identifier, payload.password)
    if not user:
        raise AuthenticationRequired("Invalid credentials")

    _set_session_cookie(response, user)
    logger.info(f"User {user.id} ({user.role}) logged in")
    return _auth_response(user)


@router.post("/logout", response_model=SuccessResponse)
def logout(response: Response):
    response.delete_cookie(config.SESSION_COOKIE_NAME, path="/")
    return SuccessResponse()


@router.get("/me", response_model=MeResponse)
def me(current_user: User = Depends(get_current_user)):
    return MeResponse(user=EmployeeOut.model_validate(current_user))
