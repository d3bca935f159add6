import logging

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from booking_api.core.errors import InternalError
from booking_api.database import get_db
from booking_api.services import auth_service

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)


class RegisterRequest(BaseModel):
    name: str | None = None
    email: str | None = None
    password: str | None = None


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class UserSummaryResponse(BaseModel):
    id: int
    name: str
    email: str

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class RegisteredUserResponse(UserSummaryResponse):
    role: str


class RegisterResponse(BaseModel):
    message: str
    user: RegisteredUserResponse


class LoginResponse(BaseModel):
    token: str
    role: str
    user: UserSummaryResponse


@router.post('/register', response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest | None = None, db: Session = Depends(get_db)):
    data = data or RegisterRequest()

    try:
        user = auth_service.register(db, data.name, data.email, data.password)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Registration error')
        raise InternalError('REGISTRATION_FAILED', 'Registration failed') from exc

    return RegisterResponse(
        message='User registered successfully',
        user=RegisteredUserResponse.model_validate(user),
    )


@router.post('/login', response_model=LoginResponse)
def login(data: LoginRequest | None = None, db: Session = Depends(get_db)):
    data = data or LoginRequest()

    try:
        token, user = auth_service.login(db, data.email, data.password)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Login error')
        raise InternalError('LOGIN_FAILED', 'Login failed') from exc

    return LoginResponse(
        token=token,
        role=user.role,
        user=UserSummaryResponse.model_validate(user),
    )
