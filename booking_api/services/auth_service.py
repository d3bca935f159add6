"""Registration, login and admin seeding."""

import logging
import re

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from booking_api.auth import jwt_handler
from booking_api.auth.jwt_handler import TokenClaims
from booking_api.auth.passwords import hash_password, verify_password
from booking_api.core.errors import AuthError, ConflictError, ValidationError
from booking_api.models.user import ROLE_ADMIN, ROLE_PATIENT, User

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
MIN_PASSWORD_LENGTH = 8
ADMIN_NAME = 'Admin User'


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def is_strong_password(password: str | None) -> bool:
    return bool(password) and len(password) >= MIN_PASSWORD_LENGTH


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email).first()


def register(db: Session, name: str | None, email: str | None, password: str | None) -> User:
    """Create a patient account.

    Emails are matched exactly as stored; ``Alice@x.com`` and ``alice@x.com``
    are different accounts.
    """
    if not name or not email or not password:
        raise ValidationError('MISSING_FIELDS', 'Name, email, and password are required')

    if not is_valid_email(email):
        raise ValidationError('INVALID_EMAIL', 'Invalid email format')

    if not is_strong_password(password):
        raise ValidationError('WEAK_PASSWORD', f'Password must be at least {MIN_PASSWORD_LENGTH} characters')

    if find_user_by_email(db, email) is not None:
        raise ConflictError('EMAIL_EXISTS', 'Email already registered')

    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=ROLE_PATIENT,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if find_user_by_email(db, email) is None:
            raise
        # A concurrent registration won the unique email index.
        raise ConflictError('EMAIL_EXISTS', 'Email already registered') from exc
    db.refresh(user)

    logger.info('Registered user id=%s', user.id)
    return user


def login(db: Session, email: str | None, password: str | None) -> tuple[str, User]:
    if not email or not password:
        raise ValidationError('MISSING_CREDENTIALS', 'Email and password are required')

    user = find_user_by_email(db, email)
    # Same error for unknown email and wrong password.
    if user is None or not verify_password(password, user.password_hash):
        raise AuthError('INVALID_CREDENTIALS', 'Invalid email or password')

    token = jwt_handler.create_access_token(
        TokenClaims(user_id=user.id, email=user.email, role=user.role)
    )
    return token, user


def seed_admin(db: Session, email: str, password: str) -> User | None:
    """Create the admin account unless a user with ``email`` already exists."""
    if find_user_by_email(db, email) is not None:
        return None

    admin = User(
        name=ADMIN_NAME,
        email=email,
        password_hash=hash_password(password),
        role=ROLE_ADMIN,
    )
    db.add(admin)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if find_user_by_email(db, email) is None:
            raise
        logger.info('Admin user %s was seeded by another instance', email)
        return None
    db.refresh(admin)

    logger.info('Admin user seeded: %s', email)
    return admin
