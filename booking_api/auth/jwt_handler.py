from datetime import datetime, timedelta, timezone

import jwt
from pydantic import BaseModel, Field

from booking_api.core import config


class TokenClaims(BaseModel):
    """Claims carried by an access token."""
    user_id: int = Field(alias="userId")
    email: str
    role: str

    class Config:
        populate_by_name = True


def create_access_token(claims: TokenClaims, expires_minutes: int | None = None) -> str:
    expire_minutes = expires_minutes or config.JWT_EXPIRES_MINUTES
    issued_at = datetime.now(timezone.utc)
    payload = claims.model_dump(by_alias=True)
    payload.update({"iat": issued_at, "exp": issued_at + timedelta(minutes=expire_minutes)})
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> TokenClaims:
    """Verify signature and expiry, then parse the claims.

    Raises ``jwt.InvalidTokenError`` (expired tokens included) or
    ``pydantic.ValidationError`` when required claims are missing.
    """
    payload = jwt.decode(
        token,
        config.JWT_SECRET_KEY,
        algorithms=[config.JWT_ALGORITHM],
        options={"require": ["exp"]},
    )
    return TokenClaims.model_validate(payload)
