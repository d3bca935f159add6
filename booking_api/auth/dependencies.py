import jwt
import pydantic
from fastapi import Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from booking_api.auth import jwt_handler
from booking_api.auth.jwt_handler import TokenClaims
from booking_api.core.errors import AuthError
from booking_api.models.user import ROLE_ADMIN

# auto_error is off so a missing header renders through the error envelope.
security = HTTPBearer(auto_error=False)


def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> TokenClaims:
    if credentials is None or not credentials.credentials:
        raise AuthError('UNAUTHORIZED', 'Access token required')

    try:
        return jwt_handler.decode_access_token(credentials.credentials)
    except (jwt.InvalidTokenError, pydantic.ValidationError) as exc:
        raise AuthError(
            'INVALID_TOKEN',
            'Invalid or expired token',
            status_code=status.HTTP_403_FORBIDDEN,
        ) from exc


def require_admin(principal: TokenClaims = Depends(get_current_principal)) -> TokenClaims:
    if principal.role != ROLE_ADMIN:
        raise AuthError(
            'ADMIN_REQUIRED',
            'Admin access required',
            status_code=status.HTTP_403_FORBIDDEN,
        )
    return principal
