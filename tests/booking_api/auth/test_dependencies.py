import pytest
from fastapi.security import HTTPAuthorizationCredentials

from booking_api.auth import jwt_handler
from booking_api.auth.dependencies import get_current_principal, require_admin
from booking_api.auth.jwt_handler import TokenClaims
from booking_api.core.errors import AuthError


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme='Bearer', credentials=token)


def test_get_current_principal_requires_token() -> None:
    with pytest.raises(AuthError) as exception_info:
        get_current_principal(None)

    assert exception_info.value.status_code == 401
    assert exception_info.value.code == 'UNAUTHORIZED'


def test_get_current_principal_rejects_garbage_token() -> None:
    with pytest.raises(AuthError) as exception_info:
        get_current_principal(_bearer('not-a-jwt'))

    assert exception_info.value.status_code == 403
    assert exception_info.value.code == 'INVALID_TOKEN'


def test_get_current_principal_returns_decoded_claims() -> None:
    token = jwt_handler.create_access_token(TokenClaims(user_id=3, email='bob@x.com', role='patient'))

    principal = get_current_principal(_bearer(token))

    assert principal.user_id == 3
    assert principal.email == 'bob@x.com'


def test_require_admin_rejects_patient() -> None:
    with pytest.raises(AuthError) as exception_info:
        require_admin(TokenClaims(user_id=3, email='bob@x.com', role='patient'))

    assert exception_info.value.status_code == 403
    assert exception_info.value.code == 'ADMIN_REQUIRED'


def test_require_admin_accepts_admin() -> None:
    admin = TokenClaims(user_id=1, email='admin@example.com', role='admin')

    assert require_admin(admin) is admin
