"""Application error taxonomy and the handlers that render it.

Every failure leaves the API as ``{"error": {"code": ..., "message": ...}}``.
Services raise the typed errors below; the handlers registered by
:func:`register_exception_handlers` are the only place responses are shaped.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto the JSON error envelope."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = 'INTERNAL_ERROR'
    message = 'Internal server error'

    def __init__(self, code: str | None = None, message: str | None = None, status_code: int | None = None):
        self.code = code or self.code
        self.message = message or self.message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = 'VALIDATION_FAILED'
    message = 'Invalid request'


class AuthError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = 'UNAUTHORIZED'
    message = 'Access token required'


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = 'NOT_FOUND'
    message = 'Resource not found'


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = 'CONFLICT'
    message = 'Resource already exists'


class InternalError(AppError):
    pass


HTTP_ERROR_CODES = {
    status.HTTP_404_NOT_FOUND: 'NOT_FOUND',
    status.HTTP_405_METHOD_NOT_ALLOWED: 'METHOD_NOT_ALLOWED',
}


def error_response(status_code: int, code: str, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={'error': {'code': code, 'message': message}},
        headers=headers,
    )


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    return error_response(exc.status_code, exc.code, exc.message)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    first_error = exc.errors()[0] if exc.errors() else {}
    location = '.'.join(str(part) for part in first_error.get('loc', ()) if part != 'body')
    message = first_error.get('msg', 'Invalid request')
    if location:
        message = f'{location}: {message}'
    return error_response(status.HTTP_400_BAD_REQUEST, 'INVALID_REQUEST', message)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = HTTP_ERROR_CODES.get(exc.status_code, 'HTTP_ERROR')
    return error_response(exc.status_code, code, str(exc.detail), headers=getattr(exc, 'headers', None))


def handle_rate_limit_exceeded(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    # Called synchronously by SlowAPIMiddleware.
    logger.warning('Rate limit exceeded for %s on %s', request.client.host if request.client else '-', request.url.path)
    return error_response(
        status.HTTP_429_TOO_MANY_REQUESTS,
        'RATE_LIMITED',
        f'Too many requests, limit is {exc.detail}',
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception('Unhandled error on %s %s', request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, 'INTERNAL_ERROR', 'Internal server error')


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RateLimitExceeded, handle_rate_limit_exceeded)
    app.add_exception_handler(Exception, handle_unexpected_error)
