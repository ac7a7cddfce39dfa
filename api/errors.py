"""Global exception handlers for FastAPI.

Maps the auth and CRM exception taxonomy onto HTTP status codes and the
unified error envelope. Driver messages never reach the client.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from api.base import ErrorCodes, dump, error_response
from auth.exceptions import (
    AuthError,
    DuplicateAccountError,
    InvalidCredentialsError,
    InvalidTokenError,
    PermissionDeniedError,
    RateLimitedError,
    SessionRevokedError,
)
from core.exceptions import (
    ConflictError,
    CRMError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# exception class -> (HTTP status, error code); most specific class wins
_STATUS_MAP: dict[type[Exception], tuple[int, str]] = {
    DuplicateAccountError: (400, ErrorCodes.ALREADY_EXISTS),
    ValidationError: (400, ErrorCodes.VALIDATION_ERROR),
    InvalidCredentialsError: (401, ErrorCodes.INVALID_CREDENTIALS),
    InvalidTokenError: (401, ErrorCodes.INVALID_TOKEN),
    SessionRevokedError: (401, ErrorCodes.SESSION_REVOKED),
    PermissionDeniedError: (403, ErrorCodes.PERMISSION_DENIED),
    NotFoundError: (404, ErrorCodes.NOT_FOUND),
    ConflictError: (409, ErrorCodes.CONFLICT),
    RateLimitedError: (429, ErrorCodes.RATE_LIMITED),
    StorageUnavailableError: (503, ErrorCodes.SERVICE_UNAVAILABLE),
}

_HTTP_STATUS_CODES = {
    401: ErrorCodes.NOT_AUTHENTICATED,
    403: ErrorCodes.PERMISSION_DENIED,
    404: ErrorCodes.NOT_FOUND,
    405: ErrorCodes.INVALID_REQUEST,
}


def internal_error_response() -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content=dump(error_response(ErrorCodes.INTERNAL_ERROR, "An internal error occurred")),
    )


def exception_response(exc: Exception) -> JSONResponse:
    """Envelope + status for a taxonomy exception. Unknown types become a 500."""
    for cls in type(exc).__mro__:
        if cls in _STATUS_MAP:
            status, code = _STATUS_MAP[cls]
            break
    else:
        logger.error("Unmapped exception %s: %s", type(exc).__name__, exc)
        return internal_error_response()

    headers = None
    if isinstance(exc, RateLimitedError):
        headers = {"Retry-After": str(exc.retry_after_seconds)}

    if status >= 500:
        logger.error("%s: %s", type(exc).__name__, exc)
    else:
        logger.info("%s -> %s %s", type(exc).__name__, status, code)

    return JSONResponse(
        status_code=status,
        headers=headers,
        content=dump(error_response(code, str(exc))),
    )


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        return exception_response(exc)

    @app.exception_handler(CRMError)
    async def crm_error_handler(request: Request, exc: CRMError):
        return exception_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=dump(error_response(ErrorCodes.VALIDATION_ERROR, _describe_validation_errors(exc))),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        code = _HTTP_STATUS_CODES.get(exc.status_code, ErrorCodes.INVALID_REQUEST)
        return JSONResponse(
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
            content=dump(error_response(code, str(exc.detail))),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return internal_error_response()
