"""Unified API response format and error codes."""

import math
from typing import Any
from datetime import datetime

from pydantic import BaseModel, Field

from api.middleware import current_request_id
from utils.timezone import now_utc


class APIMeta(BaseModel):
    """Metadata included in every API response."""

    timestamp: datetime = Field(..., description="Response timestamp (UTC)")
    request_id: str = Field(..., description="Unique request identifier for tracing")


class Pagination(BaseModel):
    """Page position of a list response. Serialized in camelCase for the UI."""

    page: int
    limit: int
    total: int
    totalPages: int


class APIResponse(BaseModel):
    """
    Unified response format for all API endpoints.

    Every endpoint returns this structure, making client parsing predictable.
    On failure `error` holds the human-readable message and `code` the
    machine-readable one.
    """

    success: bool
    data: Any | None = None
    error: str | None = None
    code: str | None = None
    pagination: Pagination | None = None
    meta: APIMeta


def _meta() -> APIMeta:
    return APIMeta(timestamp=now_utc(), request_id=current_request_id())


def success_response(data: Any) -> APIResponse:
    """Create a success response."""
    return APIResponse(success=True, data=data, meta=_meta())


def paginated_response(items: list, page: int, limit: int, total: int) -> APIResponse:
    """Create a success response for one page of a list."""
    return APIResponse(
        success=True,
        data=items,
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            totalPages=math.ceil(total / limit) if limit else 0,
        ),
        meta=_meta(),
    )


def error_response(code: str, message: str) -> APIResponse:
    """Create an error response."""
    return APIResponse(success=False, error=message, code=code, meta=_meta())


def dump(response: APIResponse) -> dict:
    """JSON-ready dict without the fields that don't apply to this response."""
    return response.model_dump(mode="json", exclude_none=True)


class ErrorCodes:
    """Standard error codes for consistent error handling."""

    # Authentication & Authorization
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_TOKEN = "INVALID_TOKEN"
    SESSION_REVOKED = "SESSION_REVOKED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    RATE_LIMITED = "RATE_LIMITED"

    # Resource Errors
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    CONFLICT = "CONFLICT"

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"

    # Infrastructure
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
