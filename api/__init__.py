"""API modules for HTTP interface."""

from api.base import (
    APIMeta,
    APIResponse,
    Pagination,
    success_response,
    paginated_response,
    error_response,
    ErrorCodes,
)
