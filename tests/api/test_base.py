"""Tests for api/base.py - Unified API response format."""

from datetime import timezone

from api.base import (
    ErrorCodes,
    dump,
    error_response,
    paginated_response,
    success_response,
)


class TestSuccessResponse:
    """Tests for success_response()."""

    def test_structure(self):
        resp = success_response({"foo": "bar"})
        assert resp.success is True
        assert resp.data == {"foo": "bar"}
        assert resp.error is None

    def test_request_id_generated(self):
        resp = success_response({})
        assert resp.meta.request_id

    def test_timestamp_is_utc(self):
        resp = success_response({})
        assert resp.meta.timestamp.tzinfo == timezone.utc

    def test_dump_drops_unused_fields(self):
        body = dump(success_response({"a": 1}))
        assert set(body) == {"success", "data", "meta"}
        assert set(body["meta"]) == {"timestamp", "request_id"}


class TestErrorResponse:
    """Tests for error_response()."""

    def test_structure(self):
        resp = error_response("TEST_ERROR", "Something went wrong")
        assert resp.success is False
        assert resp.data is None
        assert resp.code == "TEST_ERROR"
        assert resp.error == "Something went wrong"

    def test_dump_is_flat(self):
        body = dump(error_response("NOT_FOUND", "Contact not found"))
        assert body["success"] is False
        assert body["error"] == "Contact not found"
        assert body["code"] == "NOT_FOUND"
        assert "data" not in body


class TestPaginatedResponse:
    def test_total_pages_rounds_up(self):
        resp = paginated_response([1, 2], page=1, limit=2, total=5)
        assert resp.pagination.totalPages == 3

    def test_empty(self):
        body = dump(paginated_response([], page=1, limit=50, total=0))
        assert body["data"] == []
        assert body["pagination"] == {"page": 1, "limit": 50, "total": 0, "totalPages": 0}


class TestErrorCodes:
    """Tests that ErrorCodes contains the codes clients rely on."""

    def test_auth_codes(self):
        assert ErrorCodes.NOT_AUTHENTICATED == "NOT_AUTHENTICATED"
        assert ErrorCodes.INVALID_CREDENTIALS == "INVALID_CREDENTIALS"
        assert ErrorCodes.SESSION_REVOKED == "SESSION_REVOKED"

    def test_has_internal_error(self):
        assert ErrorCodes.INTERNAL_ERROR == "INTERNAL_ERROR"

    def test_has_service_unavailable(self):
        assert ErrorCodes.SERVICE_UNAVAILABLE == "SERVICE_UNAVAILABLE"
