"""
Unit Tests for Exception Handlers.

Tests the exception handler functions in isolation.
"""

import json
from unittest.mock import MagicMock

import pytest
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from modules.backend.core.exception_handlers import (
    EXCEPTION_STATUS_MAP,
    GENERIC_SERVER_MESSAGE,
    _get_request_id,
    application_error_handler,
    http_exception_handler,
    unhandled_exception_handler,
    validation_error_handler,
)
from modules.backend.core.exceptions import (
    ApplicationError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    PayloadTooLargeError,
    StorageError,
    UnsupportedMediaError,
    ValidationError,
)


def _body(response) -> dict:
    return json.loads(response.body)


@pytest.fixture
def mock_request():
    """Request without state, carrying an X-Request-ID header."""
    request = MagicMock(spec=Request)
    request.url.path = "/api/load/abc"
    request.method = "GET"
    request.headers = {"x-request-id": "test-123"}
    del request.state.request_id
    return request


class TestExceptionStatusMapping:
    """Tests for exception to HTTP status code mapping."""

    @pytest.mark.parametrize(
        ("exc_type", "status"),
        [
            (ValidationError, 400),
            (AuthenticationError, 401),
            (AuthorizationError, 401),
            (NotFoundError, 404),
            (ConflictError, 409),
            (PayloadTooLargeError, 413),
            (UnsupportedMediaError, 415),
            (StorageError, 500),
        ],
    )
    def test_status(self, exc_type, status):
        assert EXCEPTION_STATUS_MAP[exc_type] == status


class TestGetRequestId:
    """Tests for request ID extraction."""

    def test_extracts_from_request_state(self):
        request = MagicMock(spec=Request)
        request.state.request_id = "state-123"
        request.headers = {}

        assert _get_request_id(request) == "state-123"

    def test_falls_back_to_header(self, mock_request):
        assert _get_request_id(mock_request) == "test-123"

    def test_returns_none_when_not_present(self):
        request = MagicMock(spec=Request)
        del request.state.request_id
        request.headers = {}

        assert _get_request_id(request) is None


class TestApplicationErrorHandler:
    """Tests for application_error_handler."""

    @pytest.mark.asyncio
    async def test_not_found_envelope(self, mock_request):
        response = await application_error_handler(mock_request, NotFoundError("Note not found"))

        assert response.status_code == 404
        assert _body(response) == {
            "success": False,
            "error": "Note not found",
            "code": "RES_NOT_FOUND",
            "details": None,
            "request_id": "test-123",
        }

    @pytest.mark.asyncio
    async def test_wrong_note_password_is_401(self, mock_request):
        response = await application_error_handler(mock_request, AuthorizationError())

        assert response.status_code == 401
        body = _body(response)
        assert body["error"] == "Invalid password"
        assert body["code"] == "AUTHZ_INVALID_PASSWORD"

    @pytest.mark.asyncio
    async def test_validation_includes_details(self, mock_request):
        exc = ValidationError("Too many files", details={"count": 11})

        response = await application_error_handler(mock_request, exc)

        assert response.status_code == 400
        body = _body(response)
        assert body["code"] == "VAL_VALIDATION_ERROR"
        assert body["details"] == {"count": 11}

    @pytest.mark.asyncio
    async def test_storage_error_hides_message(self, mock_request):
        response = await application_error_handler(
            mock_request, StorageError("Database operation failed: save_note")
        )

        assert response.status_code == 500
        body = _body(response)
        assert body["error"] == GENERIC_SERVER_MESSAGE
        assert "save_note" not in response.body.decode()

    @pytest.mark.asyncio
    async def test_unknown_application_error_returns_500(self, mock_request):
        exc = ApplicationError("Unknown error", code="CUSTOM_ERROR")

        response = await application_error_handler(mock_request, exc)

        assert response.status_code == 500


class TestValidationErrorHandler:
    """Tests for validation_error_handler."""

    @pytest.mark.asyncio
    async def test_returns_400_with_field_errors(self, mock_request):
        exc = MagicMock(spec=RequestValidationError)
        exc.errors.return_value = [
            {"loc": ("body", "email"), "msg": "invalid email", "type": "value_error"},
            {"loc": ("body", "password"), "msg": "too short", "type": "string_too_short"},
        ]

        response = await validation_error_handler(mock_request, exc)

        assert response.status_code == 400
        body = _body(response)
        assert body["code"] == "VAL_REQUEST_INVALID"
        fields = [e["field"] for e in body["details"]["validation_errors"]]
        assert fields == ["body.email", "body.password"]


class TestHttpExceptionHandler:
    """Tests for http_exception_handler."""

    @pytest.mark.asyncio
    async def test_unknown_route(self, mock_request):
        response = await http_exception_handler(mock_request, StarletteHTTPException(404))

        assert response.status_code == 404
        assert _body(response)["error"] == "Endpoint not found"

    @pytest.mark.asyncio
    async def test_method_not_allowed(self, mock_request):
        exc = StarletteHTTPException(405, detail="Method Not Allowed")

        response = await http_exception_handler(mock_request, exc)

        assert response.status_code == 405
        assert _body(response)["code"] == "HTTP_405"


class TestUnhandledExceptionHandler:
    """Tests for unhandled_exception_handler."""

    @pytest.mark.asyncio
    async def test_hides_internal_details(self, mock_request):
        exc = RuntimeError("sqlite file /srv/data/notepad.db is locked")

        response = await unhandled_exception_handler(mock_request, exc)

        assert response.status_code == 500
        body = _body(response)
        assert body["code"] == "SYS_INTERNAL_ERROR"
        assert body["error"] == GENERIC_SERVER_MESSAGE
        assert "notepad.db" not in response.body.decode()
