"""
Integration Test Fixtures.

Fixtures for integration tests - real database, real upload directory
and the full HTTP stack. These fixtures build on the root conftest.py
database and storage fixtures.
"""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from modules.backend.core.database import Database
from modules.backend.core.storage import FileStorage
from modules.client.api import NotepadClient


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def app(database: Database, file_storage: FileStorage) -> FastAPI:
    """Application wired to the test database and upload directory."""
    from modules.backend.main import create_app

    return create_app(database=database, file_storage=file_storage)


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """
    Raw HTTP client against the in-process app.

    Usage:
        async def test_health_endpoint(client: AsyncClient):
            response = await client.get("/api/health")
            assert response.status_code == 200
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client


@pytest.fixture
async def notepad(app: FastAPI) -> AsyncGenerator[NotepadClient, None]:
    """NotepadClient talking to the in-process app."""
    async with NotepadClient(
        base_url="http://test/api",
        timeout=5.0,
        transport=ASGITransport(app=app),
    ) as notepad_client:
        yield notepad_client


# =============================================================================
# API Response Assertion Helpers
# =============================================================================


class ApiAssertions:
    """Helper class for API response assertions."""

    @staticmethod
    def assert_success(response: Any, expected_status: int = 200) -> dict[str, Any]:
        """
        Assert API response is successful.

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is True, f"Response not successful: {data}"
        return data

    @staticmethod
    def assert_error(
        response: Any,
        expected_status: int,
        expected_code: str | None = None,
    ) -> dict[str, Any]:
        """
        Assert API response is an error envelope.

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is False, f"Response should be error: {data}"
        assert data.get("error"), f"Missing error message: {data}"

        if expected_code:
            assert data.get("code") == expected_code, (
                f"Expected error code {expected_code}, got {data.get('code')}"
            )

        return data


@pytest.fixture
def api() -> ApiAssertions:
    """Provide API assertion helpers."""
    return ApiAssertions()


# =============================================================================
# Upload Helpers
# =============================================================================


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def png_file() -> tuple[str, bytes, str]:
    """A small PNG attachment as an httpx multipart tuple."""
    return ("pic.png", PNG_BYTES, "image/png")
