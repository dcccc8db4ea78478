"""
Integration Tests for Health Endpoints.
"""

import pytest
from httpx import AsyncClient


class TestLiveness:
    """Tests for GET /api/health."""

    @pytest.mark.asyncio
    async def test_health_reports_running(self, client: AsyncClient, api):
        data = api.assert_success(await client.get("/api/health"))
        assert data["message"] == "API is running"
        assert data["timestamp"]


class TestReadiness:
    """Tests for GET /api/health/ready."""

    @pytest.mark.asyncio
    async def test_ready_when_database_and_storage_available(self, client: AsyncClient, api):
        data = api.assert_success(await client.get("/api/health/ready"))
        assert data["checks"]["database"]["status"] == "healthy"
        assert data["checks"]["storage"]["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_not_ready_when_upload_dir_missing(self, client: AsyncClient, api, upload_dir):
        upload_dir.rmdir()

        response = await client.get("/api/health/ready")

        api.assert_error(response, 503)


class TestUnknownRoute:
    """Unknown routes still answer with the error envelope."""

    @pytest.mark.asyncio
    async def test_unknown_route_returns_404_envelope(self, client: AsyncClient, api):
        data = api.assert_error(await client.get("/api/nothing-here"), 404, "RES_NOT_FOUND")
        assert data["error"] == "Endpoint not found"
