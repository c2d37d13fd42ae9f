"""API tests for health check endpoints.

Tests the /health and /ready endpoints.
"""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient


@pytest.mark.asyncio
class TestHealthEndpoints:
    """Test health check API endpoints."""

    async def test_health_returns_200(self, client):
        """GET /health returns 200 with healthy status."""
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "blog-service"

    async def test_ready_returns_200_when_store_reachable(self, client):
        response = await client.get("/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    async def test_ready_returns_503_during_startup(self, app):
        """GET /ready returns 503 when initialization not complete."""
        app.state.init_done = False

        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as client:
            response = await client.get("/ready")

        assert response.status_code == 503
        assert response.json()["detail"] == "Starting"

    async def test_ready_returns_503_when_init_failed(self, app):
        app.state.init_error = "connection refused"

        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as client:
            response = await client.get("/ready")

        assert response.status_code == 503
        assert "connection refused" in response.json()["detail"]
        app.state.init_error = None

    async def test_ready_returns_503_when_store_down(self, client):
        with patch(
            "routes.health_routes.check_db_connection",
            AsyncMock(side_effect=OSError("connection refused")),
        ):
            response = await client.get("/ready")

        assert response.status_code == 503
        assert response.json()["detail"] == "Database unavailable"
