"""
Tests for health check and root endpoints.

The simplest test file, verifying the test infrastructure itself:
- Per-test database schema created
- FastAPI test client working
- Database connectivity
"""

from unittest.mock import AsyncMock, patch

from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlmodel.ext.asyncio.session import AsyncSession

from teamtasks.config import settings
from tests.utils import assert_status_code


class TestHealthCheck:
    """Test health check endpoint."""

    async def test_health_check_returns_healthy_status(self, client: AsyncClient):
        """Test that health check returns healthy status with database connection."""
        # Act
        response = await client.get("/health")

        # Assert
        assert_status_code(response, 200)
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "connected"
        assert data["version"] == settings.API_VERSION
        assert "error" not in data, "Healthy response should not contain error field"

    async def test_health_check_reports_database_failure(
        self, client: AsyncClient, test_session: AsyncSession
    ):
        """Test that an unreachable store is reported, not raised."""
        # Arrange
        failure = OperationalError("SELECT 1", {}, Exception("connection refused"))

        # Act
        with patch.object(test_session, "execute", AsyncMock(side_effect=failure)):
            response = await client.get("/health")

        # Assert
        assert_status_code(response, 200)
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["database"] == "disconnected"
        assert "connection refused" in data["error"]


class TestRoot:
    """Test GET /"""

    async def test_root(self, client: AsyncClient):
        response = await client.get("/")

        assert_status_code(response, 200)
        assert response.json()["name"] == settings.API_TITLE
