"""
Unit tests for the health endpoint.
"""

from unittest.mock import Mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from market_widget.api import router
from market_widget.core.config import get_settings


# ===== Fixtures =====


@pytest.fixture
def mock_settings():
    """Mock Settings instance."""
    settings = Mock()
    settings.cache_ttl = 45
    return settings


@pytest.fixture
def client(mock_settings):
    """Create test client with mocked dependencies."""
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_settings] = lambda: mock_settings
    return TestClient(app)


# ===== health_check Tests =====


class TestHealthCheck:
    """Test liveness endpoint."""

    def test_health_ok(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["cacheTTL"] == 45
        assert data["timestamp"].endswith("Z")

    def test_health_needs_no_data_manager(self, client):
        """No app.state.data_manager is set, yet health still answers."""
        assert client.get("/api/health").status_code == 200
