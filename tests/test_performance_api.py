"""
Tests for the /api/performance endpoint.
"""

from unittest.mock import AsyncMock, Mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from market_widget.api import router
from market_widget.api.dependencies.data_deps import get_data_manager
from market_widget.core.exceptions import UpstreamError
from market_widget.services.data_manager import Fetched, PerformanceRecord


@pytest.fixture
def mock_data_manager():
    return Mock(get_performance=AsyncMock())


@pytest.fixture
def client(mock_data_manager):
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_data_manager] = lambda: mock_data_manager
    return TestClient(app)


class TestPerformanceEndpoint:
    """Test GET /api/performance"""

    def test_records_with_colors(self, client, mock_data_manager):
        mock_data_manager.get_performance.return_value = Fetched(
            [
                PerformanceRecord(name="Gold", return_percent=512),
                PerformanceRecord(name="CDs/Savings", return_percent=49),
                PerformanceRecord(name="Cash (USD)", return_percent=-44),
            ]
        )

        response = client.get("/api/performance")

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "data": [
                {"name": "Gold", "return": 512, "color": "#d4a84b"},
                {"name": "CDs/Savings", "return": 49, "color": "#5a5a5a"},
                {"name": "Cash (USD)", "return": -44, "color": "#4a4a4a"},
            ],
        }

    def test_stale_data_served_as_success(self, client, mock_data_manager):
        mock_data_manager.get_performance.return_value = Fetched(
            [PerformanceRecord(name="Silver", return_percent=150)], stale=True
        )

        body = client.get("/api/performance").json()

        assert body["success"] is True
        assert body["data"][0]["name"] == "Silver"

    def test_failure_envelope(self, client, mock_data_manager):
        mock_data_manager.get_performance.side_effect = UpstreamError(
            "Too Many Requests", service="performance"
        )

        response = client.get("/api/performance")

        assert response.status_code == 200
        assert response.json() == {
            "success": False,
            "error": "Too Many Requests",
            "data": [],
        }
