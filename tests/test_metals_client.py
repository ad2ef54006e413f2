"""
Unit tests for MetalsAPIClient - metals-api spot prices.

Tests metals-api interactions with mocked HTTP responses.
"""

from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from market_widget.core.exceptions import (
    ConfigurationError,
    TransportError,
    UpstreamError,
)
from market_widget.services.market_data.metals import MetalsAPIClient, _usd_per_ounce


# ===== Fixtures =====


@pytest.fixture
def mock_settings():
    """Mock Settings"""
    settings = Mock()
    settings.metals_api_key = "test_metals_key"
    settings.metals_api_url = "https://metals-api.test/api/latest"
    settings.upstream_timeout_seconds = 10.0
    return settings


@pytest.fixture
def metals_client(mock_settings):
    """Create MetalsAPIClient with a mocked HTTP client"""
    with patch("market_widget.services.market_data.base.httpx.AsyncClient"):
        client = MetalsAPIClient(mock_settings)
        client.client = AsyncMock()
        return client


def _response(payload, status_code=200):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


@pytest.fixture
def mock_latest_response():
    """Mock metals-api latest response"""
    return {
        "success": True,
        "timestamp": 1736935200,
        "base": "USD",
        "rates": {
            "USDXAU": 2650.25,
            "USDXAG": 30.5,
            "XAU": 0.000377,
            "XAG": 0.0328,
        },
    }


# ===== get_latest Tests =====


class TestGetLatest:
    """Test get_latest method"""

    @pytest.mark.asyncio
    async def test_get_latest_success(self, metals_client, mock_latest_response):
        metals_client.client.get.return_value = _response(mock_latest_response)

        snapshot = await metals_client.get_latest()

        assert snapshot.gold.price == 2650.25
        assert snapshot.silver.price == 30.5
        assert snapshot.gold.timestamp == 1736935200

        metals_client.client.get.assert_called_once_with(
            "https://metals-api.test/api/latest",
            params={"access_key": "test_metals_key", "base": "USD", "symbols": "XAU,XAG"},
        )

    @pytest.mark.asyncio
    async def test_get_latest_inverts_bare_rates(self, metals_client):
        metals_client.client.get.return_value = _response(
            {"success": True, "timestamp": 1, "rates": {"XAU": 0.0005, "XAG": 0.04}}
        )

        snapshot = await metals_client.get_latest()

        assert snapshot.gold.price == pytest.approx(2000.0)
        assert snapshot.silver.price == pytest.approx(25.0)

    @pytest.mark.asyncio
    async def test_get_latest_missing_rate_is_none(self, metals_client):
        metals_client.client.get.return_value = _response(
            {"success": True, "rates": {"USDXAU": 2000}}
        )

        snapshot = await metals_client.get_latest()

        assert snapshot.gold.price == 2000.0
        assert snapshot.silver.price is None

    @pytest.mark.asyncio
    async def test_get_latest_provider_failure(self, metals_client):
        metals_client.client.get.return_value = _response(
            {
                "success": False,
                "error": {"code": 104, "info": "Your monthly API request volume has been reached."},
            }
        )

        with pytest.raises(UpstreamError) as exc_info:
            await metals_client.get_latest()

        assert "monthly API request volume" in exc_info.value.message
        assert exc_info.value.service == "metals_api"

    @pytest.mark.asyncio
    async def test_get_latest_provider_failure_without_info(self, metals_client):
        metals_client.client.get.return_value = _response({"success": False}, 401)

        with pytest.raises(UpstreamError, match="Metals API request failed"):
            await metals_client.get_latest()

    @pytest.mark.asyncio
    async def test_get_latest_missing_rates(self, metals_client):
        metals_client.client.get.return_value = _response({"success": True})

        with pytest.raises(UpstreamError, match="missing rates"):
            await metals_client.get_latest()

    @pytest.mark.asyncio
    async def test_get_latest_without_api_key(self, metals_client):
        metals_client.api_key = ""

        with pytest.raises(ConfigurationError, match="METALS_API_KEY not configured"):
            await metals_client.get_latest()

        metals_client.client.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_latest_timeout(self, metals_client):
        metals_client.client.get.side_effect = httpx.ReadTimeout("timed out")

        with pytest.raises(TransportError, match="timed out"):
            await metals_client.get_latest()

    @pytest.mark.asyncio
    async def test_get_latest_connection_error_masks_key(self, metals_client):
        metals_client.client.get.side_effect = httpx.ConnectError(
            "failed: https://metals-api.test/api/latest?access_key=SECRET123&base=USD"
        )

        with pytest.raises(TransportError) as exc_info:
            await metals_client.get_latest()

        assert "SECRET123" not in exc_info.value.message
        assert "access_key=****" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_get_latest_invalid_json(self, metals_client):
        response = Mock()
        response.status_code = 502
        response.json.side_effect = ValueError("Expecting value")
        metals_client.client.get.return_value = response

        with pytest.raises(UpstreamError, match="invalid JSON"):
            await metals_client.get_latest()


class TestUsdPerOunce:
    """Test rate normalization"""

    def test_prefers_usd_prefixed_rate(self):
        assert _usd_per_ounce({"USDXAU": 2000, "XAU": 0.001}, "XAU") == 2000.0

    def test_zero_inverse_rate_is_none(self):
        assert _usd_per_ounce({"XAU": 0}, "XAU") is None

    def test_absent(self):
        assert _usd_per_ounce({}, "XAG") is None


class TestClose:
    """Test resource cleanup"""

    @pytest.mark.asyncio
    async def test_close(self, metals_client):
        await metals_client.close()
        metals_client.client.aclose.assert_awaited_once()
