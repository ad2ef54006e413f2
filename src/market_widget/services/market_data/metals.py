"""
Precious metals spot prices from metals-api.com.
"""

from typing import Any

import structlog

from ...core.config import Settings
from ...core.exceptions import UpstreamError
from ...shared.sanitizers import sanitize_api_response, sanitize_text
from ..data_manager.types import MetalsSnapshot, SpotPrice
from .base import RESTProviderBase

logger = structlog.get_logger(__name__)


def _usd_per_ounce(rates: dict[str, Any], symbol: str) -> float | None:
    """
    Read a USD-per-troy-ounce price from a metals-api ``rates`` block.

    ``USD{symbol}`` is already USD per ounce; the bare symbol is ounces
    per USD and has to be inverted.
    """
    direct = rates.get(f"USD{symbol}")
    if direct:
        return float(direct)

    inverse = rates.get(symbol)
    if inverse:
        return 1 / float(inverse)

    return None


class MetalsAPIClient(RESTProviderBase):
    """Client for the metals-api ``latest`` endpoint (gold XAU, silver XAG)."""

    service = "metals_api"
    api_key_env = "METALS_API_KEY"

    def __init__(self, settings: Settings):
        super().__init__(settings, settings.metals_api_key, settings.metals_api_url)

    async def get_latest(self) -> MetalsSnapshot:
        """
        Fetch the latest gold and silver spot prices in USD.

        Returns:
            MetalsSnapshot with per-ounce prices (None when a rate is missing)

        Raises:
            ConfigurationError: METALS_API_KEY is not set
            UpstreamError: Provider reported ``success: false`` or no rates
            TransportError: Network failure or timeout
        """
        api_key = self._require_api_key()

        logger.info("upstream_fetch_started", service=self.service)
        data = await self._get_json(
            {"access_key": api_key, "base": "USD", "symbols": "XAU,XAG"}
        )

        if not data.get("success"):
            error = data.get("error") or {}
            info = error.get("info") if isinstance(error, dict) else None
            logger.warning(
                "upstream_fetch_failed",
                service=self.service,
                response=sanitize_api_response(data),
            )
            raise UpstreamError(
                sanitize_text(info or "Metals API request failed"),
                service=self.service,
            )

        rates = data.get("rates")
        if not isinstance(rates, dict):
            raise UpstreamError("Metals API response missing rates", service=self.service)

        try:
            timestamp = data.get("timestamp")
            snapshot = MetalsSnapshot(
                gold=SpotPrice(price=_usd_per_ounce(rates, "XAU"), timestamp=timestamp),
                silver=SpotPrice(price=_usd_per_ounce(rates, "XAG"), timestamp=timestamp),
            )
        except (TypeError, ValueError) as e:
            raise UpstreamError(
                f"Metals API returned malformed rates: {e}", service=self.service
            ) from e

        logger.info(
            "Metals prices fetched",
            gold=snapshot.gold.price,
            silver=snapshot.silver.price,
        )
        return snapshot
