"""
Base class for REST market data providers.
Provides initialization, HTTP client management, and error translation.
"""

from typing import Any

import httpx
import structlog

from ...core.config import Settings
from ...core.exceptions import ConfigurationError, TransportError, UpstreamError
from ...shared.sanitizers import sanitize_exception_message

logger = structlog.get_logger(__name__)


class RESTProviderBase:
    """
    Base class for key-authenticated JSON APIs (metals-api, NewsAPI).

    Provides:
    - HTTP client with connection pooling and a bounded timeout
    - API key presence check (missing key -> ConfigurationError)
    - Transport/HTTP error translation into the fetch-layer taxonomy
    - Resource cleanup
    """

    service: str = "rest_provider"
    api_key_env: str = "API_KEY"

    def __init__(self, settings: Settings, api_key: str, base_url: str):
        """Initialize provider with its API key and a persistent HTTP client.

        Args:
            settings: Application settings (timeout)
            api_key: Provider credential, may be empty
            base_url: Endpoint URL
        """
        self.settings = settings
        self.api_key = api_key
        self.base_url = base_url

        # Persistent HTTP client with connection pooling
        self.client = httpx.AsyncClient(
            timeout=settings.upstream_timeout_seconds,
            limits=httpx.Limits(
                max_keepalive_connections=5,
                max_connections=10,
                keepalive_expiry=30.0,
            ),
        )

        if not self.api_key:
            logger.warning("API key not configured", service=self.service)

        logger.info(
            "Upstream provider initialized",
            service=self.service,
            api_key_configured=bool(self.api_key),
        )

    async def close(self) -> None:
        """Close HTTP client and cleanup resources."""
        await self.client.aclose()
        logger.info("Upstream provider closed", service=self.service)

    def _require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigurationError(
                f"{self.api_key_env} not configured", service=self.service
            )
        return self.api_key

    async def _get_json(self, params: dict[str, Any]) -> dict[str, Any]:
        """
        GET ``base_url`` with ``params`` and decode the JSON body.

        Both providers report their own failures inside a JSON body, often
        alongside a 4xx status, so the body is decoded whenever possible
        and left for the caller to inspect.

        Raises:
            TransportError: Network failure or timeout
            UpstreamError: Body is not a JSON object
        """
        try:
            response = await self.client.get(self.base_url, params=params)
        except httpx.TimeoutException as e:
            raise TransportError(
                f"{self.service} request timed out", service=self.service
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(
                sanitize_exception_message(e), service=self.service
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(
                f"{self.service} returned invalid JSON (HTTP {response.status_code})",
                service=self.service,
                status=response.status_code,
            ) from e

        if not isinstance(data, dict):
            raise UpstreamError(
                f"{self.service} returned unexpected payload",
                service=self.service,
                status=response.status_code,
            )

        return data
