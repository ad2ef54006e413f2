"""
Custom exception hierarchy for upstream fetch failures.

Every failure a fetcher can hit is one of three kinds:
- ConfigurationError: a credential is missing (permanent until redeployed)
- UpstreamError: the provider reported a failure or sent a malformed payload
- TransportError: the network call failed or timed out

The fetch layer treats all three the same way (serve stale cache, else
propagate) and the request handlers turn them into warnings or
``success: false`` envelopes, so none of them reach the client as a non-200.

Usage:
    from market_widget.core.exceptions import ConfigurationError, UpstreamError

    raise ConfigurationError("METALS_API_KEY not configured", setting="metals_api_key")
    raise UpstreamError("rate limit reached", service="metals_api")
"""

from typing import Any


class AppError(Exception):
    """
    Base application error with HTTP status mapping.

    All custom exceptions inherit from this to enable consistent error handling.
    """

    status_code: int = 500
    error_type: str = "internal_error"

    def __init__(self, message: str, **context: Any):
        """
        Initialize error with message and optional context.

        Args:
            message: Human-readable error description
            **context: Additional key-value pairs for logging (e.g., service, symbol)
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON response and structured logging."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "status_code": self.status_code,
            **self.context,
        }


class ConfigurationError(AppError):
    """
    Application misconfigured (e.g., missing API key).

    Raised per request by fetchers whose credential is absent; never retried.
    """

    status_code = 500
    error_type = "configuration_error"


# ===== 502/503: External Service Errors =====


class ExternalServiceError(AppError):
    """
    External service unavailable or returned error.

    Maps to 503 Service Unavailable (third-party problem, retry may help).
    """

    status_code = 503
    error_type = "external_service_error"

    def __init__(self, message: str, service: str, **context: Any):
        """
        Initialize with service name for easier debugging.

        Args:
            message: Error description
            service: Service identifier (e.g., "metals_api", "newsapi", "yfinance")
            **context: Additional context (e.g., symbol)
        """
        super().__init__(message, service=service, **context)
        self.service = service


class UpstreamError(ExternalServiceError):
    """Provider reported its own failure, or the payload could not be parsed."""

    status_code = 502
    error_type = "upstream_error"


class TransportError(ExternalServiceError):
    """Network failure or timeout talking to a provider."""

    status_code = 504
    error_type = "transport_error"
