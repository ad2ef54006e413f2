"""
Shared sanitization utilities.

Provides text and response sanitization to prevent API key leakage
in logs, error messages, and the ``error``/``warnings`` fields returned
to the dashboard. httpx error messages embed the request URL, and both
upstream providers take their key as a query parameter.
"""

import re
from typing import Any

# Pre-compiled regex patterns for performance
_QUERY_KEY_PATTERN = re.compile(
    r"((?:access_key|api_?key)=)([^&\s'\"]+)", re.IGNORECASE
)
_BEARER_TOKEN_PATTERN = re.compile(r"(Bearer\s+)([A-Za-z0-9._-]+)", re.IGNORECASE)

# Keywords that indicate sensitive content
_SENSITIVE_KEYWORDS = frozenset({"access_key", "apikey", "api_key", "bearer"})


def sanitize_text(text: str, mask: str = "****") -> str:
    """
    Remove sensitive information from text strings.

    Args:
        text: Text to sanitize
        mask: Replacement mask for sensitive values

    Returns:
        Sanitized text with sensitive values masked

    Examples:
        >>> sanitize_text("GET https://metals-api.com/api/latest?access_key=ABC123&base=USD")
        "GET https://metals-api.com/api/latest?access_key=****&base=USD"
        >>> sanitize_text("Bearer eyJhbGciOiJIUzI1NiJ9.xyz")
        "Bearer ****"
    """
    if not text:
        return text

    # Quick check for sensitive keywords (optimization)
    text_lower = text.lower()
    if not any(keyword in text_lower for keyword in _SENSITIVE_KEYWORDS):
        return text

    result = _QUERY_KEY_PATTERN.sub(rf"\1{mask}", text)
    result = _BEARER_TOKEN_PATTERN.sub(rf"\1{mask}", result)
    return result


def sanitize_api_response(
    response: dict[str, Any], mask: str = "****"
) -> dict[str, Any]:
    """
    Remove API keys from provider error payloads before logging.

    Args:
        response: Decoded provider response
        mask: Replacement mask for sensitive values

    Returns:
        Sanitized shallow copy of the response
    """
    if not response:
        return response

    sanitized = response.copy()
    for field in ("message", "error", "info"):
        value = sanitized.get(field)
        if isinstance(value, str):
            sanitized[field] = sanitize_text(value, mask)
        elif isinstance(value, dict):
            sanitized[field] = sanitize_api_response(value, mask)

    return sanitized


def sanitize_exception_message(exc: BaseException, mask: str = "****") -> str:
    """
    Sanitize an exception message for safe logging/display.

    Falls back to the exception class name when the message is empty
    (``asyncio.TimeoutError()`` stringifies to "").
    """
    return sanitize_text(str(exc), mask) or type(exc).__name__
