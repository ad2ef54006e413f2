"""
Health check endpoint for liveness probes.

Reports process liveness only; never touches the cache or any upstream.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends

from ..core.config import Settings, get_settings
from ..shared.formatters import utc_now_iso

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)) -> dict[str, Any]:
    """Liveness probe with the configured default cache TTL."""
    logger.debug("Health check requested")
    return {
        "status": "ok",
        "timestamp": utc_now_iso(),
        "cacheTTL": settings.cache_ttl,
    }
