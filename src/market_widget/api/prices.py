"""
Unified quote snapshot endpoint.

Combines metals-api spot prices and Yahoo Finance index quotes into one
response. Always answers ``success: true``; sources that failed come back
as null tiles plus a warning.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends

from ..services.data_manager.manager import MarketDataManager
from ..shared.formatters import indices_quotes, metals_quotes, utc_now_iso
from .dependencies.data_deps import get_data_manager

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.get("/prices")
async def get_prices(
    data_manager: MarketDataManager = Depends(get_data_manager),
) -> dict[str, Any]:
    """
    Gold, silver, S&P 500 and Dow Jones in a single envelope.

    Response:
        success: always true
        data: gold/silver/sp500/dow tiles, null for a failed source
        lastUpdated: when this response was assembled
        warnings: present only when a source failed or is stale
    """
    snapshot = await data_manager.get_prices()

    tiles = {
        **metals_quotes(snapshot.metals.value),
        **indices_quotes(snapshot.indices.value),
    }

    response: dict[str, Any] = {
        "success": True,
        "data": {
            name: quote.to_dict() if quote is not None else None
            for name, quote in tiles.items()
        },
        "lastUpdated": utc_now_iso(),
    }
    if snapshot.warnings:
        response["warnings"] = snapshot.warnings
        logger.warning("Prices served with warnings", warnings=snapshot.warnings)

    return response
