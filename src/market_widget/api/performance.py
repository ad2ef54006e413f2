"""
Historical performance endpoint.

20-year total return per asset class for the comparison chart.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends

from ..core.exceptions import AppError
from ..services.data_manager.manager import MarketDataManager
from ..shared.formatters import with_colors
from .dependencies.data_deps import get_data_manager

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.get("/performance")
async def get_performance(
    data_manager: MarketDataManager = Depends(get_data_manager),
) -> dict[str, Any]:
    """
    Asset returns sorted best first, each tagged with its chart color.

    Assets whose history could not be fetched are left out of ``data``.
    """
    try:
        fetched = await data_manager.get_performance()
    except AppError as e:
        logger.error("Performance data unavailable", error=e.message)
        return {"success": False, "error": e.message, "data": []}

    return {
        "success": True,
        "data": [record.to_dict() for record in with_colors(fetched.value)],
    }
