"""
News feed endpoints.

Each route serves one NewsAPI feed. A feed that cannot be fetched and has
never been cached answers ``success: false`` with an empty list, still
with HTTP 200.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Depends

from ..core.exceptions import AppError
from ..services.data_manager.manager import MarketDataManager
from ..services.market_data.news import (
    GENERAL_FEED,
    GOLD_FEED,
    HEADLINES_FEED,
    INFLATION_FEED,
    MACRO_FEED,
    NewsFeed,
)
from ..shared.formatters import utc_now_iso
from ..shared.news_filters import project_articles
from .dependencies.data_deps import get_data_manager

router = APIRouter()
logger = structlog.get_logger(__name__)


async def _feed_response(
    data_manager: MarketDataManager, feed: NewsFeed, payload_key: str = "articles"
) -> dict[str, Any]:
    try:
        fetched = await data_manager.get_news(feed)
    except AppError as e:
        logger.error("News feed unavailable", feed=feed.name, error=e.message)
        return {"success": False, "error": e.message, payload_key: []}

    return {
        "success": True,
        payload_key: project_articles(fetched.value, feed.fields),
        "lastUpdated": utc_now_iso(),
    }


@router.get("/news")
async def get_news(
    data_manager: MarketDataManager = Depends(get_data_manager),
) -> dict[str, Any]:
    """General precious metals news (5 articles, cached 12 hours)."""
    return await _feed_response(data_manager, GENERAL_FEED)


@router.get("/macro-news")
async def get_macro_news(
    data_manager: MarketDataManager = Depends(get_data_manager),
) -> dict[str, Any]:
    """Macro / precious metals news for the sales widget (10 articles)."""
    return await _feed_response(data_manager, MACRO_FEED)


@router.get("/news/inflation")
async def get_inflation_news(
    data_manager: MarketDataManager = Depends(get_data_manager),
) -> dict[str, Any]:
    """Inflation and dollar devaluation news (10 articles)."""
    return await _feed_response(data_manager, INFLATION_FEED)


@router.get("/news/gold")
async def get_gold_news(
    data_manager: MarketDataManager = Depends(get_data_manager),
) -> dict[str, Any]:
    """Gold-bullish news (10 articles)."""
    return await _feed_response(data_manager, GOLD_FEED)


@router.get("/news/headlines")
async def get_headlines(
    data_manager: MarketDataManager = Depends(get_data_manager),
) -> dict[str, Any]:
    """Bullish investment headlines for the sidebar ticker (25 items)."""
    return await _feed_response(data_manager, HEADLINES_FEED, payload_key="headlines")
