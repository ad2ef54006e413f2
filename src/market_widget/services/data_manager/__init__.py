"""
Data Manager Layer (DML) - Single source of truth for all upstream data.

This package provides the process-wide cache store, its keys and the data
types shared by the upstream clients, the manager and the API layer.

Usage:
    from market_widget.services.data_manager import CacheStore, CacheKeys
    from market_widget.services.data_manager.manager import MarketDataManager

    cache = CacheStore(default_ttl=30, ttl_table=settings.cache_ttl_table())
    dm = MarketDataManager(cache, metals_client, yahoo_client, news_client)

    prices = await dm.get_prices()
    headlines = await dm.get_news(HEADLINES_FEED)

The manager is imported from its module directly: the upstream clients
import the types exported here.
"""

from .cache import CacheEntry, CacheStore
from .keys import CacheKeys
from .types import (
    Fetched,
    IndexQuote,
    IndicesSnapshot,
    MarketState,
    MetalsSnapshot,
    NewsArticle,
    PerformanceRecord,
    PriceQuote,
    PricesSnapshot,
    SourceOutcome,
    SpotPrice,
)

__all__ = [
    "CacheEntry",
    "CacheStore",
    "CacheKeys",
    "Fetched",
    "IndexQuote",
    "IndicesSnapshot",
    "MarketState",
    "MetalsSnapshot",
    "NewsArticle",
    "PerformanceRecord",
    "PriceQuote",
    "PricesSnapshot",
    "SourceOutcome",
    "SpotPrice",
]
