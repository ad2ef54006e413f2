"""
Data Manager - Single source of truth for all upstream data access.

The MarketDataManager provides a unified interface for:
- Metals spot prices (metals-api)
- Equity index quotes (Yahoo Finance)
- Themed news feeds (NewsAPI)
- 20-year asset performance (Yahoo Finance monthly history)

Key Features:
- One cache key per source with its own TTL
- Stale cache served when an upstream call fails
- Parallel fetching with asyncio.gather, never failing fast
- Upstream calls shielded from client disconnects so they still fill the cache
"""

import asyncio
import functools
import math
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any, TypeVar

import pandas as pd
import structlog

from ...core.exceptions import AppError, UpstreamError
from ...shared.sanitizers import sanitize_exception_message
from ..market_data.metals import MetalsAPIClient
from ..market_data.news import NewsAPIClient, NewsFeed
from ..market_data.yahoo import YahooFinanceClient
from .cache import CacheStore
from .keys import CacheKeys
from .types import (
    Fetched,
    IndicesSnapshot,
    MetalsSnapshot,
    NewsArticle,
    PerformanceRecord,
    PricesSnapshot,
    SourceOutcome,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Yahoo symbols used as proxies for each asset class
PERFORMANCE_SYMBOLS: dict[str, str] = {
    "Gold": "GC=F",  # Gold Futures
    "Silver": "SI=F",  # Silver Futures
    "S&P 500": "^GSPC",
    "Dow Jones": "^DJI",
    "Real Estate": "VNQ",  # Vanguard Real Estate ETF
    "Bonds": "AGG",  # iShares Core US Aggregate Bond ETF
}
PERFORMANCE_YEARS = 20

# Assets without a usable ETF proxy, as fixed 20-year estimates:
# CDs at ~2%/yr compound to ~49%; cash loses ~44% purchasing power to inflation.
FIXED_PERFORMANCE_ESTIMATES: tuple[PerformanceRecord, ...] = (
    PerformanceRecord(name="CDs/Savings", return_percent=49),
    PerformanceRecord(name="Cash (USD)", return_percent=-44),
)


def total_return_percent(closes: list[float]) -> int | None:
    """
    Total return from first to last close, rounded half up to an integer.

    Returns:
        ``round((last - first) / first * 100)``, or None with fewer than two
        closes or a non-positive first close
    """
    if len(closes) < 2:
        return None

    first, last = closes[0], closes[-1]
    if not first or first <= 0:
        return None

    return math.floor((last - first) / first * 100 + 0.5)


class MarketDataManager:
    """
    Single source of truth for upstream data in the application.

    Every source goes through ``_fetch_cached``:
    cache hit -> return; miss -> call upstream, store, return;
    failure -> last stored value tagged stale, or raise.
    """

    def __init__(
        self,
        cache: CacheStore,
        metals_client: MetalsAPIClient,
        yahoo_client: YahooFinanceClient,
        news_client: NewsAPIClient,
    ):
        """
        Initialize the Data Manager.

        Args:
            cache: Process-wide cache store
            metals_client: metals-api client
            yahoo_client: Yahoo Finance client
            news_client: NewsAPI client
        """
        self._cache = cache
        self._metals = metals_client
        self._yahoo = yahoo_client
        self._news = news_client
        # Strong references to in-flight fills so detached ones are not collected
        self._fills: set[asyncio.Task[Any]] = set()
        logger.info("data_manager_initialized")

    @property
    def cache(self) -> CacheStore:
        return self._cache

    async def close(self) -> None:
        """Close all upstream clients."""
        await asyncio.gather(
            self._metals.close(),
            self._yahoo.close(),
            self._news.close(),
        )

    # =========================================================================
    # Generic fetch path
    # =========================================================================

    async def _load_and_store(self, key: str, loader: Callable[[], Awaitable[Any]]) -> Any:
        value = await loader()
        self._cache.set(key, value)
        return value

    async def _shielded_fill(
        self, key: str, loader: Callable[[], Awaitable[T]], source: str
    ) -> T:
        """
        Run the load-and-store for ``key`` as its own task.

        Cancelling the caller (client disconnect) detaches the task instead of
        cancelling it: the fill still populates the cache, and a failure is
        logged once it completes.
        """
        fill = asyncio.ensure_future(self._load_and_store(key, loader))
        self._fills.add(fill)
        fill.add_done_callback(self._fills.discard)

        try:
            return await asyncio.shield(fill)
        except asyncio.CancelledError:
            if not fill.done():
                logger.info("upstream_fill_detached", key=key, source=source)
                fill.add_done_callback(
                    functools.partial(self._finish_detached_fill, key, source)
                )
            raise

    @staticmethod
    def _finish_detached_fill(key: str, source: str, fill: asyncio.Task[Any]) -> None:
        if fill.cancelled():
            return

        error = fill.exception()
        if error is None:
            logger.info("detached_fill_stored", key=key, source=source)
            return

        logger.error(
            "upstream_fetch_failed",
            key=key,
            source=source,
            detached=True,
            error_type=getattr(error, "error_type", type(error).__name__),
            error=sanitize_exception_message(error),
        )

    async def _fetch_cached(
        self,
        key: str,
        loader: Callable[[], Awaitable[T]],
        source: str,
    ) -> Fetched[T]:
        """
        Serve ``key`` from cache, else load it, else fall back to stale.

        Args:
            key: Cache key for the source
            loader: Async callable doing the upstream call and normalization
            source: Source name for logs and wrapped errors

        Returns:
            Fetched value, ``stale=True`` when served from an expired entry

        Raises:
            AppError: Load failed and nothing was ever cached under ``key``
        """
        cached = self._cache.get(key)
        if cached is not None:
            return Fetched(cached)

        try:
            value = await self._shielded_fill(key, loader, source)
            return Fetched(value)
        except Exception as e:
            error = (
                e
                if isinstance(e, AppError)
                else UpstreamError(sanitize_exception_message(e), service=source)
            )

            stale = self._cache.get_stale(key)
            if stale is not None:
                logger.warning(
                    "stale_fallback_used",
                    key=key,
                    source=source,
                    error_type=error.error_type,
                    error=error.message,
                )
                return Fetched(stale, stale=True)

            logger.error(
                "upstream_fetch_failed",
                key=key,
                source=source,
                error_type=error.error_type,
                error=error.message,
            )
            if error is e:
                raise
            raise error from e

    # =========================================================================
    # Sources
    # =========================================================================

    async def get_metals(self) -> Fetched[MetalsSnapshot]:
        """Gold and silver spot prices."""
        return await self._fetch_cached(
            CacheKeys.METALS, self._metals.get_latest, source="metals"
        )

    async def get_indices(self) -> Fetched[IndicesSnapshot]:
        """S&P 500 and Dow Jones quotes, fetched together; either failing fails both."""

        async def load() -> IndicesSnapshot:
            sp500, dow = await asyncio.gather(
                self._yahoo.get_quote("^GSPC"),
                self._yahoo.get_quote("^DJI"),
            )
            return IndicesSnapshot(sp500=sp500, dow=dow)

        return await self._fetch_cached(CacheKeys.INDICES, load, source="indices")

    async def get_news(self, feed: NewsFeed) -> Fetched[list[NewsArticle]]:
        """Deduplicated articles for one news feed."""

        async def load() -> list[NewsArticle]:
            return await self._news.get_articles(feed)

        return await self._fetch_cached(feed.cache_key, load, source=f"news:{feed.name}")

    async def get_performance(self) -> Fetched[list[PerformanceRecord]]:
        """
        20-year total return per asset, sorted by return descending.

        Symbols whose history fails are dropped without a warning; the
        fixed CDs/Savings and Cash estimates are always included.
        """
        return await self._fetch_cached(
            CacheKeys.PERFORMANCE, self._load_performance, source="performance"
        )

    async def _symbol_return(
        self, symbol: str, start: datetime, end: datetime
    ) -> int | None:
        closes = await self._yahoo.get_monthly_closes(symbol, start, end)
        return total_return_percent(closes)

    async def _load_performance(self) -> list[PerformanceRecord]:
        end = datetime.now(UTC)
        start = (pd.Timestamp(end) - pd.DateOffset(years=PERFORMANCE_YEARS)).to_pydatetime()

        logger.info("performance_fetch_started", symbols=len(PERFORMANCE_SYMBOLS))

        names = list(PERFORMANCE_SYMBOLS)
        results = await asyncio.gather(
            *(self._symbol_return(PERFORMANCE_SYMBOLS[name], start, end) for name in names),
            return_exceptions=True,
        )

        records: list[PerformanceRecord] = []
        for name, result in zip(names, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning(
                    "performance_symbol_dropped",
                    asset=name,
                    symbol=PERFORMANCE_SYMBOLS[name],
                    error=sanitize_exception_message(result),
                )
                continue
            if result is None:
                logger.warning(
                    "performance_symbol_dropped",
                    asset=name,
                    symbol=PERFORMANCE_SYMBOLS[name],
                    error="insufficient history",
                )
                continue
            records.append(PerformanceRecord(name=name, return_percent=result))

        records.extend(FIXED_PERFORMANCE_ESTIMATES)
        records.sort(key=lambda r: r.return_percent, reverse=True)

        logger.info("performance_fetch_completed", assets=len(records))
        return records

    # =========================================================================
    # Aggregates
    # =========================================================================

    async def get_prices(self) -> PricesSnapshot:
        """
        Metals and indices fetched in parallel, each outcome kept independently.

        Never raises: a failed source becomes an outcome with ``error`` set
        and a warning; a stale source keeps its value and adds a warning.
        """
        metals_result, indices_result = await asyncio.gather(
            self.get_metals(),
            self.get_indices(),
            return_exceptions=True,
        )

        metals = SourceOutcome.from_result("metals", metals_result)
        indices = SourceOutcome.from_result("indices", indices_result)

        warnings: list[str] = []
        for outcome, label, failure in (
            (metals, "Metals data", "Unable to fetch metals prices"),
            (indices, "Stock indices", "Unable to fetch stock indices"),
        ):
            if not outcome.ok:
                warnings.append(failure)
                logger.error(
                    "source_failed", source=outcome.source, error=outcome.error
                )
            elif outcome.stale:
                warnings.append(f"{label} may be stale")

        return PricesSnapshot(metals=metals, indices=indices, warnings=warnings)
