"""
Equity index quotes and monthly price history from Yahoo Finance.

yfinance is synchronous, so every call runs in a worker thread and is
bounded by the upstream timeout. A timed-out thread is not interrupted;
its result is discarded.
"""

import asyncio
from collections.abc import Callable
from datetime import datetime
from typing import Any, TypeVar

import pandas as pd
import structlog
import yfinance as yf

from ...core.config import Settings
from ...core.exceptions import TransportError, UpstreamError
from ...shared.formatters import safe_optional_float
from ...shared.sanitizers import sanitize_exception_message
from ..data_manager.types import IndexQuote, MarketState

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class YahooFinanceClient:
    """Thin async wrapper over ``yfinance.Ticker``."""

    service = "yfinance"

    def __init__(self, settings: Settings):
        self.timeout = settings.upstream_timeout_seconds

    async def close(self) -> None:
        """Nothing pooled; present so all providers share the lifecycle."""
        return None

    async def _run(self, func: Callable[[], T], symbol: str) -> T:
        try:
            return await asyncio.wait_for(asyncio.to_thread(func), timeout=self.timeout)
        except TimeoutError as e:
            raise TransportError(
                f"Yahoo Finance request timed out for {symbol}",
                service=self.service,
                symbol=symbol,
            ) from e
        except Exception as e:
            raise UpstreamError(
                sanitize_exception_message(e), service=self.service, symbol=symbol
            ) from e

    async def get_quote(self, symbol: str) -> IndexQuote:
        """
        Fetch the current quote for an index (e.g. ``^GSPC``).

        Change and change percent come from Yahoo and are passed through.

        Raises:
            UpstreamError: No quote data for the symbol
            TransportError: Timeout
        """

        def _load() -> dict[str, Any]:
            return dict(yf.Ticker(symbol).info or {})

        info = await self._run(_load, symbol)

        price = safe_optional_float(info.get("regularMarketPrice"))
        if price is None:
            raise UpstreamError(
                f"No quote data for symbol: {symbol}", service=self.service, symbol=symbol
            )

        quote = IndexQuote(
            price=price,
            previous_close=safe_optional_float(info.get("regularMarketPreviousClose")),
            change=safe_optional_float(info.get("regularMarketChange")),
            change_percent=safe_optional_float(info.get("regularMarketChangePercent")),
            market_state=MarketState.parse(info.get("marketState")),
            timestamp=info.get("regularMarketTime"),
        )

        logger.info("Quote fetched", symbol=symbol, price=quote.price)
        return quote

    async def get_monthly_closes(
        self, symbol: str, start: datetime, end: datetime
    ) -> list[float]:
        """
        Fetch monthly closing prices between ``start`` and ``end``, oldest first.

        Raises:
            UpstreamError: yfinance failed
            TransportError: Timeout
        """

        def _load() -> pd.DataFrame:
            return yf.Ticker(symbol).history(start=start, end=end, interval="1mo")

        history = await self._run(_load, symbol)

        if history is None or history.empty or "Close" not in history:
            logger.warning("No history returned for symbol", symbol=symbol)
            return []

        closes = history["Close"].dropna().astype(float).tolist()
        logger.info("History fetched", symbol=symbol, data_points=len(closes))
        return closes
