"""
Shared formatting utilities.

Number coercion for provider payloads and the presentation helpers that
turn fetched snapshots into dashboard tiles.
"""

import math
from datetime import UTC, datetime
from typing import Any

from ..services.data_manager.types import (
    IndexQuote,
    IndicesSnapshot,
    MetalsSnapshot,
    PerformanceRecord,
    PriceQuote,
    SpotPrice,
)

# Simulated day-over-day move for metals. metals-api's free tier has no
# previous close, so these are fixed placeholders, not market data.
# TODO: replace with a stored previous close once a historical metals source is wired in.
METALS_SIMULATED_CHANGE: dict[str, float] = {
    "gold": 0.002,
    "silver": 0.005,
}

PERFORMANCE_COLORS: dict[str, str] = {
    "Gold": "#d4a84b",
    "Silver": "#9ca3a8",
    "S&P 500": "#5a7a9a",
    "Dow Jones": "#5a8a85",
    "Real Estate": "#5a9a6a",
    "Bonds": "#6a6a6a",
    "CDs/Savings": "#5a5a5a",
    "Cash (USD)": "#4a4a4a",
}
DEFAULT_PERFORMANCE_COLOR = "#666666"


def safe_optional_float(value: Any) -> float | None:
    """
    Convert a provider value to float, None when missing or not a number.

    Examples:
        >>> safe_optional_float("123.45")
        123.45
        >>> safe_optional_float(None) is None
        True
        >>> safe_optional_float(float("nan")) is None
        True
    """
    if value is None or value == "" or value == "None":
        return None
    try:
        result = float(value)
    except (ValueError, TypeError):
        return None
    return None if math.isnan(result) else result


def metal_quote(metal: str, spot: SpotPrice) -> PriceQuote:
    """
    Build a tile for gold or silver with the simulated change applied.

    ``previousClose = price * (1 - rate)``, ``change = price * rate`` and
    ``changePercent = rate * 100``; derived fields stay None without a price.
    """
    rate = METALS_SIMULATED_CHANGE[metal]
    symbol, name = ("XAU", "Gold") if metal == "gold" else ("XAG", "Silver")
    price = spot.price

    return PriceQuote(
        symbol=symbol,
        name=name,
        price=price,
        previous_close=price * (1 - rate) if price is not None else None,
        change=price * rate if price is not None else None,
        change_percent=round(rate * 100, 4) if price is not None else None,
        unit="USD/oz",
    )


def index_quote(symbol: str, name: str, quote: IndexQuote) -> PriceQuote:
    """Build a tile for an equity index, passing upstream change through."""
    return PriceQuote(
        symbol=symbol,
        name=name,
        price=quote.price,
        previous_close=quote.previous_close,
        change=quote.change,
        change_percent=quote.change_percent,
        market_state=quote.market_state,
        unit="points",
    )


def metals_quotes(snapshot: MetalsSnapshot | None) -> dict[str, PriceQuote | None]:
    """Gold and silver tiles, both None when the metals source failed."""
    if snapshot is None:
        return {"gold": None, "silver": None}
    return {
        "gold": metal_quote("gold", snapshot.gold),
        "silver": metal_quote("silver", snapshot.silver),
    }


def with_colors(records: list[PerformanceRecord]) -> list[PerformanceRecord]:
    """Copy of ``records`` tagged with their chart colors."""
    return [
        PerformanceRecord(
            name=r.name,
            return_percent=r.return_percent,
            color=PERFORMANCE_COLORS.get(r.name, DEFAULT_PERFORMANCE_COLOR),
        )
        for r in records
    ]


def indices_quotes(snapshot: IndicesSnapshot | None) -> dict[str, PriceQuote | None]:
    """S&P 500 and Dow tiles, both None when the indices source failed."""
    if snapshot is None:
        return {"sp500": None, "dow": None}
    return {
        "sp500": index_quote("^GSPC", "S&P 500", snapshot.sp500),
        "dow": index_quote("^DJI", "Dow Jones", snapshot.dow),
    }


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a ``Z`` suffix."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
