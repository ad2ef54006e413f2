"""
Data types for the Data Manager Layer.

These models define the structure of data returned by the DML,
ensuring consistent interfaces across all data consumers. ``to_dict``
produces the camelCase JSON the dashboard client reads.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class MarketState(str, Enum):
    """Trading session reported by Yahoo Finance for an index."""

    PRE = "PRE"
    REGULAR = "REGULAR"
    POST = "POST"
    CLOSED = "CLOSED"
    PREPRE = "PREPRE"
    POSTPOST = "POSTPOST"

    @classmethod
    def parse(cls, value: Any) -> "MarketState | None":
        """Map a raw provider value to a state, None when unknown or missing."""
        if not value:
            return None
        try:
            return cls(str(value).upper())
        except ValueError:
            return None


@dataclass
class SpotPrice:
    """Metals spot price in USD per troy ounce."""

    price: float | None
    timestamp: int | None = None


@dataclass
class MetalsSnapshot:
    """Gold and silver spot prices from a single metals API call."""

    gold: SpotPrice
    silver: SpotPrice


@dataclass
class IndexQuote:
    """Equity index quote as returned upstream (change already computed)."""

    price: float | None
    previous_close: float | None
    change: float | None
    change_percent: float | None
    market_state: MarketState | None = None
    timestamp: int | None = None


@dataclass
class IndicesSnapshot:
    """S&P 500 and Dow Jones quotes fetched together."""

    sp500: IndexQuote
    dow: IndexQuote


@dataclass
class PriceQuote:
    """Display-ready quote for one dashboard tile."""

    symbol: str
    name: str
    price: float | None
    previous_close: float | None
    change: float | None
    change_percent: float | None
    unit: str
    market_state: MarketState | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "symbol": self.symbol,
            "name": self.name,
            "price": self.price,
            "previousClose": self.previous_close,
            "change": self.change,
            "changePercent": self.change_percent,
        }
        # Metals carry no session
        if self.market_state is not None:
            result["marketState"] = self.market_state.value
        result["unit"] = self.unit
        return result


@dataclass
class NewsArticle:
    """Normalized news article."""

    title: str
    source: str
    url: str
    published_at: str
    description: str | None = None
    image: str | None = None

    def to_dict(self, fields: tuple[str, ...] | None = None) -> dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Args:
            fields: JSON keys to keep, in output order (all when None)
        """
        full = {
            "title": self.title,
            "description": self.description,
            "source": self.source,
            "url": self.url,
            "image": self.image,
            "publishedAt": self.published_at,
        }
        if fields is None:
            return full
        return {name: full[name] for name in fields}

    @classmethod
    def from_newsapi(cls, raw: dict[str, Any]) -> "NewsArticle":
        """Create from a NewsAPI ``articles[]`` item."""
        source = raw.get("source") or {}
        return cls(
            title=raw.get("title") or "",
            description=raw.get("description"),
            source=source.get("name") or "",
            url=raw.get("url") or "",
            image=raw.get("urlToImage"),
            published_at=raw.get("publishedAt") or "",
        )


@dataclass
class PerformanceRecord:
    """Total return of one asset over the performance window."""

    name: str
    return_percent: int
    color: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"name": self.name, "return": self.return_percent}
        if self.color is not None:
            result["color"] = self.color
        return result


@dataclass
class Fetched(Generic[T]):
    """Value returned by a fetcher, tagged when it came from an expired entry."""

    value: T
    stale: bool = False


@dataclass
class SourceOutcome(Generic[T]):
    """
    Outcome of one source inside an aggregated response.

    Either ``value`` is set (possibly stale) or ``error`` is; a failed
    source is an explicit state rather than a None threaded through.
    """

    source: str
    value: T | None = None
    stale: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def from_result(cls, source: str, result: "Fetched[T] | BaseException") -> "SourceOutcome[T]":
        """Build from an ``asyncio.gather(..., return_exceptions=True)`` item."""
        if isinstance(result, BaseException):
            return cls(source=source, error=str(result) or type(result).__name__)
        return cls(source=source, value=result.value, stale=result.stale)


@dataclass
class PricesSnapshot:
    """Per-source outcomes behind one /api/prices response."""

    metals: SourceOutcome[MetalsSnapshot]
    indices: SourceOutcome[IndicesSnapshot]
    warnings: list[str] = field(default_factory=list)
