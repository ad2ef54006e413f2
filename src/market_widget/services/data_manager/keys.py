"""
Cache keys for the Data Manager Layer.

Each upstream source owns exactly one key; the value under it is the
whole normalized payload for that source (both metals, both indices,
one news feed, the full performance table).
"""


class CacheKeys:
    """Cache key constants, one per upstream source."""

    METALS = "metals_prices"
    INDICES = "stock_indices"
    NEWS = "news"
    MACRO_NEWS = "macro_news"
    INFLATION_NEWS = "inflation_news"
    GOLD_NEWS = "gold_news"
    HEADLINES = "bullish_headlines"
    PERFORMANCE = "performance_data"

    @classmethod
    def all(cls) -> list[str]:
        """Every source key, in fetch-layer order."""
        return [
            cls.METALS,
            cls.INDICES,
            cls.NEWS,
            cls.MACRO_NEWS,
            cls.INFLATION_NEWS,
            cls.GOLD_NEWS,
            cls.HEADLINES,
            cls.PERFORMANCE,
        ]
