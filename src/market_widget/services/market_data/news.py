"""
Market news from NewsAPI (``/v2/everything``).

Each dashboard widget reads its own themed feed; a feed is a query plus
the page size requested upstream, the number of articles kept after
deduplication, the lookback window and the fields the widget renders.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import structlog

from ...core.config import Settings
from ...core.exceptions import UpstreamError
from ...shared.news_filters import dedupe_articles
from ...shared.sanitizers import sanitize_api_response, sanitize_text
from ..data_manager.keys import CacheKeys
from ..data_manager.types import NewsArticle
from .base import RESTProviderBase

logger = structlog.get_logger(__name__)

ARTICLE_FIELDS = ("title", "description", "source", "url", "publishedAt")
ARTICLE_FIELDS_WITH_IMAGE = (
    "title",
    "description",
    "source",
    "url",
    "image",
    "publishedAt",
)
HEADLINE_FIELDS = ("title", "source", "url", "publishedAt")


@dataclass(frozen=True)
class NewsFeed:
    """Definition of one themed news feed."""

    name: str
    cache_key: str
    query: str
    page_size: int
    limit: int
    fields: tuple[str, ...]
    lookback_days: int | None = 7

    def params(self, api_key: str, now: datetime | None = None) -> dict[str, Any]:
        """Query parameters for the ``everything`` endpoint."""
        params: dict[str, Any] = {
            "q": self.query,
            "language": "en",
            "sortBy": "publishedAt",
            "pageSize": self.page_size,
            "apiKey": api_key,
        }
        if self.lookback_days is not None:
            now = now or datetime.now(UTC)
            params["from"] = (now - timedelta(days=self.lookback_days)).date().isoformat()
        return params


GENERAL_FEED = NewsFeed(
    name="general",
    cache_key=CacheKeys.NEWS,
    query='(gold OR "precious metals" OR silver) AND (price OR market OR investment)',
    page_size=5,
    limit=5,
    fields=ARTICLE_FIELDS,
    lookback_days=None,
)

MACRO_FEED = NewsFeed(
    name="macro",
    cache_key=CacheKeys.MACRO_NEWS,
    query=(
        "gold price OR silver price OR precious metals OR "
        "gold market OR bullion OR inflation hedge OR "
        "central bank gold OR safe haven"
    ),
    page_size=20,
    limit=10,
    fields=ARTICLE_FIELDS_WITH_IMAGE,
)

INFLATION_FEED = NewsFeed(
    name="inflation",
    cache_key=CacheKeys.INFLATION_NEWS,
    query=(
        'inflation OR "dollar weakness" OR "currency devaluation" OR '
        '"purchasing power" OR "Fed rate" OR "money printing" OR '
        '"dollar decline" OR "fiat currency" OR "debt crisis" OR '
        '"economic uncertainty" OR "stagflation"'
    ),
    page_size=20,
    limit=10,
    fields=ARTICLE_FIELDS_WITH_IMAGE,
)

GOLD_FEED = NewsFeed(
    name="gold",
    cache_key=CacheKeys.GOLD_NEWS,
    query=(
        '"gold price" OR "gold rally" OR "gold record" OR '
        '"precious metals" OR "silver price" OR "bullion" OR '
        '"safe haven" OR "gold forecast" OR "gold investment" OR '
        '"central bank gold" OR "gold demand" OR "gold bullish"'
    ),
    page_size=20,
    limit=10,
    fields=ARTICLE_FIELDS_WITH_IMAGE,
)

HEADLINES_FEED = NewsFeed(
    name="headlines",
    cache_key=CacheKeys.HEADLINES,
    query=(
        '"gold investment" OR "precious metals" OR "gold rally" OR '
        '"silver gains" OR "bullion demand" OR "gold outlook" OR '
        '"gold forecast" OR "invest in gold" OR "gold ETF" OR '
        '"gold stocks" OR "mining stocks" OR "gold bullish"'
    ),
    page_size=30,
    limit=25,
    fields=HEADLINE_FIELDS,
)


class NewsAPIClient(RESTProviderBase):
    """Client for the NewsAPI ``everything`` endpoint."""

    service = "newsapi"
    api_key_env = "NEWS_API_KEY"

    def __init__(self, settings: Settings):
        super().__init__(settings, settings.news_api_key, settings.news_api_url)

    async def get_articles(self, feed: NewsFeed) -> list[NewsArticle]:
        """
        Fetch one feed, deduplicated and capped to the feed's limit.

        Args:
            feed: Feed definition (query, page size, limit)

        Returns:
            Normalized articles, newest first as returned upstream

        Raises:
            ConfigurationError: NEWS_API_KEY is not set
            UpstreamError: Provider reported ``status != "ok"``
            TransportError: Network failure or timeout
        """
        api_key = self._require_api_key()

        logger.info("upstream_fetch_started", service=self.service, feed=feed.name)
        data = await self._get_json(feed.params(api_key))

        if data.get("status") != "ok":
            logger.warning(
                "upstream_fetch_failed",
                service=self.service,
                feed=feed.name,
                response=sanitize_api_response(data),
            )
            raise UpstreamError(
                sanitize_text(data.get("message") or "NewsAPI request failed"),
                service=self.service,
                feed=feed.name,
                code=data.get("code"),
            )

        raw_articles = data.get("articles")
        if not isinstance(raw_articles, list):
            raise UpstreamError(
                "NewsAPI response missing articles", service=self.service, feed=feed.name
            )

        articles = dedupe_articles(raw_articles, limit=feed.limit)

        logger.info(
            "News fetched",
            feed=feed.name,
            received=len(raw_articles),
            kept=len(articles),
        )
        return articles
