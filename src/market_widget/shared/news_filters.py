"""
News deduplication and normalization helpers.

Shared by every news feed: NewsAPI returns syndicated copies of the same
story under slightly different titles, and redacts removed articles with
a ``[Removed]`` placeholder.
"""

import re
from collections.abc import Iterable
from typing import Any

from ..services.data_manager.types import NewsArticle

REMOVED_MARKER = "[Removed]"
TITLE_KEY_LENGTH = 50

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def title_key(title: str) -> str:
    """
    Normalized dedup key for a headline.

    Lowercases, keeps the first 50 characters, then strips everything
    outside ``[a-z0-9]``.

    Examples:
        >>> title_key("Gold Hits Record High, Analysts Say")
        'goldhitsrecordhighanalystssay'
    """
    return _NON_ALNUM.sub("", title.lower()[:TITLE_KEY_LENGTH])


def is_placeholder_title(title: str | None) -> bool:
    """True for missing titles and provider-redacted articles."""
    return not title or REMOVED_MARKER in title


def dedupe_articles(
    articles: Iterable[dict[str, Any]], limit: int | None = None
) -> list[NewsArticle]:
    """
    Normalize raw NewsAPI articles, dropping near-duplicates.

    First occurrence wins and upstream order is preserved. Articles with a
    placeholder title are skipped before they can claim a key.

    Args:
        articles: Raw ``articles[]`` items
        limit: Maximum number of articles to return

    Returns:
        Normalized, deduplicated articles
    """
    seen: set[str] = set()
    result: list[NewsArticle] = []

    for raw in articles:
        if limit is not None and len(result) >= limit:
            break

        title = raw.get("title")
        if is_placeholder_title(title):
            continue

        key = title_key(title)
        if key in seen:
            continue
        seen.add(key)

        result.append(NewsArticle.from_newsapi(raw))

    return result


def project_articles(
    articles: Iterable[NewsArticle], fields: tuple[str, ...]
) -> list[dict[str, Any]]:
    """Serialize articles keeping only ``fields`` (feed-specific payload shape)."""
    return [article.to_dict(fields) for article in articles]
