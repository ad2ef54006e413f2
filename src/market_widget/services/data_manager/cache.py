"""
In-process cache store for the Data Manager Layer.

Provides a small key/value store with:
- Per-entry TTL (looked up from an injected TTL table when not given)
- Expiry checked at read time, no background sweep
- Stale reads that ignore TTL, used as the fallback when a fetch fails
- Hit/miss/stale counters for logging
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


@dataclass
class CacheEntry:
    """Single cached value. Replaced in place when its key is written again."""

    key: str
    value: Any
    stored_at: float
    ttl_seconds: int

    def age(self, now: float) -> float:
        """Seconds since the entry was written."""
        return now - self.stored_at

    def is_expired(self, now: float) -> bool:
        """True once the entry is older than its TTL (the boundary itself is fresh)."""
        return self.age(now) > self.ttl_seconds


class CacheStore:
    """
    Key/value store with per-entry TTL and stale reads.

    Constructed once per process and handed to the data manager by reference.
    All access happens on the event loop thread between awaits, so plain
    dict reads/writes are atomic enough and no lock is taken.

    Expired entries are never deleted: ``get`` stops returning them, while
    ``get_stale`` keeps returning the last written value until the key is
    overwritten.
    """

    def __init__(
        self,
        default_ttl: int,
        ttl_table: dict[str, int] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache store.

        Args:
            default_ttl: TTL in seconds for keys missing from ``ttl_table``
            ttl_table: Per-key TTL overrides (e.g. news, performance)
            clock: Monotonic time source, injectable for tests
        """
        self.default_ttl = default_ttl
        self.ttl_table = dict(ttl_table or {})
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0
        self._stale_reads = 0

    def ttl_for(self, key: str) -> int:
        """TTL applied to ``key`` when ``set`` is called without one."""
        return self.ttl_table.get(key, self.default_ttl)

    def get(self, key: str) -> Any | None:
        """
        Get a fresh value by key.

        Returns:
            The stored value while ``now - stored_at <= ttl``, otherwise None
        """
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            logger.debug("cache_miss", key=key)
            return None

        if entry.is_expired(self._clock()):
            self._misses += 1
            logger.debug("cache_miss", key=key, expired=True)
            return None

        self._hits += 1
        logger.debug("cache_hit", key=key)
        return entry.value

    def get_stale(self, key: str) -> Any | None:
        """
        Get the last stored value by key, ignoring TTL.

        Returns:
            The last value written under ``key``, or None if it was never written
        """
        entry = self._entries.get(key)
        if entry is None:
            return None

        self._stale_reads += 1
        logger.debug(
            "cache_stale_read",
            key=key,
            age_seconds=round(entry.age(self._clock()), 1),
        )
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """
        Store a value, replacing any previous entry for the key.

        Args:
            key: Cache key
            value: Normalized payload
            ttl_seconds: TTL override; defaults to the key's TTL table entry
        """
        ttl = self.ttl_for(key) if ttl_seconds is None else ttl_seconds
        self._entries[key] = CacheEntry(
            key=key,
            value=value,
            stored_at=self._clock(),
            ttl_seconds=ttl,
        )
        logger.debug("cache_set", key=key, ttl=ttl)

    def keys(self) -> list[str]:
        """All keys ever written, fresh or expired."""
        return list(self._entries)

    def stats(self) -> dict[str, int]:
        """Entry counts and read counters."""
        now = self._clock()
        fresh = sum(1 for e in self._entries.values() if not e.is_expired(now))
        return {
            "entries": len(self._entries),
            "fresh": fresh,
            "hits": self._hits,
            "misses": self._misses,
            "stale_reads": self._stale_reads,
        }

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
