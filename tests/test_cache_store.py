"""
Unit tests for the in-process cache store.

Tests cover:
- Fresh reads within TTL and misses after it
- Stale reads ignoring TTL
- In-place replacement on write
- TTL table lookup and stats counters
"""

import pytest

from market_widget.core.config import Settings
from market_widget.services.data_manager import CacheEntry, CacheKeys, CacheStore


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ===== Fixtures =====


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    """Fresh store per test: 30s default, 600s for macro news."""
    return CacheStore(
        default_ttl=30,
        ttl_table={CacheKeys.MACRO_NEWS: 600},
        clock=clock,
    )


# ===== get / get_stale Tests =====


class TestFreshReads:
    """Test TTL-bounded reads."""

    def test_get_never_written(self, store):
        assert store.get("metals_prices") is None

    def test_get_within_ttl(self, store, clock):
        store.set("metals_prices", {"gold": 2000})
        clock.advance(29)
        assert store.get("metals_prices") == {"gold": 2000}

    def test_get_at_ttl_boundary_is_fresh(self, store, clock):
        """now - stored_at == ttl is still a hit."""
        store.set("metals_prices", "v")
        clock.advance(30)
        assert store.get("metals_prices") == "v"

    def test_get_after_ttl_returns_none(self, store, clock):
        store.set("metals_prices", "v")
        clock.advance(30.5)
        assert store.get("metals_prices") is None

    def test_expired_entry_is_not_deleted(self, store, clock):
        store.set("metals_prices", "v")
        clock.advance(3600)
        assert store.get("metals_prices") is None
        assert "metals_prices" in store
        assert len(store) == 1


class TestStaleReads:
    """Test reads that ignore TTL."""

    def test_get_stale_never_written(self, store):
        assert store.get_stale("news") is None

    def test_get_stale_while_fresh(self, store):
        store.set("news", ["a"])
        assert store.get_stale("news") == ["a"]

    def test_get_stale_after_expiry(self, store, clock):
        store.set("news", ["a"], ttl_seconds=10)
        clock.advance(10_000)
        assert store.get("news") is None
        assert store.get_stale("news") == ["a"]


class TestWrites:
    """Test write semantics."""

    def test_set_replaces_in_place(self, store, clock):
        store.set("stock_indices", "old")
        clock.advance(60)
        store.set("stock_indices", "new")

        assert store.get("stock_indices") == "new"
        assert store.get_stale("stock_indices") == "new"
        assert len(store) == 1

    def test_rewrite_resets_age(self, store, clock):
        store.set("stock_indices", "old")
        clock.advance(25)
        store.set("stock_indices", "new")
        clock.advance(25)
        assert store.get("stock_indices") == "new"

    def test_explicit_ttl_overrides_table(self, store, clock):
        store.set(CacheKeys.MACRO_NEWS, "v", ttl_seconds=5)
        clock.advance(6)
        assert store.get(CacheKeys.MACRO_NEWS) is None

    def test_ttl_table_lookup(self, store, clock):
        store.set(CacheKeys.MACRO_NEWS, "v")
        clock.advance(599)
        assert store.get(CacheKeys.MACRO_NEWS) == "v"

    def test_default_ttl_for_unknown_key(self, store):
        assert store.ttl_for("something_else") == 30
        assert store.ttl_for(CacheKeys.MACRO_NEWS) == 600

    def test_none_value_reads_as_absent(self, store):
        store.set("metals_prices", None)
        assert store.get("metals_prices") is None


class TestStats:
    """Test counters used in shutdown logging."""

    def test_stats_counts(self, store, clock):
        store.set("a", 1)
        store.set("b", 2, ttl_seconds=1)
        clock.advance(5)

        store.get("a")  # hit
        store.get("b")  # expired -> miss
        store.get("c")  # never written -> miss
        store.get_stale("b")

        assert store.stats() == {
            "entries": 2,
            "fresh": 1,
            "hits": 1,
            "misses": 2,
            "stale_reads": 1,
        }

    def test_keys(self, store):
        store.set("a", 1)
        store.set("b", 2)
        assert sorted(store.keys()) == ["a", "b"]


class TestCacheEntry:
    """Test entry expiry arithmetic."""

    def test_is_expired(self):
        entry = CacheEntry(key="k", value=1, stored_at=100.0, ttl_seconds=30)
        assert entry.is_expired(130.0) is False
        assert entry.is_expired(130.01) is True
        assert entry.age(145.0) == 45.0


class TestSettingsTTLTable:
    """Test the TTL table built from settings."""

    def test_default_ttl_table(self):
        settings = Settings(_env_file=None)
        table = settings.cache_ttl_table()

        assert table[CacheKeys.METALS] == 30
        assert table[CacheKeys.INDICES] == 30
        assert table[CacheKeys.NEWS] == 43200
        assert table[CacheKeys.MACRO_NEWS] == 600
        assert table[CacheKeys.INFLATION_NEWS] == 600
        assert table[CacheKeys.GOLD_NEWS] == 600
        assert table[CacheKeys.HEADLINES] == 600
        assert table[CacheKeys.PERFORMANCE] == 3600
        assert set(table) == set(CacheKeys.all())

    def test_cache_ttl_drives_price_keys(self):
        settings = Settings(_env_file=None, cache_ttl=45)
        table = settings.cache_ttl_table()
        assert table[CacheKeys.METALS] == 45
        assert table[CacheKeys.INDICES] == 45
