"""Tests for the suggestion cache."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock

import pytest

from anisuggest.core.models import BestMatch, CookedData, Suggestion
from anisuggest.services.cache_store import CacheStore
from anisuggest.services.kv_store import MemoryKeyValueStore
from anisuggest.shared.errors import CacheError, ErrorCode

PREFIXES = ["o", "on", "oni", "oniz", "onizu", "onizuk"]


@pytest.fixture
def cooked() -> CookedData:
    return CookedData(
        suggestions=[
            Suggestion(
                content="https://anidb.net/ch1234",
                description="<url><match>Onizuka</match></url>",
            )
        ],
        site_link="<dim>Search for <match>onizuka</match> on site.</dim>",
        best=BestMatch(title="Onizuka", text="Character", note="9.1"),
    )


def result(expires: float) -> CookedData:
    return CookedData(site_link="x", expires=expires)


class TestReadWrite:
    """Test write_result() and get()."""

    @pytest.mark.asyncio
    async def test_write_stamps_expiry(self, cache_store: CacheStore, clock, cooked) -> None:
        stored = await cache_store.write_result("input:onizuka", cooked)

        assert stored.expires == clock.now + cache_store.max_age
        assert cooked.expires is None
        assert await cache_store.get("input:onizuka") == stored

    @pytest.mark.asyncio
    async def test_missing_key(self, cache_store: CacheStore) -> None:
        assert await cache_store.get("input:nothing") is None

    @pytest.mark.asyncio
    async def test_prefix_aliases_resolve_to_result(
        self,
        cache_store: CacheStore,
        memory_store: MemoryKeyValueStore,
        cooked: CookedData,
    ) -> None:
        alias_keys = [f"input:{prefix}" for prefix in PREFIXES]
        stored = await cache_store.write_result("input:onizuka", cooked, alias_keys)

        raw = await memory_store.get(alias_keys)
        assert set(raw.values()) == {"onizuka"}
        for key in alias_keys:
            assert await cache_store.get(key) == stored

    @pytest.mark.asyncio
    async def test_alias_to_own_key_is_skipped(self, cache_store: CacheStore, cooked) -> None:
        stored = await cache_store.write_result("input:x", cooked, ["input:x"])
        assert await cache_store.get("input:x") == stored

    @pytest.mark.asyncio
    async def test_dangling_alias_is_a_miss(
        self,
        cache_store: CacheStore,
        memory_store: MemoryKeyValueStore,
    ) -> None:
        await memory_store.set({"input:on": "onizuka"})
        assert await cache_store.get("input:on") is None

    @pytest.mark.asyncio
    async def test_alias_chain_is_not_followed(
        self,
        cache_store: CacheStore,
        memory_store: MemoryKeyValueStore,
    ) -> None:
        await memory_store.set({"input:o": "on", "input:on": "onizuka"})
        await cache_store.put({"input:onizuka": result(10.0)})

        assert await cache_store.get("input:o") is None
        assert await cache_store.get("input:on") is not None

    @pytest.mark.asyncio
    async def test_malformed_value_is_a_miss(
        self,
        cache_store: CacheStore,
        memory_store: MemoryKeyValueStore,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        await memory_store.set({"input:x": {"suggestions": "nope"}})

        with caplog.at_level(logging.WARNING, logger="anisuggest.services.cache_store"):
            assert await cache_store.get("input:x") is None

        record = caplog.records[-1]
        assert record.error_code == "CACHE_CORRUPTED"
        assert record.context["additional_data"] == {"key": "input:x"}

    @pytest.mark.asyncio
    async def test_backend_failure_is_a_miss(self, clock) -> None:
        store = AsyncMock()
        store.get.side_effect = CacheError(ErrorCode.CACHE_READ_FAILED, "disk on fire")
        cache = CacheStore(store, clock=clock)

        assert await cache.get("input:x") is None

    @pytest.mark.asyncio
    async def test_write_failure_propagates(self, clock, cooked) -> None:
        store = AsyncMock()
        store.set.side_effect = CacheError(ErrorCode.CACHE_WRITE_FAILED, "read-only")
        cache = CacheStore(store, clock=clock)

        with pytest.raises(CacheError):
            await cache.write_result("input:x", cooked)


class TestQuota:
    """Test quota enforcement."""

    @pytest.mark.asyncio
    async def test_oldest_half_is_evicted(self, cache_store: CacheStore) -> None:
        await cache_store.put(
            {"input:e1": result(100.0), "input:e2": result(200.0), "input:e3": result(300.0)}
        )
        cache_store.quota_bytes = 2 * await cache_store.size_in_bytes()

        await cache_store.put({"input:e4": result(400.0), "input:a": "e4"})

        assert await cache_store.get("input:e1") is None
        assert await cache_store.get("input:e2") is None
        assert await cache_store.get("input:e3") is not None
        assert await cache_store.get("input:a") == await cache_store.get("input:e4")
        assert await cache_store.size_in_bytes() <= cache_store.quota_bytes / 2

    @pytest.mark.asyncio
    async def test_no_eviction_below_threshold(self, cache_store: CacheStore) -> None:
        await cache_store.put({"input:e1": result(100.0), "input:e2": result(200.0)})
        assert (await cache_store.stats()).results == 2


class TestMaintenance:
    """Test expiry purging, statistics and removal."""

    @pytest.mark.asyncio
    async def test_purge_expired(
        self,
        cache_store: CacheStore,
        memory_store: MemoryKeyValueStore,
        clock,
    ) -> None:
        await cache_store.put(
            {
                "input:old": result(clock.now - 1),
                "input:new": result(clock.now + 100),
                "input:n": "new",
            }
        )
        await memory_store.set({"input:broken": {"siteLink": "no expiry"}})

        assert await cache_store.purge_expired() == 2
        assert set(await memory_store.get(None)) == {"input:new", "input:n"}

    @pytest.mark.asyncio
    async def test_purge_removes_orphaned_aliases(
        self,
        cache_store: CacheStore,
        memory_store: MemoryKeyValueStore,
        clock,
    ) -> None:
        await cache_store.put(
            {
                "input:bebop": result(clock.now - 1),
                "input:b": "bebop",
                "input:be": "bebop",
                "input:onizuka": result(clock.now + 100),
                "input:o": "onizuka",
                "input:x": "gone",
            }
        )

        assert await cache_store.purge_expired() == 4
        assert set(await memory_store.get(None)) == {"input:onizuka", "input:o"}

    @pytest.mark.asyncio
    async def test_live_expiries(self, cache_store: CacheStore) -> None:
        await cache_store.put({"input:a": result(5.0), "input:b": result(6.0), "input:x": "a"})
        assert await cache_store.live_expiries() == {"input:a": 5.0, "input:b": 6.0}

    @pytest.mark.asyncio
    async def test_stats(self, cache_store: CacheStore, clock) -> None:
        await cache_store.put(
            {
                "input:old": result(clock.now - 1),
                "input:new": result(clock.now + 100),
                "input:n": "new",
                "input:ne": "new",
            }
        )
        stats = await cache_store.stats()

        assert stats.results == 2
        assert stats.aliases == 2
        assert stats.expired == 1
        assert stats.size_bytes == await cache_store.size_in_bytes()
        assert stats.quota_bytes == cache_store.quota_bytes

    @pytest.mark.asyncio
    async def test_remove_and_remove_all(self, cache_store: CacheStore) -> None:
        await cache_store.put({"input:a": result(5.0), "input:b": result(6.0)})

        await cache_store.remove(["input:a"])
        assert await cache_store.get("input:a") is None
        assert await cache_store.get("input:b") is not None

        await cache_store.remove_all()
        assert await cache_store.size_in_bytes() == 0
