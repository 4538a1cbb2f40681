"""Tests for the best-effort CacheStore facade."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from starpulse.infrastructure.cache.store import CacheStore, marker_key

NOW = datetime(2025, 1, 15, 2, 0, tzinfo=timezone.utc)


@pytest.fixture()
def cache_store(mock_cache: AsyncMock) -> CacheStore:
    return CacheStore(mock_cache, clock=lambda: NOW)


class TestGet:
    async def test_hit(self, cache_store: CacheStore, mock_cache: AsyncMock) -> None:
        mock_cache.get.return_value = {"a/b": 2}
        assert await cache_store.get("k") == {"a/b": 2}

    async def test_miss(self, cache_store: CacheStore) -> None:
        assert await cache_store.get("k") is None

    async def test_backend_error_degrades_to_miss(
        self, cache_store: CacheStore, mock_cache: AsyncMock
    ) -> None:
        mock_cache.get.side_effect = OSError("disk gone")
        assert await cache_store.get("k") is None


class TestPut:
    async def test_writes_with_ttl(
        self, cache_store: CacheStore, mock_cache: AsyncMock
    ) -> None:
        await cache_store.put("k", {"a": 1}, 60)
        mock_cache.set.assert_awaited_once_with("k", {"a": 1}, ttl=60)

    async def test_mark_refresh_writes_marker(
        self, cache_store: CacheStore, mock_cache: AsyncMock
    ) -> None:
        await cache_store.put("k", [1], 60, mark_refresh=True)
        mock_cache.set.assert_any_await("k", [1], ttl=60)
        mock_cache.set.assert_any_await(
            "k-last-refresh", NOW.isoformat(), ttl=60
        )

    async def test_backend_error_is_swallowed(
        self, cache_store: CacheStore, mock_cache: AsyncMock
    ) -> None:
        mock_cache.set.side_effect = RuntimeError("not opened")
        await cache_store.put("k", {"a": 1}, 60)


class TestDelete:
    async def test_delete(self, cache_store: CacheStore, mock_cache: AsyncMock) -> None:
        await cache_store.delete("k")
        mock_cache.delete.assert_awaited_once_with("k")

    async def test_backend_error_is_swallowed(
        self, cache_store: CacheStore, mock_cache: AsyncMock
    ) -> None:
        mock_cache.delete.side_effect = OSError("boom")
        await cache_store.delete("k")


async def test_get_marker_reads_marker_key(
    cache_store: CacheStore, mock_cache: AsyncMock
) -> None:
    mock_cache.get.return_value = "2025-01-15T01:45:00+00:00"
    assert await cache_store.get_marker("k") == "2025-01-15T01:45:00+00:00"
    mock_cache.get.assert_awaited_once_with(marker_key("k"))
