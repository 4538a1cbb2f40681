"""Tests for PopularRepositoriesUseCase."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock

import pytest

from starpulse.application.use_cases import PopularRepositoriesUseCase
from starpulse.domain.entities import RefreshPolicy, UpstreamError
from starpulse.infrastructure.cache.store import CacheStore

KEY = "popular-repositories-list"
FRESH = [{"name": "fresh/repo"}]
STALE = [{"name": "stale/repo"}]


def _at(hour: int, minute: int = 0, day: int = 15) -> datetime:
    return datetime(2025, 1, day, hour, minute, tzinfo=timezone.utc)


@pytest.fixture()
def source() -> AsyncMock:
    mock = AsyncMock()
    mock.fetch_popular = AsyncMock(return_value=FRESH)
    return mock


def _use_case(
    source: AsyncMock, store: CacheStore, now: datetime
) -> PopularRepositoriesUseCase:
    return PopularRepositoriesUseCase(
        source,
        store,
        cache_key=KEY,
        ttl_seconds=3600,
        policy=RefreshPolicy(refresh_hour=1, refresh_buffer_minutes=30),
        clock=lambda: now,
    )


async def test_empty_cache_fetches_and_marks_refresh(
    source: AsyncMock, store: CacheStore, memory_cache: Any
) -> None:
    result = await _use_case(source, store, _at(12)).get_popular()

    assert result == FRESH
    assert memory_cache.data[KEY] == FRESH
    assert memory_cache.data[f"{KEY}-last-refresh"]
    assert memory_cache.ttls[KEY] == 3600


async def test_fresh_marker_serves_cache(
    source: AsyncMock, store: CacheStore, memory_cache: Any
) -> None:
    memory_cache.data[KEY] = STALE
    memory_cache.data[f"{KEY}-last-refresh"] = _at(1, 45).isoformat()

    assert await _use_case(source, store, _at(12)).get_popular() == STALE
    source.fetch_popular.assert_not_awaited()


async def test_marker_from_yesterday_forces_refresh(
    source: AsyncMock, store: CacheStore, memory_cache: Any
) -> None:
    memory_cache.data[KEY] = STALE
    memory_cache.data[f"{KEY}-last-refresh"] = _at(0, 50, day=14).isoformat()

    assert await _use_case(source, store, _at(2)).get_popular() == FRESH
    source.fetch_popular.assert_awaited_once()


async def test_before_cutoff_serves_cache_even_when_old(
    source: AsyncMock, store: CacheStore, memory_cache: Any
) -> None:
    memory_cache.data[KEY] = STALE
    memory_cache.data[f"{KEY}-last-refresh"] = _at(3, day=13).isoformat()

    assert await _use_case(source, store, _at(1, 0)).get_popular() == STALE


async def test_fetch_failure_falls_back_to_stale(
    source: AsyncMock, store: CacheStore, memory_cache: Any
) -> None:
    memory_cache.data[KEY] = STALE
    source.fetch_popular.side_effect = UpstreamError("down")

    assert await _use_case(source, store, _at(12)).get_popular() == STALE


async def test_fetch_failure_without_cache_is_empty(
    source: AsyncMock, store: CacheStore
) -> None:
    source.fetch_popular.side_effect = UpstreamError("down")
    assert await _use_case(source, store, _at(12)).get_popular() == []


async def test_bypass_cache_always_fetches(
    source: AsyncMock, store: CacheStore, memory_cache: Any
) -> None:
    memory_cache.data[KEY] = STALE
    memory_cache.data[f"{KEY}-last-refresh"] = _at(1, 45).isoformat()

    assert await _use_case(source, store, _at(12)).get_popular(bypass_cache=True) == FRESH
