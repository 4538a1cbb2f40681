"""Shared test fixtures for the starpulse test suite."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any
from unittest.mock import AsyncMock

import pytest

from starpulse.infrastructure.cache.store import CacheStore

# ---------------------------------------------------------------------------
# Domain fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def daily_payload() -> dict[str, Any]:
    """Daily activity document as served upstream."""
    return {
        "date": "2025-01-01",
        "total_repositories": 3,
        "0": "Owner/Alpha",
        "1": "owner/beta",
        "2": "owner/gamma",
    }


@pytest.fixture()
def fixed_day() -> date:
    return date(2025, 1, 15)


@pytest.fixture()
def fixed_now() -> datetime:
    return datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Mock port fixtures
# ---------------------------------------------------------------------------


class MemoryCache:
    """In-memory CachePort; records TTLs so tests can assert on them."""

    def __init__(self) -> None:
        self.data: dict[str, Any] = {}
        self.ttls: dict[str, int | None] = {}

    async def get(self, key: str) -> Any:
        return self.data.get(key)

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        self.data[key] = value
        self.ttls[key] = ttl

    async def delete(self, key: str) -> bool:
        return self.data.pop(key, None) is not None

    async def exists(self, key: str) -> bool:
        return key in self.data

    async def clear(self) -> None:
        self.data.clear()

    async def aclose(self) -> None:
        return None

    async def __aenter__(self) -> MemoryCache:
        return self

    async def __aexit__(self, *exc: object) -> None:
        return None


@pytest.fixture()
def memory_cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture()
def store(memory_cache: MemoryCache) -> CacheStore:
    """CacheStore over an in-memory cache."""
    return CacheStore(
        memory_cache,
        clock=lambda: datetime(2025, 1, 15, 2, 0, tzinfo=timezone.utc),
    )


@pytest.fixture()
def mock_cache() -> AsyncMock:
    """Mock CachePort."""
    cache = AsyncMock()
    cache.get = AsyncMock(return_value=None)
    cache.set = AsyncMock()
    cache.delete = AsyncMock(return_value=True)
    cache.exists = AsyncMock(return_value=False)
    cache.clear = AsyncMock()
    cache.aclose = AsyncMock()
    return cache


@pytest.fixture()
def mock_activity_source() -> AsyncMock:
    """Mock ActivitySourcePort."""
    source = AsyncMock()
    source.fetch_day = AsyncMock(return_value=None)
    return source
