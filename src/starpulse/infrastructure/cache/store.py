"""Best-effort cache facade used by every pipeline stage.

The cache is never the source of truth: any backend failure is logged and
degrades to a miss (read) or a no-op (write/delete). Callers never see an
exception from here.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

import structlog

from starpulse.domain.ports.cache import CachePort

log = structlog.get_logger(__name__)

MARKER_SUFFIX = "-last-refresh"


def marker_key(key: str) -> str:
    """Key of the refresh marker written alongside *key*."""
    return f"{key}{MARKER_SUFFIX}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CacheStore:
    """JSON key/value store with TTL on top of a :class:`CachePort`."""

    def __init__(
        self,
        cache: CachePort,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._cache = cache
        self._clock = clock

    async def get(self, key: str) -> Any | None:
        try:
            return await self._cache.get(key)
        except Exception as e:  # noqa: BLE001
            log.warning("cache_store_get_failed", key=key, error=str(e))
            return None

    async def put(
        self,
        key: str,
        value: Any,
        ttl_seconds: int,
        *,
        mark_refresh: bool = False,
    ) -> None:
        """Write *value*; with *mark_refresh* also stamp the refresh marker."""
        try:
            await self._cache.set(key, value, ttl=ttl_seconds)
            if mark_refresh:
                await self._cache.set(
                    marker_key(key),
                    self._clock().isoformat(),
                    ttl=ttl_seconds,
                )
        except Exception as e:  # noqa: BLE001
            log.warning("cache_store_put_failed", key=key, error=str(e))

    async def delete(self, key: str) -> None:
        try:
            await self._cache.delete(key)
        except Exception as e:  # noqa: BLE001
            log.warning("cache_store_delete_failed", key=key, error=str(e))

    async def get_marker(self, key: str) -> Any | None:
        """Raw refresh marker stored for *key* (None when absent)."""
        return await self.get(marker_key(key))
