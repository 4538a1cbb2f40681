"""Popular-repositories list guarded by the daily refresh rule."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

import structlog

from starpulse.domain.entities import (
    RefreshPolicy,
    UpstreamError,
    parse_marker,
    should_force_refresh,
)
from starpulse.domain.ports import PopularSourcePort
from starpulse.infrastructure.cache.store import CacheStore

log = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PopularRepositoriesUseCase:
    """Serves the coarse popular list from cache until the upstream regenerates it.

    Flow:
        1. Cached list present and not due for refresh -> return it
        2. Otherwise fetch (with retry) and store with a refresh marker
        3. Fetch failed -> stale cached list, else empty list
    """

    def __init__(
        self,
        source: PopularSourcePort,
        store: CacheStore,
        *,
        cache_key: str = "popular-repositories-list",
        ttl_seconds: int = 86_400,
        policy: RefreshPolicy | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._source = source
        self._store = store
        self._key = cache_key
        self._ttl = ttl_seconds
        self._policy = policy or RefreshPolicy()
        self._clock = clock

    async def get_popular(self, bypass_cache: bool = False) -> list[dict[str, Any]]:
        cached = await self._store.get(self._key)
        stale = cached if isinstance(cached, list) else None

        if stale is not None and not bypass_cache:
            marker = parse_marker(await self._store.get_marker(self._key))
            if not should_force_refresh(self._clock(), marker, self._policy):
                return stale
            log.info("popular_refresh_due", last_refresh=str(marker))

        try:
            fresh = await self._source.fetch_popular()
        except UpstreamError as e:
            log.warning(
                "popular_fetch_failed",
                error=str(e),
                serving_stale=stale is not None,
            )
            return stale or []

        await self._store.put(self._key, fresh, self._ttl, mark_refresh=True)
        return fresh
