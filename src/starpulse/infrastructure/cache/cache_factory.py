"""Cache factory - builds the adapter selected in config."""

from __future__ import annotations

from typing import Literal

import structlog

from starpulse.domain.ports.cache import CachePort
from starpulse.infrastructure.cache.diskcache_adapter import DiskcacheAdapter
from starpulse.infrastructure.cache.redis_adapter import RedisAdapter

log = structlog.get_logger(__name__)

CacheBackend = Literal["diskcache", "redis"]

_REDIS_MAX_CONCURRENT = 50


def create_cache(
    backend: CacheBackend = "diskcache",
    *,
    directory: str = "./cache",
    redis_url: str = "redis://localhost:6379/0",
    ttl_seconds: int = 86_400,
    max_concurrent: int = 10,
) -> CachePort:
    """Create a cache adapter for *backend*.

    Args:
        backend: ``"diskcache"`` (SQLite) or ``"redis"``.
        directory: Diskcache path.
        redis_url: Redis connection string.
        ttl_seconds: Default TTL for writes without an explicit TTL.
        max_concurrent: Semaphore limit for diskcache (Redis uses its own).

    Raises:
        ValueError: Unknown backend.
    """
    if backend == "diskcache":
        log.info(
            "cache_factory_create",
            backend=backend,
            directory=directory,
            ttl=ttl_seconds,
            max_concurrent=max_concurrent,
        )
        return DiskcacheAdapter(
            directory=directory,
            ttl_seconds=ttl_seconds,
            max_concurrent=max_concurrent,
        )
    if backend == "redis":
        log.info(
            "cache_factory_create",
            backend=backend,
            url=redis_url,
            ttl=ttl_seconds,
            max_concurrent=_REDIS_MAX_CONCURRENT,
        )
        return RedisAdapter(
            url=redis_url,
            ttl_seconds=ttl_seconds,
            max_concurrent=_REDIS_MAX_CONCURRENT,
        )
    raise ValueError(
        f"Unknown cache backend: {backend!r}. Must be 'diskcache' or 'redis'."
    )
