"""Cache infrastructure - backend adapters and the best-effort store."""

from .cache_factory import CacheBackend, create_cache
from .diskcache_adapter import DiskcacheAdapter
from .redis_adapter import RedisAdapter
from .store import CacheStore, marker_key

__all__ = [
    "CacheBackend",
    "CacheStore",
    "DiskcacheAdapter",
    "RedisAdapter",
    "create_cache",
    "marker_key",
]
