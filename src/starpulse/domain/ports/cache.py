"""Cache port - backend-agnostic key/value storage with TTL."""

from __future__ import annotations

from typing import Any, Protocol


class CachePort(Protocol):
    """Async key-value cache holding JSON-compatible values.

    Implementations:
      - DiskcacheAdapter (SQLite, no daemon)
      - RedisAdapter (redis.asyncio)

    Adapters are opened/closed as async context managers:
        async with cache:
            await cache.set("key", value, ttl=60)
    """

    async def get(self, key: str) -> Any:
        """Return the stored value, None when missing or expired."""
        ...

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        """Store *value* for *ttl* seconds (adapter default when None)."""
        ...

    async def delete(self, key: str) -> bool:
        """Delete *key*. True when something was removed."""
        ...

    async def exists(self, key: str) -> bool: ...

    async def clear(self) -> None:
        """Drop every key."""
        ...

    async def aclose(self) -> None: ...

    async def __aenter__(self) -> CachePort: ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None: ...
