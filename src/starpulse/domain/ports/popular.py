"""Port for the coarse "popular repositories" list."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class PopularSourcePort(Protocol):
    async def fetch_popular(self) -> list[dict[str, Any]]:
        """Return the current list. Raises UpstreamError on failure."""
        ...
