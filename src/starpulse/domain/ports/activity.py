"""Port for the upstream daily star-activity source."""

from __future__ import annotations

from datetime import date
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ActivitySourcePort(Protocol):
    async def fetch_day(self, day: date) -> dict[str, Any] | None:
        """Return the raw rank-indexed document for *day*.

        None when the upstream is unreachable, answers non-2xx, or returns
        something that is not a JSON object.
        """
        ...
