"""Shared consumer side of the fan-out dispatchers."""

from __future__ import annotations

from contextlib import aclosing
from typing import AsyncIterator, Sequence

from starpulse.domain.entities.dispatch import (
    DispatchEvent,
    DispatchItem,
    DispatchResult,
)
from starpulse.domain.entities.errors import DispatchError
from starpulse.domain.ports.dispatcher import ProgressCallback


class BaseFanOutDispatcher:
    """Implements ``dispatch()`` on top of a subclass's ``stream()``."""

    def stream(self, items: Sequence[DispatchItem]) -> AsyncIterator[DispatchEvent]:
        raise NotImplementedError

    async def dispatch(
        self,
        items: Sequence[DispatchItem],
        on_progress: ProgressCallback | None = None,
    ) -> list[DispatchResult]:
        async with aclosing(self.stream(items)) as events:  # type: ignore[type-var]
            async for event in events:
                if event.kind == "progress":
                    if on_progress is not None:
                        on_progress(event)
                    continue
                if len(event.results) != len(items):
                    raise DispatchError(
                        f"Dispatcher returned {len(event.results)} results "
                        f"for {len(items)} items"
                    )
                return list(event.results)
        raise DispatchError("Stream ended without complete result")
