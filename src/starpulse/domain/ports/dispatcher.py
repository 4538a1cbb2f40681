"""Port for bounded fan-out execution of outbound HTTP requests."""

from __future__ import annotations

from typing import AsyncIterator, Callable, Protocol, Sequence, runtime_checkable

from starpulse.domain.entities.dispatch import (
    DispatchEvent,
    DispatchItem,
    DispatchResult,
)

ProgressCallback = Callable[[DispatchEvent], None]


@runtime_checkable
class FanOutDispatcherPort(Protocol):
    """Executes a batch of requests under a concurrency/throughput ceiling.

    Guarantees ``len(results) == len(items)`` in input order; a failing
    item is reported in its own ``error`` field and never aborts the batch.
    """

    def stream(self, items: Sequence[DispatchItem]) -> AsyncIterator[DispatchEvent]:
        """Yield one ``progress`` event per completed item, then one ``result``."""
        ...

    async def dispatch(
        self,
        items: Sequence[DispatchItem],
        on_progress: ProgressCallback | None = None,
    ) -> list[DispatchResult]:
        """Consume :meth:`stream` and return the final ordered results."""
        ...
