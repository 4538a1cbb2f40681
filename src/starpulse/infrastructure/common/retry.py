"""Reusable retry-with-backoff policy for outbound calls."""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

import structlog

log = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff with jitter.

    Delay before attempt ``n + 1`` is
    ``initial_delay * backoff_factor ** (n - 1)`` plus up to ``jitter``
    seconds, capped at ``max_delay``.
    """

    max_attempts: int = 3
    initial_delay: float = 1.0
    backoff_factor: float = 2.0
    max_delay: float = 30.0
    jitter: float = 0.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

    def delay_for(self, attempt: int) -> float:
        """Delay after the failed *attempt* (1-based)."""
        delay = self.initial_delay * (self.backoff_factor ** (attempt - 1))
        if self.jitter > 0:
            delay += random.uniform(0, self.jitter)  # noqa: S311
        return min(delay, self.max_delay)

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        retry_on: tuple[type[BaseException], ...] = (Exception,),
        name: str = "operation",
    ) -> T:
        """Await *operation* until it succeeds or attempts run out.

        Only exceptions in *retry_on* are retried; the last one is re-raised.
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation()
            except retry_on as e:
                if attempt == self.max_attempts:
                    log.warning(
                        "retry_exhausted",
                        operation=name,
                        attempts=attempt,
                        error=str(e),
                    )
                    raise
                delay = self.delay_for(attempt)
                log.info(
                    "retry_scheduled",
                    operation=name,
                    attempt=attempt,
                    delay=round(delay, 2),
                    error=str(e),
                )
                await asyncio.sleep(delay)
        raise AssertionError("unreachable")  # pragma: no cover
