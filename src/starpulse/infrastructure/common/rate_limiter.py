"""Token-bucket throughput limiter for outbound fan-out requests.

Optionally adaptive (AIMD): a 429/503 halves the rate, successes grow it
back slowly, so a throttling upstream is not hammered.
"""

from __future__ import annotations

import asyncio
import time

import structlog

log = structlog.get_logger(__name__)


class TokenBucket:
    """Shared rate limiter: at most *rate* acquisitions per second.

    Args:
        rate: Tokens replenished per second. ``<= 0`` disables limiting.
        burst: Bucket size (short bursts above *rate*).
        adaptive: Enable AIMD adjustment via the ``record_*`` methods.
        min_rate: Lower bound for the adaptive rate.
        max_rate: Upper bound for the adaptive rate.
    """

    def __init__(
        self,
        rate: float,
        burst: int = 10,
        *,
        adaptive: bool = False,
        min_rate: float = 0.5,
        max_rate: float = 50.0,
    ) -> None:
        self._rate = rate
        self._burst = max(1, burst)
        self._tokens = float(self._burst)
        self._last_refill = time.monotonic()
        self._lock = asyncio.Lock()
        self._adaptive = adaptive
        self._min_rate = min_rate
        self._max_rate = max_rate

    @property
    def rate(self) -> float:
        return self._rate

    async def acquire(self) -> None:
        """Wait until a token is available, then consume it."""
        if self._rate <= 0:
            return

        async with self._lock:
            self._refill()
            while self._tokens < 1.0:
                await asyncio.sleep((1.0 - self._tokens) / self._rate)
                self._refill()
            self._tokens -= 1.0

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._tokens = min(self._burst, self._tokens + elapsed * self._rate)
        self._last_refill = now

    def record_success(self) -> None:
        """Additive increase: +10%, capped at max_rate."""
        if not self._adaptive:
            return
        self._rate = min(self._max_rate, self._rate * 1.1)

    def record_throttle(self) -> None:
        """Multiplicative decrease on 429/503: halve, floored at min_rate."""
        if not self._adaptive:
            return
        old = self._rate
        self._rate = max(self._min_rate, self._rate * 0.5)
        log.debug(
            "rate_limit_throttle", old_rps=round(old, 2), new_rps=round(self._rate, 2)
        )
