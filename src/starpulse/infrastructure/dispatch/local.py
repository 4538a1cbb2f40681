"""In-process fan-out dispatcher: a bounded httpx worker pool."""

from __future__ import annotations

import asyncio
from typing import Any, AsyncIterator, Sequence

import httpx
import structlog

from starpulse.domain.entities.dispatch import (
    DispatchEvent,
    DispatchItem,
    DispatchResult,
)
from starpulse.infrastructure.common.rate_limiter import TokenBucket
from starpulse.infrastructure.dispatch.base import BaseFanOutDispatcher
from starpulse.infrastructure.dispatch.limits import DispatchLimits, validate_batch

log = structlog.get_logger(__name__)

_THROTTLE_STATUSES = frozenset({429, 503})


def _decode_body(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except (ValueError, UnicodeDecodeError):
        return resp.text


class LocalFanOutDispatcher(BaseFanOutDispatcher):
    """Executes a batch with at most *max_concurrent* requests in flight.

    Workers pull item indices from a shared queue, so the result list keeps
    input order regardless of completion order. Throughput is additionally
    capped by an adaptive token bucket that backs off on 429/503.
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        max_concurrent: int = 10,
        requests_per_second: float = 20.0,
        limits: DispatchLimits | None = None,
    ) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be >= 1")
        self._http = http_client
        self._max_concurrent = max_concurrent
        self._limits = limits or DispatchLimits()
        self._bucket = TokenBucket(
            requests_per_second,
            burst=max_concurrent,
            adaptive=True,
            min_rate=min(0.5, requests_per_second),
            # successes recover towards the configured rate, never above it
            max_rate=requests_per_second,
        )

    async def _execute(self, item: DispatchItem) -> tuple[DispatchResult, int]:
        await self._bucket.acquire()

        kwargs: dict[str, Any] = {"headers": item.headers or None}
        if item.body is not None:
            if isinstance(item.body, (str, bytes)):
                kwargs["content"] = item.body
            else:
                kwargs["json"] = item.body

        try:
            resp = await self._http.request(item.method, item.url, **kwargs)
        except httpx.HTTPError as e:
            log.debug("dispatch_item_failed", url=item.url, error=str(e))
            return DispatchResult.failure(f"{type(e).__name__}: {e}"), 0

        if resp.status_code in _THROTTLE_STATUSES:
            self._bucket.record_throttle()
        else:
            self._bucket.record_success()

        size = len(resp.content)
        if size > self._limits.max_result_bytes:
            return (
                DispatchResult.failure(
                    f"Response is {size} bytes, limit is "
                    f"{self._limits.max_result_bytes}",
                    status=resp.status_code,
                ),
                0,
            )

        return (
            DispatchResult(
                status=resp.status_code,
                headers=dict(resp.headers),
                result=_decode_body(resp),
            ),
            size,
        )

    async def stream(  # type: ignore[override]
        self, items: Sequence[DispatchItem]
    ) -> AsyncIterator[DispatchEvent]:
        validate_batch(items, self._limits)

        total = len(items)
        results: list[DispatchResult | None] = [None] * total
        pending: asyncio.Queue[int] = asyncio.Queue()
        for index in range(total):
            pending.put_nowait(index)
        done: asyncio.Queue[int] = asyncio.Queue()
        received_bytes = 0

        async def worker() -> None:
            nonlocal received_bytes
            while True:
                try:
                    index = pending.get_nowait()
                except asyncio.QueueEmpty:
                    return
                if received_bytes > self._limits.max_total_result_bytes:
                    results[index] = DispatchResult.failure(
                        "Total response size limit exceeded"
                    )
                else:
                    try:
                        result, size = await self._execute(items[index])
                    except Exception as e:  # noqa: BLE001
                        log.warning(
                            "dispatch_item_crashed",
                            url=items[index].url,
                            error=str(e),
                        )
                        result, size = DispatchResult.failure(str(e)), 0
                    received_bytes += size
                    results[index] = result
                done.put_nowait(index)

        workers = [
            asyncio.create_task(worker())
            for _ in range(min(self._max_concurrent, total))
        ]
        completed = succeeded = 0
        try:
            while completed < total:
                index = await done.get()
                completed += 1
                if results[index] is not None and results[index].ok:  # type: ignore[union-attr]
                    succeeded += 1
                yield DispatchEvent(
                    kind="progress",
                    completed=completed,
                    succeeded=succeeded,
                    failed=completed - succeeded,
                    total=total,
                )
        finally:
            for task in workers:
                task.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

        final = tuple(r for r in results if r is not None)
        log.info(
            "dispatch_complete",
            total=total,
            succeeded=succeeded,
            failed=total - succeeded,
        )
        yield DispatchEvent(
            kind="result",
            completed=total,
            succeeded=succeeded,
            failed=total - succeeded,
            total=total,
            results=final,
        )
