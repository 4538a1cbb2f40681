"""Remote fan-out dispatcher: delegates a batch to an SSE endpoint."""

from __future__ import annotations

from typing import AsyncIterator, Sequence

import httpx
import structlog

from starpulse.domain.entities.dispatch import DispatchEvent, DispatchItem
from starpulse.domain.entities.errors import ConfigurationError, DispatchError
from starpulse.infrastructure.common.retry import RetryPolicy
from starpulse.infrastructure.dispatch.base import BaseFanOutDispatcher
from starpulse.infrastructure.dispatch.limits import DispatchLimits, validate_batch
from starpulse.infrastructure.dispatch.stream_parser import EventStreamParser

log = structlog.get_logger(__name__)


class RemoteFanOutDispatcher(BaseFanOutDispatcher):
    """POSTs the batch as a JSON array and relays the streamed events.

    Only opening the stream is retried; once events flow, a broken
    connection is a ``DispatchError`` for the whole batch.
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        endpoint: str,
        api_key: str | None,
        limits: DispatchLimits | None = None,
        retry: RetryPolicy | None = None,
    ) -> None:
        self._http = http_client
        self._endpoint = endpoint
        self._api_key = api_key
        self._limits = limits or DispatchLimits()
        self._retry = retry or RetryPolicy()

    async def _open(self, items: Sequence[DispatchItem]) -> httpx.Response:
        request = self._http.build_request(
            "POST",
            self._endpoint,
            json=[item.to_dict() for item in items],
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Accept": "text/event-stream",
            },
        )
        try:
            resp = await self._http.send(request, stream=True)
        except httpx.HTTPError as e:
            raise DispatchError(f"Dispatch endpoint unreachable: {e}") from e

        if resp.status_code >= 400:
            body = (await resp.aread()).decode("utf-8", errors="replace")
            await resp.aclose()
            raise DispatchError(
                f"Dispatch endpoint returned {resp.status_code}: {body[:200]}"
            )
        return resp

    async def stream(  # type: ignore[override]
        self, items: Sequence[DispatchItem]
    ) -> AsyncIterator[DispatchEvent]:
        if not self._api_key:
            raise ConfigurationError(
                "dispatch.api_key is required when dispatch.endpoint is set"
            )
        validate_batch(items, self._limits)

        resp = await self._retry.run(
            lambda: self._open(items),
            retry_on=(DispatchError,),
            name="remote_dispatch",
        )
        parser = EventStreamParser()
        try:
            async for chunk in resp.aiter_text():
                for event in parser.feed(chunk):
                    yield event
                if parser.done:
                    break
        except httpx.HTTPError as e:
            raise DispatchError(f"Dispatch stream interrupted: {e}") from e
        finally:
            await resp.aclose()

        if not parser.done:
            yield parser.close()
