"""Popular-repositories list client."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from starpulse.domain.entities.errors import UpstreamError
from starpulse.infrastructure.common.retry import RetryPolicy

log = structlog.get_logger(__name__)


class HttpxPopularClient:
    """Fetches ``{"repositories": [...]}`` with retry. Implements ``PopularSourcePort``."""

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        url: str,
        retry: RetryPolicy | None = None,
    ) -> None:
        self._http = http_client
        self._url = url
        self._retry = retry or RetryPolicy()

    async def _fetch_once(self) -> list[dict[str, Any]]:
        try:
            resp = await self._http.get(self._url, headers={"Accept": "application/json"})
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                f"Popular repos API returned {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Popular repos API unreachable: {e}") from e
        except ValueError as e:
            raise UpstreamError("Popular repos API returned invalid JSON") from e

        repositories = data.get("repositories") if isinstance(data, dict) else None
        if not isinstance(repositories, list):
            raise UpstreamError("Popular repos payload has no 'repositories' list")
        return [repo for repo in repositories if isinstance(repo, dict)]

    async def fetch_popular(self) -> list[dict[str, Any]]:
        repositories = await self._retry.run(
            self._fetch_once,
            retry_on=(UpstreamError,),
            name="popular_fetch",
        )
        log.info("popular_fetched", count=len(repositories))
        return repositories
