"""Daily star-activity client (async httpx)."""

from __future__ import annotations

from datetime import date
from typing import Any

import httpx
import structlog

log = structlog.get_logger(__name__)


class HttpxActivityClient:
    """Fetches one calendar day's ranked document.

    Implements ``ActivitySourcePort``. Every failure (network, non-2xx,
    non-JSON body, non-object JSON) is logged and reported as None; the
    caller does not distinguish it from a day without activity.
    """

    def __init__(self, *, http_client: httpx.AsyncClient, url_template: str) -> None:
        self._http = http_client
        self._url_template = url_template

    def url_for(self, day: date) -> str:
        return self._url_template.format(date=day.isoformat())

    async def fetch_day(self, day: date) -> dict[str, Any] | None:
        url = self.url_for(day)
        log.debug("activity_fetch", url=url)
        try:
            resp = await self._http.get(url, headers={"Accept": "application/json"})
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            log.warning(
                "activity_http_error",
                day=day.isoformat(),
                status=e.response.status_code,
            )
            return None
        except httpx.HTTPError:
            log.warning("activity_network_error", day=day.isoformat(), exc_info=True)
            return None
        except ValueError:
            log.warning("activity_invalid_json", day=day.isoformat())
            return None

        if not isinstance(data, dict):
            log.warning(
                "activity_unexpected_shape",
                day=day.isoformat(),
                type=type(data).__name__,
            )
            return None
        return data
