"""Multi-day rankings: rolling windows and calendar ranges."""

from __future__ import annotations

import asyncio
import calendar
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Iterable, Literal, Mapping

import structlog

from starpulse.application.use_cases.day_ranking import DayAggregator
from starpulse.domain.entities import ScoreMap, coerce_score_map, merge_scores
from starpulse.infrastructure.cache.store import CacheStore

log = structlog.get_logger(__name__)

RangeKind = Literal["week", "month"]

DEFAULT_WINDOW_DAYS: dict[str, int] = {"week": 7, "month": 30}


def _today() -> date:
    return datetime.now(timezone.utc).date()


def rolling_dates(days: int, anchor: date) -> list[date]:
    """The *days* calendar dates ending at (and including) *anchor*."""
    return [anchor - timedelta(days=offset) for offset in range(days)]


def iso_week_dates(year: int, week: int, today: date | None = None) -> list[date]:
    """Monday..Sunday of ISO week *week* of *year*, clipped to *today*.

    Raises:
        ValueError: the week does not exist in that year.
    """
    monday = date.fromisocalendar(year, week, 1)
    days = [monday + timedelta(days=offset) for offset in range(7)]
    if today is not None:
        days = [day for day in days if day <= today]
    return days


def month_dates(year: int, month: int, today: date | None = None) -> list[date]:
    """Every day of *month*, clipped to *today* for the running month."""
    _, last = calendar.monthrange(year, month)
    days = [date(year, month, day) for day in range(1, last + 1)]
    if today is not None:
        days = [day for day in days if day <= today]
    return days


def rank_totals(totals: Mapping[str, int]) -> ScoreMap:
    """Order by total descending, ties by repository id ascending."""
    return dict(sorted(totals.items(), key=lambda kv: (-kv[1], kv[0])))


class WindowAggregator:
    """Sums day rankings over a set of dates.

    Day fetches run concurrently under a semaphore. A date whose day
    aggregation raises is skipped and logged; the remaining dates are
    still summed. A result is cached only when every date succeeded.
    """

    def __init__(
        self,
        days: DayAggregator,
        store: CacheStore,
        *,
        schema_version: str = "v4",
        ttl_seconds: int = 3_600,
        window_days: Mapping[str, int] | None = None,
        max_parallel: int = 10,
        today: Callable[[], date] = _today,
    ):
        self._days = days
        self._store = store
        self._schema_version = schema_version
        self._ttl = ttl_seconds
        self._window_days = dict(window_days or DEFAULT_WINDOW_DAYS)
        self._max_parallel = max(1, max_parallel)
        self._today = today

    def cache_key(self, kind: str, identifier: str) -> str:
        return f"{self._schema_version}-{kind}-{identifier}"

    def today(self) -> date:
        return self._today()

    async def get_window(
        self,
        kind: RangeKind,
        anchor: date | None = None,
        bypass_cache: bool = False,
    ) -> ScoreMap:
        """Rolling window of ``week`` (7) or ``month`` (30) days ending at *anchor*."""
        if kind not in self._window_days:
            raise ValueError(f"Unknown window kind: {kind!r}")
        anchor = anchor or self._today()
        dates = rolling_dates(self._window_days[kind], anchor)
        return await self.get_range(
            kind,
            dates,
            identifier=f"last-{anchor.isoformat()}",
            bypass_cache=bypass_cache,
        )

    async def get_range(
        self,
        kind: RangeKind,
        dates: Iterable[date],
        *,
        identifier: str | None = None,
        bypass_cache: bool = False,
    ) -> ScoreMap:
        """Sum the day rankings of *dates*; cache under *identifier* if given."""
        key = self.cache_key(kind, identifier) if identifier else None
        if key and not bypass_cache:
            cached = coerce_score_map(await self._store.get(key))
            if cached is not None:
                log.debug("window_cache_hit", kind=kind, identifier=identifier)
                return rank_totals(cached)

        dates = list(dates)
        totals, failed = await self._sum_days(dates, bypass_cache)
        ranked = rank_totals(totals)

        if key and not failed:
            await self._store.put(key, ranked, self._ttl)
        log.info(
            "window_aggregated",
            kind=kind,
            identifier=identifier,
            days=len(dates),
            failed_days=failed,
            repositories=len(ranked),
        )
        return ranked

    async def _sum_days(
        self, dates: list[date], bypass_cache: bool
    ) -> tuple[dict[str, int], int]:
        sem = asyncio.Semaphore(self._max_parallel)

        async def one(day: date) -> ScoreMap:
            async with sem:
                return await self._days.get_day(day, bypass_cache=bypass_cache)

        outcomes = await asyncio.gather(
            *(one(day) for day in dates), return_exceptions=True
        )

        totals: dict[str, int] = {}
        failed = 0
        for day, outcome in zip(dates, outcomes):
            if isinstance(outcome, BaseException):
                failed += 1
                log.warning(
                    "window_day_failed",
                    day=day.isoformat(),
                    error=str(outcome),
                )
                continue
            merge_scores(totals, outcome)
        return totals, failed
