"""Tests for WindowAggregator and calendar helpers."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any
from unittest.mock import AsyncMock

import pytest

from starpulse.application.use_cases import (
    WindowAggregator,
    iso_week_dates,
    month_dates,
    rank_totals,
    rolling_dates,
)
from starpulse.infrastructure.cache.store import CacheStore

TODAY = date(2025, 1, 15)


def _day_scores(day: date) -> dict[str, int]:
    # shared repo every day, plus one repo unique to the day
    return {"shared/repo": 2, f"only/{day.isoformat()}": 1}


@pytest.fixture()
def days() -> AsyncMock:
    mock = AsyncMock()
    mock.get_day = AsyncMock(side_effect=lambda day, bypass_cache=False: _day_scores(day))
    return mock


@pytest.fixture()
def windows(days: AsyncMock, store: CacheStore) -> WindowAggregator:
    return WindowAggregator(
        days,
        store,
        schema_version="v4",
        ttl_seconds=300,
        max_parallel=3,
        today=lambda: TODAY,
    )


class TestCalendarHelpers:
    def test_rolling_dates_end_at_anchor(self) -> None:
        dates = rolling_dates(7, TODAY)
        assert len(dates) == 7
        assert max(dates) == TODAY
        assert min(dates) == TODAY - timedelta(days=6)

    def test_iso_week_is_monday_to_sunday(self) -> None:
        dates = iso_week_dates(2025, 3)
        assert dates[0] == date(2025, 1, 13)
        assert dates[-1] == date(2025, 1, 19)
        assert [d.isoweekday() for d in dates] == [1, 2, 3, 4, 5, 6, 7]

    def test_iso_week_clipped_to_today(self) -> None:
        assert iso_week_dates(2025, 3, TODAY) == [
            date(2025, 1, 13),
            date(2025, 1, 14),
            TODAY,
        ]
        assert iso_week_dates(2025, 4, TODAY) == []

    def test_iso_week_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            iso_week_dates(2025, 54)

    def test_month_dates_full_month(self) -> None:
        assert len(month_dates(2024, 2)) == 29

    def test_month_dates_clipped_to_today(self) -> None:
        assert month_dates(2025, 1, TODAY)[-1] == TODAY
        assert len(month_dates(2025, 1, TODAY)) == 15

    def test_rank_totals_breaks_ties_by_id(self) -> None:
        assert list(rank_totals({"b/b": 3, "a/a": 3, "c/c": 5})) == [
            "c/c",
            "a/a",
            "b/b",
        ]


class TestGetWindow:
    @pytest.mark.parametrize(("kind", "n"), [("week", 7), ("month", 30)])
    async def test_sums_every_day(
        self, windows: WindowAggregator, days: AsyncMock, kind: str, n: int
    ) -> None:
        scores = await windows.get_window(kind)  # type: ignore[arg-type]

        assert days.get_day.await_count == n
        assert scores["shared/repo"] == 2 * n
        assert len(scores) == n + 1
        assert next(iter(scores)) == "shared/repo"

    async def test_failing_day_is_skipped(
        self, windows: WindowAggregator, days: AsyncMock
    ) -> None:
        failing = TODAY - timedelta(days=2)

        async def get_day(day: date, bypass_cache: bool = False) -> dict[str, int]:
            if day == failing:
                raise RuntimeError("upstream exploded")
            return _day_scores(day)

        days.get_day.side_effect = get_day
        scores = await windows.get_window("week")

        assert scores["shared/repo"] == 2 * 6
        assert f"only/{failing.isoformat()}" not in scores
        assert len(scores) == 7

    async def test_cached_when_all_days_succeed(
        self, windows: WindowAggregator, days: AsyncMock, memory_cache: Any
    ) -> None:
        await windows.get_window("week")
        key = "v4-week-last-2025-01-15"
        assert memory_cache.data[key]["shared/repo"] == 14
        assert memory_cache.ttls[key] == 300

        await windows.get_window("week")
        assert days.get_day.await_count == 7

    async def test_not_cached_when_a_day_fails(
        self, windows: WindowAggregator, days: AsyncMock, memory_cache: Any
    ) -> None:
        days.get_day.side_effect = RuntimeError("down")
        assert await windows.get_window("week") == {}
        assert "v4-week-last-2025-01-15" not in memory_cache.data

    async def test_bypass_cache_propagates_to_days(
        self, windows: WindowAggregator, days: AsyncMock
    ) -> None:
        await windows.get_window("week", bypass_cache=True)
        for call in days.get_day.await_args_list:
            assert call.kwargs["bypass_cache"] is True

    async def test_explicit_anchor(
        self, windows: WindowAggregator, days: AsyncMock
    ) -> None:
        await windows.get_window("week", anchor=date(2024, 12, 31))
        requested = {call.args[0] for call in days.get_day.await_args_list}
        assert max(requested) == date(2024, 12, 31)

    async def test_unknown_kind_rejected(self, windows: WindowAggregator) -> None:
        with pytest.raises(ValueError):
            await windows.get_window("year")  # type: ignore[arg-type]


class TestGetRange:
    async def test_iso_week_range_cached_under_identifier(
        self, windows: WindowAggregator, memory_cache: Any
    ) -> None:
        scores = await windows.get_range(
            "week", iso_week_dates(2025, 2), identifier="2025-W02"
        )
        assert scores["shared/repo"] == 14
        assert "v4-week-2025-W02" in memory_cache.data

    async def test_range_without_identifier_is_not_cached(
        self, windows: WindowAggregator, memory_cache: Any
    ) -> None:
        await windows.get_range("month", month_dates(2025, 1, TODAY))
        assert not any(key.startswith("v4-month") for key in memory_cache.data)

    async def test_malformed_cached_window_is_recomputed(
        self, windows: WindowAggregator, days: AsyncMock, memory_cache: Any
    ) -> None:
        memory_cache.data["v4-week-2025-W02"] = {"shared/repo": None}

        scores = await windows.get_range(
            "week", iso_week_dates(2025, 2), identifier="2025-W02"
        )

        assert scores["shared/repo"] == 14
        assert days.get_day.await_count == 7
        assert memory_cache.data["v4-week-2025-W02"]["shared/repo"] == 14
