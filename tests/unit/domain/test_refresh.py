"""Tests for the daily refresh rule."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from starpulse.domain.entities import RefreshPolicy, parse_marker, should_force_refresh

UTC = timezone.utc
POLICY = RefreshPolicy(refresh_hour=1, refresh_buffer_minutes=30)


def _at(hour: int, minute: int = 0, *, day: int = 15) -> datetime:
    return datetime(2025, 1, day, hour, minute, tzinfo=UTC)


class TestShouldForceRefresh:
    def test_marker_from_yesterday_forces_refresh_after_cutoff(self) -> None:
        assert should_force_refresh(_at(2), _at(0, 50, day=14), POLICY) is True

    def test_marker_after_todays_cutoff_does_not_refresh(self) -> None:
        assert should_force_refresh(_at(2), _at(1, 45), POLICY) is False

    def test_before_cutoff_never_refreshes(self) -> None:
        assert should_force_refresh(_at(1, 29), None, POLICY) is False
        assert should_force_refresh(_at(0, 10), _at(0, 5, day=10), POLICY) is False

    def test_missing_marker_after_cutoff_refreshes(self) -> None:
        assert should_force_refresh(_at(1, 30), None, POLICY) is True

    def test_marker_today_before_cutoff_refreshes(self) -> None:
        assert should_force_refresh(_at(3), _at(1, 0), POLICY) is True

    def test_marker_exactly_at_cutoff_counts_as_refreshed(self) -> None:
        assert should_force_refresh(_at(3), _at(1, 30), POLICY) is False

    def test_naive_datetimes_are_utc(self) -> None:
        now = datetime(2025, 1, 15, 2, 0)
        marker = datetime(2025, 1, 15, 1, 45)
        assert should_force_refresh(now, marker, POLICY) is False

    def test_other_timezones_are_converted(self) -> None:
        plus_two = timezone(timedelta(hours=2))
        # 03:45 at UTC+2 is 01:45 UTC, after the cutoff
        marker = datetime(2025, 1, 15, 3, 45, tzinfo=plus_two)
        assert should_force_refresh(_at(2), marker, POLICY) is False


class TestRefreshPolicy:
    def test_cutoff_for(self) -> None:
        assert POLICY.cutoff_for(_at(18)) == _at(1, 30)

    @pytest.mark.parametrize(
        ("hour", "minutes"),
        [(24, 0), (-1, 0), (1, 60)],
    )
    def test_invalid_values_rejected(self, hour: int, minutes: int) -> None:
        with pytest.raises(ValueError):
            RefreshPolicy(refresh_hour=hour, refresh_buffer_minutes=minutes)


class TestParseMarker:
    def test_parses_iso_with_z_suffix(self) -> None:
        assert parse_marker("2025-01-15T01:45:00Z") == _at(1, 45)

    def test_parses_isoformat_output(self) -> None:
        assert parse_marker(_at(1, 45).isoformat()) == _at(1, 45)

    @pytest.mark.parametrize("raw", [None, "", "yesterday", 12345])
    def test_unusable_values_are_none(self, raw: object) -> None:
        assert parse_marker(raw) is None
