"""Daily refresh rule for coarse, slowly-changing cached lists.

The upstream source regenerates its data once a day. A cached copy is
treated as stale from ``refresh_hour:refresh_buffer_minutes`` UTC onward,
unless the refresh marker shows it was already regenerated today after
that cutoff. The cache TTL stays in place as a hard backstop.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timezone


@dataclass(frozen=True)
class RefreshPolicy:
    refresh_hour: int = 1
    refresh_buffer_minutes: int = 30

    def __post_init__(self) -> None:
        if not 0 <= self.refresh_hour <= 23:
            raise ValueError("refresh_hour must be within 0..23")
        if not 0 <= self.refresh_buffer_minutes <= 59:
            raise ValueError("refresh_buffer_minutes must be within 0..59")

    def cutoff_for(self, now: datetime) -> datetime:
        """Today's cutoff (UTC) relative to *now*."""
        now_utc = _as_utc(now)
        return datetime.combine(
            now_utc.date(),
            time(self.refresh_hour, self.refresh_buffer_minutes),
            tzinfo=timezone.utc,
        )


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes are interpreted as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_marker(raw: object) -> datetime | None:
    """Parse a stored refresh marker (ISO-8601 string). None if unusable."""
    if not isinstance(raw, str) or not raw:
        return None
    try:
        return _as_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))
    except ValueError:
        return None


def should_force_refresh(
    now: datetime,
    last_refreshed_at: datetime | None,
    policy: RefreshPolicy,
) -> bool:
    """Return True when the guarded list must be regenerated.

    - Before today's cutoff: never.
    - After the cutoff: yes, unless *last_refreshed_at* falls on the same
      UTC day as *now* and at/after the cutoff.
    """
    now_utc = _as_utc(now)
    cutoff = policy.cutoff_for(now_utc)
    if now_utc < cutoff:
        return False
    if last_refreshed_at is None:
        return True

    marker = _as_utc(last_refreshed_at)
    refreshed_today = marker.date() == now_utc.date() and marker >= cutoff
    return not refreshed_today
