"""Ranking endpoints: day, week and month star-activity leaderboards."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Any, cast

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from starpulse.application.use_cases import iso_week_dates, month_dates
from starpulse.domain.entities import ScoreMap, WindowKind, limit_scores
from starpulse.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(tags=["rankings"])

PERIOD_HINT = (
    "Please fetch YYYY-MM-DD, YYYY-Www (week), YYYY-MM (month), "
    "or one of day/week/month"
)

_DAY_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_WEEK_RE = re.compile(r"^(\d{4})-[Ww](\d{1,2})$")
_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


@dataclass(frozen=True)
class Period:
    """A parsed request path segment."""

    window: WindowKind
    label: str
    day: date | None = None
    dates: tuple[date, ...] = ()
    rolling: bool = False


def parse_period(raw: str, today: date) -> Period | None:
    """Map a path segment to a Period; None when it is not recognized."""
    token = raw.strip().lower()
    if token == "day":
        return Period(window="day", label=today.isoformat(), day=today)
    if token in ("week", "month"):
        return Period(window=cast(WindowKind, token), label=token, rolling=True)

    try:
        if match := _DAY_RE.match(token):
            day = date(*(int(part) for part in match.groups()))
            return Period(window="day", label=day.isoformat(), day=day)
        if match := _WEEK_RE.match(token):
            year, week = (int(part) for part in match.groups())
            dates = iso_week_dates(year, week, today)
            if not dates:
                return None
            return Period(
                window="week",
                label=f"{year}-W{week:02d}",
                dates=tuple(dates),
            )
        if match := _MONTH_RE.match(token):
            year, month = (int(part) for part in match.groups())
            dates = month_dates(year, month, today)
            if not dates:
                return None
            return Period(
                window="month",
                label=f"{year}-{month:02d}",
                dates=tuple(dates),
            )
    except ValueError:
        return None
    return None


def _bad_period(raw: str) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": f"Unrecognized period: {raw!r}", "hint": PERIOD_HINT},
    )


async def _scores_for(state: AppState, period: Period, bypass_cache: bool) -> ScoreMap:
    if period.day is not None:
        return await state.day_aggregator.get_day(period.day, bypass_cache=bypass_cache)
    if period.rolling:
        return await state.window_aggregator.get_window(
            cast(Any, period.window), bypass_cache=bypass_cache
        )
    return await state.window_aggregator.get_range(
        cast(Any, period.window),
        period.dates,
        identifier=period.label,
        bypass_cache=bypass_cache,
    )


@router.get("/popular")
async def popular(
    request: Request,
    bypass_cache: bool = Query(default=False),
) -> JSONResponse:
    """Coarse popular-repositories list, refreshed once a day."""
    state = cast(AppState, request.app.state)
    repositories = await state.popular.get_popular(bypass_cache=bypass_cache)
    return JSONResponse(
        content={"count": len(repositories), "repositories": repositories},
        headers={
            "Cache-Control": (
                "no-cache"
                if bypass_cache
                else f"max-age={state.config.cache.popular_ttl_seconds}"
            )
        },
    )


@router.get("/{period}")
async def ranking(
    request: Request,
    period: str,
    limit: int | None = Query(default=None, ge=1),
    enrich: bool = Query(default=False),
    bypass_cache: bool = Query(default=False),
    include_errors: bool = Query(default=False),
) -> JSONResponse:
    """Ranked repositories of one day, an ISO week/month, or a rolling window.

    Without ``enrich`` the body maps repository ids to scores. With
    ``enrich`` each value becomes ``{score, info[, error]}``; failed
    entries are dropped unless ``include_errors`` is set.
    """
    state = cast(AppState, request.app.state)
    parsed = parse_period(period, state.window_aggregator.today())
    if parsed is None:
        log.info("period_rejected", period=period)
        return _bad_period(period)

    scores = await _scores_for(state, parsed, bypass_cache)
    ttl = state.config.cache.enrichment_ttl(parsed.window)

    if enrich:
        candidates = limit_scores(scores, state.config.dispatch.max_items)
        enriched = await state.enrichment.enrich(
            candidates,
            ttl_seconds=ttl,
            window_kind=parsed.window,
            bypass_cache=bypass_cache,
        )
        selected = state.enrichment.select(
            enriched, include_errors=include_errors, limit=limit
        )
        repositories: dict[str, Any] = {
            repo: entry.to_dict() for repo, entry in selected.items()
        }
    else:
        repositories = dict(limit_scores(scores, limit))

    return JSONResponse(
        content={
            "period": parsed.label,
            "window": parsed.window,
            "count": len(repositories),
            "repositories": repositories,
        },
        headers={"Cache-Control": "no-cache" if bypass_cache else f"max-age={ttl}"},
    )
