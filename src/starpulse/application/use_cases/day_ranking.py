"""Single-day ranking: daily activity document -> cached ScoreMap."""

from __future__ import annotations

from datetime import date

import structlog

from starpulse.domain.entities import (
    DailyDocument,
    ScoreMap,
    coerce_score_map,
    limit_scores,
    normalize_repo_id,
    parse_daily_document,
)
from starpulse.domain.ports import ActivitySourcePort
from starpulse.infrastructure.cache.store import CacheStore

log = structlog.get_logger(__name__)


def score_document(document: DailyDocument) -> ScoreMap:
    """Invert rank positions into weights: entry *i* of *T* scores ``T - i``.

    A repository listed twice keeps its first (best) score.
    """
    total = len(document.ranked)
    scores: ScoreMap = {}
    for index, repo in enumerate(document.ranked):
        repo_id = normalize_repo_id(repo)
        if repo_id and repo_id not in scores:
            scores[repo_id] = total - index
    return scores


class DayAggregator:
    """Produces the ScoreMap of one calendar day.

    Results are cached under ``{schema_version}-day-{YYYY-MM-DD}``. An
    upstream failure yields (and caches) an empty map.
    """

    def __init__(
        self,
        source: ActivitySourcePort,
        store: CacheStore,
        *,
        schema_version: str = "v4",
        ttl_seconds: int = 86_400,
    ):
        self._source = source
        self._store = store
        self._schema_version = schema_version
        self._ttl = ttl_seconds

    def cache_key(self, day: date) -> str:
        return f"{self._schema_version}-day-{day.isoformat()}"

    async def get_day(
        self,
        day: date,
        limit: int | None = None,
        bypass_cache: bool = False,
    ) -> ScoreMap:
        """Return *day*'s ranking, optionally truncated to the top *limit*.

        Raises:
            ValueError: *limit* is not positive.
        """
        if limit is not None and limit <= 0:
            raise ValueError("limit must be a positive integer")

        key = self.cache_key(day)
        if not bypass_cache:
            cached = coerce_score_map(await self._store.get(key))
            if cached is not None:
                log.debug("day_cache_hit", day=day.isoformat())
                return limit_scores(cached, limit)

        payload = await self._source.fetch_day(day)
        document = parse_daily_document(payload) if payload else DailyDocument()
        if document.is_empty:
            log.info("day_empty", day=day.isoformat())
        scores = limit_scores(score_document(document), None)

        await self._store.put(key, scores, self._ttl)
        log.debug("day_aggregated", day=day.isoformat(), repositories=len(scores))
        return limit_scores(scores, limit)
