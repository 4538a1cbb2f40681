"""Enrichment of a ScoreMap with per-repository metadata."""

from __future__ import annotations

import asyncio
from typing import Mapping

import structlog

from starpulse.domain.entities import (
    DispatchError,
    DispatchEvent,
    EnrichedEntry,
    UpstreamError,
    WindowKind,
)
from starpulse.domain.ports import FanOutDispatcherPort, MetadataSourcePort
from starpulse.infrastructure.cache.store import CacheStore

log = structlog.get_logger(__name__)


class EnrichmentEngine:
    """Attaches repository metadata to every entry of a ScoreMap.

    Cached metadata is reused per ``(window_kind, repo)``; the score always
    comes from the current ScoreMap. Misses go through the fan-out
    dispatcher in one batch. Failures are reported per entry and never
    cached, so the next call retries them.
    """

    def __init__(
        self,
        store: CacheStore,
        source: MetadataSourcePort,
        dispatcher: FanOutDispatcherPort,
        *,
        schema_version: str = "v4",
    ):
        self._store = store
        self._source = source
        self._dispatcher = dispatcher
        self._schema_version = schema_version

    def cache_key(self, window_kind: str, repo: str) -> str:
        return f"{self._schema_version}:repo_info:{window_kind}:{repo}"

    async def enrich(
        self,
        scores: Mapping[str, int],
        *,
        ttl_seconds: int,
        window_kind: WindowKind,
        bypass_cache: bool = False,
    ) -> dict[str, EnrichedEntry]:
        """Return one EnrichedEntry per key of *scores*, in the same order."""
        repos = list(scores)
        if not repos:
            return {}

        if bypass_cache:
            cached: list[object] = [None] * len(repos)
        else:
            cached = list(
                await asyncio.gather(
                    *(self._store.get(self.cache_key(window_kind, r)) for r in repos)
                )
            )

        entries: dict[str, EnrichedEntry] = {}
        missed: list[str] = []
        for repo, hit in zip(repos, cached):
            if isinstance(hit, dict) and hit.get("info") is not None:
                entries[repo] = EnrichedEntry.from_dict(hit).with_score(scores[repo])
            else:
                missed.append(repo)

        log.debug(
            "enrichment_lookup",
            window=window_kind,
            hits=len(entries),
            misses=len(missed),
        )
        if missed:
            entries.update(
                await self._fetch(missed, scores, ttl_seconds, window_kind)
            )

        return {repo: entries[repo] for repo in repos}

    async def _fetch(
        self,
        repos: list[str],
        scores: Mapping[str, int],
        ttl_seconds: int,
        window_kind: str,
    ) -> dict[str, EnrichedEntry]:
        items = [self._source.request_for(repo) for repo in repos]

        def on_progress(event: DispatchEvent) -> None:
            log.debug(
                "enrichment_progress",
                completed=event.completed,
                failed=event.failed,
                total=event.total,
            )

        try:
            results = await self._dispatcher.dispatch(items, on_progress=on_progress)
        except DispatchError as e:
            log.warning("enrichment_dispatch_failed", repos=len(repos), error=str(e))
            return {
                repo: EnrichedEntry(score=scores[repo], error=str(e)) for repo in repos
            }

        fetched: dict[str, EnrichedEntry] = {}
        writes = []
        for repo, result in zip(repos, results):
            try:
                info = self._source.interpret(repo, result)
            except UpstreamError as e:
                log.info("enrichment_failed", repo=repo, error=str(e))
                fetched[repo] = EnrichedEntry(score=scores[repo], error=str(e))
                continue
            entry = EnrichedEntry(score=scores[repo], info=info)
            fetched[repo] = entry
            writes.append(
                self._store.put(
                    self.cache_key(window_kind, repo),
                    entry.to_dict(),
                    ttl_seconds,
                )
            )

        if writes:
            await asyncio.gather(*writes)
        log.info(
            "enrichment_fetched",
            window=window_kind,
            requested=len(repos),
            succeeded=len(writes),
        )
        return fetched

    @staticmethod
    def select(
        enriched: Mapping[str, EnrichedEntry],
        include_errors: bool = False,
        limit: int | None = None,
    ) -> dict[str, EnrichedEntry]:
        """Drop failed entries (unless *include_errors*), order by score, truncate."""
        if limit is not None and limit <= 0:
            raise ValueError("limit must be a positive integer")
        kept = [
            (repo, entry)
            for repo, entry in enriched.items()
            if include_errors or entry.ok
        ]
        kept.sort(key=lambda kv: kv[1].score, reverse=True)
        if limit is not None:
            kept = kept[:limit]
        return dict(kept)
