"""Domain entities for star-activity rankings.

Pure value objects and helpers: no framework dependencies, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Mapping

WindowKind = Literal["day", "week", "month"]

# repository id ("owner/repo", lowercase) -> non-negative rank weight
ScoreMap = dict[str, int]

# Structured payload returned by the metadata service (details, issues,
# pulls, discussions, ...). Opaque to the domain.
RepositoryMetadata = dict[str, Any]


def normalize_repo_id(repo_id: str) -> str:
    """Case-normalize an ``owner/repo`` identifier for use as a map key."""
    return repo_id.strip().lower()


def sort_scores(scores: Mapping[str, int]) -> ScoreMap:
    """Return *scores* ordered by score descending.

    Python's sort is stable, so ties keep their insertion order.
    """
    return dict(sorted(scores.items(), key=lambda kv: kv[1], reverse=True))


def limit_scores(scores: Mapping[str, int], limit: int | None) -> ScoreMap:
    """Sorted view of *scores* truncated to the first *limit* entries."""
    ordered = sort_scores(scores)
    if limit is None:
        return ordered
    if limit <= 0:
        raise ValueError("limit must be a positive integer")
    return dict(list(ordered.items())[:limit])


def coerce_score_map(value: Any) -> ScoreMap | None:
    """Rebuild a ScoreMap from a cached JSON value; None when it is malformed."""
    if not isinstance(value, dict):
        return None
    try:
        return {str(repo): int(score) for repo, score in value.items()}
    except (TypeError, ValueError):
        return None


def merge_scores(target: dict[str, int], scores: Mapping[str, int]) -> None:
    """Add every score in *scores* into *target* in place."""
    for repo, score in scores.items():
        if score <= 0:
            continue
        target[repo] = target.get(repo, 0) + score


@dataclass(frozen=True)
class EnrichedEntry:
    """One repository of a ranking, augmented with metadata.

    Exactly one of ``info`` / ``error`` is meaningful. ``info is None``
    marks a failed enrichment.
    """

    score: int
    info: RepositoryMetadata | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.info is not None

    def with_score(self, score: int) -> EnrichedEntry:
        return EnrichedEntry(score=score, info=self.info, error=self.error)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"score": self.score, "info": self.info}
        if self.error is not None:
            data["error"] = self.error
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EnrichedEntry:
        return cls(
            score=int(data.get("score", 0)),
            info=data.get("info"),
            error=data.get("error"),
        )
