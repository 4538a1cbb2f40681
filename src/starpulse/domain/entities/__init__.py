from .dispatch import DispatchEvent, DispatchItem, DispatchResult
from .document import DailyDocument, parse_daily_document
from .errors import (
    ConfigurationError,
    DispatchError,
    DispatchRejected,
    StarpulseError,
    UpstreamError,
)
from .ranking import (
    EnrichedEntry,
    RepositoryMetadata,
    ScoreMap,
    WindowKind,
    coerce_score_map,
    limit_scores,
    merge_scores,
    normalize_repo_id,
    sort_scores,
)
from .refresh import RefreshPolicy, parse_marker, should_force_refresh

__all__ = [
    "ConfigurationError",
    "DailyDocument",
    "DispatchError",
    "DispatchEvent",
    "DispatchItem",
    "DispatchRejected",
    "DispatchResult",
    "EnrichedEntry",
    "RefreshPolicy",
    "RepositoryMetadata",
    "ScoreMap",
    "StarpulseError",
    "UpstreamError",
    "WindowKind",
    "coerce_score_map",
    "limit_scores",
    "merge_scores",
    "normalize_repo_id",
    "parse_daily_document",
    "parse_marker",
    "should_force_refresh",
    "sort_scores",
]
