"""Boundary parser for the daily star-activity document.

The upstream mixes scalar metadata and rank entries in one object::

    {"date": "2025-01-01", "total_repositories": 2, "0": "a/b", "1": "c/d"}

Numeric-string keys are rank indices (0 = most active) whose values are
``owner/repo`` identifiers; everything else is metadata.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Mapping

_INDEX_KEY = re.compile(r"^\d+$")


@dataclass(frozen=True)
class DailyDocument:
    """Daily document split into metadata and rank-ordered repository ids."""

    metadata: dict[str, Any] = field(default_factory=dict)
    ranked: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.ranked


def parse_daily_document(payload: Mapping[str, Any]) -> DailyDocument:
    """Split *payload* by key pattern; ranked ids ordered by numeric index.

    Index entries whose value is not a non-empty string are dropped.
    """
    metadata: dict[str, Any] = {}
    indexed: list[tuple[int, str]] = []

    for key, value in payload.items():
        if isinstance(key, str) and _INDEX_KEY.match(key):
            if isinstance(value, str) and value.strip():
                indexed.append((int(key), value))
            continue
        metadata[str(key)] = value

    indexed.sort(key=lambda pair: pair[0])
    return DailyDocument(
        metadata=metadata,
        ranked=tuple(repo for _, repo in indexed),
    )
