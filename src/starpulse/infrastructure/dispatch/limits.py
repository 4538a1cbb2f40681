"""Payload ceilings enforced before a batch is executed."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Sequence

from starpulse.domain.entities.dispatch import DispatchItem
from starpulse.domain.entities.errors import DispatchRejected


@dataclass(frozen=True)
class DispatchLimits:
    max_items: int = 500
    max_item_bytes: int = 64 * 1024
    max_batch_bytes: int = 4 * 1024 * 1024
    max_result_bytes: int = 5 * 1024 * 1024
    max_total_result_bytes: int = 100 * 1024 * 1024


def item_size(item: DispatchItem) -> int:
    return len(json.dumps(item.to_dict(), ensure_ascii=False).encode("utf-8"))


def validate_batch(items: Sequence[DispatchItem], limits: DispatchLimits) -> None:
    """Reject the whole batch up front; never partially process it.

    Raises:
        DispatchRejected: too many items, an oversized item, or an
            oversized batch.
    """
    if len(items) > limits.max_items:
        raise DispatchRejected(
            f"batch has {len(items)} items, limit is {limits.max_items}"
        )

    total = 0
    for index, item in enumerate(items):
        size = item_size(item)
        if size > limits.max_item_bytes:
            raise DispatchRejected(
                f"item {index} is {size} bytes, limit is {limits.max_item_bytes}"
            )
        total += size

    if total > limits.max_batch_bytes:
        raise DispatchRejected(
            f"batch is {total} bytes, limit is {limits.max_batch_bytes}"
        )
