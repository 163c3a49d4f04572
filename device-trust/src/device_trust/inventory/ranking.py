"""Ranked inventory builder."""

from __future__ import annotations

from typing import Callable, Dict, Sequence, Tuple

from device_trust.inventory.models import (
    SORT_BY_PERMISSION_COUNT,
    SORT_BY_TOTAL_BYTES,
    PackageRecord,
)

DEFAULT_LIMIT = 50

_SORT_KEYS: Dict[str, Callable[[PackageRecord], int]] = {
    SORT_BY_TOTAL_BYTES: lambda r: r.total_bytes,
    SORT_BY_PERMISSION_COUNT: lambda r: r.permission_count,
}


def rank_records(
    records: Sequence[PackageRecord],
    *,
    sort_key: str = SORT_BY_TOTAL_BYTES,
    limit: int = DEFAULT_LIMIT,
) -> Tuple[PackageRecord, ...]:
    """Sort the full population descending, then keep the top `limit`.

    `sorted` is stable, so equal keys keep enumeration order.
    """

    key = _SORT_KEYS.get(sort_key)
    if key is None:
        raise ValueError(f"unknown sort key: {sort_key}")
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")
    ranked = sorted(records, key=key, reverse=True)
    return tuple(ranked[:limit])
