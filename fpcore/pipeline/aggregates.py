"""
Common aggregate functions for DataPipeline.aggregate().

Numeric aggregates of an empty list return 0.
"""

from __future__ import annotations

from typing import Any, Callable, Hashable, Optional, Sequence


def total(items: Sequence[float]) -> float:
    return sum(items, 0)


def average(items: Sequence[float]) -> float:
    return total(items) / len(items) if items else 0


def maximum(items: Sequence[float]) -> float:
    return max(items) if items else 0


def minimum(items: Sequence[float]) -> float:
    return min(items) if items else 0


def count(items: Sequence[Any]) -> int:
    return len(items)


def unique_count(
    items: Sequence[Any],
    key_fn: Optional[Callable[[Any], Hashable]] = None,
) -> int:
    """Number of distinct items, or of distinct key_fn(item) values."""
    if key_fn is None:
        return len(set(items))
    return len({key_fn(item) for item in items})
