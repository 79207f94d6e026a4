"""
Safe accessors and parsers returning Option instead of raising.
"""

from __future__ import annotations

import json
import math
from typing import Any, Callable, Mapping, Sequence, TypeVar

from fpcore.core.types import NOTHING, Option, Some

T = TypeVar("T")
K = TypeVar("K")


def safe_get(items: Sequence[T], index: int) -> Option[T]:
    """
    Bounds-checked indexing.

    Negative indices are treated as out of range rather than
    counting from the end.
    """
    if 0 <= index < len(items):
        return Some(items[index])
    return NOTHING


def head(items: Sequence[T]) -> Option[T]:
    return safe_get(items, 0)


def last(items: Sequence[T]) -> Option[T]:
    return safe_get(items, len(items) - 1)


def safe_parse_int(text: str, base: int = 10) -> Option[int]:
    try:
        return Some(int(text.strip(), base))
    except (ValueError, TypeError, AttributeError):
        return NOTHING


def safe_parse_float(text: str) -> Option[float]:
    try:
        value = float(text)
    except (ValueError, TypeError):
        return NOTHING
    # NaN is parseable but is not a usable number
    return NOTHING if math.isnan(value) else Some(value)


def safe_parse_json(text: str) -> Option[Any]:
    try:
        return Some(json.loads(text))
    except (json.JSONDecodeError, TypeError):
        return NOTHING


def safe_prop(key: K) -> Callable[[Mapping[K, Any]], Option[Any]]:
    """Curried key lookup; a missing key and a None value are both absence."""
    def lookup(mapping: Mapping[K, Any]) -> Option[Any]:
        value = mapping.get(key)
        return NOTHING if value is None else Some(value)
    return lookup
