"""
Common item transforms for DataPipeline.transform().

Parsers raise ValueError on bad input; inside a pipeline stage that
becomes a 'transform' PipelineError.
"""

from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping

_WHITESPACE = re.compile(r"\s+")


def normalize_string(text: str) -> str:
    """Trim, lowercase and collapse internal whitespace."""
    return _WHITESPACE.sub(" ", text.strip().lower())


def parse_number(text: str) -> float:
    try:
        value = float(text)
    except (TypeError, ValueError):
        raise ValueError(f"Cannot parse {text!r} as number") from None
    if math.isnan(value):
        raise ValueError(f"Cannot parse {text!r} as number")
    return value


def parse_date(text: str) -> datetime:
    """ISO 8601 date or datetime string."""
    try:
        return datetime.fromisoformat(text.strip())
    except (AttributeError, ValueError):
        raise ValueError(f"Cannot parse {text!r} as date") from None


def pick(keys: Iterable[str]) -> Callable[[Mapping[str, Any]], dict[str, Any]]:
    """Keep only keys (missing keys are skipped)."""
    wanted = list(keys)

    def apply(record: Mapping[str, Any]) -> dict[str, Any]:
        return {key: record[key] for key in wanted if key in record}
    return apply


def omit(keys: Iterable[str]) -> Callable[[Mapping[str, Any]], dict[str, Any]]:
    """Copy of the record without keys."""
    dropped = frozenset(keys)

    def apply(record: Mapping[str, Any]) -> dict[str, Any]:
        return {key: value for key, value in record.items() if key not in dropped}
    return apply
