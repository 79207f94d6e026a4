"""
Memo module: explicit caches and deferred values.
"""

from fpcore.memo.cache import (
    CacheEntry,
    LRUCache,
    MemoStats,
    Memoizer,
    default_key,
    memoize_with_expiry,
)
from fpcore.memo.lazy import Lazy

__all__ = [
    "CacheEntry",
    "LRUCache",
    "MemoStats",
    "Memoizer",
    "default_key",
    "memoize_with_expiry",
    "Lazy",
]
