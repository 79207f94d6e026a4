"""
Memoization Caches

Three explicitly constructed cache shapes:
- LRUCache: bounded map evicting the least-recently-used key
- memoize_with_expiry: function wrapper with per-entry TTL
- Memoizer: bounded function cache with TTL and least-used eviction

Design:
- Every cache is an object owned by its caller, never a module global
- Lookups return Option rather than a None sentinel
- Clocks are injectable (monotonic seconds) so expiry is testable

Complexity:
- LRUCache get/set/delete: O(1)
- Memoizer eviction: O(n) scan for the least-used entry
"""

from __future__ import annotations

import functools
import json
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Generic, Hashable, Iterator, Optional, TypeVar

from fpcore.core import constants as C
from fpcore.core.types import NOTHING, Option, Some

logger = logging.getLogger(__name__)

KT = TypeVar("KT", bound=Hashable)  # Key type
VT = TypeVar("VT")  # Value type
T = TypeVar("T")

Clock = Callable[[], float]
KeyFn = Callable[..., Hashable]


def default_key(*args: Any, **kwargs: Any) -> str:
    """Stable JSON key for positional and keyword arguments."""
    return json.dumps([list(args), kwargs], sort_keys=True, default=repr)


# =============================================================================
# LRU CACHE
# =============================================================================
class LRUCache(Generic[KT, VT]):
    """
    Bounded key/value cache with least-recently-used eviction.

    Usage:
        cache: LRUCache[str, bytes] = LRUCache(capacity=128)
        cache.set("a", b"...")
        cache.get("a")          # Some(b"...")
        cache.get("missing")    # Nothing
    """

    __slots__ = ("_capacity", "_data")

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._data: OrderedDict[KT, VT] = OrderedDict()

    def get(self, key: KT) -> Option[VT]:
        """Look up key, marking it most recently used."""
        if key not in self._data:
            return NOTHING
        self._data.move_to_end(key)
        return Some(self._data[key])

    def set(self, key: KT, value: VT) -> None:
        """Insert or replace, evicting the oldest key at capacity."""
        if key in self._data:
            self._data.move_to_end(key)
        elif len(self._data) >= self._capacity:
            evicted, _ = self._data.popitem(last=False)
            logger.debug("LRU evicted key %r", evicted)
        self._data[key] = value

    def has(self, key: KT) -> bool:
        """Membership test; does not affect recency."""
        return key in self._data

    def delete(self, key: KT) -> bool:
        return self._data.pop(key, _MISSING) is not _MISSING

    def clear(self) -> None:
        self._data.clear()

    def keys(self) -> list[KT]:
        """Keys from least to most recently used."""
        return list(self._data)

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[KT]:
        return iter(list(self._data))


_MISSING = object()


# =============================================================================
# TTL MEMOIZATION
# =============================================================================
@dataclass
class CacheEntry(Generic[T]):
    value: T
    expiry: float
    hit_count: int = 0


def memoize_with_expiry(
    fn: Callable[..., T],
    ttl_ms: float = C.MEMO_TTL_MS,
    key_fn: Optional[KeyFn] = None,
    clock: Clock = time.monotonic,
) -> Callable[..., T]:
    """
    Wrap fn so results are reused until they are ttl_ms old.

    The returned wrapper exposes:
        .cache           dict of key -> CacheEntry
        .clear()         drop every entry
        .clear_expired() drop entries whose expiry has passed
    """
    make_key = key_fn or default_key
    cache: dict[Hashable, CacheEntry[T]] = {}

    @functools.wraps(fn)
    def memoized(*args: Any, **kwargs: Any) -> T:
        key = make_key(*args, **kwargs)
        now = clock()
        entry = cache.get(key)
        if entry is not None and entry.expiry > now:
            return entry.value

        value = fn(*args, **kwargs)
        cache[key] = CacheEntry(value=value, expiry=now + ttl_ms / 1000)
        return value

    def clear_expired() -> int:
        now = clock()
        expired = [key for key, entry in cache.items() if entry.expiry <= now]
        for key in expired:
            del cache[key]
        return len(expired)

    memoized.cache = cache
    memoized.clear = cache.clear
    memoized.clear_expired = clear_expired
    return memoized


# =============================================================================
# BOUNDED MEMOIZER
# =============================================================================
@dataclass(frozen=True)
class MemoStats:
    """Memoizer statistics."""
    size: int
    hits: int
    misses: int

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


class Memoizer(Generic[T]):
    """
    Function cache with TTL and least-used eviction.

    When full, expired entries are purged first; if none expired, the
    entry with the fewest hits is evicted (ties go to the oldest).

    Usage:
        memo = Memoizer(load_profile, max_size=500, ttl_ms=60_000)
        profile = memo.memoized(user_id)
        memo.stats().hit_rate
    """

    __slots__ = ("_fn", "_max_size", "_ttl_ms", "_key_fn", "_clock",
                 "_cache", "_hits", "_misses")

    def __init__(
        self,
        fn: Callable[..., T],
        max_size: int = C.MEMOIZER_MAX_SIZE,
        ttl_ms: float = C.MEMOIZER_TTL_MS,
        key_fn: Optional[KeyFn] = None,
        clock: Clock = time.monotonic,
    ) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be >= 1, got {max_size}")
        self._fn = fn
        self._max_size = max_size
        self._ttl_ms = ttl_ms
        self._key_fn = key_fn or default_key
        self._clock = clock
        self._cache: dict[Hashable, CacheEntry[T]] = {}
        self._hits = 0
        self._misses = 0

    def memoized(self, *args: Any, **kwargs: Any) -> T:
        key = self._key_fn(*args, **kwargs)
        now = self._clock()

        entry = self._cache.get(key)
        if entry is not None:
            if entry.expiry > now:
                entry.hit_count += 1
                self._hits += 1
                return entry.value
            del self._cache[key]

        self._misses += 1
        if len(self._cache) >= self._max_size:
            self._evict(now)

        value = self._fn(*args, **kwargs)
        self._cache[key] = CacheEntry(value=value, expiry=now + self._ttl_ms / 1000)
        return value

    __call__ = memoized

    def _evict(self, now: float) -> None:
        expired = [key for key, entry in self._cache.items() if entry.expiry <= now]
        if expired:
            for key in expired:
                del self._cache[key]
            return

        least_used = min(self._cache, key=lambda k: self._cache[k].hit_count)
        del self._cache[least_used]
        logger.debug("Memoizer evicted least-used key %r", least_used)

    def clear(self) -> None:
        """Drop every entry and reset counters."""
        self._cache.clear()
        self._hits = 0
        self._misses = 0

    def stats(self) -> MemoStats:
        return MemoStats(size=len(self._cache), hits=self._hits, misses=self._misses)

    def __len__(self) -> int:
        return len(self._cache)
