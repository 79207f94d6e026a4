"""
ResponseCache: TTL cache for successful GET responses, owned by one client.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

from fpcore.client.types import ApiResponse, CacheStats
from fpcore.core import constants as C
from fpcore.core.types import NOTHING, Option, Some
from fpcore.memo.cache import CacheEntry


class ResponseCache:
    """Expired entries are dropped on lookup and purged on every set()."""

    __slots__ = ("_ttl_ms", "_clock", "_entries")

    def __init__(
        self,
        ttl_ms: float = C.CLIENT_CACHE_TTL_MS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_ms = ttl_ms
        self._clock = clock
        self._entries: dict[str, CacheEntry[ApiResponse]] = {}

    def get(self, key: str) -> Option[ApiResponse]:
        entry = self._entries.get(key)
        if entry is None:
            return NOTHING
        if entry.expiry <= self._clock():
            del self._entries[key]
            return NOTHING
        entry.hit_count += 1
        return Some(entry.value)

    def set(self, key: str, response: ApiResponse) -> None:
        now = self._clock()
        self.clear_expired(now)
        self._entries[key] = CacheEntry(value=response, expiry=now + self._ttl_ms / 1000)

    def clear_expired(self, now: Optional[float] = None) -> int:
        """Drop every expired entry; returns how many were removed."""
        now = self._clock() if now is None else now
        expired = [key for key, entry in self._entries.items() if entry.expiry <= now]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def stats(self) -> CacheStats:
        return CacheStats(size=len(self._entries), keys=list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
