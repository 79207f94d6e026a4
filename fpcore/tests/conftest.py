"""
Shared fixtures: deterministic clocks and recorded sleeps.

Run: python -m pytest fpcore/tests -v
"""

from __future__ import annotations

import pytest


# =============================================================================
# TEST UTILITIES
# =============================================================================
class FakeClock:
    """Monotonic clock in seconds, advanced by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000


class RecordingSleep:
    """Awaitable sleep that records requested delays (seconds) and returns at once."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)

    @property
    def calls_ms(self) -> list[float]:
        return [round(seconds * 1000, 6) for seconds in self.calls]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()
