"""
Retry: Exponential Backoff over TaskEither

Implements the retry strategy for fallible asynchronous operations:
- Exponential backoff: delay_ms × multiplier^n
- Optional cap (max_delay_ms) and full jitter: random(0, backoff)
- Retry condition decides per error whether another attempt is worth it

The operation is a zero-arg factory so every attempt gets a fresh task.
Exhausting the retries returns the last Left unchanged.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TypeVar

from fpcore.core import constants as C
from fpcore.core.config import RetryConfig
from fpcore.core.errors import ReliabilityError
from fpcore.core.types import Either, Right
from fpcore.task.task_either import TaskEither

logger = logging.getLogger(__name__)

T = TypeVar("T")
L = TypeVar("L")
R = TypeVar("R")

Sleep = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration."""

    max_retries: int = C.RETRY_MAX_RETRIES
    delay_ms: int = C.RETRY_DELAY_MS
    backoff_multiplier: float = C.RETRY_BACKOFF_MULTIPLIER
    max_delay_ms: Optional[int] = None
    jitter: bool = False

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.delay_ms < 0:
            raise ValueError(f"delay_ms must be >= 0, got {self.delay_ms}")
        if self.backoff_multiplier <= 0:
            raise ValueError(
                f"backoff_multiplier must be > 0, got {self.backoff_multiplier}"
            )

    @classmethod
    def default(cls) -> RetryPolicy:
        """Default retry policy."""
        return cls()

    @classmethod
    def no_retry(cls) -> RetryPolicy:
        """No retries (for non-idempotent operations)."""
        return cls(max_retries=0)

    @classmethod
    def aggressive(cls) -> RetryPolicy:
        """Aggressive retries for critical operations."""
        return cls(
            max_retries=5,
            delay_ms=50,
            max_delay_ms=C.RETRY_MAX_DELAY_MS,
            jitter=True,
        )

    @classmethod
    def from_config(cls, config: RetryConfig) -> RetryPolicy:
        return cls(
            max_retries=config.max_retries,
            delay_ms=config.delay_ms,
            backoff_multiplier=config.backoff_multiplier,
            max_delay_ms=config.max_delay_ms,
            jitter=config.jitter,
        )

    def apply(
        self,
        operation: Callable[[], TaskEither[L, R]],
        retry_condition: Optional[Callable[[L], bool]] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> TaskEither[L, R]:
        """Wrap operation with this policy."""
        return with_retry(
            operation,
            max_retries=self.max_retries,
            delay_ms=self.delay_ms,
            backoff_multiplier=self.backoff_multiplier,
            retry_condition=retry_condition,
            max_delay_ms=self.max_delay_ms,
            jitter=self.jitter,
            sleep=sleep,
        )


def with_retry(
    operation: Callable[[], TaskEither[L, R]],
    max_retries: int = C.RETRY_MAX_RETRIES,
    delay_ms: float = C.RETRY_DELAY_MS,
    backoff_multiplier: float = C.RETRY_BACKOFF_MULTIPLIER,
    retry_condition: Optional[Callable[[L], bool]] = None,
    *,
    max_delay_ms: Optional[float] = None,
    jitter: bool = False,
    sleep: Sleep = asyncio.sleep,
) -> TaskEither[L, R]:
    """
    Re-run a fallible operation with exponential backoff.

    Args:
        operation: Factory producing a fresh TaskEither per attempt
        max_retries: Attempts after the first one
        delay_ms: Wait before the first retry
        backoff_multiplier: Growth factor applied after every retry
        retry_condition: Predicate on the Left payload (default: always)
        max_delay_ms: Upper bound for any single wait
        jitter: Use full jitter instead of the exact delay
        sleep: Awaitable sleep taking seconds (injectable for tests)

    Returns:
        The first Right, or the last Left once retries are exhausted or
        retry_condition rejects the error
    """
    should_retry = retry_condition or (lambda _: True)

    async def settle() -> Either[L, R]:
        attempt = 0
        while True:
            result = await operation().run()
            if isinstance(result, Right):
                return result
            if attempt >= max_retries or not should_retry(result.value):
                return result

            delay = calculate_backoff(
                attempt=attempt,
                base_delay_ms=delay_ms,
                max_delay_ms=max_delay_ms,
                exponential_base=backoff_multiplier,
                jitter=jitter,
            )
            logger.debug(
                "Attempt %d failed: %s; retrying in %.0fms",
                attempt + 1, result.value, delay,
            )
            await sleep(delay / 1000)
            attempt += 1

    return TaskEither(settle)


def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
    sleep: Sleep = asyncio.sleep,
) -> TaskEither[ReliabilityError, T]:
    """
    Retry a plain coroutine function that signals failure by raising.

    Every exception is retryable. After the last attempt the result is
    Left(ReliabilityError.retry_exhausted) carrying the final exception.
    """
    policy = policy or RetryPolicy.default()

    def attempt() -> TaskEither[Exception, T]:
        return TaskEither.from_awaitable(func, lambda exc: exc)

    def exhausted(exc: Exception) -> ReliabilityError:
        return ReliabilityError.retry_exhausted(
            attempts=policy.max_retries + 1,
            last_error=str(exc),
            cause=exc,
        )

    return policy.apply(attempt, sleep=sleep).map_left(exhausted)


def calculate_backoff(
    attempt: int,
    base_delay_ms: float,
    max_delay_ms: Optional[float],
    exponential_base: float,
    jitter: bool,
) -> float:
    """
    Calculate backoff delay with optional jitter.

    Full jitter: random(0, min(cap, base * exponential_base^attempt))
    """
    delay = base_delay_ms * (exponential_base ** attempt)
    if max_delay_ms is not None:
        delay = min(max_delay_ms, delay)

    if jitter:
        delay = random.uniform(0, delay)

    return delay
