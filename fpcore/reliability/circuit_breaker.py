"""
Circuit Breaker: Fault Tolerance for Fallible Operations

Three-state breaker guarding a TaskEither factory:
- CLOSED: Normal operation, calls flow through
- OPEN: Failure threshold reached, calls fail fast
- HALF_OPEN: Testing recovery, a single trial call is allowed

State machine:
    CLOSED --(failures >= threshold)--> OPEN
    OPEN --(timeout elapsed since last failure)--> HALF_OPEN
    HALF_OPEN --(trial succeeds)--> CLOSED
    HALF_OPEN --(trial fails)--> OPEN

Breakers are plain objects owned by the caller; there is no global
registry. Safe under a single event loop, not across threads.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Generic, Optional, TypeVar

from fpcore.core import constants as C
from fpcore.core.config import CircuitBreakerConfig
from fpcore.core.errors import ReliabilityError
from fpcore.core.types import Either, Left, Right
from fpcore.task.task_either import TaskEither

logger = logging.getLogger(__name__)

L = TypeVar("L")
R = TypeVar("R")

Clock = Callable[[], float]


class CircuitState(Enum):
    """Circuit breaker state."""
    CLOSED = auto()     # Normal operation
    OPEN = auto()       # Failing fast
    HALF_OPEN = auto()  # Testing recovery


@dataclass(frozen=True)
class CircuitStats:
    """Point-in-time circuit breaker statistics."""
    name: str
    state: CircuitState
    failure_count: int
    successes: int
    total_requests: int
    rejected_requests: int
    last_failure_time: Optional[float]
    last_state_change: float


class CircuitBreaker(Generic[L, R]):
    """
    Circuit breaker around a TaskEither factory.

    Usage:
        breaker = CircuitBreaker(lambda: client.get("/health"), threshold=3)

        result = await breaker.execute().run()
        if breaker.state is CircuitState.OPEN:
            ...
    """

    __slots__ = (
        "_operation", "_name", "_threshold", "_timeout_ms", "_clock",
        "_state", "_failure_count", "_successes", "_last_failure_time",
        "_last_state_change", "_total_requests", "_rejected_requests",
        "_trial_in_flight",
    )

    def __init__(
        self,
        operation: Callable[[], TaskEither[L, R]],
        threshold: int = C.CIRCUIT_BREAKER_THRESHOLD,
        timeout_ms: float = C.CIRCUIT_BREAKER_TIMEOUT_MS,
        name: str = "default",
        clock: Clock = time.monotonic,
    ) -> None:
        """
        Args:
            operation: Factory producing the guarded task
            threshold: Consecutive failures before opening the circuit
            timeout_ms: Time in OPEN before a trial call is allowed
            name: Identifier for logging and error context
            clock: Monotonic clock in seconds (injectable for tests)
        """
        if threshold < 1:
            raise ValueError(f"threshold must be >= 1, got {threshold}")
        if timeout_ms < 0:
            raise ValueError(f"timeout_ms must be >= 0, got {timeout_ms}")

        self._operation = operation
        self._name = name
        self._threshold = threshold
        self._timeout_ms = timeout_ms
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._successes = 0
        self._last_failure_time: Optional[float] = None
        self._last_state_change = clock()
        self._total_requests = 0
        self._rejected_requests = 0
        self._trial_in_flight = False

    @classmethod
    def from_config(
        cls,
        operation: Callable[[], TaskEither[L, R]],
        config: CircuitBreakerConfig,
        name: str = "default",
        clock: Clock = time.monotonic,
    ) -> CircuitBreaker[L, R]:
        return cls(
            operation,
            threshold=config.threshold,
            timeout_ms=config.timeout_ms,
            name=name,
            clock=clock,
        )

    def execute(self) -> TaskEither[L | ReliabilityError, R]:
        """
        Run the guarded operation through the breaker.

        The admission decision is made when the returned task runs.

        Returns:
            The operation's own Either, or Left(ReliabilityError) with
            code RELIABILITY_CIRCUIT_OPEN when the call was rejected
        """
        async def settle() -> Either[L | ReliabilityError, R]:
            self._total_requests += 1
            rejection = self._admit()
            if rejection is not None:
                return Left(rejection)

            trial = self._state is CircuitState.HALF_OPEN
            try:
                result = await self._operation().run()
            finally:
                if trial:
                    self._trial_in_flight = False

            if isinstance(result, Right):
                self._on_success()
            else:
                self._on_failure()
            return result

        return TaskEither(settle)

    # =========================================================================
    # STATE MACHINE
    # =========================================================================
    def _admit(self) -> Optional[ReliabilityError]:
        """Decide whether a call may proceed; None means admitted."""
        if self._state is CircuitState.OPEN:
            if self._time_until_half_open() > 0:
                return self._reject()
            self._transition_to(CircuitState.HALF_OPEN)

        if self._state is CircuitState.HALF_OPEN:
            if self._trial_in_flight:
                return self._reject()
            self._trial_in_flight = True

        return None

    def _reject(self) -> ReliabilityError:
        self._rejected_requests += 1
        logger.warning("Circuit '%s' is %s, rejecting request", self._name, self._state.name)
        return ReliabilityError.circuit_open(
            circuit_name=self._name,
            failure_count=self._failure_count,
            retry_after_ms=int(self._time_until_half_open()),
        )

    def _on_success(self) -> None:
        self._successes += 1
        self._failure_count = 0
        if self._state is not CircuitState.CLOSED:
            self._transition_to(CircuitState.CLOSED)

    def _on_failure(self) -> None:
        self._failure_count += 1
        self._last_failure_time = self._clock()

        if self._state is CircuitState.HALF_OPEN:
            # Single failure in half-open reopens
            self._transition_to(CircuitState.OPEN)
        elif self._state is CircuitState.CLOSED and self._failure_count >= self._threshold:
            self._transition_to(CircuitState.OPEN)

    def _transition_to(self, new_state: CircuitState) -> None:
        old_state = self._state
        self._state = new_state
        self._last_state_change = self._clock()

        if new_state is CircuitState.CLOSED:
            self._failure_count = 0
            self._trial_in_flight = False

        logger.info("Circuit '%s': %s -> %s", self._name, old_state.name, new_state.name)

    def _time_until_half_open(self) -> float:
        """Milliseconds remaining before a trial call is allowed."""
        if self._last_failure_time is None:
            return 0
        elapsed_ms = (self._clock() - self._last_failure_time) * 1000
        return max(0.0, self._timeout_ms - elapsed_ms)

    # =========================================================================
    # MANUAL CONTROL
    # =========================================================================
    def reset(self) -> None:
        """Return to CLOSED with counters cleared."""
        self._transition_to(CircuitState.CLOSED)
        self._last_failure_time = None

    def force_open(self) -> None:
        """Manually open circuit; the timeout counts from now."""
        self._last_failure_time = self._clock()
        self._transition_to(CircuitState.OPEN)

    # =========================================================================
    # INTROSPECTION
    # =========================================================================
    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    @property
    def is_closed(self) -> bool:
        return self._state is CircuitState.CLOSED

    @property
    def stats(self) -> CircuitStats:
        return CircuitStats(
            name=self._name,
            state=self._state,
            failure_count=self._failure_count,
            successes=self._successes,
            total_requests=self._total_requests,
            rejected_requests=self._rejected_requests,
            last_failure_time=self._last_failure_time,
            last_state_change=self._last_state_change,
        )

    def __repr__(self) -> str:
        return (
            f"CircuitBreaker(name={self._name!r}, state={self._state.name}, "
            f"failures={self._failure_count}/{self._threshold})"
        )
