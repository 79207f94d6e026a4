"""
Reliability module: Circuit breakers and retry with backoff.
"""

from fpcore.reliability.circuit_breaker import CircuitBreaker, CircuitState, CircuitStats
from fpcore.reliability.retry import (
    RetryPolicy,
    calculate_backoff,
    retry_with_backoff,
    with_retry,
)

__all__ = [
    "CircuitBreaker",
    "CircuitState",
    "CircuitStats",
    "RetryPolicy",
    "calculate_backoff",
    "retry_with_backoff",
    "with_retry",
]
