"""
Core Type Definitions for fpcore

Implements Option and Either monads for zero-exception control flow.
Every other subsystem (validation, pipeline, API client, reliability)
threads its failures through these two types.

Design Principles:
- Never use null for absence (use Option)
- Never raise across a boundary for expected failures (use Either)
- Enforce exhaustive pattern matching for all variants
- Values are immutable; every transformation returns a new value

Complexity: O(1) for all type operations (excluding user callbacks)
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    ClassVar,
    Generic,
    Iterable,
    Literal,
    Optional,
    TypeVar,
    Union,
)

# =============================================================================
# TYPE VARIABLES FOR GENERIC CONTAINERS
# =============================================================================
T = TypeVar("T")  # Payload type
U = TypeVar("U")  # Transform result type
L = TypeVar("L")  # Left (error) type
R = TypeVar("R")  # Right (success) type


class UnwrapError(RuntimeError):
    """Raised when a payload is extracted from the wrong variant."""


# =============================================================================
# OPTION MONAD: PRESENCE OR ABSENCE
# =============================================================================
@dataclass(frozen=True, slots=True)
class Some(Generic[T]):
    """
    Present variant of Option.

    Immutable, hashable container for a value that exists.
    Uses __slots__ for memory efficiency.
    """

    value: T

    def is_some(self) -> Literal[True]:
        """O(1) presence check."""
        return True

    def is_none(self) -> Literal[False]:
        """O(1) absence check."""
        return False

    def map(self, fn: Callable[[T], U]) -> Some[U]:
        """
        Apply transformation to the wrapped value.

        Exceptions raised by fn propagate to the caller.
        """
        return Some(fn(self.value))

    def flat_map(self, fn: Callable[[T], Option[U]]) -> Option[U]:
        """Monadic bind for chaining optional lookups."""
        return fn(self.value)

    def get_or_else(self, default: T) -> T:
        """Return value, ignoring default."""
        return self.value

    def fold(self, on_none: Callable[[], U], on_some: Callable[[T], U]) -> U:
        return on_some(self.value)

    def filter(self, predicate: Callable[[T], bool]) -> Option[T]:
        """Keep the value only if predicate holds."""
        return self if predicate(self.value) else NOTHING

    def to_either(self, error: L) -> Right[T]:
        return Right(self.value)

    def unwrap(self) -> T:
        return self.value

    def __repr__(self) -> str:
        return f"Some({self.value!r})"


@dataclass(frozen=True, slots=True)
class Nothing:
    """
    Absent variant of Option.

    Carries no payload. Use the NOTHING singleton rather than
    constructing new instances; all instances compare equal anyway.
    """

    def is_some(self) -> Literal[False]:
        return False

    def is_none(self) -> Literal[True]:
        return True

    def map(self, fn: Callable[[Any], U]) -> Nothing:
        """No-op on absence - fn is never invoked."""
        return self

    def flat_map(self, fn: Callable[[Any], Option[U]]) -> Nothing:
        """Propagate absence through monadic chain."""
        return self

    def get_or_else(self, default: T) -> T:
        """Return default value on absence."""
        return default

    def fold(self, on_none: Callable[[], U], on_some: Callable[[Any], U]) -> U:
        return on_none()

    def filter(self, predicate: Callable[[Any], bool]) -> Nothing:
        return self

    def to_either(self, error: L) -> Left[L]:
        return Left(error)

    def unwrap(self) -> Any:
        """
        Attempting to unwrap absence is a programming error.

        Raises:
            UnwrapError: Always
        """
        raise UnwrapError("Called unwrap() on Nothing")

    def __repr__(self) -> str:
        return "Nothing"


NOTHING: Nothing = Nothing()

# Union type for pattern matching
Option = Union[Some[T], Nothing]


def some(value: T) -> Some[T]:
    """Construct a present Option."""
    return Some(value)


def nothing() -> Nothing:
    """Return the empty Option singleton."""
    return NOTHING


# =============================================================================
# EITHER MONAD: FAILURE OR SUCCESS
# =============================================================================
@dataclass(frozen=True, slots=True)
class Left(Generic[L]):
    """
    Failure variant of Either.

    Immutable container for error information. By convention every
    operation short-circuits on Left, returning the same instance.
    """

    value: L

    def is_left(self) -> Literal[True]:
        return True

    def is_right(self) -> Literal[False]:
        return False

    def map(self, fn: Callable[[Any], U]) -> Left[L]:
        """No-op on error variant - propagates error unchanged."""
        return self

    def map_left(self, fn: Callable[[L], U]) -> Left[U]:
        """Transform the error payload."""
        return Left(fn(self.value))

    def flat_map(self, fn: Callable[[Any], Either[L, U]]) -> Left[L]:
        """Propagate error through monadic chain without invoking fn."""
        return self

    def fold(self, on_left: Callable[[L], U], on_right: Callable[[Any], U]) -> U:
        return on_left(self.value)

    def swap(self) -> Right[L]:
        """Exchange channels: Left(x) becomes Right(x)."""
        return Right(self.value)

    def get_or_else(self, default: T) -> T:
        """Return default value on error."""
        return default

    def to_option(self) -> Nothing:
        return NOTHING

    def unwrap(self) -> Any:
        """
        Attempting to unwrap an error is a programming error.

        Raises:
            UnwrapError: Always, with error context
        """
        raise UnwrapError(f"Called unwrap() on Left: {self.value!r}")

    def unwrap_left(self) -> L:
        return self.value

    def __repr__(self) -> str:
        return f"Left({self.value!r})"


@dataclass(frozen=True, slots=True)
class Right(Generic[R]):
    """
    Success variant of Either.

    Immutable, hashable container for successful computation results.
    """

    value: R

    def is_left(self) -> Literal[False]:
        return False

    def is_right(self) -> Literal[True]:
        return True

    def map(self, fn: Callable[[R], U]) -> Right[U]:
        """
        Apply transformation to success value.

        Complexity: O(f) where f is complexity of fn
        """
        return Right(fn(self.value))

    def map_left(self, fn: Callable[[Any], U]) -> Right[R]:
        """No-op on success variant."""
        return self

    def flat_map(self, fn: Callable[[R], Either[L, U]]) -> Either[L, U]:
        """Monadic bind for chaining fallible operations."""
        return fn(self.value)

    def fold(self, on_left: Callable[[Any], U], on_right: Callable[[R], U]) -> U:
        return on_right(self.value)

    def swap(self) -> Left[R]:
        """Exchange channels: Right(x) becomes Left(x)."""
        return Left(self.value)

    def get_or_else(self, default: Any) -> R:
        """Return value, ignoring default."""
        return self.value

    def to_option(self) -> Some[R]:
        return Some(self.value)

    def unwrap(self) -> R:
        """Extract value. Safe to call after is_right() check."""
        return self.value

    def unwrap_left(self) -> Any:
        raise UnwrapError(f"Called unwrap_left() on Right: {self.value!r}")

    def __repr__(self) -> str:
        return f"Right({self.value!r})"


# Union type for pattern matching
Either = Union[Left[L], Right[R]]


def left(value: L) -> Left[L]:
    """Construct a failed Either."""
    return Left(value)


def right(value: R) -> Right[R]:
    """Construct a successful Either."""
    return Right(value)


# =============================================================================
# CONVERSIONS
# =============================================================================
def from_maybe(value: Optional[T]) -> Option[T]:
    """Treat Python None as absence, anything else as presence."""
    return NOTHING if value is None else Some(value)


def to_maybe(option: Option[T]) -> Optional[T]:
    """Inverse of from_maybe: absence becomes None."""
    return option.value if isinstance(option, Some) else None


def maybe(fn: Callable[[T], U]) -> Callable[[Optional[T]], Optional[U]]:
    """Lift fn over nullable values: None in, None out."""
    def apply(value: Optional[T]) -> Optional[U]:
        return None if value is None else fn(value)
    return apply


def option_to_either(error: L) -> Callable[[Option[R]], Either[L, R]]:
    """
    Promote an Option to an Either, using error for absence.

    Standard bridge when an optional lookup must become a
    reportable failure.
    """
    def convert(option: Option[R]) -> Either[L, R]:
        return option.to_either(error)
    return convert


def either_to_option(either: Either[L, R]) -> Option[R]:
    """Drop the error payload: Right becomes Some, Left becomes Nothing."""
    return either.to_option()


# =============================================================================
# SHORT-CIRCUIT AND AGGREGATING COMBINATORS
# =============================================================================
def sequence_either(eithers: Iterable[Either[L, R]]) -> Either[L, list[R]]:
    """
    Collect Right payloads, stopping at the first Left.

    Dependent-step policy: the first failure wins and later
    elements are not inspected.
    """
    values: list[R] = []
    for either in eithers:
        if isinstance(either, Left):
            return either
        values.append(either.value)
    return Right(values)


def traverse_either(
    items: Iterable[T],
    fn: Callable[[T], Either[L, R]],
) -> Either[L, list[R]]:
    """Apply fn lazily to each item, stopping at the first Left."""
    return sequence_either(fn(item) for item in items)


def collect_all(eithers: Iterable[Either[L, R]]) -> Either[list[L], list[R]]:
    """
    Inspect every element and aggregate all failures.

    Independent-check policy: returns Left(errors) if at least
    one element failed, else Right(values). Order is preserved
    in both channels.
    """
    errors: list[L] = []
    values: list[R] = []
    for either in eithers:
        if isinstance(either, Left):
            errors.append(either.value)
        else:
            values.append(either.value)
    return Left(errors) if errors else Right(values)


def validate_all(
    value: T,
    checks: Iterable[Callable[[T], Either[L, Any]]],
) -> Either[list[L], T]:
    """
    Run every check against value, then decide.

    Returns Right(value) unchanged when all checks pass,
    otherwise Left with every collected error.
    """
    result = collect_all(check(value) for check in checks)
    return result.map(lambda _: value)


# =============================================================================
# TIMESTAMP
# =============================================================================
@dataclass(frozen=True, slots=True, order=True)
class Timestamp:
    """
    High-precision wall-clock timestamp used for error correlation.

    Stores nanoseconds since Unix epoch.
    """

    nanos: int

    NANOS_PER_MILLI: ClassVar[int] = 1_000_000

    @classmethod
    def now(cls) -> Timestamp:
        return cls(nanos=time.time_ns())

    @property
    def millis(self) -> int:
        """Convert to milliseconds (truncating)."""
        return self.nanos // self.NANOS_PER_MILLI

    def elapsed_millis(self) -> float:
        """Milliseconds elapsed since this timestamp."""
        return (time.time_ns() - self.nanos) / self.NANOS_PER_MILLI

    def __repr__(self) -> str:
        return f"Timestamp({self.nanos}ns)"
