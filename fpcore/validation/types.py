"""
Validation Types

A validator is an immutable object with a name and a validate() method
returning ValidationResult[T] = Either[list[ValidationError], T].
Failures are always lists so independent checks can be aggregated.

ValidationContext carries the dotted/indexed path of the value being
checked plus per-call message overrides.
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field as dataclass_field
from enum import Enum
from typing import (
    Any,
    Awaitable,
    Callable,
    Generic,
    Iterable,
    Mapping,
    Optional,
    TypeVar,
)

from fpcore.core.types import Either, Left, Right
from fpcore.task.task_either import TaskEither

T = TypeVar("T")

ROOT_FIELD = "root"


class ValidationCode(str, Enum):
    """Machine-readable validation failure codes."""

    TYPE_ERROR = "TYPE_ERROR"
    MIN_LENGTH = "MIN_LENGTH"
    MAX_LENGTH = "MAX_LENGTH"
    PATTERN_MISMATCH = "PATTERN_MISMATCH"
    EMPTY_VALUE = "EMPTY_VALUE"
    MIN_VALUE = "MIN_VALUE"
    MAX_VALUE = "MAX_VALUE"
    NOT_INTEGER = "NOT_INTEGER"
    NOT_POSITIVE = "NOT_POSITIVE"
    LITERAL_MISMATCH = "LITERAL_MISMATCH"
    TUPLE_LENGTH_MISMATCH = "TUPLE_LENGTH_MISMATCH"
    CUSTOM = "CUSTOM"


@dataclass(frozen=True)
class ValidationError:
    """Single failed check, located by field path."""

    field: str
    message: str
    code: Optional[str] = None
    context: Mapping[str, Any] = dataclass_field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"field": self.field, "message": self.message}
        if self.code is not None:
            data["code"] = str(self.code.value if isinstance(self.code, Enum) else self.code)
        if self.context:
            data["context"] = dict(self.context)
        return data

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


ValidationResult = Either[list[ValidationError], T]


@dataclass(frozen=True)
class ValidationContext:
    """
    Where in the input a validator is running.

    field is None at the top level; child() and index() derive the
    context for nested values without mutating this one.
    """

    field: Optional[str] = None
    parent: Any = None
    locale: Optional[str] = None
    custom_messages: Mapping[str, str] = dataclass_field(default_factory=dict)

    @property
    def path(self) -> str:
        return self.field or ROOT_FIELD

    def child(self, key: str, parent: Any = None) -> ValidationContext:
        """Context for an object member: 'a' -> 'a.key'."""
        path = f"{self.field}.{key}" if self.field else key
        return ValidationContext(path, parent, self.locale, self.custom_messages)

    def index(self, position: int, parent: Any = None) -> ValidationContext:
        """Context for a sequence element: 'a' -> 'a[0]'."""
        return ValidationContext(
            f"{self.path}[{position}]", parent, self.locale, self.custom_messages,
        )

    def message(self, key: str, default: str) -> str:
        """Custom message registered under key, else default."""
        return self.custom_messages.get(key, default)

    def error(
        self,
        key: str,
        default: str,
        code: ValidationCode,
        **context: Any,
    ) -> ValidationError:
        return ValidationError(self.path, self.message(key, default), code, context)

    def fail(
        self,
        key: str,
        default: str,
        code: ValidationCode,
        **context: Any,
    ) -> Left[list[ValidationError]]:
        return Left([self.error(key, default, code, **context)])


EMPTY_CONTEXT = ValidationContext()

Check = Callable[[Any, ValidationContext], "ValidationResult[Any]"]


class Validator(Generic[T]):
    """
    Named, immutable validation function.

    Usage:
        positive_int = Validator("positive_int", check)
        positive_int.validate(5)            # Right(5)
        positive_int.validate(-1)           # Left([ValidationError(...)])
    """

    __slots__ = ("_name", "_check")

    def __init__(self, name: str, check: Check) -> None:
        self._name = name
        self._check = check

    @property
    def name(self) -> str:
        return self._name

    def validate(
        self,
        value: Any,
        ctx: Optional[ValidationContext] = None,
    ) -> ValidationResult[T]:
        return self._check(value, ctx or EMPTY_CONTEXT)

    def __call__(self, value: Any, ctx: Optional[ValidationContext] = None) -> ValidationResult[T]:
        return self.validate(value, ctx)

    def __repr__(self) -> str:
        return f"Validator({self._name})"


AsyncCheck = Callable[[Any, ValidationContext], Awaitable["ValidationResult[Any]"]]


class AsyncValidator(Generic[T]):
    """Validator whose final check awaits I/O (uniqueness lookups etc.)."""

    __slots__ = ("_name", "_check")

    def __init__(self, name: str, check: AsyncCheck) -> None:
        self._name = name
        self._check = check

    @property
    def name(self) -> str:
        return self._name

    async def validate_async(
        self,
        value: Any,
        ctx: Optional[ValidationContext] = None,
    ) -> ValidationResult[T]:
        return await self._check(value, ctx or EMPTY_CONTEXT)

    def to_task(
        self,
        value: Any,
        ctx: Optional[ValidationContext] = None,
    ) -> TaskEither[list[ValidationError], T]:
        """Defer validation into a TaskEither, re-run on every run()."""
        return TaskEither(lambda: self.validate_async(value, ctx))

    def __repr__(self) -> str:
        return f"AsyncValidator({self._name})"


def merge_results(results: Iterable[ValidationResult[Any]]) -> ValidationResult[list[Any]]:
    """Flatten every error list; Right(values) only if nothing failed."""
    errors: list[ValidationError] = []
    values: list[Any] = []
    for result in results:
        if isinstance(result, Left):
            errors.extend(result.value)
        else:
            values.append(result.value)
    return Left(errors) if errors else Right(values)
