"""
Fluent Validator Builder

ValidatorBuilder is immutable: every method returns a new builder
wrapping the composed validator, so partially built schemas can be
shared and extended safely.

Usage:
    username = v.string().not_empty().min_length(3).max_length(20)
    age = v.number().integer().minimum(0).optional()

    signup = v.object({"username": username, "age": age})
    signup.validate({"username": "al"})
    # Left([username: Minimum length is 3])
"""

from __future__ import annotations

import re
from typing import Any, Generic, Mapping, Optional, TypeVar, Union

from fpcore.validation import validators as V
from fpcore.validation.types import (
    AsyncValidator,
    ValidationContext,
    ValidationResult,
    Validator,
)

T = TypeVar("T")

ValidatorLike = Union[Validator[Any], "ValidatorBuilder[Any]"]


def as_validator(source: ValidatorLike) -> Validator[Any]:
    return source.build() if isinstance(source, ValidatorBuilder) else source


class ValidatorBuilder(Generic[T]):
    """Immutable fluent wrapper around a Validator."""

    __slots__ = ("_validator",)

    def __init__(self, validator: Validator[T]) -> None:
        self._validator = validator

    def _then(self, refinement: V.Refinement) -> ValidatorBuilder[T]:
        return ValidatorBuilder(refinement(self._validator))

    # String refinements
    def min_length(self, length: int) -> ValidatorBuilder[T]:
        return self._then(V.min_length(length))

    def max_length(self, length: int) -> ValidatorBuilder[T]:
        return self._then(V.max_length(length))

    def pattern(
        self,
        regex: Union[str, re.Pattern[str]],
        message: Optional[str] = None,
    ) -> ValidatorBuilder[T]:
        return self._then(V.pattern(regex, message))

    def email(self) -> ValidatorBuilder[T]:
        return self._then(V.email())

    def url(self) -> ValidatorBuilder[T]:
        return self._then(V.url())

    def not_empty(self) -> ValidatorBuilder[T]:
        return self._then(V.not_empty())

    # Number refinements
    def minimum(self, bound: float) -> ValidatorBuilder[T]:
        return self._then(V.minimum(bound))

    def maximum(self, bound: float) -> ValidatorBuilder[T]:
        return self._then(V.maximum(bound))

    def integer(self) -> ValidatorBuilder[T]:
        return self._then(V.integer())

    def positive(self) -> ValidatorBuilder[T]:
        return self._then(V.positive())

    # Generic
    def custom(self, fn: V.CustomCheck) -> ValidatorBuilder[T]:
        return ValidatorBuilder(V.custom(fn, self._validator))

    def async_custom(self, fn: V.AsyncCustomCheck) -> AsyncValidator[T]:
        """Terminal: async checks cannot be refined further synchronously."""
        return V.async_custom(fn, self._validator)

    def optional(self) -> ValidatorBuilder[Optional[T]]:
        return ValidatorBuilder(V.optional(self._validator))

    def build(self) -> Validator[T]:
        return self._validator

    @property
    def name(self) -> str:
        return self._validator.name

    def validate(
        self,
        value: Any,
        ctx: Optional[ValidationContext] = None,
    ) -> ValidationResult[T]:
        return self._validator.validate(value, ctx)

    def __repr__(self) -> str:
        return f"ValidatorBuilder({self._validator.name})"


class ValidatorFactory:
    """Entry points for fluent schemas; use the module-level `v`."""

    @staticmethod
    def string() -> ValidatorBuilder[str]:
        return ValidatorBuilder(V.string())

    @staticmethod
    def number() -> ValidatorBuilder[float]:
        return ValidatorBuilder(V.number())

    @staticmethod
    def integer() -> ValidatorBuilder[int]:
        return ValidatorBuilder(V.integer_type())

    @staticmethod
    def boolean() -> ValidatorBuilder[bool]:
        return ValidatorBuilder(V.boolean())

    @staticmethod
    def date() -> ValidatorBuilder[Any]:
        return ValidatorBuilder(V.date())

    @staticmethod
    def array(item: ValidatorLike) -> ValidatorBuilder[list[Any]]:
        return ValidatorBuilder(V.array(as_validator(item)))

    @staticmethod
    def object(schema: Mapping[str, ValidatorLike]) -> ValidatorBuilder[dict[str, Any]]:
        return ValidatorBuilder(V.obj({key: as_validator(val) for key, val in schema.items()}))

    @staticmethod
    def optional(validator: ValidatorLike) -> ValidatorBuilder[Any]:
        return ValidatorBuilder(V.optional(as_validator(validator)))

    @staticmethod
    def literal(value: T) -> ValidatorBuilder[T]:
        return ValidatorBuilder(V.literal(value))

    @staticmethod
    def union(*validators: ValidatorLike) -> ValidatorBuilder[Any]:
        return ValidatorBuilder(V.union(*(as_validator(x) for x in validators)))

    @staticmethod
    def tuple(*validators: ValidatorLike) -> ValidatorBuilder[Any]:
        return ValidatorBuilder(V.tuple_of(*(as_validator(x) for x in validators)))


v = ValidatorFactory()
