"""
Validators: Primitives, Combinators, Refinements

Primitives check the Python type of a value. Combinators build
validators for containers and alternatives, aggregating every nested
failure with its path. Refinements wrap a base validator: a base
failure short-circuits, otherwise one extra check runs.

Usage:
    user = obj({
        "name": not_empty()(string()),
        "age": integer()(minimum(0)(number())),
        "tags": array(string()),
    })
    user.validate({"name": "", "age": -1, "tags": ["a", 3]})
    # Left([name: Value cannot be empty, age: Minimum value is 0,
    #       tags[1]: Expected string])
"""

from __future__ import annotations

import math
import re
from datetime import date as date_type, datetime
from typing import Any, Awaitable, Callable, Mapping, Optional, TypeVar, Union

from fpcore.core.types import Left, Right
from fpcore.validation.types import (
    AsyncValidator,
    ValidationCode,
    ValidationContext,
    ValidationError,
    ValidationResult,
    Validator,
    merge_results,
)

T = TypeVar("T")

Refinement = Callable[[Validator[T]], Validator[T]]

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
URL_PATTERN = re.compile(r"^https?://.+")


# =============================================================================
# PRIMITIVES
# =============================================================================
def _type_check(name: str, accepts: Callable[[Any], bool], expected: str) -> Validator[Any]:
    def check(value: Any, ctx: ValidationContext) -> ValidationResult[Any]:
        if accepts(value):
            return Right(value)
        return ctx.fail(name, f"Expected {expected}", ValidationCode.TYPE_ERROR)
    return Validator(name, check)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not (isinstance(value, float) and math.isnan(value))


def string() -> Validator[str]:
    return _type_check("string", lambda x: isinstance(x, str), "string")


def number() -> Validator[Union[int, float]]:
    """int or float; bool and NaN are rejected."""
    return _type_check("number", _is_number, "number")


def integer_type() -> Validator[int]:
    return _type_check(
        "integer_type",
        lambda x: isinstance(x, int) and not isinstance(x, bool),
        "integer",
    )


def boolean() -> Validator[bool]:
    return _type_check("boolean", lambda x: isinstance(x, bool), "boolean")


def date() -> Validator[date_type]:
    """Accepts date/datetime instances or ISO 8601 strings (parsed)."""
    def check(value: Any, ctx: ValidationContext) -> ValidationResult[date_type]:
        if isinstance(value, date_type):
            return Right(value)
        if isinstance(value, str):
            try:
                return Right(datetime.fromisoformat(value))
            except ValueError:
                return ctx.fail("date", f"Invalid ISO date: {value!r}", ValidationCode.TYPE_ERROR)
        return ctx.fail("date", "Expected valid date", ValidationCode.TYPE_ERROR)
    return Validator("date", check)


# =============================================================================
# COMBINATORS
# =============================================================================
def array(item: Validator[T]) -> Validator[list[T]]:
    """List or tuple whose every element passes item; errors aggregated."""
    def check(value: Any, ctx: ValidationContext) -> ValidationResult[list[T]]:
        if not isinstance(value, (list, tuple)):
            return ctx.fail("array", "Expected array", ValidationCode.TYPE_ERROR)
        return merge_results(
            item.validate(element, ctx.index(i, value))
            for i, element in enumerate(value)
        )
    return Validator(f"array<{item.name}>", check)


def obj(schema: Mapping[str, Validator[Any]]) -> Validator[dict[str, Any]]:
    """
    Mapping validated field by field.

    Missing keys are validated as None (so optional() fields pass).
    Keys not in the schema are dropped from the output.
    """
    def check(value: Any, ctx: ValidationContext) -> ValidationResult[dict[str, Any]]:
        if not isinstance(value, Mapping):
            return ctx.fail("object", "Expected object", ValidationCode.TYPE_ERROR)
        keys = list(schema)
        merged = merge_results(
            schema[key].validate(value.get(key), ctx.child(key, value))
            for key in keys
        )
        return merged.map(lambda values: dict(zip(keys, values)))
    return Validator("object", check)


def optional(validator: Validator[T]) -> Validator[Optional[T]]:
    """None passes as None; anything else goes through validator."""
    def check(value: Any, ctx: ValidationContext) -> ValidationResult[Optional[T]]:
        if value is None:
            return Right(None)
        return validator.validate(value, ctx)
    return Validator(f"optional<{validator.name}>", check)


def literal(expected: T) -> Validator[T]:
    """Exact value match; type must match too, so True is not 1."""
    def check(value: Any, ctx: ValidationContext) -> ValidationResult[T]:
        if type(value) is type(expected) and value == expected:
            return Right(expected)
        return ctx.fail(
            "literal", f"Expected {expected!r}", ValidationCode.LITERAL_MISMATCH,
            expected=expected,
        )
    return Validator(f"literal({expected!r})", check)


def union(*validators: Validator[Any]) -> Validator[Any]:
    """First validator to succeed wins; otherwise every error is returned."""
    def check(value: Any, ctx: ValidationContext) -> ValidationResult[Any]:
        errors: list[ValidationError] = []
        for validator in validators:
            result = validator.validate(value, ctx)
            if isinstance(result, Right):
                return result
            errors.extend(result.value)
        return Left(errors)
    return Validator(f"union({'|'.join(v.name for v in validators)})", check)


def tuple_of(*validators: Validator[Any]) -> Validator[tuple[Any, ...]]:
    """Fixed-length sequence with a validator per position."""
    def check(value: Any, ctx: ValidationContext) -> ValidationResult[tuple[Any, ...]]:
        if not isinstance(value, (list, tuple)):
            return ctx.fail("array", "Expected array", ValidationCode.TYPE_ERROR)
        if len(value) != len(validators):
            return ctx.fail(
                "tuple",
                f"Expected tuple of length {len(validators)}",
                ValidationCode.TUPLE_LENGTH_MISMATCH,
                expected=len(validators),
                actual=len(value),
            )
        merged = merge_results(
            validator.validate(element, ctx.index(i, value))
            for i, (validator, element) in enumerate(zip(validators, value))
        )
        return merged.map(tuple)
    return Validator(f"tuple({len(validators)})", check)


# =============================================================================
# REFINEMENTS
# =============================================================================
def refine(
    label: str,
    test: Callable[[Any, ValidationContext], Optional[ValidationError]],
) -> Refinement:
    """
    Build a refinement from a post-check.

    test receives the base validator's output and returns an error or
    None. The base validator's own failures are returned untouched, and
    a None accepted by an optional() base skips the check.
    """
    def wrap(base: Validator[T]) -> Validator[T]:
        def check(value: Any, ctx: ValidationContext) -> ValidationResult[T]:
            result = base.validate(value, ctx)
            if isinstance(result, Left) or result.value is None:
                return result
            error = test(result.value, ctx)
            return Left([error]) if error is not None else result
        return Validator(f"{base.name}.{label}", check)
    return wrap


def min_length(minimum_length: int) -> Refinement:
    def test(value: Any, ctx: ValidationContext) -> Optional[ValidationError]:
        if len(value) < minimum_length:
            return ctx.error(
                "min_length", f"Minimum length is {minimum_length}",
                ValidationCode.MIN_LENGTH, min=minimum_length, actual=len(value),
            )
        return None
    return refine(f"min_length({minimum_length})", test)


def max_length(maximum_length: int) -> Refinement:
    def test(value: Any, ctx: ValidationContext) -> Optional[ValidationError]:
        if len(value) > maximum_length:
            return ctx.error(
                "max_length", f"Maximum length is {maximum_length}",
                ValidationCode.MAX_LENGTH, max=maximum_length, actual=len(value),
            )
        return None
    return refine(f"max_length({maximum_length})", test)


def pattern(regex: Union[str, re.Pattern[str]], message: Optional[str] = None) -> Refinement:
    """Value must contain a match for regex (re.search semantics)."""
    compiled = re.compile(regex) if isinstance(regex, str) else regex

    def test(value: Any, ctx: ValidationContext) -> Optional[ValidationError]:
        if compiled.search(value) is None:
            return ValidationError(
                ctx.path,
                message or ctx.message("pattern", "Invalid format"),
                ValidationCode.PATTERN_MISMATCH,
                {"pattern": compiled.pattern},
            )
        return None
    return refine(f"pattern({compiled.pattern})", test)


def email() -> Refinement:
    return pattern(EMAIL_PATTERN, "Invalid email address")


def url() -> Refinement:
    return pattern(URL_PATTERN, "Invalid URL")


def not_empty() -> Refinement:
    """Rejects strings that are empty after stripping whitespace."""
    def test(value: Any, ctx: ValidationContext) -> Optional[ValidationError]:
        if not value.strip():
            return ctx.error("not_empty", "Value cannot be empty", ValidationCode.EMPTY_VALUE)
        return None
    return refine("not_empty()", test)


def minimum(bound: float) -> Refinement:
    def test(value: Any, ctx: ValidationContext) -> Optional[ValidationError]:
        if value < bound:
            return ctx.error(
                "minimum", f"Minimum value is {bound}",
                ValidationCode.MIN_VALUE, min=bound, actual=value,
            )
        return None
    return refine(f"minimum({bound})", test)


def maximum(bound: float) -> Refinement:
    def test(value: Any, ctx: ValidationContext) -> Optional[ValidationError]:
        if value > bound:
            return ctx.error(
                "maximum", f"Maximum value is {bound}",
                ValidationCode.MAX_VALUE, max=bound, actual=value,
            )
        return None
    return refine(f"maximum({bound})", test)


def integer() -> Refinement:
    """Numeric value with no fractional part (3.0 passes)."""
    def test(value: Any, ctx: ValidationContext) -> Optional[ValidationError]:
        if isinstance(value, float) and not value.is_integer():
            return ctx.error("integer", "Value must be an integer", ValidationCode.NOT_INTEGER)
        return None
    return refine("integer()", test)


def positive() -> Refinement:
    def test(value: Any, ctx: ValidationContext) -> Optional[ValidationError]:
        if value <= 0:
            return ctx.error("positive", "Value must be positive", ValidationCode.NOT_POSITIVE)
        return None
    return refine("positive()", test)


# =============================================================================
# CUSTOM CHECKS
# =============================================================================
CustomCheck = Callable[[T, ValidationContext], Optional[ValidationError]]
AsyncCustomCheck = Callable[[T, ValidationContext], Awaitable[Optional[ValidationError]]]


def custom(fn: CustomCheck, base: Validator[T]) -> Validator[T]:
    """Run fn after base succeeds; fn returns a ValidationError or None."""
    return refine("custom()", fn)(base)


def async_custom(fn: AsyncCustomCheck, base: Validator[T]) -> AsyncValidator[T]:
    """Like custom(), but fn is awaited (e.g. a uniqueness lookup)."""
    async def check(value: Any, ctx: ValidationContext) -> ValidationResult[T]:
        result = base.validate(value, ctx)
        if isinstance(result, Left):
            return result
        error = await fn(result.value, ctx)
        return Left([error]) if error is not None else result
    return AsyncValidator(f"{base.name}.async_custom()", check)


def custom_error(ctx: ValidationContext, message: str, **context: Any) -> ValidationError:
    """Convenience for custom checks: error at the current path, code CUSTOM."""
    return ValidationError(ctx.path, message, ValidationCode.CUSTOM, context)

