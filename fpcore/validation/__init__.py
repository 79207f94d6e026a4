"""
Validation module: aggregating schema validators built on Either.

Every failure carries its field path, and independent checks report all
of their errors at once instead of stopping at the first.
"""

from fpcore.validation.types import (
    AsyncValidator,
    ValidationCode,
    ValidationContext,
    ValidationError,
    ValidationResult,
    Validator,
    merge_results,
)
from fpcore.validation.validators import (
    array,
    async_custom,
    boolean,
    custom,
    custom_error,
    date,
    email,
    integer,
    integer_type,
    literal,
    max_length,
    maximum,
    min_length,
    minimum,
    not_empty,
    number,
    obj,
    optional,
    pattern,
    positive,
    refine,
    string,
    tuple_of,
    union,
    url,
)
from fpcore.validation.builder import ValidatorBuilder, ValidatorFactory, v

__all__ = [
    "AsyncValidator",
    "ValidationCode",
    "ValidationContext",
    "ValidationError",
    "ValidationResult",
    "Validator",
    "merge_results",
    "array",
    "async_custom",
    "boolean",
    "custom",
    "custom_error",
    "date",
    "email",
    "integer",
    "integer_type",
    "literal",
    "max_length",
    "maximum",
    "min_length",
    "minimum",
    "not_empty",
    "number",
    "obj",
    "optional",
    "pattern",
    "positive",
    "refine",
    "string",
    "tuple_of",
    "union",
    "url",
    "ValidatorBuilder",
    "ValidatorFactory",
    "v",
]
