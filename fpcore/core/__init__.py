"""
Core module: Option/Either types, combinators, error hierarchy, and configuration.

This module provides the foundational abstractions:
- Option/Either monads for zero-exception control flow
- Composition and currying helpers for point-free pipelines
- Exhaustive error hierarchy with pattern matching support
- Configuration management with validation
"""

from fpcore.core.types import (
    Option,
    Some,
    Nothing,
    NOTHING,
    some,
    nothing,
    Either,
    Left,
    Right,
    left,
    right,
    from_maybe,
    to_maybe,
    maybe,
    option_to_either,
    either_to_option,
    sequence_either,
    traverse_either,
    collect_all,
    validate_all,
    UnwrapError,
)
from fpcore.core.errors import (
    ErrorCode,
    FpCoreError,
    ReliabilityError,
    ApiError,
    PipelineError,
    ConfigError,
    TaskFailedError,
    PipelineFailedError,
)
from fpcore.core.config import FpCoreConfig

__all__ = [
    "Option",
    "Some",
    "Nothing",
    "NOTHING",
    "some",
    "nothing",
    "Either",
    "Left",
    "Right",
    "left",
    "right",
    "from_maybe",
    "to_maybe",
    "maybe",
    "option_to_either",
    "either_to_option",
    "sequence_either",
    "traverse_either",
    "collect_all",
    "validate_all",
    "UnwrapError",
    "ErrorCode",
    "FpCoreError",
    "ReliabilityError",
    "ApiError",
    "PipelineError",
    "ConfigError",
    "TaskFailedError",
    "PipelineFailedError",
    "FpCoreConfig",
]
