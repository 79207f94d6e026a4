"""
Functional Result Core for Asynchronous Python

Typed success/failure values and the machinery built on them:
- Option/Either: presence and failure as values, never None or exceptions
- TaskEither: lazy asynchronous Either with parallel/sequence/batch/timeout
- Reliability: retry with exponential backoff and circuit breakers
- Memo: explicit LRU, TTL and bounded memoization caches
- Validation: aggregating schema validators with field paths
- Pipeline: asynchronous data stages with stage-tagged errors
- Client: httpx-based API client returning TaskEither

Author: fpcore Engineering
License: MIT
"""

__version__ = "1.0.0"
__author__ = "fpcore Engineering"

# =============================================================================
# PUBLIC API EXPORTS
# =============================================================================
from fpcore.core.types import (
    Option,
    Some,
    Nothing,
    NOTHING,
    Either,
    Left,
    Right,
    from_maybe,
    to_maybe,
    sequence_either,
    traverse_either,
    collect_all,
    validate_all,
    UnwrapError,
)
from fpcore.core.combinators import compose, pipe, flow, curry, partial
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

# Task exports
from fpcore.task import (
    TaskEither,
    parallel,
    collect_errors,
    sequence,
    traverse,
    batch,
    with_timeout,
)

# Reliability exports
from fpcore.reliability import (
    CircuitBreaker,
    CircuitState,
    RetryPolicy,
    with_retry,
    retry_with_backoff,
)

# Memo exports
from fpcore.memo import LRUCache, Memoizer, memoize_with_expiry, Lazy

# Validation exports
from fpcore.validation import (
    Validator,
    ValidationError,
    ValidationContext,
    ValidatorBuilder,
    v,
)

# Pipeline exports
from fpcore.pipeline import DataPipeline

# Client exports
from fpcore.client import ApiClient, ApiResponse, RequestConfig

__all__ = [
    # Version
    "__version__",
    "__author__",
    # Option / Either
    "Option",
    "Some",
    "Nothing",
    "NOTHING",
    "Either",
    "Left",
    "Right",
    "from_maybe",
    "to_maybe",
    "sequence_either",
    "traverse_either",
    "collect_all",
    "validate_all",
    "UnwrapError",
    # Composition
    "compose",
    "pipe",
    "flow",
    "curry",
    "partial",
    # Errors
    "ErrorCode",
    "FpCoreError",
    "ReliabilityError",
    "ApiError",
    "PipelineError",
    "ConfigError",
    "TaskFailedError",
    "PipelineFailedError",
    # Config
    "FpCoreConfig",
    # Task
    "TaskEither",
    "parallel",
    "collect_errors",
    "sequence",
    "traverse",
    "batch",
    "with_timeout",
    # Reliability
    "CircuitBreaker",
    "CircuitState",
    "RetryPolicy",
    "with_retry",
    "retry_with_backoff",
    # Memo
    "LRUCache",
    "Memoizer",
    "memoize_with_expiry",
    "Lazy",
    # Validation
    "Validator",
    "ValidationError",
    "ValidationContext",
    "ValidatorBuilder",
    "v",
    # Pipeline
    "DataPipeline",
    # Client
    "ApiClient",
    "ApiResponse",
    "RequestConfig",
]
