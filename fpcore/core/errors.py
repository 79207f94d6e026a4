"""
Exhaustive Error Hierarchy for fpcore

Design Principles:
- Forbid exceptions for control flow (errors travel on the Left channel)
- Enforce exhaustive pattern matching for all error variants
- Never swallow errors or use null for absence
- Carry full error context for debugging

Each error type includes:
- Unique error code for programmatic handling
- Human-readable message for logging
- Optional cause for root cause analysis
- Timestamp for correlation across log lines

Errors subclass Exception so a caller may choose to raise one at the
outermost boundary (typically from a fold()'s on_left branch), but
nothing inside the library raises them.

Usage:
    result = await client.get("/users/1").run()
    match result:
        case Right(response):
            render(response.data)
        case Left(ApiError(code=ErrorCode.API_HTTP) as err):
            show_status(err.status)
        case Left(err):
            log(err)
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from fpcore.core.types import Timestamp, UnwrapError


# =============================================================================
# ERROR CODE ENUMERATION
# =============================================================================
class ErrorCode(Enum):
    """
    Unique error codes for programmatic error handling.

    Codes are grouped by subsystem:
    - 1xxx: Reliability errors (retry, timeout, circuit breaker)
    - 2xxx: API client errors
    - 3xxx: Pipeline errors
    - 9xxx: Configuration/internal errors
    """

    # Reliability errors (1xxx)
    RELIABILITY_CIRCUIT_OPEN = 1001
    RELIABILITY_RETRY_EXHAUSTED = 1002
    RELIABILITY_TIMEOUT = 1003

    # API client errors (2xxx)
    API_NETWORK = 2001
    API_HTTP = 2002
    API_PARSE = 2003
    API_TIMEOUT = 2004
    API_ABORTED = 2005

    # Pipeline errors (3xxx)
    PIPELINE_STAGE_FAILED = 3001

    # Configuration/internal errors (9xxx)
    CONFIG_INVALID = 9001
    INTERNAL_ERROR = 9002


# =============================================================================
# BASE ERROR CLASS
# =============================================================================
@dataclass
class FpCoreError(Exception):
    """
    Base class for all fpcore errors.

    Provides common infrastructure for error handling:
    - Unique error ID for log correlation
    - Error code for programmatic handling
    - Timestamp for correlation
    - Cause for root cause analysis
    """

    code: ErrorCode
    message: str
    error_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: Timestamp = field(default_factory=Timestamp.now)
    cause: Optional[BaseException] = None
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Initialize Exception base class with message
        super().__init__(self.message)

    def with_context(self, **kwargs: Any) -> FpCoreError:
        """
        Add context to error (returns new instance of the same class).

        Context is useful for debugging but should not
        contain sensitive information.
        """
        return dataclasses.replace(self, context={**self.context, **kwargs})

    def to_dict(self) -> dict[str, Any]:
        """Serialize error to dictionary for logging/API responses."""
        return {
            "error_id": self.error_id,
            "code": self.code.name,
            "code_value": self.code.value,
            "message": self.message,
            "timestamp_nanos": self.timestamp.nanos,
            "context": self.context,
        }

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message} (id={self.error_id[:8]})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"code={self.code.name}, "
            f"message={self.message!r}, "
            f"error_id={self.error_id!r})"
        )


# =============================================================================
# RELIABILITY ERRORS
# =============================================================================
@dataclass(repr=False)
class ReliabilityError(FpCoreError):
    """
    Errors from reliability combinators (circuit breakers, retries, timeouts).
    """

    @classmethod
    def circuit_open(
        cls,
        circuit_name: str,
        failure_count: int,
        retry_after_ms: int,
    ) -> ReliabilityError:
        """Circuit breaker is open, failing fast."""
        return cls(
            code=ErrorCode.RELIABILITY_CIRCUIT_OPEN,
            message=f"Circuit '{circuit_name}' is OPEN after {failure_count} failures",
            context={
                "circuit_name": circuit_name,
                "failure_count": failure_count,
                "retry_after_ms": retry_after_ms,
            },
        )

    @classmethod
    def retry_exhausted(
        cls,
        attempts: int,
        last_error: str,
        cause: Optional[BaseException] = None,
    ) -> ReliabilityError:
        """All retry attempts exhausted."""
        return cls(
            code=ErrorCode.RELIABILITY_RETRY_EXHAUSTED,
            message=f"Retry exhausted after {attempts} attempts: {last_error}",
            cause=cause,
            context={"attempts": attempts, "last_error": last_error},
        )

    @classmethod
    def timeout(
        cls,
        operation: str,
        timeout_ms: float,
    ) -> ReliabilityError:
        """Operation timed out."""
        return cls(
            code=ErrorCode.RELIABILITY_TIMEOUT,
            message=f"Operation '{operation}' timed out after {timeout_ms}ms",
            context={"operation": operation, "timeout_ms": timeout_ms},
        )


# =============================================================================
# API CLIENT ERRORS
# =============================================================================
@dataclass(repr=False)
class ApiError(FpCoreError):
    """
    Errors from the HTTP API client.

    Closed set of variants: network, HTTP status, parse, timeout, aborted.
    The variant is carried by code; status and details live in context.
    """

    @property
    def status(self) -> Optional[int]:
        return self.context.get("status")

    @property
    def details(self) -> Any:
        return self.context.get("details")

    @classmethod
    def network(
        cls,
        message: str = "Network request failed",
        cause: Optional[BaseException] = None,
    ) -> ApiError:
        """Transport-level failure (DNS, connection refused, reset)."""
        return cls(code=ErrorCode.API_NETWORK, message=message, cause=cause)

    @classmethod
    def http_error(
        cls,
        status: int,
        status_text: str,
        details: Any = None,
    ) -> ApiError:
        """Response status rejected by validate_status."""
        return cls(
            code=ErrorCode.API_HTTP,
            message=f"HTTP {status}: {status_text}",
            context={"status": status, "details": details},
        )

    @classmethod
    def parse(
        cls,
        message: str,
        cause: Optional[BaseException] = None,
    ) -> ApiError:
        """Response body could not be decoded."""
        return cls(code=ErrorCode.API_PARSE, message=message, cause=cause)

    @classmethod
    def timeout(
        cls,
        timeout_ms: float,
        cause: Optional[BaseException] = None,
    ) -> ApiError:
        """Request exceeded its timeout."""
        return cls(
            code=ErrorCode.API_TIMEOUT,
            message=f"Request timed out after {timeout_ms}ms",
            cause=cause,
            context={"timeout_ms": timeout_ms},
        )

    @classmethod
    def aborted(
        cls,
        cause: Optional[BaseException] = None,
    ) -> ApiError:
        """Request was aborted by the caller or an interceptor."""
        return cls(code=ErrorCode.API_ABORTED, message="Request was aborted", cause=cause)


# =============================================================================
# PIPELINE ERRORS
# =============================================================================
@dataclass(repr=False)
class PipelineError(FpCoreError):
    """
    Errors from data pipeline stages.

    Every error names the stage that produced it (read, parse,
    fetch, validate, transform, filter, ...).
    """

    @property
    def stage(self) -> str:
        return self.context.get("stage", "unknown")

    @property
    def data(self) -> Any:
        return self.context.get("data")

    @classmethod
    def stage_failed(
        cls,
        stage: str,
        message: str,
        data: Any = None,
        cause: Optional[BaseException] = None,
    ) -> PipelineError:
        return cls(
            code=ErrorCode.PIPELINE_STAGE_FAILED,
            message=message,
            cause=cause,
            context={"stage": stage, "data": data},
        )


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================
@dataclass(repr=False)
class ConfigError(FpCoreError):
    """Invalid or unparseable configuration."""

    @classmethod
    def invalid(cls, field_name: str, reason: str) -> ConfigError:
        return cls(
            code=ErrorCode.CONFIG_INVALID,
            message=f"Invalid configuration for '{field_name}': {reason}",
            context={"field": field_name, "reason": reason},
        )


# =============================================================================
# BOUNDARY EXCEPTIONS
# =============================================================================
class TaskFailedError(RuntimeError):
    """
    Raised by TaskEither.get_or_raise() when the task settled Left.

    The Left payload is available as .error.
    """

    def __init__(self, error: Any) -> None:
        super().__init__(f"Task failed: {error}")
        self.error = error


class PipelineFailedError(RuntimeError):
    """Raised by DataPipeline.run_and_get() when the pipeline failed."""

    def __init__(self, errors: list[PipelineError]) -> None:
        joined = ", ".join(e.message for e in errors)
        super().__init__(f"Pipeline failed: {joined}")
        self.errors = errors


__all__ = [
    "ErrorCode",
    "FpCoreError",
    "ReliabilityError",
    "ApiError",
    "PipelineError",
    "ConfigError",
    "TaskFailedError",
    "PipelineFailedError",
    "UnwrapError",
]
