"""
Configuration Management for fpcore

Provides validated configuration with sensible defaults.
Supports environment variable overrides.

Design:
- Immutable after validation
- Fail-fast on invalid configuration
- Type-safe with dataclasses
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from fpcore.core import constants as C
from fpcore.core.errors import ConfigError
from fpcore.core.types import Either, Left, Right

ENV_PREFIX = "FPCORE_"


@dataclass(frozen=True)
class RetryConfig:
    """Defaults for with_retry() and RetryPolicy."""

    max_retries: int = C.RETRY_MAX_RETRIES
    delay_ms: int = C.RETRY_DELAY_MS
    backoff_multiplier: float = C.RETRY_BACKOFF_MULTIPLIER
    max_delay_ms: Optional[int] = C.RETRY_MAX_DELAY_MS
    jitter: bool = False


@dataclass(frozen=True)
class CircuitBreakerConfig:
    """Defaults for CircuitBreaker."""

    threshold: int = C.CIRCUIT_BREAKER_THRESHOLD
    timeout_ms: int = C.CIRCUIT_BREAKER_TIMEOUT_MS


@dataclass(frozen=True)
class ClientConfig:
    """HTTP API client configuration."""

    base_url: str = "http://localhost"
    timeout_ms: int = C.CLIENT_TIMEOUT_MS
    retries: int = 0
    retry_delay_ms: int = C.CLIENT_RETRY_DELAY_MS
    enable_cache: bool = True
    cache_ttl_ms: int = C.CLIENT_CACHE_TTL_MS


@dataclass(frozen=True)
class ObservabilityConfig:
    """Logging configuration."""

    log_level: str = "INFO"
    log_json: bool = True


@dataclass(frozen=True)
class FpCoreConfig:
    """Root configuration."""

    retry: RetryConfig = field(default_factory=RetryConfig)
    circuit_breaker: CircuitBreakerConfig = field(default_factory=CircuitBreakerConfig)
    client: ClientConfig = field(default_factory=ClientConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    @classmethod
    def from_env(cls) -> Either[ConfigError, FpCoreConfig]:
        """
        Load configuration from environment variables.

        Environment variables are prefixed with FPCORE_.
        Example: FPCORE_RETRY_MAX_RETRIES, FPCORE_CLIENT_BASE_URL
        """
        try:
            retry = RetryConfig(
                max_retries=int(_env("RETRY_MAX_RETRIES", C.RETRY_MAX_RETRIES)),
                delay_ms=int(_env("RETRY_DELAY_MS", C.RETRY_DELAY_MS)),
                backoff_multiplier=float(
                    _env("RETRY_BACKOFF_MULTIPLIER", C.RETRY_BACKOFF_MULTIPLIER)
                ),
                jitter=_env_bool("RETRY_JITTER", False),
            )

            breaker = CircuitBreakerConfig(
                threshold=int(_env("CIRCUIT_BREAKER_THRESHOLD", C.CIRCUIT_BREAKER_THRESHOLD)),
                timeout_ms=int(_env("CIRCUIT_BREAKER_TIMEOUT_MS", C.CIRCUIT_BREAKER_TIMEOUT_MS)),
            )

            client = ClientConfig(
                base_url=_env("CLIENT_BASE_URL", "http://localhost"),
                timeout_ms=int(_env("CLIENT_TIMEOUT_MS", C.CLIENT_TIMEOUT_MS)),
                retries=int(_env("CLIENT_RETRIES", 0)),
                retry_delay_ms=int(_env("CLIENT_RETRY_DELAY_MS", C.CLIENT_RETRY_DELAY_MS)),
                enable_cache=_env_bool("CLIENT_ENABLE_CACHE", True),
                cache_ttl_ms=int(_env("CLIENT_CACHE_TTL_MS", C.CLIENT_CACHE_TTL_MS)),
            )

            observability = ObservabilityConfig(
                log_level=_env("LOG_LEVEL", "INFO").upper(),
                log_json=_env_bool("LOG_JSON", True),
            )
        except (ValueError, TypeError) as e:
            return Left(ConfigError.invalid("environment", str(e)))

        return Right(cls(
            retry=retry,
            circuit_breaker=breaker,
            client=client,
            observability=observability,
        ))

    def validate(self) -> Either[ConfigError, FpCoreConfig]:
        """Validate configuration invariants."""
        if self.retry.max_retries < 0:
            return Left(ConfigError.invalid("retry.max_retries", "must be >= 0"))
        if self.retry.delay_ms < 0:
            return Left(ConfigError.invalid("retry.delay_ms", "must be >= 0"))
        if self.retry.backoff_multiplier <= 0:
            return Left(ConfigError.invalid("retry.backoff_multiplier", "must be > 0"))
        if self.circuit_breaker.threshold < 1:
            return Left(ConfigError.invalid("circuit_breaker.threshold", "must be >= 1"))
        if self.circuit_breaker.timeout_ms < 0:
            return Left(ConfigError.invalid("circuit_breaker.timeout_ms", "must be >= 0"))
        if self.client.timeout_ms <= 0:
            return Left(ConfigError.invalid("client.timeout_ms", "must be > 0"))
        if self.client.retries < 0:
            return Left(ConfigError.invalid("client.retries", "must be >= 0"))
        if self.observability.log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            return Left(ConfigError.invalid(
                "observability.log_level",
                f"unknown level {self.observability.log_level!r}",
            ))
        return Right(self)


def _env(name: str, default: object) -> str:
    return os.getenv(f"{ENV_PREFIX}{name}", str(default))


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(f"{ENV_PREFIX}{name}")
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"{ENV_PREFIX}{name} must be a boolean, got {raw!r}")
