"""
Observability module: structured logging.
"""

from fpcore.observability.logging import (
    JsonFormatter,
    LogLevel,
    StructuredLogger,
    setup_logging,
    setup_logging_from_config,
)

__all__ = [
    "JsonFormatter",
    "LogLevel",
    "StructuredLogger",
    "setup_logging",
    "setup_logging_from_config",
]
