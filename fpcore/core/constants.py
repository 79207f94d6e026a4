"""
Library-Wide Constants for fpcore

All magic numbers and configuration defaults centralized here.
Durations are expressed in milliseconds unless the name says otherwise.
"""

from typing import Final

# =============================================================================
# TIME UNITS
# =============================================================================
MS: Final[int] = 1
SECOND_MS: Final[int] = 1000
MINUTE_MS: Final[int] = 60 * SECOND_MS

# =============================================================================
# RETRY
# =============================================================================
RETRY_MAX_RETRIES: Final[int] = 3
RETRY_DELAY_MS: Final[int] = 1 * SECOND_MS
RETRY_BACKOFF_MULTIPLIER: Final[float] = 2.0
RETRY_MAX_DELAY_MS: Final[int] = 30 * SECOND_MS

# =============================================================================
# CIRCUIT BREAKER
# =============================================================================
CIRCUIT_BREAKER_THRESHOLD: Final[int] = 5
CIRCUIT_BREAKER_TIMEOUT_MS: Final[int] = 1 * MINUTE_MS

# =============================================================================
# TASK COMBINATORS
# =============================================================================
DEFAULT_BATCH_SIZE: Final[int] = 10

# =============================================================================
# HTTP CLIENT
# =============================================================================
CLIENT_TIMEOUT_MS: Final[int] = 30 * SECOND_MS
CLIENT_RETRY_DELAY_MS: Final[int] = 1 * SECOND_MS
CLIENT_CACHE_TTL_MS: Final[int] = 5 * MINUTE_MS
API_KEY_HEADER: Final[str] = "X-API-Key"

# =============================================================================
# MEMOIZATION
# =============================================================================
MEMO_TTL_MS: Final[int] = 1 * MINUTE_MS
MEMOIZER_MAX_SIZE: Final[int] = 1000
MEMOIZER_TTL_MS: Final[int] = 5 * MINUTE_MS
