"""
Client module: HTTP API client built on TaskEither and httpx.
"""

from fpcore.client import auth, interceptors
from fpcore.client.cache import ResponseCache
from fpcore.client.client import ApiClient, to_api_error
from fpcore.client.types import (
    ApiResponse,
    CacheStats,
    HttpMethod,
    RequestAborted,
    RequestConfig,
    is_success_status,
)

__all__ = [
    "ApiClient",
    "ApiResponse",
    "CacheStats",
    "HttpMethod",
    "RequestAborted",
    "RequestConfig",
    "ResponseCache",
    "auth",
    "interceptors",
    "is_success_status",
    "to_api_error",
]
