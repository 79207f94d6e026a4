"""
Ready-made ApiClient interceptors.

Usage:
    api.add_request_interceptor(interceptors.request_logger())
    api.add_request_interceptor(interceptors.auto_refresh_token(
        get_token=store.current,
        refresh_token=store.refresh,
        is_token_expired=jwt_expired,
    ))
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from fpcore.client.types import ApiResponse, RequestAborted, RequestConfig
from fpcore.core.errors import ApiError

logger = logging.getLogger(__name__)


def auto_refresh_token(
    get_token: Callable[[], Optional[str]],
    refresh_token: Callable[[], Awaitable[str]],
    is_token_expired: Callable[[str], bool],
) -> Callable[[RequestConfig], Awaitable[RequestConfig]]:
    """
    Refresh an expired bearer token before the request is sent.

    A failed refresh aborts the request (ApiError code API_ABORTED).
    """
    async def intercept(config: RequestConfig) -> RequestConfig:
        token = get_token()
        if token is None or not is_token_expired(token):
            return config
        try:
            new_token = await refresh_token()
        except Exception as exc:
            raise RequestAborted("Token refresh failed") from exc
        return config.with_headers(Authorization=f"Bearer {new_token}")

    return intercept


def request_logger(
    log: logging.Logger = logger,
) -> Callable[[RequestConfig], RequestConfig]:
    def intercept(config: RequestConfig) -> RequestConfig:
        log.info(
            "-> %s %s", config.method, config.url,
            extra={"headers": dict(config.headers), "body": config.body},
        )
        return config
    return intercept


def response_logger(
    log: logging.Logger = logger,
) -> Callable[[ApiResponse], ApiResponse]:
    def intercept(response: ApiResponse) -> ApiResponse:
        log.info(
            "<- %d %s (%.1fms)", response.status, response.url, response.duration_ms,
        )
        return response
    return intercept


def error_logger(
    log: logging.Logger = logger,
) -> Callable[[ApiError], ApiError]:
    def intercept(error: ApiError) -> ApiError:
        log.error(
            "API error %s: %s", error.code.name, error.message,
            extra={"status": error.status, "details": error.details},
        )
        return error
    return intercept
