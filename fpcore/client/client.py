"""
ApiClient: HTTP Client Returning TaskEither

Every request returns TaskEither[ApiError, ApiResponse]; transport
exceptions never escape. The request flow for one run():

    GET cache lookup
      -> request interceptors -> httpx send -> decode -> response interceptors
      -> validate_status (retried with_retry on HTTP errors)
      -> GET cache store | error interceptors on any Left

Exception mapping (at the from_awaitable boundary):
    httpx.TimeoutException -> ApiError.timeout
    RequestAborted         -> ApiError.aborted
    json decode failure    -> ApiError.parse
    httpx.RequestError     -> ApiError.network
    anything else          -> ApiError.network

Usage:
    async with ApiClient("https://api.example.com", auth.bearer(token)) as api:
        result = await api.get("/users/1").run()
        match result:
            case Right(response):
                print(response.data["name"])
            case Left(error):
                print(error.code, error.status)
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
import time
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

import httpx

from fpcore.client.cache import ResponseCache
from fpcore.client.types import ApiResponse, CacheStats, RequestAborted, RequestConfig
from fpcore.core import constants as C
from fpcore.core.config import ClientConfig
from fpcore.core.errors import ApiError, ErrorCode
from fpcore.core.types import Either, Left, Right, Some
from fpcore.reliability.retry import with_retry
from fpcore.task.task_either import TaskEither

logger = logging.getLogger(__name__)

T = TypeVar("T")

MaybeAwaitable = Union[T, Awaitable[T]]
RequestInterceptor = Callable[[RequestConfig], MaybeAwaitable[RequestConfig]]
ResponseInterceptor = Callable[[ApiResponse], MaybeAwaitable[ApiResponse]]
ErrorInterceptor = Callable[[ApiError], MaybeAwaitable[ApiError]]

JSON_CONTENT_TYPE = "application/json"


async def _resolve(value: MaybeAwaitable[T]) -> T:
    if inspect.isawaitable(value):
        return await value
    return value


def _register(registry: list, interceptor: Callable) -> Callable[[], None]:
    registry.append(interceptor)

    def remove() -> None:
        if interceptor in registry:
            registry.remove(interceptor)
    return remove


def to_api_error(exc: Exception, timeout_ms: float) -> ApiError:
    """Map a transport/decoding exception onto the closed ApiError set."""
    if isinstance(exc, httpx.TimeoutException):
        return ApiError.timeout(timeout_ms, cause=exc)
    if isinstance(exc, RequestAborted):
        return ApiError.aborted(cause=exc)
    if isinstance(exc, json.JSONDecodeError):
        return ApiError.parse(f"Invalid JSON response: {exc}", cause=exc)
    if isinstance(exc, httpx.RequestError):
        return ApiError.network(str(exc) or "Network request failed", cause=exc)
    return ApiError.network(str(exc) or "Unknown error occurred", cause=exc)


class ApiClient:
    """
    Async HTTP client with interceptors, status retries and a GET cache.

    Owns one httpx.AsyncClient; close it with aclose() or use the client
    as an async context manager.
    """

    def __init__(
        self,
        base_url: str,
        default_headers: Optional[dict[str, str]] = None,
        timeout_ms: float = C.CLIENT_TIMEOUT_MS,
        enable_cache: bool = True,
        cache_ttl_ms: float = C.CLIENT_CACHE_TTL_MS,
        *,
        retries: int = 0,
        retry_delay_ms: float = C.CLIENT_RETRY_DELAY_MS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            base_url: Prefix for relative request URLs
            default_headers: Headers sent with every request
            timeout_ms: Default per-request timeout
            enable_cache: Cache successful GET responses
            cache_ttl_ms: Lifetime of cached responses
            retries: Default retries for responses failing validate_status
            retry_delay_ms: Default wait between those retries
            transport: httpx transport (httpx.MockTransport in tests)
            sleep: Retry sleep (injectable for tests)
            clock: Cache clock in monotonic seconds
        """
        self._base_url = base_url.rstrip("/")
        self._default_headers = dict(default_headers or {})
        self._timeout_ms = timeout_ms
        self._retries = retries
        self._retry_delay_ms = retry_delay_ms
        self._sleep = sleep
        self._cache = ResponseCache(cache_ttl_ms, clock) if enable_cache else None
        self._http = httpx.AsyncClient(transport=transport, timeout=timeout_ms / 1000)

        self._request_interceptors: list[RequestInterceptor] = []
        self._response_interceptors: list[ResponseInterceptor] = []
        self._error_interceptors: list[ErrorInterceptor] = []

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs: Any) -> ApiClient:
        return cls(
            config.base_url,
            timeout_ms=config.timeout_ms,
            enable_cache=config.enable_cache,
            cache_ttl_ms=config.cache_ttl_ms,
            retries=config.retries,
            retry_delay_ms=config.retry_delay_ms,
            **kwargs,
        )

    # =========================================================================
    # INTERCEPTORS
    # =========================================================================
    def add_request_interceptor(self, interceptor: RequestInterceptor) -> Callable[[], None]:
        """Register interceptor; returns a function that unregisters it."""
        return _register(self._request_interceptors, interceptor)

    def add_response_interceptor(self, interceptor: ResponseInterceptor) -> Callable[[], None]:
        return _register(self._response_interceptors, interceptor)

    def add_error_interceptor(self, interceptor: ErrorInterceptor) -> Callable[[], None]:
        return _register(self._error_interceptors, interceptor)

    # =========================================================================
    # HTTP VERBS
    # =========================================================================
    def get(self, url: str, **options: Any) -> TaskEither[ApiError, ApiResponse]:
        return self.request(RequestConfig(method="GET", url=url, **options))

    def post(self, url: str, body: Any = None, **options: Any) -> TaskEither[ApiError, ApiResponse]:
        return self.request(RequestConfig(method="POST", url=url, body=body, **options))

    def put(self, url: str, body: Any = None, **options: Any) -> TaskEither[ApiError, ApiResponse]:
        return self.request(RequestConfig(method="PUT", url=url, body=body, **options))

    def patch(self, url: str, body: Any = None, **options: Any) -> TaskEither[ApiError, ApiResponse]:
        return self.request(RequestConfig(method="PATCH", url=url, body=body, **options))

    def delete(self, url: str, **options: Any) -> TaskEither[ApiError, ApiResponse]:
        return self.request(RequestConfig(method="DELETE", url=url, **options))

    def request(self, config: RequestConfig) -> TaskEither[ApiError, ApiResponse]:
        """
        Build a lazy request; nothing is sent until the task runs.

        Each run() consults the cache and re-sends on a miss.
        """
        config = self._with_defaults(config)
        cache_key = self._cache_key(config)

        async def settle() -> Either[ApiError, ApiResponse]:
            if config.method == "GET" and self._cache is not None:
                cached = self._cache.get(cache_key)
                if isinstance(cached, Some):
                    logger.debug("Cache hit for %s", cache_key)
                    return Right(cached.value)

            result = await with_retry(
                lambda: self._attempt(config),
                max_retries=config.retries,
                delay_ms=config.retry_delay_ms,
                backoff_multiplier=1.0,
                retry_condition=lambda error: error.code is ErrorCode.API_HTTP,
                sleep=self._sleep,
            ).run()

            if isinstance(result, Left):
                error = result.value
                for interceptor in list(self._error_interceptors):
                    error = await _resolve(interceptor(error))
                return Left(error)

            if config.method == "GET" and self._cache is not None:
                self._cache.set(cache_key, result.value)
            return result

        return TaskEither(settle)

    # =========================================================================
    # EXECUTION
    # =========================================================================
    def _attempt(self, config: RequestConfig) -> TaskEither[ApiError, ApiResponse]:
        """One send, with the response status checked."""
        def check(response: ApiResponse) -> TaskEither[ApiError, ApiResponse]:
            if config.validate_status(response.status):
                return TaskEither.of(response)
            logger.debug("%s %s -> HTTP %d", config.method, response.url, response.status)
            return TaskEither.left(
                ApiError.http_error(response.status, response.status_text, response.data)
            )

        return TaskEither.from_awaitable(
            lambda: self._send(config),
            lambda exc: to_api_error(exc, config.timeout_ms),
        ).flat_map(check)

    async def _send(self, config: RequestConfig) -> ApiResponse:
        for interceptor in list(self._request_interceptors):
            config = await _resolve(interceptor(config))

        url = self._build_url(config.url)
        logger.debug("%s %s", config.method, url)

        started = time.perf_counter()
        response = await self._http.request(
            config.method,
            url,
            headers=dict(config.headers),
            params=config.params,
            content=self._encode_body(config),
            timeout=config.timeout_ms / 1000,
        )

        api_response = ApiResponse(
            data=self._decode_body(response, config),
            status=response.status_code,
            status_text=response.reason_phrase,
            headers=dict(response.headers),
            url=str(response.url),
            duration_ms=(time.perf_counter() - started) * 1000,
        )

        for interceptor in list(self._response_interceptors):
            api_response = await _resolve(interceptor(api_response))
        return api_response

    @staticmethod
    def _encode_body(config: RequestConfig) -> Optional[Union[str, bytes]]:
        if config.body is None:
            return None
        body = config.body
        if config.transform_request is not None:
            body = config.transform_request(body)
        if isinstance(body, (str, bytes)):
            return body
        return json.dumps(body)

    @staticmethod
    def _decode_body(response: httpx.Response, config: RequestConfig) -> Any:
        content_type = response.headers.get("content-type", "")
        if JSON_CONTENT_TYPE in content_type:
            data: Any = response.json() if response.content else None
        elif content_type.startswith("text/"):
            data = response.text
        else:
            data = response.content
        if config.transform_response is not None:
            data = config.transform_response(data)
        return data

    def _with_defaults(self, config: RequestConfig) -> RequestConfig:
        return config.replace(
            headers={"Content-Type": JSON_CONTENT_TYPE, **self._default_headers, **config.headers},
            timeout_ms=config.timeout_ms if config.timeout_ms is not None else self._timeout_ms,
            retries=config.retries if config.retries is not None else self._retries,
            retry_delay_ms=(
                config.retry_delay_ms
                if config.retry_delay_ms is not None
                else self._retry_delay_ms
            ),
        )

    def _build_url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._base_url}/{path.lstrip('/')}"

    def _cache_key(self, config: RequestConfig) -> str:
        params = json.dumps(dict(config.params or {}), sort_keys=True, default=str)
        headers = json.dumps(dict(config.headers), sort_keys=True)
        return f"{config.method}:{self._build_url(config.url)}:{params}:{headers}"

    # =========================================================================
    # CACHE / LIFECYCLE
    # =========================================================================
    def clear_cache(self) -> None:
        if self._cache is not None:
            self._cache.clear()

    def cache_stats(self) -> CacheStats:
        if self._cache is None:
            return CacheStats(size=0, keys=[])
        return self._cache.stats()

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
