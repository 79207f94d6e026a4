"""
HTTP Client Types

RequestConfig and ApiResponse are frozen; interceptors return modified
copies (dataclasses.replace / with_headers) instead of mutating.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Literal, Mapping, Optional, TypeVar

T = TypeVar("T")

HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def is_success_status(status: int) -> bool:
    return 200 <= status < 300


class RequestAborted(Exception):
    """Raised by a request interceptor to cancel the request."""


@dataclass(frozen=True)
class RequestConfig:
    """
    One HTTP request.

    timeout_ms, retries and retry_delay_ms fall back to the client's
    defaults when left as None.
    """

    method: HttpMethod = "GET"
    url: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Optional[Mapping[str, Any]] = None
    body: Any = None
    timeout_ms: Optional[float] = None
    retries: Optional[int] = None
    retry_delay_ms: Optional[float] = None
    validate_status: Callable[[int], bool] = is_success_status
    transform_request: Optional[Callable[[Any], Any]] = None
    transform_response: Optional[Callable[[Any], Any]] = None

    def with_headers(self, **headers: str) -> RequestConfig:
        return dataclasses.replace(self, headers={**self.headers, **headers})

    def replace(self, **changes: Any) -> RequestConfig:
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class ApiResponse(Generic[T]):
    """Decoded response plus transport metadata."""

    data: T
    status: int
    status_text: str
    headers: Mapping[str, str]
    url: str
    duration_ms: float

    def replace(self, **changes: Any) -> ApiResponse[Any]:
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class CacheStats:
    size: int
    keys: list[str]
