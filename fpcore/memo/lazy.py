"""
Lazy: a deferred value computed at most once.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")

_PENDING = object()


class Lazy(Generic[T]):
    """
    Deferred computation, evaluated on first access and cached.

    If the computation raises, nothing is cached and the next access
    tries again.

    Usage:
        config = Lazy(load_config)
        port = config.map(lambda c: c.port)   # nothing evaluated yet
        port.value                             # evaluates load_config once
    """

    __slots__ = ("_computation", "_value")

    def __init__(self, computation: Callable[[], T]) -> None:
        self._computation = computation
        self._value: object = _PENDING

    @classmethod
    def of(cls, value: T) -> Lazy[T]:
        return cls(lambda: value)

    @property
    def value(self) -> T:
        if self._value is _PENDING:
            self._value = self._computation()
        return self._value  # type: ignore[return-value]

    def force(self) -> T:
        return self.value

    @property
    def is_computed(self) -> bool:
        return self._value is not _PENDING

    def map(self, fn: Callable[[T], U]) -> Lazy[U]:
        return Lazy(lambda: fn(self.value))

    def flat_map(self, fn: Callable[[T], Lazy[U]]) -> Lazy[U]:
        return Lazy(lambda: fn(self.value).value)

    def __repr__(self) -> str:
        if self.is_computed:
            return f"Lazy({self._value!r})"
        return "Lazy(<pending>)"
