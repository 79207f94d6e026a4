"""
Function Composition and Point-Free Combinators

Provides:
- Composition (compose, compose3, pipe, flow, pipe_with)
- Currying and partial application (curry, curry3, curry4, partial, partial2, flip)
- Curried forms of every Option/Either operation for use inside pipe()

The curried helpers take their configuration first and the monadic
value last, so they slot directly into pipe()/flow() chains:

    normalize = pipe(
        map_option(str.strip),
        filter_option(bool),
        get_or_else("anonymous"),
    )
"""

from __future__ import annotations

from functools import reduce
from typing import Any, Callable, Iterable, TypeVar

from fpcore.core.types import Either, Option

A = TypeVar("A")
B = TypeVar("B")
C = TypeVar("C")
D = TypeVar("D")
E = TypeVar("E")
T = TypeVar("T")
U = TypeVar("U")
L = TypeVar("L")
R = TypeVar("R")


# =============================================================================
# BASIC COMBINATORS
# =============================================================================
def identity(x: T) -> T:
    return x


def constant(value: T) -> Callable[..., T]:
    """Build a function that ignores its arguments and returns value."""
    return lambda *_args, **_kwargs: value


def compose(f: Callable[[B], C], g: Callable[[A], B]) -> Callable[[A], C]:
    """Right-to-left composition: compose(f, g)(x) == f(g(x))."""
    return lambda a: f(g(a))


def compose3(
    f: Callable[[C], D],
    g: Callable[[B], C],
    h: Callable[[A], B],
) -> Callable[[A], D]:
    return lambda a: f(g(h(a)))


def pipe(*fns: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """
    Left-to-right composition.

    pipe(f, g, h)(x) == h(g(f(x))). An empty pipe is identity.
    """
    return lambda value: reduce(lambda acc, fn: fn(acc), fns, value)


def flow(*fns: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """Alias of pipe() for chains whose steps change the value type."""
    return pipe(*fns)


class pipe_with:
    """
    Fluent wrapper threading a value through successive functions.

    Usage:
        pipe_with(" Ada ").pipe(str.strip).pipe(str.upper).value()  # "ADA"
    """

    __slots__ = ("_value",)

    def __init__(self, value: T) -> None:
        self._value = value

    def pipe(self, fn: Callable[[Any], U]) -> pipe_with:
        return pipe_with(fn(self._value))

    def value(self) -> Any:
        return self._value

    def __repr__(self) -> str:
        return f"pipe_with({self._value!r})"


# =============================================================================
# CURRYING AND PARTIAL APPLICATION
# =============================================================================
def curry(fn: Callable[[A, B], C]) -> Callable[[A], Callable[[B], C]]:
    return lambda a: lambda b: fn(a, b)


def curry3(fn: Callable[[A, B, C], D]) -> Callable[[A], Callable[[B], Callable[[C], D]]]:
    return lambda a: lambda b: lambda c: fn(a, b, c)


def curry4(
    fn: Callable[[A, B, C, D], E],
) -> Callable[[A], Callable[[B], Callable[[C], Callable[[D], E]]]]:
    return lambda a: lambda b: lambda c: lambda d: fn(a, b, c, d)


def partial(fn: Callable[..., T], *partial_args: Any) -> Callable[..., T]:
    """Bind leading positional arguments."""
    def applied(*remaining: Any, **kwargs: Any) -> T:
        return fn(*partial_args, *remaining, **kwargs)
    return applied


def partial2(fn: Callable[[A, B], C]) -> Callable[[A], Callable[[B], C]]:
    return curry(fn)


def flip(fn: Callable[[A, B], C]) -> Callable[[B, A], C]:
    """Swap the order of a two-argument function's parameters."""
    return lambda b, a: fn(a, b)


# =============================================================================
# CURRIED LIST HELPERS
# =============================================================================
def map_list(fn: Callable[[T], U]) -> Callable[[Iterable[T]], list[U]]:
    return lambda items: [fn(item) for item in items]


def filter_list(predicate: Callable[[T], bool]) -> Callable[[Iterable[T]], list[T]]:
    return lambda items: [item for item in items if predicate(item)]


def reduce_list(fn: Callable[[U, T], U], initial: U) -> Callable[[Iterable[T]], U]:
    return lambda items: reduce(fn, items, initial)


# =============================================================================
# CURRIED OPTION OPERATIONS
# =============================================================================
def map_option(fn: Callable[[T], U]) -> Callable[[Option[T]], Option[U]]:
    return lambda option: option.map(fn)


def flat_map_option(fn: Callable[[T], Option[U]]) -> Callable[[Option[T]], Option[U]]:
    return lambda option: option.flat_map(fn)


def get_or_else(default: T) -> Callable[[Option[T]], T]:
    return lambda option: option.get_or_else(default)


def fold_option(
    on_none: Callable[[], U],
    on_some: Callable[[T], U],
) -> Callable[[Option[T]], U]:
    return lambda option: option.fold(on_none, on_some)


def filter_option(predicate: Callable[[T], bool]) -> Callable[[Option[T]], Option[T]]:
    return lambda option: option.filter(predicate)


# =============================================================================
# CURRIED EITHER OPERATIONS
# =============================================================================
def map_either(fn: Callable[[R], U]) -> Callable[[Either[L, R]], Either[L, U]]:
    return lambda either: either.map(fn)


def map_left(fn: Callable[[L], U]) -> Callable[[Either[L, R]], Either[U, R]]:
    return lambda either: either.map_left(fn)


def flat_map_either(
    fn: Callable[[R], Either[L, U]],
) -> Callable[[Either[L, R]], Either[L, U]]:
    return lambda either: either.flat_map(fn)


def fold_either(
    on_left: Callable[[L], U],
    on_right: Callable[[R], U],
) -> Callable[[Either[L, R]], U]:
    return lambda either: either.fold(on_left, on_right)


def swap(either: Either[L, R]) -> Either[R, L]:
    """Exchange channels; swap(swap(e)) == e."""
    return either.swap()
