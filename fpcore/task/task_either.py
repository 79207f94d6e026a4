"""
TaskEither: Lazy Asynchronous Either

Wraps a zero-argument coroutine factory that eventually yields an
Either[L, R]. Nothing runs until run() (or await) is called, and every
transformation returns a new TaskEither wrapping a new factory, so the
original is never mutated.

State (per run):
    PENDING -> SETTLED_RIGHT | SETTLED_LEFT

Replay semantics:
- Tasks built from factories (of, left, from_either, try_call, or
  from_awaitable given a callable) re-execute their source on every run.
- Tasks built by from_awaitable() from an already-created coroutine or
  future memoize that source: the first run schedules it, later runs
  await the same settled future instead of re-executing it.

Exceptions:
    from_awaitable()/try_call() are the only places exceptions are
    converted into Left values. Exceptions raised by user callbacks in
    map/flat_map/fold propagate out of run(). Cancellation is never
    converted.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import (
    Any,
    Awaitable,
    Callable,
    Generator,
    Generic,
    TypeVar,
    Union,
)

from fpcore.core.errors import TaskFailedError
from fpcore.core.types import Either, Left, Right

L = TypeVar("L")
R = TypeVar("R")
U = TypeVar("U")
F = TypeVar("F")

Thunk = Callable[[], Awaitable[Either[L, R]]]


class TaskEither(Generic[L, R]):
    """
    Asynchronous wrapper around an eventual Either.

    Usage:
        task = (
            TaskEither.try_call(fetch_user, ApiError.network, user_id)
            .map(lambda user: user["profile_id"])
            .flat_map(load_profile)
        )
        result = await task.run()        # Either[ApiError, Profile]
        name = await task.fold(str, lambda p: p.name)
    """

    __slots__ = ("_thunk",)

    def __init__(self, thunk: Thunk) -> None:
        self._thunk = thunk

    # =========================================================================
    # CONSTRUCTORS
    # =========================================================================
    @classmethod
    def of(cls, value: R) -> TaskEither[Any, R]:
        """Immediately-resolved Right."""
        return cls.from_either(Right(value))

    @classmethod
    def left(cls, error: L) -> TaskEither[L, Any]:
        """Immediately-resolved Left."""
        return cls.from_either(Left(error))

    fail = left

    @classmethod
    def from_either(cls, either: Either[L, R]) -> TaskEither[L, R]:
        async def settle() -> Either[L, R]:
            return either
        return cls(settle)

    @classmethod
    def from_awaitable(
        cls,
        source: Union[Awaitable[R], Callable[[], Awaitable[R]]],
        on_error: Callable[[Exception], L],
    ) -> TaskEither[L, R]:
        """
        Adapt an external asynchronous operation into the Either world.

        Args:
            source: Awaitable (run at most once) or zero-arg factory
                returning an awaitable (run on every run())
            on_error: Maps a raised exception to a domain error

        Returns:
            TaskEither settling Right(value) or Left(on_error(exc))
        """
        factory = source if callable(source) else _once(source)

        async def settle() -> Either[L, R]:
            try:
                value = await factory()
            except Exception as exc:
                return Left(on_error(exc))
            return Right(value)

        return cls(settle)

    @classmethod
    def try_call(
        cls,
        fn: Callable[..., Awaitable[R]],
        on_error: Callable[[Exception], L],
        *args: Any,
        **kwargs: Any,
    ) -> TaskEither[L, R]:
        """Call a coroutine function on every run, converting raised errors."""
        return cls.from_awaitable(lambda: fn(*args, **kwargs), on_error)

    # =========================================================================
    # TRANSFORMATIONS
    # =========================================================================
    def map(self, fn: Callable[[R], U]) -> TaskEither[L, U]:
        """Apply fn to the Right payload once settled."""
        async def settle() -> Either[L, U]:
            return (await self._thunk()).map(fn)
        return TaskEither(settle)

    def map_left(self, fn: Callable[[L], F]) -> TaskEither[F, R]:
        """Apply fn to the Left payload once settled."""
        async def settle() -> Either[F, R]:
            return (await self._thunk()).map_left(fn)
        return TaskEither(settle)

    def bimap(
        self,
        on_left: Callable[[L], F],
        on_right: Callable[[R], U],
    ) -> TaskEither[F, U]:
        return self.map(on_right).map_left(on_left)

    def flat_map(self, fn: Callable[[R], TaskEither[L, U]]) -> TaskEither[L, U]:
        """
        Asynchronous monadic bind.

        fn runs only after this task settles Right, and its task is
        awaited before the result settles. A Left short-circuits
        without invoking fn.
        """
        async def settle() -> Either[L, U]:
            either = await self._thunk()
            if isinstance(either, Left):
                return either
            return await fn(either.value).run()
        return TaskEither(settle)

    def or_else(self, fn: Callable[[L], TaskEither[F, R]]) -> TaskEither[F, R]:
        """Recover from a Left by binding on the error channel."""
        async def settle() -> Either[F, R]:
            either = await self._thunk()
            if isinstance(either, Right):
                return either
            return await fn(either.value).run()
        return TaskEither(settle)

    def tap(self, fn: Callable[[R], Any]) -> TaskEither[L, R]:
        """Run a side effect on the Right payload, keeping the value."""
        async def settle() -> Either[L, R]:
            either = await self._thunk()
            if isinstance(either, Right):
                outcome = fn(either.value)
                if inspect.isawaitable(outcome):
                    await outcome
            return either
        return TaskEither(settle)

    # =========================================================================
    # TERMINALS
    # =========================================================================
    async def run(self) -> Either[L, R]:
        """Execute and expose the settled Either."""
        return await self._thunk()

    async def fold(self, on_left: Callable[[L], U], on_right: Callable[[R], U]) -> U:
        """Settle, then collapse into a plain value via exactly one branch."""
        return (await self._thunk()).fold(on_left, on_right)

    async def get_or_raise(self) -> R:
        """
        Settle and return the Right payload.

        Raises:
            TaskFailedError: If the task settled Left
        """
        either = await self._thunk()
        if isinstance(either, Left):
            raise TaskFailedError(either.value)
        return either.value

    def __await__(self) -> Generator[Any, None, Either[L, R]]:
        return self.run().__await__()

    def __repr__(self) -> str:
        return f"TaskEither({getattr(self._thunk, '__qualname__', self._thunk)!s})"


def _once(awaitable: Awaitable[R]) -> Callable[[], Awaitable[R]]:
    """Share one scheduled future between every caller."""
    future: asyncio.Future[R] | None = None

    async def run() -> R:
        nonlocal future
        if future is None:
            future = asyncio.ensure_future(awaitable)
        return await future

    return run
