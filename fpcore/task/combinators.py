"""
Derived TaskEither Combinators

Concurrency shapes built on TaskEither:
- parallel / collect_errors: run concurrently, aggregate every failure
- sequence / traverse: run one after another, stop at the first failure
- batch: parallel within a batch, sequential across batches
- with_timeout: race a task against a timer

Design:
- Aggregating and short-circuiting are separate combinators, never a flag
- Result order always follows input order, not completion order
- A timed-out task keeps running unless cancel_on_timeout is set
"""

from __future__ import annotations

import asyncio
import logging
from functools import reduce
from typing import Any, Callable, Iterable, Optional, Sequence, TypeVar, Union

from fpcore.core import constants as C
from fpcore.core.errors import ReliabilityError
from fpcore.core.types import Either, Left, Right, collect_all
from fpcore.task.task_either import TaskEither

logger = logging.getLogger(__name__)

T = TypeVar("T")
L = TypeVar("L")
R = TypeVar("R")

TaskSource = Union[TaskEither[L, R], Callable[[], TaskEither[L, R]]]


# =============================================================================
# AGGREGATING (INDEPENDENT WORK)
# =============================================================================
def parallel(tasks: Iterable[TaskEither[L, R]]) -> TaskEither[list[L], list[R]]:
    """
    Run every task concurrently and wait for all of them.

    Returns:
        Right(values) in input order if all succeeded, otherwise
        Left(errors) holding every failure in input order
    """
    tasks = list(tasks)

    async def settle() -> Either[list[L], list[R]]:
        results = await asyncio.gather(*(task.run() for task in tasks))
        return collect_all(results)

    return TaskEither(settle)


def collect_errors(
    operations: Iterable[Callable[[], TaskEither[L, R]]],
) -> TaskEither[list[L], list[R]]:
    """parallel() over zero-arg factories, invoked when the result runs."""
    operations = list(operations)

    async def settle() -> Either[list[L], list[R]]:
        return await parallel(op() for op in operations).run()

    return TaskEither(settle)


# =============================================================================
# SHORT-CIRCUITING (DEPENDENT WORK)
# =============================================================================
def sequence(operations: Iterable[TaskSource]) -> TaskEither[L, list[R]]:
    """
    Run operations strictly one after another.

    Step N+1 is not created before step N settles; the first Left stops
    the chain and becomes the result.
    """
    def step(acc: TaskEither[L, list[R]], source: TaskSource) -> TaskEither[L, list[R]]:
        return acc.flat_map(
            lambda values: _resolve(source).map(lambda value: [*values, value])
        )

    return reduce(step, list(operations), TaskEither.of([]))


def traverse(
    items: Iterable[T],
    fn: Callable[[T], TaskEither[L, R]],
) -> TaskEither[L, list[R]]:
    """sequence() over fn(item); fn is called lazily per step."""
    return sequence([_bind(fn, item) for item in items])


def batch(
    items: Sequence[T],
    processor: Callable[[T], TaskEither[L, R]],
    batch_size: int = C.DEFAULT_BATCH_SIZE,
) -> TaskEither[list[L], list[R]]:
    """
    Process items in fixed-size batches.

    Items inside a batch run concurrently; batches run sequentially.
    Every batch is processed even after a failure, and the failures of
    all batches are collected into the final Left.

    Raises:
        ValueError: If batch_size < 1
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    items = list(items)
    chunks = [items[i:i + batch_size] for i in range(0, len(items), batch_size)]

    async def settle() -> Either[list[L], list[R]]:
        errors: list[L] = []
        values: list[R] = []
        for index, chunk in enumerate(chunks):
            result = await parallel(processor(item) for item in chunk).run()
            if isinstance(result, Left):
                logger.debug(
                    "Batch %d/%d finished with %d failures",
                    index + 1, len(chunks), len(result.value),
                )
                errors.extend(result.value)
            else:
                values.extend(result.value)
        return Left(errors) if errors else Right(values)

    return TaskEither(settle)


# =============================================================================
# TIMEOUT
# =============================================================================
def with_timeout(
    task: TaskEither[L, R],
    timeout_ms: float,
    operation: str = "task",
    *,
    cancel_on_timeout: bool = False,
    on_timeout: Optional[Callable[[], Any]] = None,
) -> TaskEither[Any, R]:
    """
    Race task against a timer.

    Args:
        task: Task to run
        timeout_ms: Deadline in milliseconds
        operation: Name used in the timeout error and log line
        cancel_on_timeout: Cancel the losing work instead of leaving it
            running in the background
        on_timeout: Factory for the Left payload; defaults to
            ReliabilityError.timeout(operation, timeout_ms)

    Returns:
        The task's own Either if it settles in time, else a Left
    """
    async def settle() -> Either[Any, R]:
        future = asyncio.ensure_future(task.run())
        try:
            done, _ = await asyncio.wait({future}, timeout=timeout_ms / 1000)
        except asyncio.CancelledError:
            future.cancel()
            raise

        if future in done:
            return future.result()

        logger.warning("Operation '%s' timed out after %sms", operation, timeout_ms)
        if cancel_on_timeout:
            future.cancel()
        else:
            future.add_done_callback(_log_late_failure)

        error = on_timeout() if on_timeout else ReliabilityError.timeout(operation, timeout_ms)
        return Left(error)

    return TaskEither(settle)


# =============================================================================
# HELPERS
# =============================================================================
def _resolve(source: TaskSource) -> TaskEither[L, R]:
    return source if isinstance(source, TaskEither) else source()


def _bind(fn: Callable[[T], TaskEither[L, R]], item: T) -> Callable[[], TaskEither[L, R]]:
    return lambda: fn(item)


def _log_late_failure(future: asyncio.Future) -> None:
    """Retrieve the outcome of work that lost a timeout race."""
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        logger.error("Timed-out task later raised", exc_info=exc)
