"""
DataPipeline: Asynchronous Data Transformation over TaskEither

A pipeline wraps a TaskEither[list[PipelineError], list[T]]. Every stage
returns a new pipeline; once a stage fails, later stages are skipped and
the errors travel to the terminal unchanged.

Stages:
    source -> validate -> transform/filter/map_async -> group_by/aggregate
           -> join -> recover -> run()

Error handling:
- validate() and from_csv() aggregate one error per bad item/row
- Any exception raised by a stage function becomes a single
  PipelineError tagged with that stage's name
- recover() is the only stage that runs on a failed pipeline

Pipelines are lazy and re-runnable: each run() re-executes the source.

Usage:
    result = await (
        DataPipeline.from_csv("users.csv")
        .validate(require_email)
        .transform(transforms.pick(["name", "email"]))
        .filter(lambda u: u["email"].endswith("@example.com"))
        .run()
    )
"""

from __future__ import annotations

import asyncio
import csv
import io
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import (
    Any,
    Awaitable,
    Callable,
    Generic,
    Hashable,
    Iterable,
    Optional,
    TypeVar,
    Union,
)

import httpx

from fpcore.core.errors import PipelineError, PipelineFailedError
from fpcore.core.types import Either, Left, Right
from fpcore.task.task_either import TaskEither

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")
V = TypeVar("V")
K = TypeVar("K", bound=Hashable)

PipelineResult = Either[list[PipelineError], list[T]]
ValidationRule = Callable[[Any], Either[Any, U]]


@dataclass(frozen=True)
class Group(Generic[K, T]):
    """Items sharing one group_by() key."""
    key: K
    items: list[T]


@dataclass(frozen=True)
class PipelineStats:
    """Outcome summary of one pipeline run."""
    total_items: int
    errors: list[PipelineError]
    has_errors: bool


def _failure(
    stage: str,
    message: str,
    cause: Optional[BaseException] = None,
    data: Any = None,
) -> Left[list[PipelineError]]:
    return Left([PipelineError.stage_failed(stage, message, data=data, cause=cause)])


def _describe(error: Any) -> str:
    """Render a validation rule's Left payload as one message."""
    if isinstance(error, (list, tuple)):
        return "; ".join(str(e) for e in error)
    return str(error)


class DataPipeline(Generic[T]):
    """Immutable chain of data stages over a list of items."""

    __slots__ = ("_task",)

    def __init__(self, task: TaskEither[list[PipelineError], list[T]]) -> None:
        self._task = task

    # =========================================================================
    # SOURCES
    # =========================================================================
    @classmethod
    def from_items(cls, items: Iterable[T]) -> DataPipeline[T]:
        return cls(TaskEither.of(list(items)))

    @classmethod
    def from_csv(
        cls,
        path: Union[str, Path],
        delimiter: str = ",",
        encoding: str = "utf-8",
    ) -> DataPipeline[dict[str, str]]:
        """
        Rows of a CSV file with a header line, as dicts of stripped strings.

        Blank lines are skipped. Rows whose column count differs from
        the header are reported individually with their line number.
        """
        file_path = Path(path)

        async def settle() -> PipelineResult[dict[str, str]]:
            try:
                content = await asyncio.to_thread(file_path.read_text, encoding=encoding)
            except (OSError, UnicodeDecodeError) as exc:
                return _failure("read", f"File reading failed: {exc}", exc, str(file_path))
            try:
                return _parse_csv(content, delimiter)
            except csv.Error as exc:
                return _failure("parse", f"CSV parsing failed: {exc}", exc)

        return cls(TaskEither(settle))

    @classmethod
    def from_json(
        cls,
        path: Union[str, Path],
        encoding: str = "utf-8",
    ) -> DataPipeline[Any]:
        """Items of a JSON array file; a single object becomes one item."""
        file_path = Path(path)

        async def settle() -> PipelineResult[Any]:
            try:
                content = await asyncio.to_thread(file_path.read_text, encoding=encoding)
            except (OSError, UnicodeDecodeError) as exc:
                return _failure("read", f"File reading failed: {exc}", exc, str(file_path))
            try:
                parsed = json.loads(content)
            except json.JSONDecodeError as exc:
                return _failure("parse", f"JSON parsing failed: {exc}", exc)
            return Right(parsed if isinstance(parsed, list) else [parsed])

        return cls(TaskEither(settle))

    @classmethod
    def from_api(
        cls,
        url: str,
        client: Optional[httpx.AsyncClient] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> DataPipeline[Any]:
        """
        Items of a JSON API response fetched with GET.

        Args:
            url: Absolute URL, or relative to client's base_url
            client: Shared httpx client; a short-lived one is created if None
            headers: Extra request headers
        """
        async def fetch(http: httpx.AsyncClient) -> PipelineResult[Any]:
            try:
                response = await http.get(url, headers=headers)
            except httpx.HTTPError as exc:
                return _failure("fetch", f"API call failed: {exc}", exc, url)
            if not response.is_success:
                return _failure(
                    "fetch",
                    f"API call failed: HTTP {response.status_code}: {response.reason_phrase}",
                    data=url,
                )
            try:
                payload = response.json()
            except json.JSONDecodeError as exc:
                return _failure("parse", f"API response is not JSON: {exc}", exc, url)
            return Right(payload if isinstance(payload, list) else [payload])

        async def settle() -> PipelineResult[Any]:
            if client is not None:
                return await fetch(client)
            async with httpx.AsyncClient() as own_client:
                return await fetch(own_client)

        return cls(TaskEither(settle))

    # =========================================================================
    # STAGES
    # =========================================================================
    def _stage(
        self,
        stage: str,
        message: str,
        fn: Callable[[list[T]], list[U]],
    ) -> DataPipeline[U]:
        async def settle() -> PipelineResult[U]:
            result = await self._task.run()
            if isinstance(result, Left):
                return result
            try:
                return Right(fn(result.value))
            except Exception as exc:
                logger.debug("Stage '%s' raised: %s", stage, exc)
                return _failure(stage, f"{message}: {exc}", exc)
        return DataPipeline(TaskEither(settle))

    def validate(self, rule: ValidationRule[U]) -> DataPipeline[U]:
        """
        Check every item with rule, keeping the Right payloads.

        rule may be any callable returning an Either (including a
        Validator). All failing items are reported as
        "Item <index>: <message>".
        """
        async def settle() -> PipelineResult[U]:
            result = await self._task.run()
            if isinstance(result, Left):
                return result

            errors: list[PipelineError] = []
            values: list[U] = []
            for index, item in enumerate(result.value):
                try:
                    checked = rule(item)
                except Exception as exc:
                    logger.debug("Stage 'validate' raised on item %d: %s", index, exc)
                    return _failure("validate", f"Validation failed: Item {index}: {exc}", exc, item)
                if isinstance(checked, Left):
                    errors.append(PipelineError.stage_failed(
                        "validate",
                        f"Item {index}: {_describe(checked.value)}",
                        data=item,
                    ))
                else:
                    values.append(checked.value)
            return Left(errors) if errors else Right(values)

        return DataPipeline(TaskEither(settle))

    def transform(self, fn: Callable[[T], U]) -> DataPipeline[U]:
        return self._stage("transform", "Transformation failed",
                           lambda items: [fn(item) for item in items])

    map = transform

    def filter(self, predicate: Callable[[T], bool]) -> DataPipeline[T]:
        return self._stage("filter", "Filtering failed",
                           lambda items: [item for item in items if predicate(item)])

    def map_async(
        self,
        fn: Callable[[T], Awaitable[U]],
        concurrency: Optional[int] = None,
    ) -> DataPipeline[U]:
        """
        Apply an async fn to every item concurrently.

        Args:
            fn: Coroutine function applied per item
            concurrency: Max in-flight calls (unbounded if None)
        """
        async def settle() -> PipelineResult[U]:
            result = await self._task.run()
            if isinstance(result, Left):
                return result

            limiter = asyncio.Semaphore(concurrency) if concurrency else None

            async def apply(item: T) -> U:
                if limiter is None:
                    return await fn(item)
                async with limiter:
                    return await fn(item)

            tasks = [asyncio.create_task(apply(item)) for item in result.value]
            try:
                values = await asyncio.gather(*tasks)
            except Exception as exc:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                return _failure("map_async", f"Async transformation failed: {exc}", exc)
            return Right(list(values))

        return DataPipeline(TaskEither(settle))

    def group_by(self, key_fn: Callable[[T], K]) -> DataPipeline[Group[K, T]]:
        """Group items by key, groups ordered by first appearance."""
        def group(items: list[T]) -> list[Group[K, T]]:
            groups: dict[K, list[T]] = {}
            for item in items:
                groups.setdefault(key_fn(item), []).append(item)
            return [Group(key, members) for key, members in groups.items()]
        return self._stage("group_by", "Grouping failed", group)

    def aggregate(self, fn: Callable[[list[T]], U]) -> DataPipeline[U]:
        """Collapse all items into a single-item pipeline."""
        return self._stage("aggregate", "Aggregation failed", lambda items: [fn(items)])

    def join(
        self,
        other: DataPipeline[U],
        join_fn: Callable[[T, U], Optional[V]],
    ) -> DataPipeline[V]:
        """
        Nested-loop join; pairs for which join_fn returns None are dropped.

        Both sides run concurrently. If either failed, its errors are
        returned (this side's first).
        """
        async def settle() -> PipelineResult[V]:
            left_result, right_result = await asyncio.gather(
                self._task.run(), other._task.run(),
            )
            if isinstance(left_result, Left):
                return left_result
            if isinstance(right_result, Left):
                return right_result
            try:
                joined = [
                    pair
                    for left_item in left_result.value
                    for right_item in right_result.value
                    if (pair := join_fn(left_item, right_item)) is not None
                ]
            except Exception as exc:
                return _failure("join", f"Join operation failed: {exc}", exc)
            return Right(joined)

        return DataPipeline(TaskEither(settle))

    def recover(self, fn: Callable[[list[PipelineError]], list[T]]) -> DataPipeline[T]:
        """Replace a failed pipeline's errors with fallback items."""
        async def settle() -> PipelineResult[T]:
            result = await self._task.run()
            if isinstance(result, Right):
                return result
            try:
                return Right(list(fn(result.value)))
            except Exception as exc:
                return _failure("recover", f"Recovery failed: {exc}", exc)

        return DataPipeline(TaskEither(settle))

    def debug(self, label: Optional[str] = None) -> DataPipeline[T]:
        """Log the intermediate result without changing it."""
        async def settle() -> PipelineResult[T]:
            result = await self._task.run()
            logger.info("[DEBUG%s]: %r", f" - {label}" if label else "", result)
            return result

        return DataPipeline(TaskEither(settle))

    def collect(self) -> DataPipeline[T]:
        return self

    # =========================================================================
    # TERMINALS
    # =========================================================================
    @property
    def task(self) -> TaskEither[list[PipelineError], list[T]]:
        return self._task

    async def run(self) -> PipelineResult[T]:
        return await self._task.run()

    async def run_and_get(self) -> list[T]:
        """
        Run and return the items.

        Raises:
            PipelineFailedError: If any stage failed
        """
        result = await self._task.run()
        if isinstance(result, Left):
            raise PipelineFailedError(result.value)
        return result.value

    async def get_stats(self) -> PipelineStats:
        result = await self._task.run()
        if isinstance(result, Left):
            return PipelineStats(total_items=0, errors=result.value, has_errors=True)
        return PipelineStats(total_items=len(result.value), errors=[], has_errors=False)


def _parse_csv(content: str, delimiter: str) -> PipelineResult[dict[str, str]]:
    reader = csv.reader(io.StringIO(content), delimiter=delimiter)
    rows: list[tuple[int, list[str]]] = []
    # Row numbers name the first physical line of each record
    first_line = 1
    for row in reader:
        if row:
            rows.append((first_line, [cell.strip() for cell in row]))
        first_line = reader.line_num + 1
    if not rows:
        return _failure("parse", "Empty CSV file")

    _, headers = rows[0]
    errors: list[PipelineError] = []
    records: list[dict[str, str]] = []
    for line_number, values in rows[1:]:
        if len(values) != len(headers):
            errors.append(PipelineError.stage_failed(
                "parse",
                f"Row {line_number}: Column count mismatch",
                data={"expected": len(headers), "actual": len(values)},
            ))
            continue
        records.append(dict(zip(headers, values)))
    return Left(errors) if errors else Right(records)
