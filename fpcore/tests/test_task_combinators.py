"""
Unit Tests: TaskEither Combinators

Tests:
    - parallel: concurrency, input-order results, aggregated failures
    - collect_errors: lazy factories
    - sequence/traverse: strict ordering and first-failure stop
    - batch: batch sizing and cross-batch error aggregation
    - with_timeout: in-time results, timeout Left, cancel vs keep running
"""

import asyncio

import pytest

from fpcore.core.errors import ErrorCode, ReliabilityError
from fpcore.core.types import Left, Right
from fpcore.task import (
    TaskEither,
    batch,
    collect_errors,
    parallel,
    sequence,
    traverse,
    with_timeout,
)


# =============================================================================
# TEST UTILITIES
# =============================================================================
def delayed(value, delay_s, log=None):
    async def work():
        await asyncio.sleep(delay_s)
        if log is not None:
            log.append(value)
        return value
    return TaskEither.try_call(work, str)


async def settle_background(rounds: int = 5) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


class TestParallel:
    """Tests for parallel() and collect_errors()."""

    @pytest.mark.asyncio
    async def test_preserves_input_order(self):
        completed = []
        tasks = [delayed("slow", 0.03, completed), delayed("mid", 0.01, completed),
                 delayed("fast", 0.0, completed)]

        result = await parallel(tasks).run()

        assert result == Right(["slow", "mid", "fast"])
        assert completed == ["fast", "mid", "slow"]

    @pytest.mark.asyncio
    async def test_runs_concurrently(self):
        in_flight = 0
        peak = 0

        async def work():
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return True

        await parallel(TaskEither.try_call(work, str) for _ in range(4)).run()
        assert peak == 4

    @pytest.mark.asyncio
    async def test_aggregates_every_failure(self):
        result = await parallel([
            TaskEither.of(1),
            TaskEither.left("a"),
            TaskEither.of(3),
            TaskEither.left("b"),
        ]).run()
        assert result == Left(["a", "b"])

    @pytest.mark.asyncio
    async def test_empty(self):
        assert await parallel([]).run() == Right([])

    @pytest.mark.asyncio
    async def test_collect_errors_invokes_factories_on_run(self):
        created = []

        def factory(n):
            def make():
                created.append(n)
                return TaskEither.of(n) if n % 2 else TaskEither.left(f"even {n}")
            return make

        task = collect_errors([factory(1), factory(2), factory(4)])
        assert created == []
        assert await task.run() == Left(["even 2", "even 4"])
        assert created == [1, 2, 4]


class TestSequence:
    """Tests for sequence() and traverse()."""

    @pytest.mark.asyncio
    async def test_runs_one_after_another(self):
        events = []

        def step(name):
            def make():
                events.append(f"create {name}")

                async def work():
                    events.append(f"run {name}")
                    await asyncio.sleep(0)
                    events.append(f"done {name}")
                    return name
                return TaskEither.try_call(work, str)
            return make

        result = await sequence([step("a"), step("b")]).run()

        assert result == Right(["a", "b"])
        assert events == ["create a", "run a", "done a", "create b", "run b", "done b"]

    @pytest.mark.asyncio
    async def test_stops_at_first_failure(self):
        invoked = []

        def make(n, fail=False):
            def factory():
                invoked.append(n)
                return TaskEither.left(f"failed {n}") if fail else TaskEither.of(n)
            return factory

        result = await sequence([make(1), make(2, fail=True), make(3)]).run()

        assert result == Left("failed 2")
        assert invoked == [1, 2]

    @pytest.mark.asyncio
    async def test_accepts_ready_tasks(self):
        assert await sequence([TaskEither.of(1), TaskEither.of(2)]).run() == Right([1, 2])

    @pytest.mark.asyncio
    async def test_empty(self):
        assert await sequence([]).run() == Right([])

    @pytest.mark.asyncio
    async def test_traverse(self):
        seen = []

        def check(n):
            seen.append(n)
            return TaskEither.of(n * 10) if n < 3 else TaskEither.left(f"too big {n}")

        assert await traverse([1, 2], check).run() == Right([10, 20])
        seen.clear()
        assert await traverse([1, 3, 2], check).run() == Left("too big 3")
        assert seen == [1, 3]


class TestBatch:
    """Tests for batch()."""

    @pytest.mark.asyncio
    async def test_processes_in_batches(self):
        in_flight = 0
        peak = 0

        async def work(n):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.005)
            in_flight -= 1
            return n * 2

        result = await batch(range(7), lambda n: TaskEither.try_call(work, str, n), 3).run()

        assert result == Right([0, 2, 4, 6, 8, 10, 12])
        assert peak == 3

    @pytest.mark.asyncio
    async def test_collects_errors_from_all_batches(self):
        processed = []

        def process(n):
            processed.append(n)
            return TaskEither.left(f"bad {n}") if n in (1, 4) else TaskEither.of(n)

        result = await batch([0, 1, 2, 3, 4], process, batch_size=2).run()

        assert result == Left(["bad 1", "bad 4"])
        assert processed == [0, 1, 2, 3, 4]

    def test_rejects_invalid_batch_size(self):
        with pytest.raises(ValueError):
            batch([1], TaskEither.of, batch_size=0)


class TestWithTimeout:
    """Tests for with_timeout()."""

    @pytest.mark.asyncio
    async def test_returns_result_in_time(self):
        assert await with_timeout(TaskEither.of("fast"), 1000).run() == Right("fast")
        assert await with_timeout(TaskEither.left("e"), 1000).run() == Left("e")

    @pytest.mark.asyncio
    async def test_timeout_left(self):
        never = asyncio.Event()

        async def hang():
            await never.wait()

        result = await with_timeout(
            TaskEither.try_call(hang, str), 10, "hang", cancel_on_timeout=True,
        ).run()

        assert isinstance(result, Left)
        error = result.value
        assert isinstance(error, ReliabilityError)
        assert error.code is ErrorCode.RELIABILITY_TIMEOUT
        assert error.context == {"operation": "hang", "timeout_ms": 10}

    @pytest.mark.asyncio
    async def test_custom_timeout_error(self):
        never = asyncio.Event()

        async def hang():
            await never.wait()

        result = await with_timeout(
            TaskEither.try_call(hang, str), 5,
            cancel_on_timeout=True, on_timeout=lambda: "too slow",
        ).run()
        assert result == Left("too slow")

    @pytest.mark.asyncio
    async def test_losing_task_keeps_running_by_default(self):
        release = asyncio.Event()
        finished = []

        async def slow():
            await release.wait()
            finished.append("done")
            return "late"

        result = await with_timeout(TaskEither.try_call(slow, str), 10).run()
        assert isinstance(result, Left)

        release.set()
        await settle_background()
        assert finished == ["done"]

    @pytest.mark.asyncio
    async def test_cancel_on_timeout_stops_work(self):
        cancelled = []

        async def slow():
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.append(True)
                raise

        await with_timeout(TaskEither.try_call(slow, str), 10, cancel_on_timeout=True).run()
        await settle_background()
        assert cancelled == [True]
