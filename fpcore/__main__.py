#!/usr/bin/env python3
"""
fpcore demo

Walks through the result core, the async combinators, the reliability
wrappers, validation, the data pipeline and the API client. Runs
offline: the API client talks to an in-process httpx.MockTransport.

Usage:
    python -m fpcore

    # Or with custom config
    FPCORE_LOG_LEVEL=DEBUG FPCORE_LOG_JSON=false python -m fpcore
"""

from __future__ import annotations

import asyncio
import sys

import httpx

from fpcore.client import ApiClient, auth
from fpcore.core.config import FpCoreConfig
from fpcore.core.errors import ApiError, ReliabilityError
from fpcore.core.types import Left, Right, from_maybe
from fpcore.core.utils import safe_parse_int
from fpcore.observability.logging import setup_logging_from_config
from fpcore.pipeline import DataPipeline, aggregates
from fpcore.reliability import CircuitBreaker, RetryPolicy
from fpcore.task import TaskEither, parallel, with_timeout
from fpcore.validation import v


def _demo_transport() -> httpx.MockTransport:
    users = [
        {"id": 1, "name": "Ada", "email": "ada@example.com", "age": 36},
        {"id": 2, "name": "Linus", "email": "linus@example.com", "age": 28},
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/users":
            return httpx.Response(200, json=users)
        return httpx.Response(404, json={"error": "not found"})

    return httpx.MockTransport(handler)


async def demo() -> None:
    print("\n" + "=" * 60)
    print("fpcore - Functional Result Core Demo")
    print("=" * 60 + "\n")

    config_result = FpCoreConfig.from_env().flat_map(lambda c: c.validate())
    if isinstance(config_result, Left):
        print(f"Configuration error: {config_result.value}")
        sys.exit(1)
    config = config_result.value
    setup_logging_from_config(config.observability)
    print("✓ Configuration loaded and validated")

    # 1. Option / Either
    port = safe_parse_int("8080").map(lambda p: p + 1).get_or_else(80)
    missing = from_maybe(None).map(lambda x: x * 2).get_or_else("absent")
    print(f"\n1. Option: port={port}, missing={missing}")

    # 2. Parallel aggregation and timeout
    async def slow() -> str:
        await asyncio.sleep(0.2)
        return "late"

    results = await parallel([
        TaskEither.of(1),
        TaskEither.left("boom"),
        TaskEither.of(3),
    ]).run()
    timed = await with_timeout(
        TaskEither.try_call(slow, str), 50, "slow", cancel_on_timeout=True,
    ).run()
    print(f"2. parallel -> {results}; with_timeout -> {timed.value}")

    # 3. Retry and circuit breaker
    attempts = {"count": 0}

    async def flaky() -> str:
        attempts["count"] += 1
        if attempts["count"] < 3:
            raise ConnectionError("transient")
        return "ok"

    policy = RetryPolicy(max_retries=3, delay_ms=10)
    retried = await policy.apply(lambda: TaskEither.try_call(flaky, ApiError.network)).run()
    print(f"3. retry -> {retried} after {attempts['count']} attempts")

    breaker = CircuitBreaker(
        lambda: TaskEither.left(ApiError.network("down")),
        threshold=2,
        name="demo",
    )
    for _ in range(3):
        outcome = await breaker.execute().run()
    rejected = isinstance(outcome, Left) and isinstance(outcome.value, ReliabilityError)
    print(f"   breaker state={breaker.state.name}, third call rejected={rejected}")

    # 4. Validation + pipeline over the API client
    user_schema = v.object({
        "name": v.string().not_empty(),
        "email": v.string().email(),
        "age": v.number().integer().minimum(0),
    })

    async with ApiClient(
        "http://demo.local",
        auth.bearer("demo-token"),
        transport=_demo_transport(),
    ) as api:
        response = await api.get("/users").run()
        match response:
            case Right(ok):
                print(f"\n4. GET /users -> {ok.status} ({len(ok.data)} users)")
                items = ok.data
            case Left(error):
                print(f"   Error: {error}")
                items = []
        stats = api.cache_stats()

    average_age = await (
        DataPipeline.from_items(items)
        .validate(user_schema.build())
        .map(lambda user: user["age"])
        .aggregate(aggregates.average)
        .run_and_get()
    )
    print(f"   pipeline average age={average_age[0]:.1f}, cached responses={stats.size}")

    print("\n✓ Demo complete")
    print("=" * 60 + "\n")


async def main() -> None:
    """Main entry point."""
    try:
        await demo()
    except KeyboardInterrupt:
        print("\nInterrupted")


def run() -> None:
    """Synchronous entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
