"""
Unit Tests: DataPipeline

Tests:
    - Sources: items, CSV (row errors, empty file, missing file), JSON, API
    - Stages: validate, transform/map, filter, map_async, group_by,
      aggregate, join, recover, debug
    - Stage-tagged errors and short-circuit after failure
    - Terminals: run_and_get, get_stats; re-runnability
    - transforms and aggregates helpers
"""

import asyncio
import logging
from datetime import datetime

import httpx
import pytest

from fpcore.core.errors import PipelineFailedError
from fpcore.core.types import Left, Right
from fpcore.pipeline import DataPipeline, Group, aggregates, transforms
from fpcore.validation import v


# =============================================================================
# TEST UTILITIES
# =============================================================================
def stages(result) -> list[str]:
    assert isinstance(result, Left), f"expected Left, got {result!r}"
    return [error.stage for error in result.value]


def messages(result) -> list[str]:
    return [error.message for error in result.value]


def require_positive(n):
    return Right(n) if n > 0 else Left(f"{n} is not positive")


class TestSources:
    """Tests for pipeline sources."""

    @pytest.mark.asyncio
    async def test_from_items(self):
        assert await DataPipeline.from_items([1, 2, 3]).run() == Right([1, 2, 3])

    @pytest.mark.asyncio
    async def test_from_csv(self, tmp_path):
        path = tmp_path / "users.csv"
        path.write_text("name, email\nAda, ada@example.com\n\nLinus,linus@example.com\n")

        result = await DataPipeline.from_csv(path).run()

        assert result == Right([
            {"name": "Ada", "email": "ada@example.com"},
            {"name": "Linus", "email": "linus@example.com"},
        ])

    @pytest.mark.asyncio
    async def test_from_csv_reports_every_bad_row(self, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("a,b\n1,2\n3\n4,5,6\n")

        result = await DataPipeline.from_csv(path).run()

        assert stages(result) == ["parse", "parse"]
        assert messages(result) == ["Row 3: Column count mismatch", "Row 4: Column count mismatch"]
        assert result.value[1].data == {"expected": 2, "actual": 3}

    @pytest.mark.asyncio
    async def test_from_csv_custom_delimiter(self, tmp_path):
        path = tmp_path / "semi.csv"
        path.write_text("a;b\n1;2\n")
        assert await DataPipeline.from_csv(path, delimiter=";").run() == Right([{"a": "1", "b": "2"}])

    @pytest.mark.asyncio
    async def test_from_csv_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        result = await DataPipeline.from_csv(path).run()
        assert messages(result) == ["Empty CSV file"]

    @pytest.mark.asyncio
    async def test_from_csv_missing_file(self, tmp_path):
        result = await DataPipeline.from_csv(tmp_path / "missing.csv").run()
        assert stages(result) == ["read"]

    @pytest.mark.asyncio
    async def test_from_csv_multiline_field_keeps_row_numbers(self, tmp_path):
        path = tmp_path / "notes.csv"
        path.write_text('id,note\n1,"first\nsecond"\n2\n')

        result = await DataPipeline.from_csv(path).run()

        assert messages(result) == ["Row 4: Column count mismatch"]

    @pytest.mark.asyncio
    async def test_file_sources_report_undecodable_bytes(self, tmp_path):
        csv_path = tmp_path / "latin.csv"
        csv_path.write_bytes(b"name\n\xff\xfe\n")
        json_path = tmp_path / "latin.json"
        json_path.write_bytes(b'["\xff\xfe"]')

        for result in (
            await DataPipeline.from_csv(csv_path).run(),
            await DataPipeline.from_json(json_path).run(),
        ):
            assert stages(result) == ["read"]
            assert messages(result)[0].startswith("File reading failed:")
            assert isinstance(result.value[0].cause, UnicodeDecodeError)

    @pytest.mark.asyncio
    async def test_from_json(self, tmp_path):
        array_file = tmp_path / "items.json"
        array_file.write_text('[{"id": 1}, {"id": 2}]')
        object_file = tmp_path / "item.json"
        object_file.write_text('{"id": 3}')
        broken_file = tmp_path / "broken.json"
        broken_file.write_text("{not json")

        assert await DataPipeline.from_json(array_file).run() == Right([{"id": 1}, {"id": 2}])
        assert await DataPipeline.from_json(object_file).run() == Right([{"id": 3}])
        assert stages(await DataPipeline.from_json(broken_file).run()) == ["parse"]

    @pytest.mark.asyncio
    async def test_from_api(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/users":
                return httpx.Response(200, json=[{"id": 1}])
            if request.url.path == "/one":
                return httpx.Response(200, json={"id": 2})
            if request.url.path == "/text":
                return httpx.Response(200, text="plain")
            return httpx.Response(503)

        async with httpx.AsyncClient(
            transport=httpx.MockTransport(handler), base_url="http://api.test",
        ) as client:
            assert await DataPipeline.from_api("/users", client).run() == Right([{"id": 1}])
            assert await DataPipeline.from_api("/one", client).run() == Right([{"id": 2}])
            assert stages(await DataPipeline.from_api("/text", client).run()) == ["parse"]

            failed = await DataPipeline.from_api("/down", client).run()
            assert stages(failed) == ["fetch"]
            assert "HTTP 503" in failed.value[0].message

    @pytest.mark.asyncio
    async def test_from_api_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            result = await DataPipeline.from_api("http://api.test/users", client).run()
        assert stages(result) == ["fetch"]


class TestStages:
    """Tests for pipeline stages."""

    @pytest.mark.asyncio
    async def test_validate_collects_item_errors(self):
        result = await DataPipeline.from_items([1, -2, 3, 0]).validate(require_positive).run()

        assert stages(result) == ["validate", "validate"]
        assert messages(result) == ["Item 1: -2 is not positive", "Item 3: 0 is not positive"]
        assert result.value[0].data == -2

    @pytest.mark.asyncio
    async def test_validate_with_validator(self):
        schema = v.object({"email": v.string().email()}).build()
        result = await DataPipeline.from_items([{"email": "x"}]).validate(schema).run()
        assert messages(result) == ["Item 0: email: Invalid email address"]

    @pytest.mark.asyncio
    async def test_transform_and_filter(self):
        result = await (
            DataPipeline.from_items([1, 2, 3, 4])
            .transform(lambda x: x * 10)
            .filter(lambda x: x > 15)
            .map(str)
            .run()
        )
        assert result == Right(["20", "30", "40"])

    @pytest.mark.asyncio
    async def test_stage_exception_is_tagged(self):
        result = await DataPipeline.from_items([1, 0]).transform(lambda x: 1 / x).run()

        assert stages(result) == ["transform"]
        assert messages(result)[0].startswith("Transformation failed:")
        assert isinstance(result.value[0].cause, ZeroDivisionError)

    @pytest.mark.asyncio
    async def test_validate_rule_exception_is_tagged(self):
        result = await (
            DataPipeline.from_items([{"email": "ada@example.com"}, {"name": "Linus"}])
            .validate(lambda user: Right(user["email"]))
            .run()
        )

        assert stages(result) == ["validate"]
        assert messages(result)[0].startswith("Validation failed: Item 1:")
        assert isinstance(result.value[0].cause, KeyError)
        assert result.value[0].data == {"name": "Linus"}

    @pytest.mark.asyncio
    async def test_failure_skips_later_stages(self):
        calls = []

        result = await (
            DataPipeline.from_items([-1])
            .validate(require_positive)
            .transform(lambda x: calls.append(x))
            .run()
        )

        assert stages(result) == ["validate"]
        assert calls == []

    @pytest.mark.asyncio
    async def test_map_async_respects_concurrency(self):
        in_flight = 0
        peak = 0

        async def enrich(n):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.005)
            in_flight -= 1
            return n + 100

        result = await DataPipeline.from_items(range(6)).map_async(enrich, concurrency=2).run()

        assert result == Right([100, 101, 102, 103, 104, 105])
        assert peak == 2

    @pytest.mark.asyncio
    async def test_map_async_failure(self):
        async def explode(n):
            raise ValueError(f"bad {n}")

        result = await DataPipeline.from_items([1]).map_async(explode).run()
        assert stages(result) == ["map_async"]

    @pytest.mark.asyncio
    async def test_map_async_failure_cancels_siblings(self):
        cancelled = []

        async def enrich(n):
            if n == 0:
                raise ValueError("bad item")
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.append(n)
                raise
            return n

        result = await DataPipeline.from_items([0, 1, 2]).map_async(enrich).run()

        assert stages(result) == ["map_async"]
        assert sorted(cancelled) == [1, 2]
        assert [t for t in asyncio.all_tasks() if t is not asyncio.current_task()] == []

    @pytest.mark.asyncio
    async def test_group_by_and_aggregate(self):
        rows = [("a", 1), ("b", 2), ("a", 3)]

        groups = await DataPipeline.from_items(rows).group_by(lambda r: r[0]).run_and_get()
        assert groups == [Group("a", [("a", 1), ("a", 3)]), Group("b", [("b", 2)])]

        total = await (
            DataPipeline.from_items(rows)
            .map(lambda r: r[1])
            .aggregate(aggregates.total)
            .run_and_get()
        )
        assert total == [6]

    @pytest.mark.asyncio
    async def test_join(self):
        users = DataPipeline.from_items([{"id": 1, "name": "Ada"}, {"id": 2, "name": "Linus"}])
        orders = DataPipeline.from_items([{"user": 1, "total": 5}, {"user": 1, "total": 7}])

        joined = await users.join(
            orders,
            lambda u, o: {"name": u["name"], "total": o["total"]} if u["id"] == o["user"] else None,
        ).run()

        assert joined == Right([{"name": "Ada", "total": 5}, {"name": "Ada", "total": 7}])

    @pytest.mark.asyncio
    async def test_join_propagates_failures(self):
        good = DataPipeline.from_items([1])
        bad = DataPipeline.from_items([-1]).validate(require_positive)

        assert stages(await good.join(bad, lambda a, b: (a, b)).run()) == ["validate"]
        assert stages(await bad.join(good, lambda a, b: (a, b)).run()) == ["validate"]

    @pytest.mark.asyncio
    async def test_recover(self):
        recovered = await (
            DataPipeline.from_items([-1])
            .validate(require_positive)
            .recover(lambda errors: [len(errors)])
            .run()
        )
        assert recovered == Right([1])

        untouched = await DataPipeline.from_items([5]).recover(lambda errors: []).run()
        assert untouched == Right([5])

    @pytest.mark.asyncio
    async def test_debug_logs_and_passes_through(self, caplog):
        with caplog.at_level(logging.INFO, logger="fpcore.pipeline.pipeline"):
            result = await DataPipeline.from_items([1]).debug("after load").collect().run()

        assert result == Right([1])
        assert "[DEBUG - after load]: Right([1])" in caplog.text


class TestTerminals:
    """Tests for run_and_get/get_stats."""

    @pytest.mark.asyncio
    async def test_run_and_get_raises_on_failure(self):
        pipeline = DataPipeline.from_items([0]).validate(require_positive)

        with pytest.raises(PipelineFailedError) as info:
            await pipeline.run_and_get()
        assert "Item 0: 0 is not positive" in str(info.value)
        assert len(info.value.errors) == 1

    @pytest.mark.asyncio
    async def test_get_stats(self):
        ok = await DataPipeline.from_items([1, 2]).get_stats()
        assert (ok.total_items, ok.errors, ok.has_errors) == (2, [], False)

        failed = await DataPipeline.from_items([0]).validate(require_positive).get_stats()
        assert failed.has_errors and len(failed.errors) == 1

    @pytest.mark.asyncio
    async def test_pipeline_is_rerunnable(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("[1]")
        pipeline = DataPipeline.from_json(path).map(lambda x: x * 2)

        assert await pipeline.run() == Right([2])
        path.write_text("[1, 2]")
        assert await pipeline.task.run() == Right([2, 4])


class TestHelpers:
    """Tests for transforms and aggregates."""

    def test_normalize_string(self):
        assert transforms.normalize_string("  Hello   World ") == "hello world"

    def test_parse_number(self):
        assert transforms.parse_number("2.5") == 2.5
        with pytest.raises(ValueError):
            transforms.parse_number("abc")
        with pytest.raises(ValueError):
            transforms.parse_number("nan")

    def test_parse_date(self):
        assert transforms.parse_date("2024-01-02") == datetime(2024, 1, 2)
        with pytest.raises(ValueError):
            transforms.parse_date("yesterday")

    def test_pick_and_omit(self):
        record = {"a": 1, "b": 2, "c": 3}
        assert transforms.pick(["a", "z"])(record) == {"a": 1}
        assert transforms.omit(["a"])(record) == {"b": 2, "c": 3}

    def test_aggregates(self):
        values = [3, 1, 2]
        assert aggregates.total(values) == 6
        assert aggregates.average(values) == 2
        assert aggregates.maximum(values) == 3
        assert aggregates.minimum(values) == 1
        assert aggregates.count(values) == 3
        assert aggregates.unique_count([1, 1, 2]) == 2
        assert aggregates.unique_count(["a", "A"], str.lower) == 1

    @pytest.mark.parametrize("fn", [aggregates.total, aggregates.average,
                                    aggregates.maximum, aggregates.minimum])
    def test_empty_aggregates_are_zero(self, fn):
        assert fn([]) == 0

    @pytest.mark.asyncio
    async def test_transform_parser_failure_in_pipeline(self):
        result = await DataPipeline.from_items(["1", "x"]).transform(transforms.parse_number).run()
        assert stages(result) == ["transform"]
