"""
Unit Tests: Composition Helpers and Safe Accessors

Tests:
    - compose/pipe/flow/pipe_with
    - curry/partial/flip
    - Curried Option/Either operations inside pipe()
    - safe_get/head/last and safe parsers
"""

import pytest

from fpcore.core import combinators as F
from fpcore.core.types import NOTHING, Left, Right, Some
from fpcore.core.utils import (
    head,
    last,
    safe_get,
    safe_parse_float,
    safe_parse_int,
    safe_parse_json,
    safe_prop,
)


class TestComposition:
    """Tests for compose/pipe/flow."""

    def test_compose_is_right_to_left(self):
        fn = F.compose(lambda x: x * 2, lambda x: x + 1)
        assert fn(3) == 8

    def test_compose3(self):
        fn = F.compose3(str, lambda x: x * 2, lambda x: x + 1)
        assert fn(1) == "4"

    def test_pipe_is_left_to_right(self):
        fn = F.pipe(lambda x: x + 1, lambda x: x * 2)
        assert fn(3) == 8

    def test_empty_pipe_is_identity(self):
        assert F.pipe()(42) == 42

    def test_flow_matches_pipe(self):
        assert F.flow(str.strip, str.upper)("  ada ") == "ADA"

    def test_pipe_with(self):
        result = F.pipe_with(" Ada ").pipe(str.strip).pipe(str.upper).value()
        assert result == "ADA"

    def test_identity_and_constant(self):
        assert F.identity(5) == 5
        assert F.constant("x")(1, 2, key=3) == "x"


class TestCurrying:
    """Tests for curry/partial/flip."""

    def test_curry(self):
        add = F.curry(lambda a, b: a + b)
        assert add(1)(2) == 3

    def test_curry3_and_curry4(self):
        assert F.curry3(lambda a, b, c: a + b + c)(1)(2)(3) == 6
        assert F.curry4(lambda a, b, c, d: a * b * c * d)(1)(2)(3)(4) == 24

    def test_partial(self):
        greet = F.partial(lambda greeting, name: f"{greeting}, {name}", "Hello")
        assert greet("Ada") == "Hello, Ada"

    def test_partial2(self):
        assert F.partial2(lambda a, b: a - b)(10)(3) == 7

    def test_flip(self):
        assert F.flip(lambda a, b: a - b)(1, 10) == 9

    def test_list_helpers(self):
        assert F.map_list(lambda x: x * 2)([1, 2]) == [2, 4]
        assert F.filter_list(lambda x: x > 1)([1, 2, 3]) == [2, 3]
        assert F.reduce_list(lambda acc, x: acc + x, 0)([1, 2, 3]) == 6


class TestCurriedMonadOps:
    """Curried Option/Either operations used point-free."""

    def test_map_option(self):
        """Test mapOption(n => n*2) over some(5) and none."""
        double = F.map_option(lambda n: n * 2)
        assert double(Some(5)) == Some(10)
        assert double(NOTHING) is NOTHING

    def test_option_pipeline(self):
        normalize = F.pipe(
            F.map_option(str.strip),
            F.filter_option(bool),
            F.get_or_else("anonymous"),
        )
        assert normalize(Some("  ada ")) == "ada"
        assert normalize(Some("   ")) == "anonymous"
        assert normalize(NOTHING) == "anonymous"

    def test_flat_map_and_fold_option(self):
        positive = F.flat_map_option(lambda x: Some(x) if x > 0 else NOTHING)
        render = F.fold_option(lambda: "none", str)
        assert render(positive(Some(3))) == "3"
        assert render(positive(Some(-3))) == "none"

    def test_either_ops(self):
        chain = F.pipe(
            F.map_either(lambda x: x + 1),
            F.flat_map_either(lambda x: Right(x) if x < 10 else Left("big")),
            F.map_left(str.upper),
        )
        assert chain(Right(1)) == Right(2)
        assert chain(Right(9)) == Left("BIG")
        assert chain(Left("e")) == Left("E")

    def test_fold_either_and_swap(self):
        render = F.fold_either(lambda e: f"error: {e}", lambda v: f"ok: {v}")
        assert render(Right(1)) == "ok: 1"
        assert render(Left("x")) == "error: x"
        assert F.swap(F.swap(Right(1))) == Right(1)


class TestSafeHelpers:
    """Tests for Option-returning accessors and parsers."""

    def test_safe_get(self):
        """Test safeGet([10,20,30], 1) and out-of-range index."""
        assert safe_get([10, 20, 30], 1) == Some(20)
        assert safe_get([10, 20, 30], 5) is NOTHING
        assert safe_get([10, 20, 30], -1) is NOTHING

    def test_head_and_last(self):
        assert head([1, 2, 3]) == Some(1)
        assert last([1, 2, 3]) == Some(3)
        assert head([]) is NOTHING
        assert last([]) is NOTHING

    @pytest.mark.parametrize(
        "text,expected",
        [("42", Some(42)), (" 7 ", Some(7)), ("4.2", NOTHING), ("abc", NOTHING), ("", NOTHING)],
    )
    def test_safe_parse_int(self, text, expected):
        assert safe_parse_int(text) == expected

    def test_safe_parse_int_base(self):
        assert safe_parse_int("ff", 16) == Some(255)

    def test_safe_parse_float(self):
        assert safe_parse_float("2.5") == Some(2.5)
        assert safe_parse_float("nan") is NOTHING
        assert safe_parse_float("x") is NOTHING

    def test_safe_parse_json(self):
        assert safe_parse_json('{"a": 1}') == Some({"a": 1})
        assert safe_parse_json("{bad") is NOTHING

    def test_safe_prop(self):
        name = safe_prop("name")
        assert name({"name": "Ada"}) == Some("Ada")
        assert name({"name": None}) is NOTHING
        assert name({}) is NOTHING
