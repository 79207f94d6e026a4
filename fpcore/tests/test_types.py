"""
Unit Tests: Option and Either

Tests:
    - Option construction, map/flat_map/get_or_else/fold/filter
    - Either map/map_left/flat_map/fold/swap
    - Functor and monad laws
    - Short-circuit on Nothing and Left (callbacks never invoked)
    - from_maybe/to_maybe round-trip, Option <-> Either bridges
    - sequence_either vs collect_all vs validate_all
"""

import pytest

from fpcore.core.types import (
    NOTHING,
    Left,
    Nothing,
    Right,
    Some,
    UnwrapError,
    collect_all,
    either_to_option,
    from_maybe,
    left,
    maybe,
    nothing,
    option_to_either,
    right,
    sequence_either,
    some,
    to_maybe,
    traverse_either,
    validate_all,
)


# =============================================================================
# TEST UTILITIES
# =============================================================================
class Spy:
    """Callable recording how often it was invoked."""

    def __init__(self, result=None):
        self.calls = 0
        self.result = result

    def __call__(self, *args):
        self.calls += 1
        return self.result


def double(x):
    return x * 2


def increment(x):
    return x + 1


class TestOption:
    """Tests for Some/Nothing."""

    def test_constructors(self):
        assert some(5) == Some(5)
        assert nothing() is NOTHING
        assert Nothing() == NOTHING

    def test_predicates_are_exclusive(self):
        assert Some(1).is_some() and not Some(1).is_none()
        assert NOTHING.is_none() and not NOTHING.is_some()

    def test_map(self):
        """Test map on both variants (scenario: n*2 over some(5) and none)."""
        assert Some(5).map(double) == Some(10)
        assert NOTHING.map(double) is NOTHING

    def test_map_exception_propagates(self):
        with pytest.raises(ZeroDivisionError):
            Some(1).map(lambda x: x / 0)

    def test_nothing_short_circuits(self):
        spy = Spy(Some(1))
        assert NOTHING.map(spy) is NOTHING
        assert NOTHING.flat_map(spy) is NOTHING
        assert spy.calls == 0

    def test_flat_map(self):
        assert Some(4).flat_map(lambda x: Some(x + 1)) == Some(5)
        assert Some(4).flat_map(lambda x: NOTHING) is NOTHING

    def test_get_or_else(self):
        assert Some(3).get_or_else(0) == 3
        assert NOTHING.get_or_else(0) == 0

    def test_fold(self):
        assert Some(2).fold(lambda: "none", lambda x: f"some {x}") == "some 2"
        assert NOTHING.fold(lambda: "none", lambda x: f"some {x}") == "none"

    def test_filter(self):
        assert Some(4).filter(lambda x: x % 2 == 0) == Some(4)
        assert Some(3).filter(lambda x: x % 2 == 0) is NOTHING

    def test_unwrap(self):
        assert Some("x").unwrap() == "x"
        with pytest.raises(UnwrapError):
            NOTHING.unwrap()

    def test_hashable_and_immutable(self):
        assert hash(Some(1)) == hash(Some(1))
        with pytest.raises(AttributeError):
            Some(1).value = 2  # type: ignore[misc]

    def test_pattern_matching(self):
        def describe(option):
            match option:
                case Some(value):
                    return f"has {value}"
                case Nothing():
                    return "empty"
        assert describe(Some(7)) == "has 7"
        assert describe(NOTHING) == "empty"


class TestOptionLaws:
    """Functor and monad laws for Option."""

    @pytest.mark.parametrize("option", [Some(3), NOTHING])
    def test_functor_identity(self, option):
        assert option.map(lambda x: x) == option

    @pytest.mark.parametrize("option", [Some(3), NOTHING])
    def test_functor_composition(self, option):
        assert option.map(increment).map(double) == option.map(lambda x: double(increment(x)))

    def test_left_identity(self):
        fn = lambda x: Some(x * 10)  # noqa: E731
        assert Some(2).flat_map(fn) == fn(2)

    @pytest.mark.parametrize("option", [Some(3), NOTHING])
    def test_right_identity(self, option):
        assert option.flat_map(Some) == option


class TestEither:
    """Tests for Left/Right."""

    def test_constructors(self):
        assert left("e") == Left("e")
        assert right(1) == Right(1)
        assert Left(1) != Right(1)

    def test_map_and_map_left(self):
        assert Right(21).map(double) == Right(42)
        assert Left("e").map(double) == Left("e")
        assert Left("e").map_left(str.upper) == Left("E")
        assert Right(1).map_left(str.upper) == Right(1)

    def test_left_short_circuits(self):
        spy = Spy(Right(1))
        failure = Left("boom")
        assert failure.map(spy) is failure
        assert failure.flat_map(spy) is failure
        assert spy.calls == 0

    def test_flat_map_chains(self):
        def parse(text):
            return Right(int(text)) if text.isdigit() else Left(f"bad: {text}")

        assert Right("12").flat_map(parse) == Right(12)
        assert Right("x").flat_map(parse) == Left("bad: x")

    def test_fold_invokes_exactly_one_branch(self):
        on_left, on_right = Spy("L"), Spy("R")
        assert Right(1).fold(on_left, on_right) == "R"
        assert (on_left.calls, on_right.calls) == (0, 1)
        assert Left(1).fold(on_left, on_right) == "L"
        assert (on_left.calls, on_right.calls) == (1, 1)

    @pytest.mark.parametrize("either", [Left("e"), Right(5)])
    def test_swap_involution(self, either):
        assert either.swap().swap() == either

    def test_swap_exchanges_channels(self):
        assert Right(5).swap() == Left(5)
        assert Left("e").swap() == Right("e")

    def test_get_or_else(self):
        assert Right(1).get_or_else(0) == 1
        assert Left("e").get_or_else(0) == 0

    def test_unwrap(self):
        assert Right(1).unwrap() == 1
        assert Left("e").unwrap_left() == "e"
        with pytest.raises(UnwrapError):
            Left("e").unwrap()
        with pytest.raises(UnwrapError):
            Right(1).unwrap_left()


class TestEitherLaws:
    """Functor and monad laws for Either."""

    @pytest.mark.parametrize("either", [Left("e"), Right(3)])
    def test_functor_identity(self, either):
        assert either.map(lambda x: x) == either

    @pytest.mark.parametrize("either", [Left("e"), Right(3)])
    def test_functor_composition(self, either):
        assert either.map(increment).map(double) == either.map(lambda x: double(increment(x)))

    def test_left_identity(self):
        fn = lambda x: Right(x + 1) if x > 0 else Left("neg")  # noqa: E731
        assert Right(1).flat_map(fn) == fn(1)
        assert Right(-1).flat_map(fn) == fn(-1)

    @pytest.mark.parametrize("either", [Left("e"), Right(3)])
    def test_right_identity(self, either):
        assert either.flat_map(Right) == either

    def test_associativity(self):
        f = lambda x: Right(x + 1)  # noqa: E731
        g = lambda x: Right(x * 2) if x < 10 else Left("too big")  # noqa: E731
        for start in (Right(1), Right(9), Left("e")):
            assert start.flat_map(f).flat_map(g) == start.flat_map(lambda x: f(x).flat_map(g))


class TestConversions:
    """Tests for nullable and Option/Either bridges."""

    @pytest.mark.parametrize("value", [0, "", False, "x", [1]])
    def test_maybe_round_trip(self, value):
        assert to_maybe(from_maybe(value)) == value

    def test_none_is_absence(self):
        assert from_maybe(None) is NOTHING
        assert to_maybe(NOTHING) is None

    def test_maybe_lifts_over_none(self):
        lifted = maybe(double)
        assert lifted(4) == 8
        assert lifted(None) is None

    def test_option_to_either(self):
        require = option_to_either("missing")
        assert require(Some(1)) == Right(1)
        assert require(NOTHING) == Left("missing")

    def test_either_to_option(self):
        assert either_to_option(Right(1)) == Some(1)
        assert either_to_option(Left("e")) is NOTHING


class TestAggregation:
    """Short-circuit vs aggregating collections of Either."""

    def test_sequence_either_stops_at_first_left(self):
        inspected = []

        def items():
            for either in (Right(1), Left("a"), Left("b")):
                inspected.append(either)
                yield either

        assert sequence_either(items()) == Left("a")
        assert len(inspected) == 2

    def test_sequence_either_all_right(self):
        assert sequence_either([Right(1), Right(2)]) == Right([1, 2])
        assert sequence_either([]) == Right([])

    def test_traverse_either(self):
        halve = lambda x: Right(x // 2) if x % 2 == 0 else Left(f"odd {x}")  # noqa: E731
        assert traverse_either([2, 4], halve) == Right([1, 2])
        assert traverse_either([2, 3, 5], halve) == Left("odd 3")

    def test_collect_all_aggregates_in_order(self):
        assert collect_all([Right(1), Left("a"), Right(2), Left("b")]) == Left(["a", "b"])
        assert collect_all([Right(1), Right(2)]) == Right([1, 2])

    def test_validate_all(self):
        checks = [
            lambda s: Right(s) if s else Left("empty"),
            lambda s: Right(s) if len(s) <= 3 else Left("too long"),
            lambda s: Right(s) if s.islower() else Left("not lowercase"),
        ]
        assert validate_all("abc", checks) == Right("abc")
        assert validate_all("ABCD", checks) == Left(["too long", "not lowercase"])
