"""Tests for Interval, Set and Union."""

import pytest

from mathcheck.math.numeric import Complex, Infinity, Tolerance
from mathcheck.math.sets import Interval, Set, Union


class TestIntervalConstruction:
    def test_from_text(self):
        interval = Interval("(-inf, 3]")
        assert interval.open_left is True
        assert interval.open_right is False
        assert isinstance(interval.left, Infinity)

    def test_from_brackets(self):
        interval = Interval("[", 0, 5, ")")
        assert interval.to_string() == "[0, 5)"

    def test_from_flags(self):
        assert Interval(0, 10, False, True).to_string() == "[0, 10)"

    def test_two_arguments_are_open(self):
        assert Interval(-1, 1).to_string() == "(-1, 1)"

    def test_closed_infinite_end(self):
        with pytest.raises(ValueError, match="Infinite endpoints must be open"):
            Interval(0, Infinity(), False, False)

    def test_reversed_endpoints(self):
        with pytest.raises(ValueError, match="left endpoint must be less"):
            Interval(3, 1)

    def test_degenerate_interval(self):
        assert Interval(2, 2, False, False).to_string() == "[2, 2]"
        with pytest.raises(ValueError, match="equal endpoints must be closed"):
            Interval(2, 2, True, False)


class TestIntervalComparison:
    def test_end_types_matter(self):
        assert Interval("(-inf, 3]") == Interval("(-inf, 3]")
        assert Interval("(-inf, 3]") != Interval("(-inf, 3)")

    def test_compare_parts(self):
        parts = Interval("(-inf, 3)").compare_parts(Interval("(-inf, 3]"))
        assert parts == {"left": True, "right": True, "left_type": True, "right_type": False}

    def test_endpoint_tolerance(self):
        assert Interval(0, 1.0001) == Interval(0, 1)

    def test_interval_equals_single_member_union(self):
        assert Interval(0, 1).compare(Union(Interval(0, 1)))

    def test_contains(self):
        interval = Interval(0, 1, False, True)
        assert interval.contains(0)
        assert not interval.contains(1)
        assert not interval.contains(2)


class TestSet:
    def test_reduce_sorts_and_removes_repeats(self):
        assert Set(3, 1, 3, 2).reduce().to_string() == "{1, 2, 3}"

    def test_is_reduced(self):
        assert Set(1, 2).is_reduced()
        assert not Set(1, 1).is_reduced()

    def test_compare_ignores_order(self):
        assert Set(1, 2, 3) == Set(3, 2, 1)
        assert Set(1, 2) != Set(1, 2, 3)

    def test_compare_finds_a_perfect_matching(self, complex_context):
        tol = Tolerance(tolerance=1, tolType="absolute")
        mine = Set(Complex(0, 0), Complex(0, 1.5), context=complex_context)
        theirs = Set(Complex(0, 0.8), Complex(0, -0.8), context=complex_context)
        # 0 is close to both entries, 1.5i only to 0.8i
        assert mine.compare(theirs, tol)
        assert not mine.compare(Set(Complex(0, 0.8), Complex(0, 3), context=complex_context), tol)

    def test_empty_set(self):
        assert Set().is_empty()
        assert Set("{}").to_string() == "{}"


class TestUnion:
    def test_from_text(self):
        union = Union("(-1, 1) U (4, infinity)")
        assert len(union.members) == 2
        assert union.to_string() == "(-1, 1) U (4, infinity)"

    def test_members_must_be_sets(self):
        with pytest.raises(ValueError, match="only contain intervals and sets"):
            Union(Interval(0, 1), 5)

    def test_reduce_merges_overlapping_intervals(self):
        union = Union("(-1, 1] U [1, 4) U (4, infinity)")
        assert union.reduce().to_string() == "(-1, 4) U (4, infinity)"

    def test_reduce_absorbs_points(self):
        assert Union("(0, 1) U {1}").reduce().to_string() == "(0, 1]"
        assert Union("(0, 1) U {0.5, 7}").reduce().to_string() == "(0, 1) U {7}"

    def test_closing_an_end_can_join_intervals(self):
        assert Union("(0, 1) U (1, 2) U {1}").reduce().to_string() == "(0, 2)"

    def test_is_reduced(self):
        assert Union("(-1, 1) U (4, infinity)").is_reduced()
        assert not Union("(-1, 0] U (0, 1) U (4, infinity)").is_reduced()
        assert not Union("(-1, 1) U {0}").is_reduced()

    def test_compare_uses_reduced_form(self):
        assert Union("(-1, 0] U (0, 1) U (4, infinity)") == Union("(-1, 1) U (4, infinity)")
        assert Union("(-1, 1] U [1, 4) U (4, infinity)") != Union("(-1, 1) U (4, infinity)")

    def test_union_equals_interval(self):
        assert Union("[0, 1) U [1, 2]") == Interval(0, 2, False, False)
