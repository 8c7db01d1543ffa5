"""Tests for compute(): parse, evaluate and wrap."""

import pytest

from mathcheck.core.errors import DomainError, ParseError
from mathcheck.math import (
    Compute,
    Complex,
    Formula,
    Interval,
    List,
    Matrix,
    Point,
    Real,
    Set,
    String,
    Union,
    Vector,
    compute,
)


class TestCompute:
    @pytest.mark.parametrize(
        "text,expected_type",
        [
            ("2+2", Real),
            ("1+2i", Complex),
            ("(1, 2)", Point),
            ("<1, 2>", Vector),
            ("[[1, 2], [3, 4]]", Matrix),
            ("(-inf, 3]", Interval),
            ("{1, 2}", Set),
            ("(-1, 1) U (4, inf)", Union),
            ("1, -1, 0", List),
            ("DNE", String),
            ("x^2", Formula),
        ],
    )
    def test_types_in_full_context(self, text, expected_type):
        assert isinstance(compute(text), expected_type)

    def test_value(self):
        assert compute("2+2") == Real(4)

    def test_python_values_are_wrapped(self):
        assert compute(3) == Real(3)
        assert compute((1, 2)) == Point(1, 2)

    def test_expected_type_resolves_ambiguity(self):
        assert isinstance(compute("(1, 2)", expected="Interval"), Interval)

    def test_list_with_variables_has_formula_entries(self):
        value = compute("x, x^2, 3")
        assert isinstance(value, List)
        assert [type(e) for e in value.elements] == [Formula, Formula, Real]

    def test_constant_domain_error(self):
        with pytest.raises(DomainError):
            compute("1/0")

    def test_parse_error(self, numeric):
        with pytest.raises(ParseError):
            compute("(1, 2", numeric)

    def test_alias(self):
        assert Compute is compute


class TestRoundTrip:
    """Rendered values parse back to equal values."""

    @pytest.mark.parametrize(
        "text",
        [
            "-3.25",
            "1-2i",
            "(1, -2, 3)",
            "<0, 1>",
            "[[1, 2], [3, 4]]",
            "[0, 5)",
            "(-inf, 3]",
            "{1, 2, 3}",
            "(-1, 1) U (4, inf)",
            "1, -1, 0",
            "NONE",
        ],
    )
    def test_to_string_parses_back(self, text):
        value = compute(text)
        assert compute(value.to_string(), expected=value.type_name) == value

    def test_formula_round_trip(self):
        value = compute("sin(x)^2 - 3x/(x+1)")
        assert compute(value.to_string()) == value
