"""Tests for the context-aware tokenizer."""

import pytest

from mathcheck.core.errors import ParseError
from mathcheck.parser.tokenizer import TokenType, Tokenizer


def _kinds(context, text):
    return [(t.type, t.value) for t in Tokenizer(context).tokenize(text)]


class TestBasicTokens:
    def test_number_operator_variable(self, numeric):
        assert _kinds(numeric, "3.5+x") == [
            (TokenType.NUMBER, "3.5"),
            (TokenType.OPERATOR, "+"),
            (TokenType.VARIABLE, "x"),
            (TokenType.EOF, ""),
        ]

    def test_scientific_notation(self, numeric):
        tokens = Tokenizer(numeric).tokenize("1.5e-3")
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == "1.5e-3"

    def test_double_star_is_one_operator(self, numeric):
        assert (TokenType.OPERATOR, "**") in _kinds(numeric, "x**2")

    def test_constants_and_strings(self, numeric):
        kinds = _kinds(numeric, "pi")
        assert kinds[0] == (TokenType.CONSTANT, "pi")
        assert _kinds(numeric, "DNE")[0] == (TokenType.STRING, "DNE")

    def test_strings_are_case_insensitive(self, numeric):
        assert _kinds(numeric, "none")[0] == (TokenType.STRING, "none")

    def test_positions_are_recorded(self, numeric):
        tokens = Tokenizer(numeric).tokenize("x + 12")
        assert [t.pos for t in tokens] == [0, 2, 4, 6]
        assert tokens[1].space_before is True


class TestImplicitMultiplication:
    def test_tight_juxtaposition(self, numeric):
        assert _kinds(numeric, "2x")[:3] == [
            (TokenType.NUMBER, "2"),
            (TokenType.OPERATOR, ""),
            (TokenType.VARIABLE, "x"),
        ]

    def test_space_separated_factors(self, numeric):
        assert _kinds(numeric, "2 x")[1] == (TokenType.OPERATOR, " ")

    def test_adjacent_parentheses(self, numeric):
        kinds = _kinds(numeric, "(x+1)(x-1)")
        assert (TokenType.OPERATOR, "") in kinds

    def test_run_of_names_is_split(self, point_context):
        kinds = _kinds(point_context, "xy")
        assert kinds[:3] == [
            (TokenType.VARIABLE, "x"),
            (TokenType.OPERATOR, ""),
            (TokenType.VARIABLE, "y"),
        ]

    def test_disabled_implicit_multiplication(self, numeric):
        numeric.undefine_operator("", " ")
        with pytest.raises(ParseError, match="Implicit multiplication is not allowed"):
            Tokenizer(numeric).tokenize("2x")


class TestContextRestrictions:
    def test_unknown_character(self, numeric):
        with pytest.raises(ParseError) as exc_info:
            Tokenizer(numeric).tokenize("x $ 1")
        assert exc_info.value.message == "Unexpected character '$'"
        assert exc_info.value.position == 2

    def test_undeclared_variable(self, numeric):
        with pytest.raises(ParseError, match="Variable 'q' is not defined in this context"):
            Tokenizer(numeric).tokenize("q+1")

    def test_disabled_function(self, numeric):
        numeric.disable_function("sin")
        with pytest.raises(ParseError, match="Function 'sin' is not allowed in this context"):
            Tokenizer(numeric).tokenize("sin(x)")

    def test_disabled_category(self, numeric):
        numeric.disable_function("Trig")
        with pytest.raises(ParseError, match="Function 'atanh' is not allowed"):
            Tokenizer(numeric).tokenize("atanh(x)")
        Tokenizer(numeric).tokenize("sqrt(x)")

    def test_function_needs_parentheses(self, numeric):
        with pytest.raises(ParseError, match="must have its input in parentheses"):
            Tokenizer(numeric).tokenize("sin x")

    def test_undefined_operator(self, numeric):
        numeric.undefine_operator("^", "**")
        with pytest.raises(ParseError, match="Operator '\\^' is not allowed in this context"):
            Tokenizer(numeric).tokenize("x^2")

    def test_leading_binary_operator(self, numeric):
        with pytest.raises(ParseError, match="Missing operand before '\\*'"):
            Tokenizer(numeric).tokenize("*2")

    def test_unmatched_close(self, numeric):
        with pytest.raises(ParseError, match="Unmatched '\\)'"):
            Tokenizer(numeric).tokenize("1)")

    def test_bars_need_abs_paren(self, interval_context):
        interval_context.remove_paren("|")
        with pytest.raises(ParseError, match="Absolute value bars are not allowed"):
            Tokenizer(interval_context).tokenize("|x|")

    def test_union_operator_only_where_defined(self, numeric, interval_context):
        assert (TokenType.OPERATOR, "U") in _kinds(interval_context, "(1,2) U (3,4)")
        with pytest.raises(ParseError, match="Variable 'U' is not defined"):
            Tokenizer(numeric).tokenize("(1,2) U (3,4)")
