"""Tests for the Pratt parser."""

import pytest

from mathcheck.core.errors import ParseError
from mathcheck.parser import (
    BinaryOp,
    Constant,
    FunctionCall,
    Interval,
    List,
    Matrix,
    Number,
    Parser,
    Point,
    Set,
    String,
    UnaryOp,
    Variable,
    Vector,
)


def parse(context, text, expected=None):
    return Parser(context).parse(text, expected=expected)


class TestExpressions:
    """Operator precedence and associativity."""

    def test_implicit_multiplication_binds_tighter_than_addition(self, numeric):
        assert parse(numeric, "2x + 1") == BinaryOp(
            BinaryOp(Number(2), "", Variable("x")), "+", Number(1)
        )

    def test_multiplication_before_addition(self, numeric):
        assert parse(numeric, "1+2*3") == BinaryOp(Number(1), "+", BinaryOp(Number(2), "*", Number(3)))

    def test_subtraction_is_left_associative(self, numeric):
        assert parse(numeric, "5-2-1") == BinaryOp(BinaryOp(Number(5), "-", Number(2)), "-", Number(1))

    def test_power_is_right_associative(self, numeric):
        assert parse(numeric, "x^2^3") == BinaryOp(Variable("x"), "^", BinaryOp(Number(2), "^", Number(3)))

    def test_unary_minus_below_power(self, numeric):
        assert parse(numeric, "-x^2") == UnaryOp("-", BinaryOp(Variable("x"), "^", Number(2)))

    def test_function_call_and_constant(self, numeric):
        assert parse(numeric, "sin(pi x)") == FunctionCall(
            "sin", [BinaryOp(Constant("pi"), " ", Variable("x"))]
        )

    def test_two_argument_function(self, numeric):
        assert parse(numeric, "atan2(1, x)") == FunctionCall("atan2", [Number(1), Variable("x")])

    def test_absolute_value_bars(self, numeric):
        assert parse(numeric, "|x-1|") == FunctionCall("abs", [BinaryOp(Variable("x"), "-", Number(1))])

    def test_string(self, numeric):
        assert parse(numeric, "DNE") == String("DNE")

    def test_node_positions(self, numeric):
        node = parse(numeric, "1 + sin(x)")
        assert node.right.pos == 4


class TestStructures:
    def test_top_level_commas_make_a_bare_list(self, numeric):
        node = parse(numeric, "1, 2, 3")
        assert node == List([Number(1), Number(2), Number(3)])
        assert node.open == ""

    def test_parenthesized_list_in_numeric(self, numeric):
        node = parse(numeric, "(1, 2)")
        assert isinstance(node, List)
        assert (node.open, node.close) == ("(", ")")

    def test_single_element_parens_group(self, numeric):
        assert parse(numeric, "(x)") == Variable("x")

    def test_intervals(self, interval_context):
        assert parse(interval_context, "(1, 2]") == Interval(Number(1), Number(2), True, False)
        assert parse(interval_context, "[1, 2)") == Interval(Number(1), Number(2), False, True)

    def test_union(self, interval_context):
        node = parse(interval_context, "(1,2) U [3,4]")
        assert node == BinaryOp(
            Interval(Number(1), Number(2), True, True), "U", Interval(Number(3), Number(4), False, False)
        )

    def test_set(self, interval_context):
        assert parse(interval_context, "{1, 2}") == Set([Number(1), Number(2)])
        assert parse(interval_context, "{}") == Set([])

    def test_point_and_vector(self, vector_context):
        assert parse(vector_context, "(1, 2, 3)") == Point([Number(1), Number(2), Number(3)])
        assert parse(vector_context, "<1, 0>") == Vector([Number(1), Number(0)])

    def test_matrix_rows(self, matrix_context):
        assert parse(matrix_context, "[[1,2],[3,4]]") == Matrix(
            [[Number(1), Number(2)], [Number(3), Number(4)]]
        )

    def test_ragged_matrix_rows(self, matrix_context):
        with pytest.raises(ParseError, match="same length"):
            parse(matrix_context, "[[1,2],[3]]")


class TestAmbiguousNotation:
    """The Full context reads "(a, b)" and "[a, b]" by the expected type."""

    def test_pair_is_a_point_by_default(self, full):
        assert parse(full, "(1, 2)") == Point([Number(1), Number(2)])

    def test_pair_is_an_interval_when_expected(self, full):
        assert parse(full, "(1, 2)", expected="Interval") == Interval(Number(1), Number(2), True, True)
        assert parse(full, "(1, 2)", expected="Union") == Interval(Number(1), Number(2), True, True)

    def test_brackets_are_a_closed_interval(self, full):
        assert parse(full, "[1, 2]") == Interval(Number(1), Number(2), False, False)

    def test_brackets_are_a_matrix_when_expected(self, full):
        assert parse(full, "[1, 2]", expected="Matrix") == Matrix([[Number(1), Number(2)]])

    def test_mixed_ends_are_an_interval(self, full):
        assert parse(full, "(1, 2]") == Interval(Number(1), Number(2), True, False)

    def test_union_operands_become_intervals(self, full):
        node = parse(full, "(1, 2) U (3, 4)")
        assert isinstance(node.left, Interval)
        assert isinstance(node.right, Interval)


class TestParseErrors:
    @pytest.mark.parametrize(
        "text,message",
        [
            ("", "Your answer is empty"),
            ("   ", "Your answer is empty"),
            ("2+", "Missing operand after '+'"),
            ("sin(1, 2)", "Function 'sin' has too many inputs"),
            ("atan2(1)", "Function 'atan2' has too few inputs"),
            ("(1, 2", "Missing close parenthesis for '('"),
            ("()", "Empty parentheses"),
            ("(1, 2]", "Mismatched parentheses: '(' and ']'"),
        ],
    )
    def test_messages(self, numeric, text, message):
        with pytest.raises(ParseError) as exc_info:
            parse(numeric, text)
        assert exc_info.value.message == message

    def test_error_text_includes_position(self, numeric):
        with pytest.raises(ParseError) as exc_info:
            parse(numeric, "2+")
        assert str(exc_info.value) == "Missing operand after '+'; see position 2 of formula"
