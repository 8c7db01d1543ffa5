"""Tests for contexts: named templates, managers, flags and YAML loading."""

import math

import pytest

from mathcheck.core.errors import ContextError
from mathcheck.math.compute import compute
from mathcheck.math.context import (
    CONTEXT_NAMES,
    Context,
    category_functions,
    get_context,
    register_context,
)


class TestNamedContexts:
    @pytest.mark.parametrize("name", CONTEXT_NAMES)
    def test_every_named_context_exists(self, name):
        assert get_context(name).name == name

    def test_unknown_context(self):
        with pytest.raises(ContextError, match="Unknown context 'Chemistry'"):
            get_context("Chemistry")

    def test_default_context_is_full(self):
        assert get_context().name == "Full"

    def test_copies_are_independent(self):
        ctx = get_context("Numeric")
        ctx.declare_variable("t")
        ctx.set_flags(tolerance=0.5)
        fresh = get_context("Numeric")
        assert "t" not in fresh.variables
        assert fresh.get_flag("tolerance") == 0.001

    def test_numeric_context(self, numeric):
        assert "x" in numeric.variables
        assert numeric.parens.get("(")["type"] == "List"
        assert numeric.parens.get("|")["type"] == "Abs"
        assert numeric.strings.contains("DNE")
        assert "U" not in numeric.operators

    def test_interval_context(self, interval_context):
        assert interval_context.parens.get("(")["type"] == "Interval"
        assert interval_context.parens.get("{")["type"] == "Set"
        assert "U" in interval_context.operators

    def test_full_context(self, full):
        assert full.constants.get("i") == complex(0, 1)
        assert "j" not in full.constants
        assert full.parens.get("(") == {"close": ")", "type": "Point", "formInterval": True}
        assert full.parens.get("[")["type"] == "Matrix"
        assert full.parens.get("<")["type"] == "Vector"

    def test_vector_context_unit_vectors(self, vector_context):
        assert vector_context.constants.get("j") == (0.0, 1.0, 0.0)


class TestFunctions:
    def test_category_expansion(self):
        names = category_functions("Hyperbolic")
        assert "sinh" in names
        assert "asinh" in names
        assert "sin" not in names

    def test_unknown_category(self, numeric):
        with pytest.raises(ContextError, match="Unknown function or category 'Magic'"):
            numeric.disable_function("Magic")

    def test_disable_keeps_definition(self, numeric):
        numeric.disable_function("Trig")
        assert "sin" in numeric.functions
        assert not numeric.functions.is_enabled("sin")
        assert numeric.functions.is_enabled("sqrt")

    def test_enable_restores(self, numeric):
        numeric.disable_function("sqrt").enable_function("sqrt")
        assert numeric.functions.is_enabled("sqrt")

    def test_undefine_removes(self, numeric):
        numeric.undefine_function("ln")
        assert "ln" not in numeric.functions

    def test_arity(self, numeric):
        assert numeric.functions.get("atan2")["nargs"] == 2
        assert numeric.functions.get("sin")["nargs"] == 1


class TestOperatorsAndVariables:
    def test_define_operator_uses_standard_table(self, numeric):
        numeric.undefine_operator("*")
        assert "*" not in numeric.operators
        numeric.define_operator("*")
        assert numeric.get_operator_precedence("*") == 3

    def test_custom_operator_needs_precedence(self, numeric):
        with pytest.raises(ContextError, match="needs a precedence"):
            numeric.define_operator("%")

    def test_unary_precedence(self, numeric):
        assert numeric.get_operator_precedence("-", is_unary=True) == 4
        assert numeric.get_operator_associativity("^") == "right"

    def test_variable_types(self, numeric):
        numeric.declare_variable("z", "Complex")
        assert numeric.variables.type_of("z") == "Complex"
        with pytest.raises(ContextError, match="Variables can't be of type 'Matrix'"):
            numeric.declare_variable("M", "Matrix")

    def test_variable_limits(self, numeric):
        numeric.declare_variable("t", limits=(0, 10))
        assert numeric.variables.limits("t") == (0.0, 10.0)
        with pytest.raises(ContextError, match="Lower limit must be less than upper limit"):
            numeric.variables.set("t", limits=(5, 1))


class TestFlags:
    def test_defaults(self, numeric):
        assert numeric.get_flag("tolerance") == 0.001
        assert numeric.get_flag("tolType") == "relative"
        assert numeric.get_flag("limits") == (-2.0, 2.0)
        assert numeric.get_flag("num_points") == 5

    def test_invalid_tol_type(self, numeric):
        with pytest.raises(ContextError, match="tolType must be one of"):
            numeric.set_flags(tolType="fuzzy")

    def test_negative_tolerance(self, numeric):
        with pytest.raises(ContextError, match="tolerance must be a non-negative number"):
            numeric.set_flags(tolerance=-1)

    def test_bad_limits(self, numeric):
        with pytest.raises(ContextError):
            numeric.set_flags(limits=(1, 1))


class TestLoading:
    def test_from_dict(self):
        ctx = Context.from_dict(
            {
                "name": "Kinematics",
                "base": "Numeric",
                "variables": ["t", {"name": "v0", "limits": [1, 5]}],
                "constants": {"g": 9.8},
                "functions": {"disable": ["Trig"]},
                "operators": {"undefine": [" "]},
                "parens": {"remove": ["["]},
                "strings": ["INFINITE"],
                "flags": {"tolerance": 0.01, "tolType": "absolute"},
            }
        )
        assert ctx.name == "Kinematics"
        assert "t" in ctx.variables
        assert ctx.variables.limits("v0") == (1.0, 5.0)
        assert not ctx.functions.is_enabled("cos")
        assert " " not in ctx.operators
        assert "[" not in ctx.parens
        assert ctx.strings.contains("infinite")
        assert ctx.get_flag("tolType") == "absolute"
        assert compute("g*2", ctx).value == pytest.approx(19.6)

    def test_from_dict_needs_name(self):
        with pytest.raises(ContextError, match="needs a name"):
            Context.from_dict({"base": "Numeric"})

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "context.yaml"
        path.write_text(
            "name: Growth\n"
            "base: Numeric\n"
            "variables:\n"
            "  - {name: t, limits: [0, 3]}\n"
            "flags: {tolerance: 0.05}\n"
        )
        ctx = Context.from_yaml(path)
        assert ctx.variables.limits("t") == (0.0, 3.0)
        assert ctx.get_flag("tolerance") == 0.05
        assert math.isclose(compute("e^0", ctx).value, 1.0)

    def test_register_context(self):
        custom = get_context("Numeric").copy(name="RegisteredForTests")
        custom.declare_variable("w")
        register_context(custom)
        assert "w" in get_context("RegisteredForTests").variables
