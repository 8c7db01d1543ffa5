"""
AST Visitor implementations.

- StringVisitor: render an AST as text the parser reads back
- EvalVisitor: evaluate an AST to a MathValue
- VariableCollector: the free variables of an AST
- SubstituteVisitor: replace variables by values or sub-trees
- SympyVisitor / from_sympy: convert to and from sympy expressions
"""

from __future__ import annotations

from typing import Any

import sympy as sp

from mathcheck.core.errors import ComparisonError, ParseError, TypeMismatchError

from .ast import (
    ASTNode,
    BinaryOp,
    Constant,
    FunctionCall,
    Interval,
    List,
    Matrix,
    Number,
    Point,
    Set,
    String,
    UnaryOp,
    Variable,
    Vector,
)

# Precedences used for parenthesization when rendering
_RENDER_PRECEDENCE = {"U": 1, "+": 2, "-": 2, "*": 3, "/": 3, ".": 3, "><": 3, "^": 7}
_UNARY_PRECEDENCE = 4


class StringVisitor:
    """
    Convert an AST to text.

    Implicit multiplication is written with ``*`` and ``**`` as ``^`` so the
    output does not depend on the spacing of the original answer.

    Examples:
    - BinaryOp(Number(2), '', Variable('x')) → "2*x"
    - FunctionCall('sin', [Variable('x')]) → "sin(x)"
    """

    def visit_number(self, node: Number) -> str:
        from mathcheck.math.numeric import format_number

        return format_number(node.value)

    def visit_variable(self, node: Variable) -> str:
        return node.name

    def visit_constant(self, node: Constant) -> str:
        return node.name

    def visit_string(self, node: String) -> str:
        return node.value

    def visit_binary_op(self, node: BinaryOp) -> str:
        op = _render_op(node.op)
        precedence = _RENDER_PRECEDENCE.get(op, 3)
        left_str = node.left.accept(self)
        right_str = node.right.accept(self)

        left_prec = _precedence(node.left)
        right_prec = _precedence(node.right)

        if op == "^":
            # right associative
            if left_prec is not None and left_prec <= precedence:
                left_str = f"({left_str})"
            if right_prec is not None and right_prec < precedence:
                right_str = f"({right_str})"
            return f"{left_str}^{right_str}"

        if left_prec is not None and left_prec < precedence:
            left_str = f"({left_str})"
        if right_prec is not None and right_prec <= precedence:
            right_str = f"({right_str})"

        return f"{left_str} {op} {right_str}"

    def visit_unary_op(self, node: UnaryOp) -> str:
        operand_str = node.operand.accept(self)
        operand_prec = _precedence(node.operand)
        if operand_prec is not None and operand_prec <= _UNARY_PRECEDENCE:
            operand_str = f"({operand_str})"
        return f"{node.op}{operand_str}"

    def visit_function_call(self, node: FunctionCall) -> str:
        args_str = ", ".join(arg.accept(self) for arg in node.args)
        return f"{node.name}({args_str})"

    def visit_list(self, node: List) -> str:
        elements = []
        for el in node.elements:
            text = el.accept(self)
            if isinstance(el, List) and not el.open:
                text = f"[{text}]"
            elements.append(text)
        return f"{node.open}{', '.join(elements)}{node.close}"

    def visit_point(self, node: Point) -> str:
        return "(" + ", ".join(coord.accept(self) for coord in node.coords) + ")"

    def visit_vector(self, node: Vector) -> str:
        return "<" + ", ".join(comp.accept(self) for comp in node.components) + ">"

    def visit_matrix(self, node: Matrix) -> str:
        rows_str = ", ".join("[" + ", ".join(el.accept(self) for el in row) + "]" for row in node.rows)
        return f"[{rows_str}]"

    def visit_interval(self, node: Interval) -> str:
        left_bracket = "(" if node.open_left else "["
        right_bracket = ")" if node.open_right else "]"
        return f"{left_bracket}{node.left.accept(self)}, {node.right.accept(self)}{right_bracket}"

    def visit_set(self, node: Set) -> str:
        return "{" + ", ".join(el.accept(self) for el in node.elements) + "}"


def _render_op(op: str) -> str:
    if op in ("", " "):
        return "*"
    if op == "**":
        return "^"
    if op == "//":
        return "/"
    return op


def _precedence(node: ASTNode) -> int | None:
    if isinstance(node, BinaryOp):
        return _RENDER_PRECEDENCE.get(_render_op(node.op), 3)
    if isinstance(node, UnaryOp):
        return _UNARY_PRECEDENCE
    return None


class EvalVisitor:
    """
    Evaluate an AST to a MathValue.

    Args:
        context: Context supplying constants
        bindings: Variable name → value (MathValue or Python number)

    Raises:
        ComparisonError: If a variable has no binding
        DomainError: If the expression is undefined at the bindings
        ParseError: If a structure (interval, point, ...) is malformed
    """

    def __init__(self, context, bindings: dict[str, Any] | None = None):
        self.context = context
        self.bindings = bindings or {}

    def visit_number(self, node: Number):
        from mathcheck.math.numeric import Real

        return Real(node.value, context=self.context)

    def visit_variable(self, node: Variable):
        from mathcheck.math.value import MathValue

        if node.name not in self.bindings:
            raise ComparisonError(f"Variable '{node.name}' has no value")
        return MathValue.from_python(self.bindings[node.name], self.context)

    def visit_constant(self, node: Constant):
        from mathcheck.math.geometric import Vector
        from mathcheck.math.value import MathValue

        value = self.context.constants.get(node.name)
        if value is None:
            raise ComparisonError(f"Constant '{node.name}' is not defined in this context")
        if isinstance(value, tuple):
            return Vector(coords=value, context=self.context)
        return MathValue.from_python(value, self.context)

    def visit_string(self, node: String):
        from mathcheck.math.collections import String as StringValue

        return StringValue(node.value, context=self.context)

    def visit_binary_op(self, node: BinaryOp):
        from mathcheck.math.operations import apply_binary

        left = node.left.accept(self)
        right = node.right.accept(self)
        try:
            return apply_binary(node.op, left, right, self.context)
        except ValueError as e:
            raise ParseError(str(e), node.pos) from e

    def visit_unary_op(self, node: UnaryOp):
        from mathcheck.math.operations import apply_unary

        return apply_unary(node.op, node.operand.accept(self), self.context)

    def visit_function_call(self, node: FunctionCall):
        from mathcheck.math.operations import apply_function

        args = [arg.accept(self) for arg in node.args]
        return apply_function(node.name, args, self.context)

    def visit_list(self, node: List):
        from mathcheck.math.collections import List as ListValue

        elements = [el.accept(self) for el in node.elements]
        return ListValue(elements=elements, open=node.open, close=node.close, context=self.context)

    def visit_point(self, node: Point):
        from mathcheck.math.geometric import Point as PointValue

        return self._build(node, PointValue, coords=[c.accept(self) for c in node.coords])

    def visit_vector(self, node: Vector):
        from mathcheck.math.geometric import Vector as VectorValue

        return self._build(node, VectorValue, coords=[c.accept(self) for c in node.components])

    def visit_matrix(self, node: Matrix):
        from mathcheck.math.geometric import Matrix as MatrixValue

        return self._build(node, MatrixValue, rows=[[el.accept(self) for el in row] for row in node.rows])

    def visit_interval(self, node: Interval):
        from mathcheck.math.sets import Interval as IntervalValue

        return self._build(
            node,
            IntervalValue,
            left=node.left.accept(self),
            right=node.right.accept(self),
            open_left=node.open_left,
            open_right=node.open_right,
        )

    def visit_set(self, node: Set):
        from mathcheck.math.sets import Set as SetValue

        return self._build(node, SetValue, elements=[el.accept(self) for el in node.elements])

    def _build(self, node: ASTNode, cls, **fields):
        try:
            return cls(context=self.context, **fields)
        except ValueError as e:
            raise ParseError(_validation_message(e), node.pos) from e


def _validation_message(error: ValueError) -> str:
    # pydantic wraps validator messages; report the first one plainly
    errors = getattr(error, "errors", None)
    if callable(errors):
        first = errors()[0]
        return str(first.get("ctx", {}).get("error", first.get("msg")))
    return str(error)


class VariableCollector:
    """Collect the names of the variables used in an AST."""

    def __init__(self):
        self.names: set[str] = set()

    def collect(self, node: ASTNode) -> set[str]:
        node.accept(self)
        return self.names

    def visit_number(self, node: Number):
        pass

    def visit_variable(self, node: Variable):
        self.names.add(node.name)

    def visit_constant(self, node: Constant):
        pass

    def visit_string(self, node: String):
        pass

    def visit_binary_op(self, node: BinaryOp):
        node.left.accept(self)
        node.right.accept(self)

    def visit_unary_op(self, node: UnaryOp):
        node.operand.accept(self)

    def visit_function_call(self, node: FunctionCall):
        for arg in node.args:
            arg.accept(self)

    def visit_list(self, node: List):
        for el in node.elements:
            el.accept(self)

    def visit_point(self, node: Point):
        for coord in node.coords:
            coord.accept(self)

    def visit_vector(self, node: Vector):
        for comp in node.components:
            comp.accept(self)

    def visit_matrix(self, node: Matrix):
        for row in node.rows:
            for el in row:
                el.accept(self)

    def visit_interval(self, node: Interval):
        node.left.accept(self)
        node.right.accept(self)

    def visit_set(self, node: Set):
        for el in node.elements:
            el.accept(self)


class SubstituteVisitor:
    """
    Build a copy of an AST with variables replaced.

    Args:
        replacements: Variable name → AST node
    """

    def __init__(self, replacements: dict[str, ASTNode]):
        self.replacements = replacements

    def visit_number(self, node: Number):
        return Number(node.value).at(node.pos)

    def visit_variable(self, node: Variable):
        if node.name in self.replacements:
            return self.replacements[node.name]
        return Variable(node.name).at(node.pos)

    def visit_constant(self, node: Constant):
        return Constant(node.name).at(node.pos)

    def visit_string(self, node: String):
        return String(node.value).at(node.pos)

    def visit_binary_op(self, node: BinaryOp):
        return BinaryOp(node.left.accept(self), node.op, node.right.accept(self)).at(node.pos)

    def visit_unary_op(self, node: UnaryOp):
        return UnaryOp(node.op, node.operand.accept(self)).at(node.pos)

    def visit_function_call(self, node: FunctionCall):
        return FunctionCall(node.name, [arg.accept(self) for arg in node.args]).at(node.pos)

    def visit_list(self, node: List):
        return List([el.accept(self) for el in node.elements], node.open, node.close).at(node.pos)

    def visit_point(self, node: Point):
        return Point([c.accept(self) for c in node.coords]).at(node.pos)

    def visit_vector(self, node: Vector):
        return Vector([c.accept(self) for c in node.components]).at(node.pos)

    def visit_matrix(self, node: Matrix):
        return Matrix([[el.accept(self) for el in row] for row in node.rows]).at(node.pos)

    def visit_interval(self, node: Interval):
        return Interval(
            node.left.accept(self), node.right.accept(self), node.open_left, node.open_right
        ).at(node.pos)

    def visit_set(self, node: Set):
        return Set([el.accept(self) for el in node.elements]).at(node.pos)


# Sympy conversion

_SYMPY_FUNCTIONS = {
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "sec": sp.sec,
    "csc": sp.csc,
    "cot": sp.cot,
    "asin": sp.asin,
    "acos": sp.acos,
    "atan": sp.atan,
    "asec": sp.asec,
    "acsc": sp.acsc,
    "acot": sp.acot,
    "atan2": sp.atan2,
    "sinh": sp.sinh,
    "cosh": sp.cosh,
    "tanh": sp.tanh,
    "sech": sp.sech,
    "csch": sp.csch,
    "coth": sp.coth,
    "asinh": sp.asinh,
    "acosh": sp.acosh,
    "atanh": sp.atanh,
    "asech": sp.asech,
    "acsch": sp.acsch,
    "acoth": sp.acoth,
    "ln": sp.log,
    "log": sp.log,
    "log10": lambda x: sp.log(x, 10),
    "exp": sp.exp,
    "sqrt": sp.sqrt,
    "abs": sp.Abs,
    "sgn": sp.sign,
    "int": lambda x: sp.sign(x) * sp.floor(sp.Abs(x)),
    "Re": sp.re,
    "Im": sp.im,
    "conj": sp.conjugate,
    "arg": sp.arg,
    "mod": sp.Abs,
}

_SYMPY_CONSTANTS = {
    "pi": sp.pi,
    "e": sp.E,
    "i": sp.I,
    "inf": sp.oo,
    "infinity": sp.oo,
}


class SympyVisitor:
    """
    Convert a scalar AST to a sympy expression.

    Variables become real (or complex) sympy Symbols. Structures such as
    points or intervals have no scalar sympy form and raise TypeMismatchError.
    """

    def __init__(self, context=None):
        self.context = context

    def _symbol(self, name: str) -> sp.Symbol:
        is_real = True
        if self.context is not None and name in self.context.variables:
            is_real = self.context.variables.type_of(name) == "Real"
        return sp.Symbol(name, real=is_real)

    def visit_number(self, node: Number):
        if node.value == int(node.value):
            return sp.Integer(int(node.value))
        return sp.nsimplify(node.value, rational=True)

    def visit_variable(self, node: Variable):
        return self._symbol(node.name)

    def visit_constant(self, node: Constant):
        if self.context is not None:
            value = self.context.constants.get(node.name)
            if isinstance(value, complex) and node.name == "i":
                return sp.I
            if isinstance(value, (int, float)) and node.name not in _SYMPY_CONSTANTS:
                return sp.Float(value)
            if isinstance(value, tuple):
                raise TypeMismatchError(f"Can't convert the vector '{node.name}' to a sympy expression")
        if node.name in _SYMPY_CONSTANTS:
            return _SYMPY_CONSTANTS[node.name]
        return sp.Symbol(node.name)

    def visit_string(self, node: String):
        raise TypeMismatchError("Can't convert a word to a sympy expression")

    def visit_binary_op(self, node: BinaryOp):
        left = node.left.accept(self)
        right = node.right.accept(self)
        op = _render_op(node.op)
        if op == "+":
            return left + right
        if op == "-":
            return left - right
        if op == "*":
            return left * right
        if op == "/":
            return left / right
        if op == "^":
            return left**right
        raise TypeMismatchError(f"Can't convert '{node.op}' to a sympy expression")

    def visit_unary_op(self, node: UnaryOp):
        operand = node.operand.accept(self)
        return -operand if node.op == "-" else operand

    def visit_function_call(self, node: FunctionCall):
        if node.name not in _SYMPY_FUNCTIONS:
            raise TypeMismatchError(f"Can't convert '{node.name}' to a sympy expression")
        return _SYMPY_FUNCTIONS[node.name](*(arg.accept(self) for arg in node.args))

    def _structure(self, node: ASTNode):
        raise TypeMismatchError("Only scalar formulas can be converted to sympy expressions")

    visit_list = visit_point = visit_vector = visit_matrix = visit_interval = visit_set = _structure


def from_sympy(expr: sp.Expr) -> ASTNode:
    """
    Convert a sympy expression back into an AST.

    Args:
        expr: sympy expression built from the supported functions

    Returns:
        Equivalent AST

    Raises:
        TypeMismatchError: For sympy constructs with no counterpart
    """
    if expr is sp.pi:
        return Constant("pi")
    if expr is sp.E:
        return Constant("e")
    if expr is sp.I:
        return Constant("i")
    if expr is sp.oo:
        return Constant("infinity")
    if expr is sp.S.NegativeInfinity:
        return UnaryOp("-", Constant("infinity"))
    if expr.is_Symbol:
        return Variable(expr.name)
    if expr.is_Integer or expr.is_Float:
        value = float(expr)
        return UnaryOp("-", Number(-value)) if value < 0 else Number(value)
    if expr.is_Rational:
        node = BinaryOp(Number(abs(expr.p)), "/", Number(expr.q))
        return UnaryOp("-", node) if expr.p < 0 else node

    if expr.is_Add:
        terms = list(expr.as_ordered_terms())
        node = from_sympy(terms[0])
        for term in terms[1:]:
            coeff, rest = term.as_coeff_Mul()
            if coeff.is_number and coeff.is_negative:
                node = BinaryOp(node, "-", from_sympy(-term))
            else:
                node = BinaryOp(node, "+", from_sympy(term))
        return node

    if expr.is_Mul:
        coeff, rest = expr.as_coeff_Mul()
        if coeff == -1:
            return UnaryOp("-", from_sympy(rest))
        numer, denom = sp.fraction(expr)
        if denom != 1:
            return BinaryOp(from_sympy(numer), "/", from_sympy(denom))
        factors = list(expr.as_ordered_factors())
        node = from_sympy(factors[0])
        for factor in factors[1:]:
            node = BinaryOp(node, "*", from_sympy(factor))
        return node

    if expr.is_Pow:
        base, exponent = expr.as_base_exp()
        if exponent == sp.Rational(1, 2):
            return FunctionCall("sqrt", [from_sympy(base)])
        if exponent.is_number and exponent.is_negative:
            return BinaryOp(Number(1), "/", from_sympy(base**-exponent))
        return BinaryOp(from_sympy(base), "^", from_sympy(exponent))

    if isinstance(expr, sp.exp):
        return FunctionCall("exp", [from_sympy(expr.args[0])])
    if isinstance(expr, sp.log):
        return FunctionCall("ln", [from_sympy(expr.args[0])])
    if isinstance(expr, sp.Abs):
        return FunctionCall("abs", [from_sympy(expr.args[0])])
    if isinstance(expr, sp.sign):
        return FunctionCall("sgn", [from_sympy(expr.args[0])])
    if isinstance(expr, sp.re):
        return FunctionCall("Re", [from_sympy(expr.args[0])])
    if isinstance(expr, sp.im):
        return FunctionCall("Im", [from_sympy(expr.args[0])])
    if isinstance(expr, sp.conjugate):
        return FunctionCall("conj", [from_sympy(expr.args[0])])

    if isinstance(expr, sp.Function):
        name = type(expr).__name__
        if name in _SYMPY_FUNCTIONS:
            return FunctionCall(name, [from_sympy(arg) for arg in expr.args])

    raise TypeMismatchError(f"Can't convert '{expr}' from sympy")
