"""
Arithmetic and function application on MathValues.

Every operator and function of the grammar is evaluated here, dispatching on
the operands' type tags. Any Formula operand makes the result a Formula that
records the operation instead of performing it.

Evaluation problems raise:
- DomainError: the operation is undefined at these values (1/0, ln(-1))
- DimensionError: vectors or matrices of incompatible sizes
- TypeMismatchError: the operation makes no sense for the operand types
"""

from __future__ import annotations

import cmath
import math
from typing import Any, Callable

import numpy as np

from mathcheck.core.errors import DimensionError, DomainError, TypeMismatchError

from .value import MathValue, TypePrecedence

SCALARS = (TypePrecedence.REAL, TypePrecedence.COMPLEX)
GEOMETRIC = (TypePrecedence.POINT, TypePrecedence.VECTOR)

# Surface forms that mean the same operation
_CANONICAL_OPS = {"**": "^", "": "*", " ": "*", "//": "/"}

_OP_NAMES = {
    "+": "add",
    "-": "subtract",
    "*": "multiply",
    "/": "divide",
    "^": "raise",
    ".": "take the dot product of",
    "><": "take the cross product of",
}


def _allows_complex(context: Any) -> bool:
    """Complex results are allowed when the context's i is the imaginary unit."""
    return context is not None and isinstance(context.constants.get("i"), complex)


def _context_of(*values: Any) -> Any:
    for value in values:
        if isinstance(value, MathValue) and value.context is not None:
            return value.context
    return None


def _wrap(result: complex | float, context: Any, complex_inputs: bool) -> MathValue:
    from .numeric import Complex, Real

    if isinstance(result, complex):
        if not (cmath.isfinite(result)):
            raise DomainError("The result is not a finite number")
        if result.imag == 0 and not complex_inputs:
            return Real(result.real, context=context)
        if not complex_inputs and not _allows_complex(context):
            raise DomainError("The result is not a real number")
        return Complex(result.real, result.imag, context=context)
    if not math.isfinite(result):
        raise DomainError("The result is not a finite number")
    return Real(float(result), context=context)


def _type_error(op: str, a: MathValue, b: MathValue) -> TypeMismatchError:
    verb = _OP_NAMES.get(op, f"use '{op}' with")
    return TypeMismatchError(f"Can't {verb} {a.type_phrase} and {b.type_phrase}")


# Binary operations


def apply_binary(op: str, a: Any, b: Any, context: Any = None) -> MathValue:
    """
    Apply a binary operator.

    Args:
        op: Operator token (any surface form: "*", "", " ", "**", ...)
        a: Left operand (MathValue or Python number)
        b: Right operand
        context: Context for the result (None = the operands' context)

    Returns:
        The resulting MathValue (a Formula when either operand is one)
    """
    context = context if context is not None else _context_of(a, b)
    a = MathValue.from_python(a, context)
    b = MathValue.from_python(b, context)

    if a.is_formula or b.is_formula:
        from .formula import Formula

        return Formula.from_operation(op, a, b, context)

    if op == "U":
        return _union(a, b, context)

    op = _CANONICAL_OPS.get(op, op)
    pa, pb = a.type_precedence, b.type_precedence

    if pa in SCALARS and pb in SCALARS:
        return _scalar_binary(op, a.to_python(), b.to_python(), context,
                              TypePrecedence.COMPLEX in (pa, pb))
    if pa in GEOMETRIC or pb in GEOMETRIC:
        return _geometric_binary(op, a, b, context)
    if TypePrecedence.MATRIX in (pa, pb):
        return _matrix_binary(op, a, b, context)
    raise _type_error(op, a, b)


def _scalar_binary(op: str, x: complex | float, y: complex | float, context: Any, complex_inputs: bool) -> MathValue:
    try:
        if op == "+":
            result = x + y
        elif op == "-":
            result = x - y
        elif op == "*":
            result = x * y
        elif op == "/":
            if y == 0:
                raise DomainError("Division by zero")
            result = x / y
        elif op == "^":
            result = _power(x, y, context, complex_inputs)
        else:
            raise TypeMismatchError(f"Can't use '{op}' with numbers")
    except (OverflowError, ZeroDivisionError) as e:
        raise DomainError(f"Can't evaluate: {e}") from e
    return _wrap(result, context, complex_inputs)


def _power(x: complex | float, y: complex | float, context: Any, complex_inputs: bool) -> complex | float:
    if x == 0 and (y.real < 0 if isinstance(y, complex) else y < 0):
        raise DomainError("Division by zero")
    if isinstance(x, complex) or isinstance(y, complex):
        return complex(x) ** complex(y)
    if x < 0 and y != int(y):
        if not _allows_complex(context):
            raise DomainError("Can't raise a negative number to a non-integer power")
        return complex(x) ** y
    return x ** y


def _geometric_binary(op: str, a: MathValue, b: MathValue, context: Any) -> MathValue:
    from .geometric import Point, Vector

    pa, pb = a.type_precedence, b.type_precedence

    if op in ("+", "-") and pa in GEOMETRIC and pb in GEOMETRIC:
        if len(a.coords) != len(b.coords):
            raise DimensionError(f"Can't {_OP_NAMES[op]} {a.type_phrase} and {b.type_phrase} of different dimensions")
        v, w = a.to_numpy(), b.to_numpy()
        result = v + w if op == "+" else v - w
        cls = Vector if pa == pb == TypePrecedence.VECTOR else Point
        return cls(coords=result.tolist(), context=context)

    if op == "*" and (pa in SCALARS) != (pb in SCALARS):
        scalar, geom = (a, b) if pa in SCALARS else (b, a)
        result = geom.to_numpy() * scalar.to_python()
        return type(geom)(coords=result.tolist(), context=context)

    if op == "/" and pa in GEOMETRIC and pb in SCALARS:
        if b.to_python() == 0:
            raise DomainError("Division by zero")
        result = a.to_numpy() / b.to_python()
        return type(a)(coords=result.tolist(), context=context)

    if op in (".", "><") and pa == pb == TypePrecedence.VECTOR:
        return a.dot(b) if op == "." else a.cross(b)

    if pa == TypePrecedence.MATRIX or pb == TypePrecedence.MATRIX:
        return _matrix_binary(op, a, b, context)

    raise _type_error(op, a, b)


def _matrix_binary(op: str, a: MathValue, b: MathValue, context: Any) -> MathValue:
    from .geometric import Matrix, Vector

    pa, pb = a.type_precedence, b.type_precedence

    if op in ("+", "-") and pa == pb == TypePrecedence.MATRIX:
        if a.shape != b.shape:
            raise DimensionError(f"Can't {_OP_NAMES[op]} matrices of different sizes")
        m, n = a.to_numpy(), b.to_numpy()
        return Matrix((m + n if op == "+" else m - n).tolist(), context=context)

    if op == "*":
        if pa in SCALARS or pb in SCALARS:
            scalar, matrix = (a, b) if pa in SCALARS else (b, a)
            return Matrix((matrix.to_numpy() * scalar.to_python()).tolist(), context=context)
        if pa == pb == TypePrecedence.MATRIX:
            if a.shape[1] != b.shape[0]:
                raise DimensionError("Matrix dimensions are not compatible for multiplication")
            return Matrix((a.to_numpy() @ b.to_numpy()).tolist(), context=context)
        if pa == TypePrecedence.MATRIX and pb in GEOMETRIC:
            if a.shape[1] != len(b.coords):
                raise DimensionError("Matrix and vector dimensions are not compatible")
            return Vector(coords=(a.to_numpy() @ b.to_numpy()).tolist(), context=context)

    if op == "/" and pa == TypePrecedence.MATRIX and pb in SCALARS:
        if b.to_python() == 0:
            raise DomainError("Division by zero")
        return Matrix((a.to_numpy() / b.to_python()).tolist(), context=context)

    if op == "^" and pa == TypePrecedence.MATRIX and pb == TypePrecedence.REAL:
        n = b.to_python()
        if n != int(n):
            raise DomainError("Matrix powers must be integers")
        if a.shape[0] != a.shape[1]:
            raise DimensionError("Only square matrices can be raised to a power")
        try:
            return Matrix(np.linalg.matrix_power(a.to_numpy(), int(n)).tolist(), context=context)
        except np.linalg.LinAlgError as e:
            raise DomainError("The matrix is not invertible") from e

    raise _type_error(op, a, b)


def _union(a: MathValue, b: MathValue, context: Any) -> MathValue:
    from .sets import Union

    allowed = (TypePrecedence.INTERVAL, TypePrecedence.SET, TypePrecedence.UNION)
    if a.type_precedence not in allowed or b.type_precedence not in allowed:
        raise TypeMismatchError(f"Can't form a union of {a.type_phrase} and {b.type_phrase}")
    return Union(a, b, context=context)


# Unary operations


def apply_unary(op: str, x: Any, context: Any = None) -> MathValue:
    """Apply unary plus or minus."""
    context = context if context is not None else _context_of(x)
    x = MathValue.from_python(x, context)

    if op == "+":
        return x
    if op != "-":
        raise TypeMismatchError(f"Unknown unary operator '{op}'")

    if x.is_formula:
        from .formula import Formula

        return Formula.from_unary(op, x, context)

    from .geometric import Matrix
    from .numeric import Complex, Infinity, Real

    precedence = x.type_precedence
    if precedence == TypePrecedence.REAL:
        return Real(-x.value, context=context)
    if precedence == TypePrecedence.COMPLEX:
        return Complex(-x.real, -x.imag, context=context)
    if precedence == TypePrecedence.INFINITY:
        return Infinity(-x.sign, context=context)
    if precedence in GEOMETRIC:
        return type(x)(coords=(-x.to_numpy()).tolist(), context=context)
    if precedence == TypePrecedence.MATRIX:
        return Matrix((-x.to_numpy()).tolist(), context=context)
    raise TypeMismatchError(f"Can't negate {x.type_phrase}")


# Functions


def _sgn(x: float) -> float:
    return float((x > 0) - (x < 0))


def _reciprocal(f: Callable) -> Callable:
    def g(x):
        value = f(x)
        if value == 0:
            raise DomainError("Division by zero")
        return 1 / value

    return g


def _inverse_of_reciprocal(f: Callable) -> Callable:
    def g(x):
        if x == 0:
            raise DomainError("Division by zero")
        return f(1 / x)

    return g


def _acot(x):
    if x == 0:
        return math.pi / 2
    return math.atan(1 / x)


# name -> (real implementation, complex implementation or None)
_SCALAR_FUNCTIONS: dict[str, tuple[Callable, Callable | None]] = {
    "sin": (math.sin, cmath.sin),
    "cos": (math.cos, cmath.cos),
    "tan": (math.tan, cmath.tan),
    "sec": (_reciprocal(math.cos), _reciprocal(cmath.cos)),
    "csc": (_reciprocal(math.sin), _reciprocal(cmath.sin)),
    "cot": (_reciprocal(math.tan), _reciprocal(cmath.tan)),
    "asin": (math.asin, cmath.asin),
    "acos": (math.acos, cmath.acos),
    "atan": (math.atan, cmath.atan),
    "asec": (_inverse_of_reciprocal(math.acos), _inverse_of_reciprocal(cmath.acos)),
    "acsc": (_inverse_of_reciprocal(math.asin), _inverse_of_reciprocal(cmath.asin)),
    "acot": (_acot, None),
    "sinh": (math.sinh, cmath.sinh),
    "cosh": (math.cosh, cmath.cosh),
    "tanh": (math.tanh, cmath.tanh),
    "sech": (_reciprocal(math.cosh), _reciprocal(cmath.cosh)),
    "csch": (_reciprocal(math.sinh), _reciprocal(cmath.sinh)),
    "coth": (_reciprocal(math.tanh), _reciprocal(cmath.tanh)),
    "asinh": (math.asinh, cmath.asinh),
    "acosh": (math.acosh, cmath.acosh),
    "atanh": (math.atanh, cmath.atanh),
    "asech": (_inverse_of_reciprocal(math.acosh), _inverse_of_reciprocal(cmath.acosh)),
    "acsch": (_inverse_of_reciprocal(math.asinh), _inverse_of_reciprocal(cmath.asinh)),
    "acoth": (_inverse_of_reciprocal(math.atanh), _inverse_of_reciprocal(cmath.atanh)),
    "ln": (math.log, cmath.log),
    "log": (math.log, cmath.log),
    "log10": (math.log10, cmath.log10),
    "exp": (math.exp, cmath.exp),
    "sqrt": (math.sqrt, cmath.sqrt),
    "int": (lambda x: float(math.trunc(x)), None),
    "sgn": (_sgn, None),
}

# Functions whose real versions fail where the complex version succeeds
_COMPLEX_EXTENSIONS = ("sqrt", "ln", "log", "log10", "asin", "acos", "acosh", "atanh", "asec", "acsc")


def apply_function(name: str, args: list[Any], context: Any = None) -> MathValue:
    """
    Apply a named function to evaluated arguments.

    Args:
        name: Function name (sin, sqrt, norm, Re, ...)
        args: Argument values
        context: Context for the result

    Returns:
        The resulting MathValue (a Formula when any argument is one)

    Raises:
        DomainError: If the function is undefined at the argument
        TypeMismatchError: If the argument has the wrong type
    """
    context = context if context is not None else _context_of(*args)
    args = [MathValue.from_python(arg, context) for arg in args]

    if any(arg.is_formula for arg in args):
        from .formula import Formula

        return Formula.from_function(name, args, context)

    if name == "atan2":
        y, x = args
        if y.type_precedence != TypePrecedence.REAL or x.type_precedence != TypePrecedence.REAL:
            raise TypeMismatchError("The inputs to atan2 must be real numbers")
        return _wrap(math.atan2(y.value, x.value), context, False)

    (arg,) = args
    precedence = arg.type_precedence

    if name in ("norm", "unit", "abs") and precedence in GEOMETRIC:
        from .geometric import Vector

        vector = Vector.from_point(arg) if precedence == TypePrecedence.POINT else arg
        if name == "unit":
            try:
                return vector.unit()
            except ValueError as e:
                raise DomainError(str(e)) from e
        return vector.norm()
    if name in ("norm", "unit"):
        raise TypeMismatchError(f"The input to {name} must be a vector")

    if precedence not in SCALARS:
        raise TypeMismatchError(f"The input to {name} must be a number, not {arg.type_phrase}")

    value = arg.to_python()
    complex_input = precedence == TypePrecedence.COMPLEX

    if name in ("abs", "mod"):
        return _wrap(abs(value), context, False)
    if name == "arg":
        return _wrap(cmath.phase(value), context, False)
    if name == "Re":
        return _wrap(complex(value).real, context, False)
    if name == "Im":
        return _wrap(complex(value).imag, context, False)
    if name == "conj":
        return _wrap(complex(value).conjugate(), context, True)

    if name not in _SCALAR_FUNCTIONS:
        raise TypeMismatchError(f"Unknown function '{name}'")
    real_impl, complex_impl = _SCALAR_FUNCTIONS[name]

    try:
        if complex_input:
            if complex_impl is None:
                raise TypeMismatchError(f"The input to {name} must be a real number")
            return _wrap(complex_impl(value), context, True)
        try:
            return _wrap(real_impl(value), context, False)
        except ValueError:
            if name in _COMPLEX_EXTENSIONS and complex_impl is not None and _allows_complex(context):
                return _wrap(complex_impl(complex(value)), context, True)
            raise
    except ValueError as e:
        raise DomainError(f"{name}({arg.to_string()}) is undefined") from e
    except (OverflowError, ZeroDivisionError) as e:
        raise DomainError(f"Can't evaluate {name}({arg.to_string()})") from e
