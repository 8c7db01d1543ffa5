"""
Base MathValue class for mathcheck values.

This module provides the foundation shared by every parsed value:
- a closed set of type tags (``TypePrecedence``) used for dispatch
- tolerance-aware comparison
- parseable string output
- arithmetic that composes through ``mathcheck.math.operations``

Values are immutable once constructed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from mathcheck.parser.ast import ASTNode

    from .context import Context
    from .numeric import Tolerance


class TypePrecedence(IntEnum):
    """
    Type tags, ordered by promotion precedence.

    Lower values promote to higher values.
    """

    REAL = 1
    INFINITY = 2
    COMPLEX = 3
    POINT = 4
    VECTOR = 5
    MATRIX = 6
    LIST = 7
    INTERVAL = 8
    SET = 9
    UNION = 10
    STRING = 11
    FORMULA = 12


class ToleranceMode:
    """Modes for fuzzy comparison."""

    RELATIVE = "relative"  # |a - b| / |b| <= tol
    ABSOLUTE = "absolute"  # |a - b| <= tol


class MathValue(BaseModel, ABC):
    """
    Base class for all mathematical value objects.

    Subclasses set ``type_precedence`` plus the names used in student
    feedback, and implement ``compare``, ``to_string`` and ``to_python``.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    context: Any = Field(default=None, exclude=True, repr=False)

    type_precedence: ClassVar[TypePrecedence]
    type_name: ClassVar[str] = "Value"
    type_phrase: ClassVar[str] = "a value"

    @abstractmethod
    def compare(self, other: MathValue, tol: Tolerance | None = None) -> bool:
        """
        Fuzzy comparison with tolerance.

        Args:
            other: Value to compare against
            tol: Tolerance settings (None = this value's context flags)

        Returns:
            True if values are equal within tolerance
        """

    @abstractmethod
    def to_string(self) -> str:
        """Convert to text that parses back to an equal value."""

    @abstractmethod
    def to_python(self) -> Any:
        """Convert to plain Python data."""

    @abstractmethod
    def to_ast(self) -> ASTNode:
        """Convert to an AST node, for building formulas."""

    # Helpers shared by the concrete types

    def get_context(self) -> Context:
        from .context import default_context

        return self.context if self.context is not None else default_context()

    def tolerance(self, tol: Tolerance | None = None) -> Tolerance:
        if tol is not None:
            return tol
        from .numeric import Tolerance

        return Tolerance.from_context(self.get_context())

    @property
    def is_formula(self) -> bool:
        return self.type_precedence == TypePrecedence.FORMULA

    def cmp(self, **flags: Any):
        """
        Return an answer checker for this value.

        Args:
            **flags: Checker flags (showTypeWarnings, ordered, checker, ...)

        Returns:
            AnswerChecker whose ``evaluate(student_text)`` returns an AnswerHash
        """
        from mathcheck.answer.checkers import checker_for

        return checker_for(self, **flags)

    def length(self) -> int:
        """Number of entries (1 for scalars)."""
        return 1

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.to_string()})"

    def __eq__(self, other: Any) -> bool:
        try:
            other = MathValue.from_python(other, self.context)
        except TypeError:
            return NotImplemented
        return self.compare(other)

    def __ne__(self, other: Any) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None  # tolerance equality can't be hashed

    # Arithmetic composes through the operation tables

    def __add__(self, other: Any) -> MathValue:
        from .operations import apply_binary

        return apply_binary("+", self, other)

    def __radd__(self, other: Any) -> MathValue:
        from .operations import apply_binary

        return apply_binary("+", other, self)

    def __sub__(self, other: Any) -> MathValue:
        from .operations import apply_binary

        return apply_binary("-", self, other)

    def __rsub__(self, other: Any) -> MathValue:
        from .operations import apply_binary

        return apply_binary("-", other, self)

    def __mul__(self, other: Any) -> MathValue:
        from .operations import apply_binary

        return apply_binary("*", self, other)

    def __rmul__(self, other: Any) -> MathValue:
        from .operations import apply_binary

        return apply_binary("*", other, self)

    def __truediv__(self, other: Any) -> MathValue:
        from .operations import apply_binary

        return apply_binary("/", self, other)

    def __rtruediv__(self, other: Any) -> MathValue:
        from .operations import apply_binary

        return apply_binary("/", other, self)

    def __pow__(self, other: Any) -> MathValue:
        from .operations import apply_binary

        return apply_binary("^", self, other)

    def __rpow__(self, other: Any) -> MathValue:
        from .operations import apply_binary

        return apply_binary("^", other, self)

    def __neg__(self) -> MathValue:
        from .operations import apply_unary

        return apply_unary("-", self)

    def __pos__(self) -> MathValue:
        return self

    # Factory

    @staticmethod
    def from_python(value: Any, context: Context | None = None) -> MathValue:
        """
        Wrap a Python value as a MathValue.

        int/float -> Real (or Infinity), complex -> Complex, str -> String,
        tuple -> Point, 1-D ndarray -> Vector, 2-D ndarray -> Matrix,
        list -> List.

        Raises:
            TypeError: If the value has no MathValue counterpart
        """
        import math

        import numpy as np

        from .collections import List, String
        from .geometric import Matrix, Point, Vector
        from .numeric import Complex, Infinity, Real

        if isinstance(value, MathValue):
            return value
        if isinstance(value, bool):
            raise TypeError("Booleans are not math values")
        if isinstance(value, (int, float, np.integer, np.floating)):
            if math.isinf(value):
                return Infinity(1 if value > 0 else -1, context=context)
            return Real(float(value), context=context)
        if isinstance(value, (complex, np.complexfloating)):
            return Complex(value.real, value.imag, context=context)
        if isinstance(value, str):
            return String(value, context=context)
        if isinstance(value, tuple):
            return Point(*value, context=context)
        if isinstance(value, np.ndarray):
            if value.ndim == 1:
                return Vector(*value.tolist(), context=context)
            if value.ndim == 2:
                return Matrix(value.tolist(), context=context)
        if isinstance(value, list):
            return List(*value, context=context)
        raise TypeError(f"Can't convert {type(value).__name__} to a math value")
