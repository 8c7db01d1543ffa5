"""
Numeric MathValue types: Real, Complex, Infinity.

Also home of the scalar tolerance rule every other comparison builds on.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mathcheck.core.config import settings

from .value import MathValue, ToleranceMode, TypePrecedence

# Slack for floating point error so that exactly-at-tolerance stays inclusive
EPSILON = 1e-12


def fuzzy_compare(
    a: float | complex,
    b: float | complex,
    tolerance: float,
    mode: str,
    zero_level: float = 1e-14,
    zero_level_tol: float = 1e-12,
) -> bool:
    """
    Compare two numbers with tolerance.

    In relative mode the difference is measured against ``|b|`` (the
    reference value); when either value is smaller than ``zero_level`` the
    comparison falls back to an absolute one against ``zero_level_tol``.

    Args:
        a: Student value
        b: Reference value
        tolerance: Tolerance value
        mode: "relative" or "absolute"
        zero_level: Magnitude below which a value counts as zero
        zero_level_tol: Absolute tolerance used near zero

    Returns:
        True if values are equal within tolerance (boundary inclusive)
    """
    if a == b:
        return True

    diff = abs(a - b)
    if math.isnan(diff):
        return False

    if mode == ToleranceMode.ABSOLUTE:
        return diff <= tolerance + EPSILON

    if abs(a) < zero_level or abs(b) < zero_level:
        return diff <= zero_level_tol + EPSILON

    return diff / abs(b) <= tolerance + EPSILON


class Tolerance(BaseModel):
    """Tolerance settings used by ``MathValue.compare``."""

    model_config = ConfigDict(frozen=True)

    tolerance: float = Field(default_factory=lambda: settings.DEFAULT_TOLERANCE, ge=0)
    tolType: str = Field(default_factory=lambda: settings.DEFAULT_TOL_TYPE)
    zeroLevel: float = Field(default_factory=lambda: settings.DEFAULT_ZERO_LEVEL, ge=0)
    zeroLevelTol: float = Field(default_factory=lambda: settings.DEFAULT_ZERO_LEVEL_TOL, ge=0)

    @field_validator("tolType")
    @classmethod
    def validate_tol_type(cls, v: str) -> str:
        if v not in (ToleranceMode.RELATIVE, ToleranceMode.ABSOLUTE):
            raise ValueError(f"tolType must be 'relative' or 'absolute', got '{v}'")
        return v

    @classmethod
    def from_context(cls, context: Any, **overrides: Any) -> "Tolerance":
        """Build from a context's flags, with per-call overrides (None = keep flag)."""
        values = {
            name: context.flags.get(name)
            for name in ("tolerance", "tolType", "zeroLevel", "zeroLevelTol")
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def equal(self, a: float | complex, b: float | complex) -> bool:
        return fuzzy_compare(a, b, self.tolerance, self.tolType, self.zeroLevel, self.zeroLevelTol)


def format_number(value: float) -> str:
    """Shortest text for a float that parses back to the same float."""
    if math.isfinite(value) and value == int(value) and abs(value) < 1e15:
        return str(int(value))
    return repr(float(value))


class Real(MathValue):
    """
    Real number value.

    The most common mathematical type, represents floating-point numbers
    with fuzzy comparison support.
    """

    type_precedence = TypePrecedence.REAL
    type_name = "Number"
    type_phrase = "a number"

    value: float = Field(description="The numeric value")

    def __init__(self, value: float | int | str = 0.0, context=None, **kwargs):
        """
        Initialize a Real number.

        Args:
            value: Numeric value, or text such as "pi/2" to be parsed
            context: The Context (None = default context)
        """
        if isinstance(value, str):
            from .compute import compute

            parsed = compute(value, context)
            if not isinstance(parsed, Real):
                raise ValueError(f"'{value}' is not a real number")
            value = parsed.value
        elif isinstance(value, Real):
            value = value.value
        value = float(value)
        if not math.isfinite(value):
            raise ValueError("Real values must be finite; use Infinity")
        super().__init__(value=value, context=context, **kwargs)

    def compare(self, other: MathValue, tol: Tolerance | None = None) -> bool:
        tol = self.tolerance(tol)
        if isinstance(other, Real):
            return tol.equal(self.value, other.value)
        if isinstance(other, Complex):
            return tol.equal(complex(self.value, 0), other.to_python())
        return False

    def to_string(self) -> str:
        return format_number(self.value)

    def to_python(self) -> float:
        return self.value

    def to_ast(self):
        from mathcheck.parser.ast import Number, UnaryOp

        if self.value < 0:
            return UnaryOp("-", Number(-self.value))
        return Number(self.value)

    def __float__(self) -> float:
        return self.value

    def __lt__(self, other: Any) -> bool:
        return self.value < float(other)

    def __le__(self, other: Any) -> bool:
        return self.value <= float(other)

    def __gt__(self, other: Any) -> bool:
        return self.value > float(other)

    def __ge__(self, other: Any) -> bool:
        return self.value >= float(other)

    def __abs__(self) -> Real:
        return Real(abs(self.value), context=self.context)


class Complex(MathValue):
    """Complex number value a + bi."""

    type_precedence = TypePrecedence.COMPLEX
    type_name = "Complex"
    type_phrase = "a complex number"

    real: float = 0.0
    imag: float = 0.0

    def __init__(self, real: float | complex | str = 0.0, imag: float = 0.0, context=None, **kwargs):
        if isinstance(real, str):
            from .compute import compute

            parsed = compute(real, context)
            if not isinstance(parsed, (Real, Complex)):
                raise ValueError(f"'{real}' is not a complex number")
            real, imag = parsed.to_python().real, parsed.to_python().imag
        elif isinstance(real, complex):
            real, imag = real.real, real.imag
        super().__init__(real=float(real), imag=float(imag), context=context, **kwargs)

    def compare(self, other: MathValue, tol: Tolerance | None = None) -> bool:
        tol = self.tolerance(tol)
        if isinstance(other, (Real, Complex)):
            return tol.equal(self.to_python(), complex(other.to_python()))
        return False

    def to_string(self) -> str:
        if self.imag == 0:
            return format_number(self.real)
        if self.imag == 1:
            imag = "i"
        elif self.imag == -1:
            imag = "-i"
        else:
            imag = f"{format_number(self.imag)}i"
        if self.real == 0:
            return imag
        sign = "" if imag.startswith("-") else "+"
        return f"{format_number(self.real)}{sign}{imag}"

    def to_python(self) -> complex:
        return complex(self.real, self.imag)

    def to_ast(self):
        from mathcheck.parser.ast import BinaryOp, Constant

        return BinaryOp(
            Real(self.real).to_ast(), "+", BinaryOp(Real(self.imag).to_ast(), "*", Constant("i"))
        )

    def __abs__(self) -> Real:
        return Real(abs(self.to_python()), context=self.context)


class Infinity(MathValue):
    """Positive or negative infinity."""

    type_precedence = TypePrecedence.INFINITY
    type_name = "Infinity"
    type_phrase = "infinity"

    sign: int = 1

    def __init__(self, sign: int = 1, context=None, **kwargs):
        super().__init__(sign=sign, context=context, **kwargs)

    @field_validator("sign", mode="before")
    @classmethod
    def _validate_sign(cls, value: Any) -> int:
        if value not in (1, -1):
            raise ValueError("Infinity sign must be 1 or -1")
        return int(value)

    def compare(self, other: MathValue, tol: Tolerance | None = None) -> bool:
        return isinstance(other, Infinity) and other.sign == self.sign

    def to_string(self) -> str:
        return "infinity" if self.sign > 0 else "-infinity"

    def to_python(self) -> float:
        return math.inf * self.sign

    def to_ast(self):
        from mathcheck.parser.ast import Constant, UnaryOp

        node = Constant("infinity")
        return node if self.sign > 0 else UnaryOp("-", node)

    def __float__(self) -> float:
        return self.to_python()
