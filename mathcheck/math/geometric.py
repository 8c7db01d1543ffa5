"""
Geometric MathValue types: Point, Vector, Matrix.

Coordinates are stored as MathValues (Real or Complex); numeric work such
as norms, parallel tests and matrix products goes through NumPy.
"""

from __future__ import annotations

from typing import Any, Iterable

import numpy as np
from pydantic import Field

from mathcheck.core.errors import DimensionError

from .numeric import Real, Tolerance
from .value import MathValue, TypePrecedence


def _coerce_coordinates(raw: Iterable[Any], context: Any) -> tuple[MathValue, ...]:
    coords = tuple(MathValue.from_python(c, context) for c in raw)
    for coord in coords:
        if coord.type_precedence not in (TypePrecedence.REAL, TypePrecedence.COMPLEX):
            raise ValueError(f"Coordinates must be numbers, not {coord.type_phrase}")
    return coords


def _parse_arguments(cls, args: tuple, context: Any, expected: str) -> tuple[MathValue, ...]:
    if len(args) == 1 and isinstance(args[0], str):
        from .compute import compute

        parsed = compute(args[0], context, expected=expected)
        if not isinstance(parsed, cls):
            raise ValueError(f"'{args[0]}' is not {cls.type_phrase}")
        return parsed.coords
    if len(args) == 1 and isinstance(args[0], (list, tuple, np.ndarray)):
        return _coerce_coordinates(list(args[0]), context)
    if len(args) == 1 and isinstance(args[0], (Point, Vector)):
        return args[0].coords
    return _coerce_coordinates(args, context)


class Point(MathValue):
    """
    Point in n-dimensional space, written (x, y, ...).

    Points compare coordinate by coordinate.
    """

    type_precedence = TypePrecedence.POINT
    type_name = "Point"
    type_phrase = "a point"

    coords: tuple[MathValue, ...] = Field(default_factory=tuple)

    def __init__(self, *args: Any, context: Any = None, coords: Iterable[Any] | None = None, **kwargs: Any):
        """
        Initialize a Point.

        Examples:
            Point(1, 2)
            Point([1, 2, 3])
            Point("(1, 2)")
        """
        if coords is not None and args:
            raise ValueError("Point accepts either coords or positional arguments, not both")
        if coords is not None:
            parsed = _coerce_coordinates(coords, context)
        else:
            parsed = _parse_arguments(type(self), args, context, self.type_name)
        super().__init__(coords=parsed, context=context, **kwargs)

    def compare(self, other: MathValue, tol: Tolerance | None = None) -> bool:
        if type(other) is not type(self) or len(other.coords) != len(self.coords):
            return False
        tol = self.tolerance(tol)
        return all(a.compare(b, tol) for a, b in zip(self.coords, other.coords))

    def coordinate_matches(self, other: "Point", tol: Tolerance | None = None) -> list[bool]:
        """Per-coordinate equality against another value of the same dimension."""
        if len(other.coords) != len(self.coords):
            raise DimensionError("The number of coordinates is incorrect")
        tol = self.tolerance(tol)
        return [a.compare(b, tol) for a, b in zip(self.coords, other.coords)]

    def to_string(self) -> str:
        return "(" + ", ".join(c.to_string() for c in self.coords) + ")"

    def to_python(self) -> tuple:
        return tuple(c.to_python() for c in self.coords)

    def to_numpy(self) -> np.ndarray:
        return np.array(self.to_python())

    def to_ast(self):
        from mathcheck.parser.ast import Point as PointNode

        return PointNode([c.to_ast() for c in self.coords])

    def length(self) -> int:
        return len(self.coords)

    def __len__(self) -> int:
        return len(self.coords)

    def __getitem__(self, index: int) -> MathValue:
        return self.coords[index]


class Vector(Point):
    """
    Vector in n-dimensional space, written <x, y, ...>.

    Supports vector operations: dot product, cross product, norm, and the
    parallel test used by the vector answer checker.
    """

    type_precedence = TypePrecedence.VECTOR
    type_name = "Vector"
    type_phrase = "a vector"

    def to_string(self) -> str:
        return "<" + ", ".join(c.to_string() for c in self.coords) + ">"

    def to_ast(self):
        from mathcheck.parser.ast import Vector as VectorNode

        return VectorNode([c.to_ast() for c in self.coords])

    @classmethod
    def from_point(cls, point: Point) -> "Vector":
        return cls(coords=point.coords, context=point.context)

    def norm(self) -> Real:
        """Euclidean norm ||v||."""
        return Real(float(np.linalg.norm(self.to_numpy())), context=self.context)

    def unit(self) -> "Vector":
        magnitude = self.norm().value
        if magnitude == 0:
            raise ValueError("Can't normalize the zero vector")
        return Vector(self.to_numpy() / magnitude, context=self.context)

    def dot(self, other: "Vector") -> MathValue:
        if len(self.coords) != len(other.coords):
            raise DimensionError("Vectors must have the same dimension")
        return MathValue.from_python(np.dot(self.to_numpy(), other.to_numpy()).item(), self.context)

    def cross(self, other: "Vector") -> "Vector":
        if len(self.coords) != 3 or len(other.coords) != 3:
            raise DimensionError("Cross product is only defined for 3D vectors")
        return Vector(np.cross(self.to_numpy(), other.to_numpy()), context=self.context)

    def is_parallel(self, other: "Vector", same_direction: bool = False, tol: Tolerance | None = None) -> bool:
        """
        Test whether this vector is a scalar multiple of ``other``.

        The scale factor is the least-squares multiple k = (v . w) / (w . w);
        every coordinate must match k * w within tolerance.

        Args:
            other: Reference vector
            same_direction: Require k > 0
            tol: Tolerance settings

        Returns:
            True if parallel (and pointing the same way when requested)
        """
        if len(self.coords) != len(other.coords):
            raise DimensionError("The number of coordinates is incorrect")
        tol = self.tolerance(tol)
        v, w = self.to_numpy(), other.to_numpy()
        ww = np.vdot(w, w).real
        if ww == 0:
            return not np.any(v)
        k = np.vdot(w, v) / ww
        if abs(k) < tol.zeroLevel:
            return False
        if same_direction and (abs(k.imag) > tol.zeroLevel or k.real <= 0):
            return False
        return all(tol.equal(a, k * b) for a, b in zip(v.tolist(), w.tolist()))


class Matrix(MathValue):
    """Matrix of numbers, written [[a, b], [c, d]]."""

    type_precedence = TypePrecedence.MATRIX
    type_name = "Matrix"
    type_phrase = "a matrix"

    rows: tuple[tuple[MathValue, ...], ...] = Field(default_factory=tuple)

    def __init__(self, *args: Any, context: Any = None, rows: Any = None, **kwargs: Any):
        """
        Initialize a Matrix.

        Examples:
            Matrix([[1, 2], [3, 4]])
            Matrix([1, 2], [3, 4])
            Matrix("[[1, 2], [3, 4]]")
        """
        if rows is None:
            if len(args) == 1 and isinstance(args[0], str):
                from .compute import compute

                parsed = compute(args[0], context, expected="Matrix")
                if not isinstance(parsed, Matrix):
                    raise ValueError(f"'{args[0]}' is not a matrix")
                rows = parsed.rows
            elif len(args) == 1:
                rows = args[0]
            else:
                rows = args
        rows = [list(row) if isinstance(row, (list, tuple, np.ndarray)) else [row] for row in rows]
        if not rows or any(len(row) != len(rows[0]) for row in rows) or not rows[0]:
            raise ValueError("Matrix rows must be non-empty and all the same length")
        coerced = tuple(_coerce_coordinates(row, context) for row in rows)
        super().__init__(rows=coerced, context=context, **kwargs)

    @property
    def shape(self) -> tuple[int, int]:
        return (len(self.rows), len(self.rows[0]))

    def compare(self, other: MathValue, tol: Tolerance | None = None) -> bool:
        if not isinstance(other, Matrix) or other.shape != self.shape:
            return False
        tol = self.tolerance(tol)
        return all(
            a.compare(b, tol)
            for row_a, row_b in zip(self.rows, other.rows)
            for a, b in zip(row_a, row_b)
        )

    def to_string(self) -> str:
        return "[" + ", ".join("[" + ", ".join(e.to_string() for e in row) + "]" for row in self.rows) + "]"

    def to_python(self) -> list[list]:
        return [[e.to_python() for e in row] for row in self.rows]

    def to_numpy(self) -> np.ndarray:
        return np.array(self.to_python())

    def to_ast(self):
        from mathcheck.parser.ast import Matrix as MatrixNode

        return MatrixNode([[e.to_ast() for e in row] for row in self.rows])

    def length(self) -> int:
        return len(self.rows)
