"""
Checkers for points, vectors and matrices.

The student's value must have the reference's dimension before any values
are compared; a dimension mismatch is always a score of 0.
"""

from __future__ import annotations

import random

from mathcheck.core.errors import DimensionError
from mathcheck.math.geometric import Vector
from mathcheck.math.value import MathValue, TypePrecedence

from ..answer_hash import AnswerHash
from .base import AnswerChecker, ordinal


class PointAnswerChecker(AnswerChecker):
    """Points compare coordinate by coordinate; wrong coordinates can be hinted."""

    def type_check(self, student: MathValue, ans: AnswerHash) -> MathValue:
        student = super().type_check(student, ans)
        if len(student.coords) != len(self.correct.coords):
            raise DimensionError("The number of coordinates is incorrect")
        return student

    def compare_values(self, student: MathValue, ans: AnswerHash, rng: random.Random) -> float:
        matches = student.coordinate_matches(self.correct, self.tolerance())
        if all(matches):
            return 1.0
        # naming the wrong coordinates only helps when some are right
        if self.flags.showCoordinateHints and any(matches):
            for index, match in enumerate(matches, start=1):
                if not match:
                    self.hint(ans, f"The {ordinal(index)} coordinate is incorrect")
        return 0.0


class VectorAnswerChecker(PointAnswerChecker):
    """
    Vectors, optionally accepting points (``promotePoints``) and any parallel
    vector (``parallel``, with ``sameDirection`` requiring a positive multiple).
    """

    default_flags = {"promotePoints": True}

    def accepts(self, student: MathValue) -> bool:
        if student.type_precedence == TypePrecedence.POINT:
            return bool(self.flags.promotePoints)
        return super().accepts(student)

    def type_check(self, student: MathValue, ans: AnswerHash) -> MathValue:
        student = super().type_check(student, ans)
        if student.type_precedence == TypePrecedence.POINT:
            student = Vector.from_point(student)
        return student

    def compare_values(self, student: MathValue, ans: AnswerHash, rng: random.Random) -> float:
        if self.flags.parallel:
            parallel = student.is_parallel(self.correct, same_direction=self.flags.sameDirection, tol=self.tolerance())
            return 1.0 if parallel else 0.0
        return super().compare_values(student, ans, rng)


class MatrixAnswerChecker(AnswerChecker):
    def type_check(self, student: MathValue, ans: AnswerHash) -> MathValue:
        student = super().type_check(student, ans)
        if student.shape != self.correct.shape:
            rows, columns = self.correct.shape
            raise DimensionError(f"The dimensions of your matrix are incorrect (it should be {rows} by {columns})")
        return student
