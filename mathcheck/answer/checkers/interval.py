"""
Checker for intervals.
"""

from __future__ import annotations

import random

from mathcheck.math.sets import Interval
from mathcheck.math.value import MathValue, TypePrecedence

from ..answer_hash import AnswerHash
from .base import AnswerChecker

_SET_TYPES = (TypePrecedence.INTERVAL, TypePrecedence.SET, TypePrecedence.UNION)


class IntervalAnswerChecker(AnswerChecker):
    """
    Intervals compare endpoints and end types separately.

    Both results are recorded in the AnswerHash metadata
    (``endpoints_correct``, ``end_types_correct``). With
    ``requireParenMatch`` correct endpoints with a wrong end type score 0.
    Sets and unions are accepted as answers and compared as sets of reals.
    """

    def accepts(self, student: MathValue) -> bool:
        return student.type_precedence in _SET_TYPES

    def compare_values(self, student: MathValue, ans: AnswerHash, rng: random.Random) -> float:
        tol = self.tolerance()
        if not isinstance(student, Interval):
            return 1.0 if student.compare(self.correct, tol) else 0.0

        parts = student.compare_parts(self.correct, tol)
        endpoints = parts["left"] and parts["right"]
        end_types = parts["left_type"] and parts["right_type"]
        ans.metadata["endpoints_correct"] = endpoints
        ans.metadata["end_types_correct"] = end_types

        if endpoints and end_types:
            return 1.0
        if endpoints:
            if not self.flags.requireParenMatch:
                return 1.0
            if self.flags.showEndTypeHints:
                self.hint(ans, self._end_type_message(parts))
            return 0.0
        if self.flags.showEndpointHints and parts["left"] != parts["right"]:
            side = "right" if parts["left"] else "left"
            self.hint(ans, f"The {side} endpoint of your interval is incorrect")
        return 0.0

    @staticmethod
    def _end_type_message(parts: dict[str, bool]) -> str:
        if not parts["left_type"] and not parts["right_type"]:
            return "The end-types of your interval are incorrect"
        side = "left" if not parts["left_type"] else "right"
        return f"The {side} end-type of your interval is incorrect"
