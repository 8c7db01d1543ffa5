"""
Checker for formulas.
"""

from __future__ import annotations

import random
from typing import Optional

from mathcheck.core.errors import TypeMismatchError
from mathcheck.math.compute import compute
from mathcheck.math.formula import Formula
from mathcheck.math.value import MathValue, TypePrecedence

from ..answer_hash import AnswerHash
from .base import AnswerChecker

_NUMERIC = (TypePrecedence.REAL, TypePrecedence.COMPLEX)

# fixed seed so type checks don't depend on the comparison points
_TYPE_SEED = 0


def _result_phrase(result_type: type) -> str:
    return f"a formula that returns {result_type.type_phrase}"


class FormulaAnswerChecker(AnswerChecker):
    """
    Formulas are compared by evaluating both at random points.

    A constant answer is treated as a formula with no variables. The
    student's formula must return the same kind of value as the reference.
    """

    @property
    def expected_type(self) -> Optional[str]:
        return None

    def parse_student(self, text: str) -> MathValue:
        value = compute(text, self.context)
        if isinstance(value, Formula):
            return value
        return Formula(value.to_ast(), context=self.context)

    def type_check(self, student: MathValue, ans: AnswerHash) -> MathValue:
        expected = self.correct.result_type(random.Random(_TYPE_SEED))
        actual = student.result_type(random.Random(_TYPE_SEED))
        if expected is None or actual is None:
            return student
        if expected.type_precedence in _NUMERIC and actual.type_precedence in _NUMERIC:
            return student
        if expected.type_precedence != actual.type_precedence:
            raise TypeMismatchError(
                f"Your answer isn't {_result_phrase(expected)} (it looks like {_result_phrase(actual)})"
            )
        return student

    def reference(self) -> Formula:
        if self.flags.limits is not None:
            return self.correct.model_copy(update={"limits": self.flags.limits})
        return self.correct

    def compare_values(self, student: MathValue, ans: AnswerHash, rng: random.Random) -> float:
        result = student.compare_sampled(
            self.reference(), self.tolerance(), rng, up_to_constant=self.flags.upToConstant
        )
        ans.metadata["test_points"] = [binding for binding, _, _ in result.points]
        if result.domain_mismatch:
            if self.flags.showDomainErrors:
                self.hint(ans, "The domain of your function doesn't match that of the correct answer")
            return 0.0
        return 1.0 if result.equal else 0.0
