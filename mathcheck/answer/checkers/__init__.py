"""
Answer checkers, one class per kind of reference value.

``checker_for(value, **flags)`` (reached through ``value.cmp(**flags)``)
picks the checker class from the value's type tag.
"""

from typing import Any

from mathcheck.math.value import MathValue, TypePrecedence

from .base import AnswerChecker, CheckerState, ordinal
from .collections import ListAnswerChecker, SetAnswerChecker, UnionAnswerChecker
from .formula import FormulaAnswerChecker
from .geometric import MatrixAnswerChecker, PointAnswerChecker, VectorAnswerChecker
from .interval import IntervalAnswerChecker
from .scalar import ScalarAnswerChecker

CHECKERS: dict[TypePrecedence, type[AnswerChecker]] = {
    TypePrecedence.REAL: ScalarAnswerChecker,
    TypePrecedence.INFINITY: ScalarAnswerChecker,
    TypePrecedence.COMPLEX: ScalarAnswerChecker,
    TypePrecedence.STRING: ScalarAnswerChecker,
    TypePrecedence.POINT: PointAnswerChecker,
    TypePrecedence.VECTOR: VectorAnswerChecker,
    TypePrecedence.MATRIX: MatrixAnswerChecker,
    TypePrecedence.LIST: ListAnswerChecker,
    TypePrecedence.INTERVAL: IntervalAnswerChecker,
    TypePrecedence.SET: SetAnswerChecker,
    TypePrecedence.UNION: UnionAnswerChecker,
    TypePrecedence.FORMULA: FormulaAnswerChecker,
}


def checker_for(value: MathValue, **flags: Any) -> AnswerChecker:
    """
    Create the answer checker for a reference value.

    Args:
        value: The reference answer
        **flags: Checker flags

    Returns:
        AnswerChecker for the value's type
    """
    return CHECKERS[value.type_precedence](value, **flags)


__all__ = [
    "AnswerChecker",
    "CheckerState",
    "CHECKERS",
    "checker_for",
    "ordinal",
    "ScalarAnswerChecker",
    "PointAnswerChecker",
    "VectorAnswerChecker",
    "MatrixAnswerChecker",
    "IntervalAnswerChecker",
    "ListAnswerChecker",
    "SetAnswerChecker",
    "UnionAnswerChecker",
    "FormulaAnswerChecker",
]
