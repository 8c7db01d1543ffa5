"""
Answer checking: per-type checkers, their flags and the AnswerHash result.

Examples:
    >>> from mathcheck.math import compute
    >>> checker = compute("(-inf, 3]").cmp()
    >>> checker.evaluate("(-inf, 3)").score
    0.0
"""

from .answer_hash import AnswerHash
from .checkers import (
    AnswerChecker,
    CheckerState,
    FormulaAnswerChecker,
    IntervalAnswerChecker,
    ListAnswerChecker,
    MatrixAnswerChecker,
    PointAnswerChecker,
    ScalarAnswerChecker,
    SetAnswerChecker,
    UnionAnswerChecker,
    VectorAnswerChecker,
    checker_for,
)
from .flags import CheckerFlags
from mathcheck.math.matching import assign, optimal_total

__all__ = [
    "AnswerHash",
    "AnswerChecker",
    "CheckerFlags",
    "CheckerState",
    "checker_for",
    "assign",
    "optimal_total",
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
