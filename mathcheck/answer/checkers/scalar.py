"""
Checker for numbers, infinities and words.
"""

from __future__ import annotations

from mathcheck.math.value import MathValue, TypePrecedence

from .base import AnswerChecker

_REALS = (TypePrecedence.REAL, TypePrecedence.INFINITY)


class ScalarAnswerChecker(AnswerChecker):
    """
    Real, Complex, Infinity and String reference answers.

    A real reference accepts a real or an infinite answer (the latter is just
    wrong unless ``ignoreInfinity=0``, which reports it as a type mismatch).
    A complex reference accepts reals. A word reference accepts anything,
    since any other answer is simply not that word.
    """

    def accepts(self, student: MathValue) -> bool:
        expected = self.correct.type_precedence
        actual = student.type_precedence
        if expected == TypePrecedence.STRING:
            return True
        if expected == TypePrecedence.COMPLEX:
            return actual in (TypePrecedence.REAL, TypePrecedence.COMPLEX)
        if expected == TypePrecedence.REAL and actual == TypePrecedence.INFINITY:
            return self.flags.ignoreInfinity
        return actual in _REALS
