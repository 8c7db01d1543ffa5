"""
Checkers for lists, sets and unions.

The student's entries are paired with the reference's entries by an optimal
assignment (see ``mathcheck.math.matching``), so entry order does not
matter unless ``ordered`` is set. Unmatched entries produce the "too few",
"too many" and "incorrect entry" hints.
"""

from __future__ import annotations

import random
from typing import Any, ClassVar

import numpy as np

from mathcheck.core.errors import CheckerError, ComparisonError
from mathcheck.core.logging import get_logger
from mathcheck.math.collections import List, String
from mathcheck.math.formula import Formula
from mathcheck.math.sets import Interval, Set, Union
from mathcheck.math.value import MathValue, TypePrecedence

from ..answer_hash import AnswerHash
from mathcheck.math.matching import assign
from .base import AnswerChecker, ordinal

logger = get_logger(__name__)

_NUMERIC = (TypePrecedence.REAL, TypePrecedence.INFINITY, TypePrecedence.COMPLEX)


def _entry_word(value: MathValue) -> str:
    if value.type_precedence in _NUMERIC:
        return "number"
    phrase = value.type_phrase
    for article in ("a ", "an "):
        if phrase.startswith(article):
            return phrase[len(article):]
    return phrase


def _plural(word: str) -> str:
    if word.endswith("y"):
        return word[:-1] + "ies"
    return word + "s"


class ListAnswerChecker(AnswerChecker):
    """
    Lists: every student entry is checked against every reference entry.

    Flags (beyond the common ones):
        ordered: Entries must be in the reference order
        partialCredit: Score the fraction of correct entries
        showHints: Name the incorrect entries
        showLengthHints: Say when there are too few or too many entries
        entry_type, list_type: Words used in hints
        extra: Value that an unneeded student entry is compared with
        typeMatch: Value whose type every entry must have
        removeParens: Show the reference without its outer parentheses
        implicitList: Treat a single non-list answer as a one-entry list
        checker: Per-entry ``checker(correct, student, ans[, nth, value])``
        list_checker: Whole-list ``list_checker(correct, student, ans, type)``
            returning (number correct, messages)
    """

    default_flags = {"showHints": True, "showLengthHints": True}
    list_type_default: ClassVar[str] = "list"

    @classmethod
    def flag_defaults(cls, correct: MathValue) -> dict[str, Any]:
        defaults = super().flag_defaults(correct)
        if isinstance(correct, List):
            # lists of formulas keep their parentheses
            defaults.setdefault("removeParens", not any(e.is_formula for e in correct.elements))
        return defaults

    @property
    def list_type(self) -> str:
        return self.flags.list_type or self.list_type_default

    def entry_words(self) -> tuple[str, str]:
        """Singular and plural words for an entry, used in hints."""
        if self.flags.entry_type:
            word = self.flags.entry_type
        else:
            words = {_entry_word(e) for e in self.reference_entries()}
            word = words.pop() if len(words) == 1 else "entry"
        return word, _plural(word)

    def render_correct(self) -> str:
        if isinstance(self.correct, List) and self.flags.removeParens and self.correct.open:
            return self.correct.with_parens("", "").to_string()
        return self.correct.to_string()

    # Entries

    def reference_entries(self) -> list[MathValue]:
        return list(self.correct.elements)

    def student_entries(self, student: MathValue) -> list[MathValue]:
        if isinstance(student, List):
            return list(student.elements)
        return [student]

    def accepts(self, student: MathValue) -> bool:
        return isinstance(student, List) or self.flags.implicitList

    # Comparison

    def compare(self, student: MathValue, ans: AnswerHash, rng: random.Random) -> float:
        correct = self.reference_entries()
        entries = self.student_entries(student)
        if self.flags.list_checker is not None:
            return self._run_list_checker(correct, entries, ans)
        return self.match_entries(correct, entries, ans, rng)

    def _run_list_checker(self, correct: list[MathValue], entries: list[MathValue], ans: AnswerHash) -> float:
        result = self.run_callback(self.flags.list_checker, correct, entries, ans, self.correct.type_name)
        try:
            count, messages = result
        except (TypeError, ValueError) as e:
            raise CheckerError("A list checker must return a score and a list of messages") from e
        for message in messages or []:
            self.hint(ans, message)
        return self._score(float(count), len(entries), len(correct), exact=float(count) >= len(correct))

    def _score(self, total: float, n: int, m: int, exact: bool) -> float:
        if max(n, m) == 0:
            return 1.0
        if self.flags.partialCredit:
            return total / max(n, m)
        return 1.0 if n == m and exact else 0.0

    def compatible(self, correct: MathValue, student: MathValue) -> bool:
        """Whether a student entry's type can match a reference entry."""
        if self.flags.typeMatch is not None:
            correct = MathValue.from_python(self.flags.typeMatch, self.context)
        if correct.is_formula or student.is_formula:
            return True
        if correct.type_precedence in _NUMERIC and student.type_precedence in _NUMERIC:
            return True
        return correct.type_precedence == student.type_precedence

    def entry_score(
        self, correct: MathValue, student: MathValue, ans: AnswerHash, nth: int, rng: random.Random
    ) -> float:
        """Score of one student entry (1-based position ``nth``) against one reference entry."""
        if not self.compatible(correct, student):
            return 0.0
        if self.flags.checker is not None:
            return self.call_checker(correct, student, ans, nth, student)
        tol = self.tolerance()
        if correct.is_formula or student.is_formula:
            formula = student if student.is_formula else Formula(student.to_ast(), context=self.context)
            try:
                result = formula.compare_sampled(correct, tol, rng, up_to_constant=self.flags.upToConstant)
            except ComparisonError as e:
                logger.debug("Entry %d can't be compared with %s: %s", nth, correct, e.message)
                return 0.0
            return 1.0 if result.equal and not result.domain_mismatch else 0.0
        return 1.0 if student.compare(correct, tol) else 0.0

    def match_entries(
        self, correct: list[MathValue], entries: list[MathValue], ans: AnswerHash, rng: random.Random
    ) -> float:
        """
        Score the student's entries against the reference entries.

        Returns:
            sum of matched pair scores / max(n, m) with partial credit,
            otherwise 1 only when every entry matches
        """
        n, m = len(entries), len(correct)
        word, words = self.entry_words()

        weights = np.zeros((n, m))
        for i, entry in enumerate(entries):
            for j, reference in enumerate(correct):
                try:
                    weights[i, j] = self.entry_score(reference, entry, ans, i + 1, rng)
                except CheckerError as e:
                    raise CheckerError(f"There is a problem with your {ordinal(i + 1)} {word}: {e.message}") from e

        pairs = assign(weights, ordered=self.flags.ordered)
        total = float(sum(weights[i, j] for i, j in pairs))
        exact = len(pairs) == m and all(weights[i, j] >= 1.0 for i, j in pairs)
        score = self._score(total, n, m, exact)
        logger.debug("Matched %d of %d entries against %d (total %.3f)", len(pairs), n, m, total)

        self._length_and_entry_hints(ans, correct, entries, weights, pairs, score, word, words)
        return score

    def _length_and_entry_hints(
        self,
        ans: AnswerHash,
        correct: list[MathValue],
        entries: list[MathValue],
        weights: np.ndarray,
        pairs: list[tuple[int, int]],
        score: float,
        word: str,
        words: str,
    ) -> None:
        n, m = len(entries), len(correct)
        matched_students = {i for i, _ in pairs}
        matched_refs = {j for _, j in pairs}
        if self.flags.showLengthHints and n < m and len(matched_refs) < m:
            self.hint(ans, f"There should be more {words} in your {self.list_type}")

        too_many = False
        incorrect: list[int] = []
        for i, entry in enumerate(entries):
            if i in matched_students:
                continue
            if self._is_extra(entry, weights[i], matched_refs):
                too_many = True
            elif not any(self.compatible(reference, entry) for reference in correct) and correct:
                if self._entry_type_warning(ans, entry, i + 1, correct[0], word):
                    continue
                # a word the student added, or any entry when type warnings are off
                if n > m:
                    too_many = True
                else:
                    incorrect.append(i + 1)
            else:
                incorrect.append(i + 1)

        if too_many and self.flags.showLengthHints:
            self.hint(ans, f"There should be fewer {words} in your {self.list_type}")
        if self.flags.showHints and score > 0:
            for nth in incorrect:
                self.hint(ans, f"Your {ordinal(nth)} {word} is incorrect")

    def _is_extra(self, entry: MathValue, scores: np.ndarray, matched_refs: set[int]) -> bool:
        """An unneeded entry: equal to ``extra`` or a repeat of a matched reference entry."""
        if self.flags.extra is not None:
            extra = MathValue.from_python(self.flags.extra, self.context)
            if self.compatible(extra, entry) and entry.compare(extra, self.tolerance()):
                return True
        return any(scores[j] >= 1.0 for j in matched_refs)

    def _entry_type_warning(self, ans: AnswerHash, entry: MathValue, nth: int, reference: MathValue, word: str) -> bool:
        """Warn that an entry has the wrong type; False when the warning is turned off."""
        if not self.flags.showTypeWarnings or (self.flags.ignoreStrings and isinstance(entry, String)):
            return False
        if self.flags.typeMatch is not None:
            reference = MathValue.from_python(self.flags.typeMatch, self.context)
        self.hint(ans, f"Your {ordinal(nth)} {word} isn't {reference.type_phrase} (it looks like {entry.type_phrase})")
        return True


def _interval_count(union: Union) -> int:
    return sum(isinstance(member, Interval) for member in union.members)


class SetAnswerChecker(ListAnswerChecker):
    """
    Finite sets: the student must enter a set; repeated entries count as
    extra entries.
    """

    list_type_default: ClassVar[str] = "set"

    def reference_entries(self) -> list[MathValue]:
        return list(self.correct.reduce(self.tolerance()).elements)

    def student_entries(self, student: MathValue) -> list[MathValue]:
        return list(student.elements)

    def accepts(self, student: MathValue) -> bool:
        return isinstance(student, Set)


class UnionAnswerChecker(ListAnswerChecker):
    """
    Unions of intervals and sets.

    With ``studentsMustReduceUnions`` a union that could be written with
    fewer pieces (overlapping or adjacent intervals, redundant points) scores
    0. Otherwise both unions are reduced and their pieces matched.
    """

    list_type_default: ClassVar[str] = "union"

    def reference_entries(self) -> list[MathValue]:
        return list(self.correct.reduce(self.tolerance()).members)

    def accepts(self, student: MathValue) -> bool:
        return isinstance(student, (Union, Interval, Set))

    def type_check(self, student: MathValue, ans: AnswerHash) -> MathValue:
        student = super().type_check(student, ans)
        if not isinstance(student, Union):
            student = Union(student, context=student.context)
        return student

    def student_entries(self, student: MathValue) -> list[MathValue]:
        return list(student.reduce(self.tolerance()).members)

    def compare(self, student: MathValue, ans: AnswerHash, rng: random.Random) -> float:
        if self.flags.studentsMustReduceUnions and not student.is_reduced(self.tolerance()):
            if self.flags.showUnionReduceWarnings:
                self.hint(ans, self._reduce_message(student))
            return 0.0
        return super().compare(student, ans, rng)

    def _reduce_message(self, student: Union) -> str:
        reduced = student.reduce(self.tolerance())
        if _interval_count(reduced) < _interval_count(student):
            return "Your union can be simplified by combining some of its intervals"
        return "Your union can be simplified by removing redundant points"
