r"""
Base class for answer checkers.

Every checker runs the same state machine:

    INIT -> PARSE_STUDENT -> TYPE_CHECK -> VALUE_COMPARE -> SCORE_COMPUTED
                                        \-> TYPE_MISMATCH

Subclasses supply the type-specific pieces (which student types are
acceptable, how values are compared, what hints to give). Errors raised by
those pieces are caught here and turned into a score of 0 plus a message.
"""

from __future__ import annotations

import inspect
import random
from abc import ABC
from enum import Enum
from typing import Any, Callable, ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field

from mathcheck.core.errors import (
    CheckerError,
    ComparisonError,
    DimensionError,
    MathCheckError,
    ParseError,
    TypeMismatchError,
)
from mathcheck.core.logging import get_context_logger, get_logger
from mathcheck.math.collections import String
from mathcheck.math.compute import compute
from mathcheck.math.numeric import Tolerance
from mathcheck.math.value import MathValue

from ..answer_hash import AnswerHash
from ..flags import CheckerFlags

logger = get_logger(__name__)

_ORDINALS = ["first", "second", "third", "fourth", "fifth", "sixth", "seventh", "eighth", "ninth", "tenth"]

# errors a checker may raise on purpose; evaluate() maps each to its own message rule
_PASSTHROUGH_ERRORS = (CheckerError, ComparisonError, DimensionError, TypeMismatchError)


def ordinal(n: int) -> str:
    """Ordinal word for a 1-based position ("first", "second", ..., "11th")."""
    if 1 <= n <= len(_ORDINALS):
        return _ORDINALS[n - 1]
    suffix = "th" if 10 <= n % 100 <= 20 else {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


class CheckerState(str, Enum):
    INIT = "init"
    PARSE_STUDENT = "parse_student"
    TYPE_CHECK = "type_check"
    TYPE_MISMATCH = "type_mismatch"
    VALUE_COMPARE = "value_compare"
    SCORE_COMPUTED = "score_computed"


def _takes_position(func: Callable) -> bool:
    """True if a checker callback accepts the optional (nth, value) arguments."""
    try:
        parameters = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return False
    positional = 0
    for parameter in parameters:
        if parameter.kind == inspect.Parameter.VAR_POSITIONAL:
            return True
        if parameter.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            positional += 1
    return positional >= 5


def _as_score(result: Any) -> float:
    if isinstance(result, bool):
        return 1.0 if result else 0.0
    try:
        score = float(result)
    except (TypeError, ValueError) as e:
        raise CheckerError(f"Custom checker returned {result!r} instead of a score") from e
    return max(0.0, min(1.0, score))


class AnswerChecker(BaseModel, ABC):
    """
    Checks student answers against one reference value.

    Created by ``value.cmp(**flags)``; call ``evaluate(student_text)`` once
    per submission.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    correct: Any = Field(description="The reference MathValue")
    flags: CheckerFlags = Field(default_factory=CheckerFlags)

    default_flags: ClassVar[dict[str, Any]] = {}

    def __init__(self, correct: MathValue, **flags: Any):
        resolved = CheckerFlags(**flags).resolved(**self.flag_defaults(correct))
        super().__init__(correct=correct, flags=resolved)

    @classmethod
    def flag_defaults(cls, correct: MathValue) -> dict[str, Any]:
        """Type-specific defaults for flags left unset by the caller."""
        return dict(cls.default_flags)

    @property
    def context(self):
        return self.correct.get_context()

    @property
    def expected_type(self) -> Optional[str]:
        return self.correct.type_name

    def tolerance(self) -> Tolerance:
        return Tolerance.from_context(self.context, **self.flags.tolerance_overrides())

    # State machine

    def _enter(self, ans: AnswerHash, state: CheckerState) -> None:
        ans.metadata["state"] = state.value
        state_logger = get_context_logger(__name__, checker=type(self).__name__, answer_type=ans.type)
        state_logger.debug("Checker state %s", state.value, extra_data={"state": state.value})

    def evaluate(
        self, student_text: Optional[str], is_preview: bool = False, rng: Optional[random.Random] = None
    ) -> AnswerHash:
        """
        Check one student answer.

        Args:
            student_text: The student's answer as typed
            is_preview: Preview submissions get syntax errors but no hints
            rng: Random source for formula sampling

        Returns:
            AnswerHash with the score and messages
        """
        text = student_text or ""
        ans = AnswerHash(
            correct_ans=self.render_correct(),
            correct_value=self.correct,
            student_ans=text.strip(),
            original_student_ans=text,
            is_preview=is_preview,
            type=self.correct.type_name,
            flags=dict(self.flags),
        )
        self._enter(ans, CheckerState.INIT)

        if ans.is_blank():
            self._enter(ans, CheckerState.SCORE_COMPUTED)
            return ans

        self._enter(ans, CheckerState.PARSE_STUDENT)
        try:
            student = self.parse_student(ans.student_ans)
        except ParseError as e:
            ans.set_error(str(e))
            self._enter(ans, CheckerState.SCORE_COMPUTED)
            return ans
        except MathCheckError as e:
            ans.set_error(e.message)
            self._enter(ans, CheckerState.SCORE_COMPUTED)
            return ans

        ans.student_value = student
        if student.is_formula:
            ans.student_formula = student

        self._enter(ans, CheckerState.TYPE_CHECK)
        try:
            checked = self.type_check(student, ans)
        except TypeMismatchError as e:
            self._type_mismatch(ans, student, e)
            return ans
        except DimensionError as e:
            self._fail(ans, e.message, self.flags.showDimensionHints)
            self._enter(ans, CheckerState.SCORE_COMPUTED)
            return ans

        self._enter(ans, CheckerState.VALUE_COMPARE)
        rng = rng if rng is not None else random.Random()
        score = 0.0
        try:
            score = self.compare(checked, ans, rng)
        except DimensionError as e:
            self._fail(ans, e.message, self.flags.showDimensionHints)
        except TypeMismatchError as e:
            self._type_mismatch(ans, student, e)
            return ans
        except CheckerError as e:
            self._fail(ans, e.message, True)
        except ComparisonError as e:
            self._fail(ans, e.message, self.flags.showEqualErrors)
        except MathCheckError as e:
            self._fail(ans, e.message, True)

        if not ans.error_flag:
            ans.set_score(score)
        self._enter(ans, CheckerState.SCORE_COMPUTED)
        return ans

    def _type_mismatch(self, ans: AnswerHash, student: MathValue, error: TypeMismatchError) -> None:
        ans.type_error = True
        show = self.flags.showTypeWarnings and not (self.flags.ignoreStrings and isinstance(student, String))
        self._fail(ans, error.message, show)
        self._enter(ans, CheckerState.TYPE_MISMATCH)

    def _fail(self, ans: AnswerHash, message: str, show: bool) -> None:
        ans.error_flag = True
        ans.error_message = message
        ans.set_score(0.0)
        if show:
            self.hint(ans, message)

    def hint(self, ans: AnswerHash, message: str) -> None:
        """Add a message unless this is a preview."""
        if not ans.is_preview:
            ans.add_message(message)

    # Hooks for subclasses

    def render_correct(self) -> str:
        return self.correct.to_string()

    def parse_student(self, text: str) -> MathValue:
        return compute(text, self.context, expected=self.expected_type)

    def accepts(self, student: MathValue) -> bool:
        return student.type_precedence == self.correct.type_precedence

    def type_mismatch_message(self, student: MathValue) -> str:
        return f"Your answer isn't {self.correct.type_phrase} (it looks like {student.type_phrase})"

    def type_check(self, student: MathValue, ans: AnswerHash) -> MathValue:
        """
        Check (and possibly convert) the student's value.

        Returns:
            The value to compare

        Raises:
            TypeMismatchError: The student's answer has the wrong type
            DimensionError: The student's answer has the wrong size
        """
        if not self.accepts(student):
            raise TypeMismatchError(self.type_mismatch_message(student))
        return student

    def compare(self, student: MathValue, ans: AnswerHash, rng: random.Random) -> float:
        """Score the type-checked student value; a custom checker takes precedence."""
        if self.flags.checker is not None:
            return self.call_checker(self.correct, student, ans)
        return self.compare_values(student, ans, rng)

    def compare_values(self, student: MathValue, ans: AnswerHash, rng: random.Random) -> float:
        return 1.0 if student.compare(self.correct, self.tolerance()) else 0.0

    def call_checker(
        self, correct: MathValue, student: MathValue, ans: AnswerHash, nth: Optional[int] = None, value: Any = None
    ) -> float:
        """
        Run the caller's ``checker(correct, student, ans[, nth, value])``.

        Raises:
            CheckerError: The checker rejected the answer, or failed
        """
        checker = self.flags.checker
        if _takes_position(checker):
            result = self.run_callback(checker, correct, student, ans, nth, value)
        else:
            result = self.run_callback(checker, correct, student, ans)
        return _as_score(result)

    def run_callback(self, func: Callable, *args: Any) -> Any:
        """
        Call a caller-supplied checker.

        Errors that already map to a checker outcome pass through; anything
        else the callback raises becomes a CheckerError.
        """
        try:
            return func(*args)
        except _PASSTHROUGH_ERRORS:
            raise
        except MathCheckError as e:
            raise CheckerError(e.message) from e
        except Exception as e:
            logger.warning("Custom checker %r raised %s: %s", func, type(e).__name__, e)
            raise CheckerError(str(e)) from e
