"""
Per-submission answer record (AnswerHash).

One AnswerHash is created for every ``evaluate()`` call. It carries the flags
in effect, the reference and parsed student values, and accumulates the
score and the messages shown to the student.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AnswerHash(BaseModel):
    """
    Result of checking one student answer.

    Attributes:
        score: Score in [0, 1]
        correct: True when the score is 1
        messages: Ordered messages for the student
        correct_ans: The reference answer as text
        correct_value: The reference MathValue
        student_ans: The student's text, trimmed
        original_student_ans: The student's text as submitted
        student_value: The parsed student value
        student_formula: The parsed student value when it is a Formula
        is_preview: True for preview submissions (hints are suppressed)
        type: Type name of the reference answer
        error_flag: True when the answer could not be processed
        error_message: Why the answer could not be processed
        type_error: True when the student's answer has the wrong type
        flags: The checker flags in effect
        metadata: Extra details (checker state, endpoint correctness, ...)
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True)

    score: float = 0.0
    correct: bool = False
    messages: list[str] = Field(default_factory=list)

    correct_ans: str = ""
    correct_value: Any = None

    student_ans: str = ""
    original_student_ans: str = ""
    student_value: Any = None
    student_formula: Any = None

    is_preview: bool = False
    type: str = "unknown"

    error_flag: bool = False
    error_message: str = ""
    type_error: bool = False

    flags: dict[str, Any] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("score")
    @classmethod
    def validate_score(cls, v: float) -> float:
        if v < 0.0 or v > 1.0:
            raise ValueError("score must be between 0.0 and 1.0")
        return float(v)

    def set_score(self, score: float) -> None:
        """Record the final score; ``correct`` follows it."""
        self.score = max(0.0, min(1.0, float(score)))
        self.correct = self.score >= 1.0

    def add_message(self, message: str) -> None:
        """Add a message for the student, skipping blanks and repeats."""
        if message and message.strip() and message not in self.messages:
            self.messages.append(message)

    def set_error(self, error: str) -> None:
        """Mark the answer as unprocessable; the score becomes 0."""
        self.error_flag = True
        self.error_message = error
        self.set_score(0.0)
        self.add_message(error)

    def is_blank(self) -> bool:
        return not self.original_student_ans.strip()

    def result(self) -> dict[str, Any]:
        """
        The outcome reported to the caller.

        Returns:
            Dict with ``score``, ``messages`` and ``correct_value`` (the
            reference answer rendered for display)
        """
        return {
            "score": self.score,
            "messages": list(self.messages),
            "correct_value": self.correct_ans,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "score": self.score,
            "correct": self.correct,
            "messages": list(self.messages),
            "correct_ans": self.correct_ans,
            "correct_value": _text(self.correct_value),
            "student_ans": self.student_ans,
            "original_student_ans": self.original_student_ans,
            "student_value": _text(self.student_value),
            "student_formula": _text(self.student_formula),
            "is_preview": self.is_preview,
            "type": self.type,
            "error_flag": self.error_flag,
            "error_message": self.error_message,
            "type_error": self.type_error,
            "flags": {name: _plain(value) for name, value in self.flags.items()},
            "metadata": {name: _plain(value) for name, value in self.metadata.items()},
        }


def _text(value: Any) -> str | None:
    return None if value is None else str(value)


def _plain(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    if callable(value):
        return getattr(value, "__name__", repr(value))
    return str(value)
