"""
Error taxonomy for parsing and answer comparison.

Every failure that can happen while checking a student answer is one of
these classes. The answer checkers catch them at their boundary and turn
them into a score of 0 plus a message, so none of them escape ``evaluate()``.
"""

from typing import Any, Dict, Optional


class MathCheckError(Exception):
    """Base exception for mathcheck errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ContextError(MathCheckError):
    """Raised for an invalid context configuration (unknown function, bad flag)"""


class ParseError(MathCheckError):
    """
    Raised when text can't be parsed under the active context.

    Attributes:
        message: Human-readable reason
        position: 0-based character offset where the problem was found
    """

    def __init__(self, message: str, position: int = 0, token: str = ""):
        self.position = position
        self.token = token
        super().__init__(message, details={"position": position, "token": token})

    def __str__(self) -> str:
        return f"{self.message}; see position {self.position + 1} of formula"


class TypeMismatchError(MathCheckError):
    """Raised when a value has the wrong type for an operation or answer"""


class DimensionError(MathCheckError):
    """Raised when points, vectors or matrices have incompatible sizes"""


class ComparisonError(MathCheckError):
    """Raised when two values can't be compared or evaluated"""


class DomainError(ComparisonError):
    """Raised when an expression is undefined at a point (e.g. sqrt(-1) for reals)"""


class CheckerError(MathCheckError):
    """
    Raised from inside a custom ``checker`` or ``list_checker`` to reject an
    answer with a message. Stops the rest of the comparison.
    """
