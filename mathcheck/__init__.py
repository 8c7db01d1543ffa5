"""
mathcheck - parse, type-check and compare student answers to math problems.

Examples:
    >>> from mathcheck import compute
    >>> compute("1, -1, 0").cmp().evaluate("0, -1, 1").score
    1.0
"""

__version__ = "0.1.0"

from mathcheck.answer import AnswerHash, CheckerFlags, checker_for
from mathcheck.math import Compute, Formula, compute, get_context

__all__ = [
    "__version__",
    "AnswerHash",
    "CheckerFlags",
    "Compute",
    "Formula",
    "checker_for",
    "compute",
    "get_context",
]
