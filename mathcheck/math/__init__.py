"""
mathcheck.math - typed math values and the context they are parsed in.

Value types compare with tolerance, render as parseable text and compose
through arithmetic; Formulas are compared by sampling.
"""

from .collections import List, String
from .compute import Compute, compute, parse
from .context import Context, default_context, get_context, register_context
from .formula import Formula, FormulaComparison
from .geometric import Matrix, Point, Vector
from .numeric import Complex, Infinity, Real, Tolerance, fuzzy_compare
from .sets import Interval, Set, Union
from .value import MathValue, ToleranceMode, TypePrecedence

__all__ = [
    "MathValue",
    "TypePrecedence",
    "ToleranceMode",
    "Tolerance",
    "fuzzy_compare",
    "Real",
    "Complex",
    "Infinity",
    "Point",
    "Vector",
    "Matrix",
    "List",
    "String",
    "Interval",
    "Set",
    "Union",
    "Formula",
    "FormulaComparison",
    "Context",
    "get_context",
    "default_context",
    "register_context",
    "Compute",
    "compute",
    "parse",
]
