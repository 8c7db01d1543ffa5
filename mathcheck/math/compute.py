"""
compute() function for parsing and evaluating answers.
"""

from __future__ import annotations

from typing import Any, Optional

from mathcheck.core.logging import get_logger

logger = get_logger(__name__)


def parse(text: str, context=None, expected: Optional[str] = None):
    """
    Parse text to an AST under a context.

    Args:
        text: The answer text
        context: Context to use (None = the default context)
        expected: Type name used to resolve ambiguous notation

    Returns:
        Root AST node

    Raises:
        ParseError: If the text is not valid in the context
    """
    from mathcheck.parser import Parser

    from .context import default_context

    context = context if context is not None else default_context()
    return Parser(context).parse(text, expected=expected)


def compute(expression: Any, context=None, expected: Optional[str] = None):
    """
    Parse and evaluate an answer.

    If the expression has no free variables, returns its value (Real, Point,
    Interval, ...). Otherwise returns a Formula, or for a list with
    variables a List whose entries are formulas.

    Args:
        expression: Text to parse (numbers and MathValues are wrapped as-is)
        context: Context to use (None = the default context)
        expected: Type name used to resolve ambiguous notation, e.g.
            "Interval" so that "(1, 2)" is read as an interval in the Full
            context

    Returns:
        A MathValue

    Raises:
        ParseError: If the text can't be parsed
        DomainError: If a constant expression is undefined (1/0)

    Examples:
        >>> compute("2+2")
        Real(4)

        >>> compute("x^2")
        Formula(x^2)

        >>> compute("(-inf, 3]")
        Interval((-infinity, 3])
    """
    from mathcheck.parser.ast import List as ListNode
    from mathcheck.parser.visitors import VariableCollector

    from .context import default_context
    from .value import MathValue

    if not isinstance(expression, str):
        return MathValue.from_python(expression, context)

    context = context if context is not None else default_context()
    ast = parse(expression.strip(), context, expected)

    # a list with variables becomes a list of formulas so entries match unordered
    if isinstance(ast, ListNode) and VariableCollector().collect(ast):
        from .collections import List

        entries = [_from_ast(element, context) for element in ast.elements]
        return List(elements=entries, open=ast.open, close=ast.close, context=context)

    value = _from_ast(ast, context)
    logger.debug("Computed %r as %s", expression, value.type_name)
    return value


def _from_ast(ast, context):
    from mathcheck.parser.visitors import EvalVisitor, VariableCollector

    if VariableCollector().collect(ast):
        from .formula import Formula

        return Formula(ast, context=context)
    return ast.accept(EvalVisitor(context))


Compute = compute
