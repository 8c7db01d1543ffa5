"""
Formula MathValue: an expression with free variables.

Formulas are compared numerically: the reference formula is evaluated at
random points drawn from each variable's domain and the student's formula
must agree (within tolerance) wherever both are defined.
"""

from __future__ import annotations

import random
from typing import Any, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from mathcheck.core.errors import ComparisonError, DomainError, ParseError
from mathcheck.core.logging import get_logger

from .numeric import Tolerance
from .value import MathValue, TypePrecedence

logger = get_logger(__name__)


class FormulaComparison(BaseModel):
    """
    Outcome of comparing two formulas by sampling.

    Attributes:
        equal: True if the values agree at every point where both are defined
        domain_mismatch: True if one formula is undefined where the other is
            defined
        points: (binding, student value, reference value) for each point
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    equal: bool
    domain_mismatch: bool = False
    points: list[tuple[dict, Any, Any]] = Field(default_factory=list)


class Formula(MathValue):
    """
    Formula with free variables.

    Examples:
        >>> f = Formula("x^2 + 1")
        >>> f.variables
        ['x']
        >>> f.eval(x=2)
        Real(5)
        >>> Formula("x+1") == Formula("1+x")
        True
    """

    type_precedence = TypePrecedence.FORMULA
    type_name = "Formula"
    type_phrase = "a formula"

    ast: Any = Field(repr=False)
    limits: Any = None
    test_at: Optional[list] = None
    test_points: Optional[list] = None
    num_points: Optional[int] = None

    def __init__(
        self,
        expression: Any = None,
        context: Any = None,
        limits: Any = None,
        test_at: Optional[Sequence] = None,
        test_points: Optional[Sequence] = None,
        num_points: Optional[int] = None,
        **kwargs: Any,
    ):
        """
        Create a formula.

        Args:
            expression: Formula text or an AST node
            context: Context (None = the default context)
            limits: Sampling domain, either one (low, high) pair for every
                variable or a dict of variable name -> (low, high)
            test_at: Points always tested in addition to the random ones
            test_points: Points tested instead of random ones
            num_points: Number of random points (None = context flag)
        """
        from mathcheck.parser.ast import ASTNode

        from .compute import parse
        from .context import default_context

        if "ast" in kwargs:
            expression = kwargs.pop("ast")
        context = context if context is not None else default_context()
        if isinstance(expression, str):
            expression = parse(expression, context)
        if not isinstance(expression, ASTNode):
            raise ValueError("Formula needs formula text or an AST node")
        super().__init__(
            ast=expression,
            context=context,
            limits=limits,
            test_at=list(test_at) if test_at is not None else None,
            test_points=list(test_points) if test_points is not None else None,
            num_points=num_points,
            **kwargs,
        )

    # Construction from operations

    def _derive(self, ast) -> "Formula":
        return Formula(
            ast,
            context=self.context,
            limits=self.limits,
            test_at=self.test_at,
            test_points=self.test_points,
            num_points=self.num_points,
        )

    @classmethod
    def from_operation(cls, op: str, a: MathValue, b: MathValue, context: Any = None) -> "Formula":
        from mathcheck.parser.ast import BinaryOp

        template = a if isinstance(a, Formula) else b
        return template._derive(BinaryOp(a.to_ast(), op, b.to_ast()))

    @classmethod
    def from_unary(cls, op: str, x: "Formula", context: Any = None) -> "Formula":
        from mathcheck.parser.ast import UnaryOp

        return x._derive(UnaryOp(op, x.to_ast()))

    @classmethod
    def from_function(cls, name: str, args: list[MathValue], context: Any = None) -> "Formula":
        from mathcheck.parser.ast import FunctionCall

        template = next(arg for arg in args if isinstance(arg, Formula))
        return template._derive(FunctionCall(name, [arg.to_ast() for arg in args]))

    # Variables and evaluation

    @property
    def variables(self) -> list[str]:
        from mathcheck.parser.visitors import VariableCollector

        return sorted(VariableCollector().collect(self.ast))

    def eval(self, **bindings: Any) -> MathValue:
        """
        Evaluate the formula.

        Args:
            **bindings: Variable values

        Returns:
            The value when every variable is bound, otherwise a new Formula
            with the bound variables substituted

        Raises:
            DomainError: If the formula is undefined at the bindings
        """
        from mathcheck.parser.visitors import EvalVisitor

        if set(self.variables) - set(bindings):
            return self.substitute(**bindings)
        return self.ast.accept(EvalVisitor(self.get_context(), bindings))

    def substitute(self, **values: Any) -> "Formula":
        """Replace variables by values, formulas or formula text."""
        from mathcheck.parser.visitors import SubstituteVisitor

        from .compute import parse

        replacements = {}
        for name, value in values.items():
            if isinstance(value, str):
                replacements[name] = parse(value, self.get_context())
            else:
                replacements[name] = MathValue.from_python(value, self.context).to_ast()
        return self._derive(self.ast.accept(SubstituteVisitor(replacements)))

    def value_at(self, binding: dict) -> Optional[MathValue]:
        """The formula's value at a binding, or None where it is undefined."""
        try:
            return self.eval(**binding)
        except (DomainError, ParseError) as e:
            logger.debug("Formula %s undefined at %s: %s", self.to_string(), binding, e.message)
            return None

    # Sampling

    def _limits_for(self, name: str) -> tuple[float, float]:
        if isinstance(self.limits, dict) and name in self.limits:
            return tuple(self.limits[name])
        if self.limits is not None and not isinstance(self.limits, dict):
            return tuple(self.limits)
        context = self.get_context()
        declared = context.variables.limits(name)
        if declared is not None:
            return declared
        return tuple(context.flags.get("limits"))

    def _binding(self, point: Any, names: list[str]) -> dict:
        if isinstance(point, dict):
            return dict(point)
        if not isinstance(point, (list, tuple)):
            point = [point]
        if len(point) != len(names):
            raise ComparisonError(
                f"Test point {point!r} should have {len(names)} coordinate(s) for variables {names}"
            )
        return dict(zip(names, point))

    def _random_binding(self, names: list[str], rng: random.Random) -> dict:
        context = self.get_context()
        binding: dict[str, Any] = {}
        for name in names:
            low, high = self._limits_for(name)
            if name in context.variables and context.variables.type_of(name) == "Complex":
                binding[name] = complex(rng.uniform(low, high), rng.uniform(low, high))
            else:
                binding[name] = rng.uniform(low, high)
        return binding

    def sample(
        self, rng: Optional[random.Random] = None, variables: Optional[list[str]] = None
    ) -> list[tuple[dict, Optional[MathValue]]]:
        """
        Evaluate the formula at test points.

        ``test_points`` replaces random sampling entirely; otherwise
        ``test_at`` points come first, followed by ``num_points`` random
        points at which the formula is defined.

        Args:
            rng: Random source (None = a fresh unseeded one)
            variables: Variables to bind (default: the formula's own); extra
                names let a second formula be evaluated at the same points

        Returns:
            (binding, value) pairs; value is None where the formula is
            undefined at an explicit test point

        Raises:
            ComparisonError: If too many random points are undefined
        """
        rng = rng if rng is not None else random.Random()
        names = variables if variables is not None else self.variables
        context = self.get_context()

        if self.test_points is not None:
            return [(b, self.value_at(b)) for b in (self._binding(p, names) for p in self.test_points)]

        results = [(b, self.value_at(b)) for b in (self._binding(p, names) for p in self.test_at or [])]

        count = self.num_points if self.num_points is not None else context.flags.get("num_points")
        if not names:
            count = min(count, 1)
        max_undefined = context.flags.get("max_undefined")
        undefined = 0
        generated = 0
        while generated < count:
            binding = self._random_binding(names, rng)
            value = self.value_at(binding)
            if value is None:
                undefined += 1
                if undefined > max_undefined:
                    raise ComparisonError(
                        f"Can't generate enough valid points for comparison of {self.to_string()}"
                    )
                continue
            results.append((binding, value))
            generated += 1

        logger.debug("Sampled %s at %d points (%d undefined)", self.to_string(), len(results), undefined)
        return results

    # Comparison

    def compare_sampled(
        self,
        other: MathValue,
        tol: Optional[Tolerance] = None,
        rng: Optional[random.Random] = None,
        up_to_constant: bool = False,
    ) -> FormulaComparison:
        """
        Compare this (student) formula with a reference by sampling.

        Points are drawn from the reference's domain and test points. The
        formulas are equal when their values agree at every point where both
        are defined; a point where only one is defined is a domain mismatch.

        Args:
            other: Reference formula (constants are promoted)
            tol: Tolerance settings (None = the reference context's flags)
            rng: Random source
            up_to_constant: Accept answers that differ by a constant
                (real-valued formulas only)

        Returns:
            FormulaComparison
        """
        reference = other if isinstance(other, Formula) else Formula(other.to_ast(), context=other.get_context())
        tol = reference.tolerance(tol)
        names = sorted(set(reference.variables) | set(self.variables))

        comparison = FormulaComparison(equal=True)
        shifted: list[tuple[float, float]] = []
        for binding, expected in reference.sample(rng, names):
            actual = self.value_at(binding)
            comparison.points.append((binding, actual, expected))
            if actual is None and expected is None:
                continue
            if actual is None or expected is None:
                comparison.domain_mismatch = True
                continue
            if up_to_constant:
                if actual.type_precedence != TypePrecedence.REAL or expected.type_precedence != TypePrecedence.REAL:
                    raise ComparisonError("Answers up to a constant only work for real-valued formulas")
                shifted.append((actual.value, expected.value))
            elif not actual.compare(expected, tol):
                comparison.equal = False

        if up_to_constant and shifted:
            # the student value is compared with the reference shifted by the mean difference
            constant = sum(a - e for a, e in shifted) / len(shifted)
            comparison.equal = all(tol.equal(a, e + constant) for a, e in shifted)
        return comparison

    def compare(self, other: MathValue, tol: Optional[Tolerance] = None) -> bool:
        try:
            result = self.compare_sampled(other, tol)
        except ComparisonError:
            return False
        return result.equal and not result.domain_mismatch

    def result_type(self, rng: Optional[random.Random] = None) -> Optional[type]:
        """The MathValue class the formula evaluates to, or None if undefined everywhere sampled."""
        try:
            for _, value in self.sample(rng):
                if value is not None:
                    return type(value)
        except ComparisonError:
            return None
        return None

    # Symbolic helpers

    def to_sympy(self):
        """Convert to a sympy expression (scalar formulas only)."""
        from mathcheck.parser.visitors import SympyVisitor

        return self.ast.accept(SympyVisitor(self.get_context()))

    def D(self, var: Optional[str] = None) -> "Formula":
        """
        Derivative with respect to a variable.

        Args:
            var: Variable name (default: the only variable)
        """
        import sympy as sp

        from mathcheck.parser.visitors import from_sympy

        if var is None:
            if len(self.variables) != 1:
                raise ComparisonError("Specify the variable to differentiate with respect to")
            var = self.variables[0]
        expr = self.to_sympy()
        symbol = next((s for s in expr.free_symbols if s.name == var), sp.Symbol(var, real=True))
        return self._derive(from_sympy(sp.diff(expr, symbol)))

    def reduce(self) -> "Formula":
        """Simplified equivalent formula."""
        import sympy as sp

        from mathcheck.parser.visitors import from_sympy

        return self._derive(from_sympy(sp.simplify(self.to_sympy())))

    # Output

    def to_string(self) -> str:
        from mathcheck.parser.visitors import StringVisitor

        return self.ast.accept(StringVisitor())

    def to_python(self) -> str:
        return self.to_string()

    def to_ast(self):
        return self.ast
