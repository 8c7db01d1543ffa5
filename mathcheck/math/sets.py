"""
Set MathValue types: Interval, Set, Union.

Unions compare through their reduced form: intervals sorted and merged,
set points absorbed into the intervals that contain them.
"""

from __future__ import annotations

import math
from typing import Any, Iterable

import numpy as np
from pydantic import Field, field_validator

from .matching import optimal_total
from .numeric import Infinity, Real, Tolerance
from .value import MathValue, TypePrecedence


def _endpoint_value(endpoint: MathValue) -> float:
    return endpoint.to_python()


class Interval(MathValue):
    """
    Interval of real numbers with open or closed ends.

    Examples:
    - [0, 1] - closed interval
    - (0, 1) - open interval
    - [0, 1) - half-open interval
    - (-infinity, infinity) - all real numbers
    """

    type_precedence = TypePrecedence.INTERVAL
    type_name = "Interval"
    type_phrase = "an interval"

    left: MathValue
    right: MathValue
    open_left: bool = True
    open_right: bool = True

    def __init__(
        self,
        *args: Any,
        left: Any | None = None,
        right: Any | None = None,
        open_left: bool | None = None,
        open_right: bool | None = None,
        context: Any | None = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize an Interval.

        Examples:
            Interval("(-inf, 3]")
            Interval("[", 0, 5, ")")
            Interval(0, 10, False, True)
            Interval(-1, 1)  # open
        """
        if args:
            parsed_left, parsed_right, parsed_open_left, parsed_open_right = self._parse_arguments(args, context)
            left = parsed_left
            right = parsed_right
            if open_left is None:
                open_left = parsed_open_left
            if open_right is None:
                open_right = parsed_open_right

        if left is None or right is None:
            raise ValueError("Interval requires left and right endpoints")

        super().__init__(
            left=self._coerce_endpoint(left, context),
            right=self._coerce_endpoint(right, context),
            open_left=True if open_left is None else bool(open_left),
            open_right=True if open_right is None else bool(open_right),
            context=context,
            **kwargs,
        )
        self._check_endpoints()

    @staticmethod
    def _coerce_endpoint(value: Any, context: Any = None) -> MathValue:
        endpoint = MathValue.from_python(value, context)
        if not isinstance(endpoint, (Real, Infinity)):
            raise ValueError("Interval endpoints must be real numbers or infinity")
        return endpoint

    @classmethod
    def _parse_arguments(cls, args: tuple[Any, ...], context: Any) -> tuple[Any, Any, bool, bool]:
        if len(args) == 1 and isinstance(args[0], str):
            from .compute import compute

            parsed = compute(args[0], context, expected="Interval")
            if not isinstance(parsed, Interval):
                raise ValueError(f"'{args[0]}' is not an interval")
            return parsed.left, parsed.right, parsed.open_left, parsed.open_right
        if len(args) == 4:
            first, second, third, fourth = args
            if isinstance(first, str) and isinstance(fourth, str):
                return second, third, first == "(", fourth == ")"
            if isinstance(third, bool) and isinstance(fourth, bool):
                return first, second, third, fourth
            raise ValueError("Invalid Interval constructor arguments")
        if len(args) == 2:
            return args[0], args[1], True, True
        raise ValueError(f"Interval requires 1, 2 or 4 arguments, got {len(args)}")

    @field_validator("open_left", "open_right", mode="before")
    @classmethod
    def _validate_open_flag(cls, value: Any) -> bool:
        if not isinstance(value, bool):
            raise ValueError("Open flags must be booleans")
        return value

    def _check_endpoints(self) -> None:
        a, b = _endpoint_value(self.left), _endpoint_value(self.right)
        if math.isinf(a) and not self.open_left or math.isinf(b) and not self.open_right:
            raise ValueError("Infinite endpoints must be open")
        if a > b:
            raise ValueError("The left endpoint must be less than the right endpoint")
        if a == b and (self.open_left or self.open_right):
            raise ValueError("An interval with equal endpoints must be closed")

    # Comparison

    def _endpoint_equal(self, mine: MathValue, theirs: MathValue, tol: Tolerance) -> bool:
        if isinstance(mine, Infinity) or isinstance(theirs, Infinity):
            return mine.compare(theirs, tol)
        return tol.equal(mine.value, theirs.value)

    def compare_parts(self, other: "Interval", tol: Tolerance | None = None) -> dict[str, bool]:
        """
        Compare endpoints and end types separately.

        Returns:
            Dict with ``left``, ``right`` (endpoint values) and ``left_type``,
            ``right_type`` (open/closed) correctness
        """
        tol = self.tolerance(tol)
        return {
            "left": self._endpoint_equal(self.left, other.left, tol),
            "right": self._endpoint_equal(self.right, other.right, tol),
            "left_type": self.open_left == other.open_left,
            "right_type": self.open_right == other.open_right,
        }

    def compare(self, other: MathValue, tol: Tolerance | None = None) -> bool:
        if isinstance(other, Union):
            return Union(self, context=self.context).compare(other, tol)
        if not isinstance(other, Interval):
            return False
        return all(self.compare_parts(other, tol).values())

    # Set operations

    def contains(self, x: Any) -> bool:
        value = float(x)
        a, b = _endpoint_value(self.left), _endpoint_value(self.right)
        if value < a or value > b:
            return False
        if value == a and self.open_left:
            return False
        if value == b and self.open_right:
            return False
        return True

    def is_empty(self) -> bool:
        return False

    def touches(self, other: "Interval", tol: Tolerance) -> bool:
        """True if the union of the two intervals (self first by left end) is one interval."""
        a_right, b_left = _endpoint_value(self.right), _endpoint_value(other.left)
        if math.isinf(a_right) or math.isinf(b_left):
            return a_right >= b_left
        if b_left < a_right and not tol.equal(b_left, a_right):
            return True
        if tol.equal(b_left, a_right):
            return not (self.open_right and other.open_left)
        return False

    def to_string(self) -> str:
        open_char = "(" if self.open_left else "["
        close_char = ")" if self.open_right else "]"
        return f"{open_char}{self.left.to_string()}, {self.right.to_string()}{close_char}"

    def to_python(self) -> tuple[float, float, bool, bool]:
        return (_endpoint_value(self.left), _endpoint_value(self.right), self.open_left, self.open_right)

    def to_ast(self):
        from mathcheck.parser.ast import Interval as IntervalNode

        return IntervalNode(self.left.to_ast(), self.right.to_ast(), self.open_left, self.open_right)

    def length(self) -> int:
        return 1


class Set(MathValue):
    """
    Finite set of numbers, written {a, b, c}.

    Entries are kept as given so that a student's repeated entries can be
    detected; ``reduce()`` sorts and removes duplicates.
    """

    type_precedence = TypePrecedence.SET
    type_name = "Set"
    type_phrase = "a set"

    elements: tuple[MathValue, ...] = Field(default_factory=tuple)

    def __init__(self, *args: Any, context: Any = None, elements: Iterable[Any] | None = None, **kwargs: Any):
        """
        Initialize a Set.

        Examples:
            Set(1, 2, 3)
            Set([1, 2])
            Set("{1, 2}")
        """
        if elements is None:
            if len(args) == 1 and isinstance(args[0], str):
                from .compute import compute

                parsed = compute(args[0], context, expected="Set")
                if not isinstance(parsed, Set):
                    raise ValueError(f"'{args[0]}' is not a set")
                elements = parsed.elements
            elif len(args) == 1 and isinstance(args[0], (list, tuple)):
                elements = args[0]
            else:
                elements = args
        coerced = tuple(MathValue.from_python(e, context) for e in elements)
        super().__init__(elements=coerced, context=context, **kwargs)

    def reduce(self, tol: Tolerance | None = None) -> "Set":
        tol = self.tolerance(tol)
        unique: list[MathValue] = []
        for element in self.elements:
            if not any(element.compare(seen, tol) for seen in unique):
                unique.append(element)
        if all(isinstance(e, Real) for e in unique):
            unique.sort(key=lambda e: e.value)
        return Set(elements=unique, context=self.context)

    def is_reduced(self, tol: Tolerance | None = None) -> bool:
        return len(self.reduce(tol).elements) == len(self.elements)

    def compare(self, other: MathValue, tol: Tolerance | None = None) -> bool:
        if isinstance(other, Union):
            return Union(self, context=self.context).compare(other, tol)
        if not isinstance(other, Set):
            return False
        tol = self.tolerance(tol)
        mine, theirs = self.reduce(tol).elements, other.reduce(tol).elements
        if len(mine) != len(theirs):
            return False
        weights = np.array([[1.0 if a.compare(b, tol) else 0.0 for b in theirs] for a in mine])
        weights = weights.reshape(len(mine), len(theirs))
        return optimal_total(weights) == len(mine)

    def contains(self, x: Any) -> bool:
        value = MathValue.from_python(x, self.context)
        return any(value.compare(e) for e in self.elements)

    def is_empty(self) -> bool:
        return not self.elements

    def to_string(self) -> str:
        return "{" + ", ".join(e.to_string() for e in self.elements) + "}"

    def to_python(self) -> list:
        return [e.to_python() for e in self.elements]

    def to_ast(self):
        from mathcheck.parser.ast import Set as SetNode

        return SetNode([e.to_ast() for e in self.elements])

    def length(self) -> int:
        return len(self.elements)


class Union(MathValue):
    """
    Union of intervals and sets, written A U B.

    Members keep the order the student typed; ``reduce()`` produces the
    canonical form used for comparison.
    """

    type_precedence = TypePrecedence.UNION
    type_name = "Union"
    type_phrase = "a union of intervals or sets"

    members: tuple[MathValue, ...] = Field(default_factory=tuple)

    def __init__(self, *args: Any, context: Any = None, members: Iterable[Any] | None = None, **kwargs: Any):
        """
        Initialize a Union.

        Examples:
            Union("(-1, 1) U (4, infinity)")
            Union(Interval(-1, 1), Interval(4, Infinity()))
        """
        if members is None:
            if len(args) == 1 and isinstance(args[0], str):
                from .compute import compute

                parsed = compute(args[0], context, expected="Union")
                if isinstance(parsed, Union):
                    members = parsed.members
                elif isinstance(parsed, (Interval, Set)):
                    members = (parsed,)
                else:
                    raise ValueError(f"'{args[0]}' is not a union")
            elif len(args) == 1 and isinstance(args[0], (list, tuple)):
                members = args[0]
            else:
                members = args
        flattened: list[MathValue] = []
        for member in members:
            if isinstance(member, Union):
                flattened.extend(member.members)
            elif isinstance(member, (Interval, Set)):
                flattened.append(member)
            else:
                raise ValueError("Unions can only contain intervals and sets")
        super().__init__(members=tuple(flattened), context=context, **kwargs)

    def _merge(self, intervals: list[Interval], tol: Tolerance) -> list[Interval]:
        intervals = sorted(intervals, key=lambda i: (_endpoint_value(i.left), i.open_left))
        merged: list[Interval] = []
        for interval in intervals:
            if not merged or not merged[-1].touches(interval, tol):
                merged.append(interval)
                continue
            last = merged[-1]
            if last.right.compare(interval.right, tol):
                right, open_right = last.right, last.open_right and interval.open_right
            elif _endpoint_value(interval.right) > _endpoint_value(last.right):
                right, open_right = interval.right, interval.open_right
            else:
                right, open_right = last.right, last.open_right
            merged[-1] = Interval(
                left=last.left, right=right, open_left=last.open_left,
                open_right=open_right, context=self.context,
            )
        return merged

    def reduce(self, tol: Tolerance | None = None) -> "Union":
        """
        Canonical form: disjoint sorted intervals followed by at most one set
        of points not contained in any interval.
        """
        tol = self.tolerance(tol)
        merged = self._merge([m for m in self.members if isinstance(m, Interval)], tol)

        leftover: list[MathValue] = []
        for member in self.members:
            if not isinstance(member, Set):
                continue
            for point in member.elements:
                if not isinstance(point, Real):
                    leftover.append(point)
                elif not any(interval.contains(point.value) for interval in merged):
                    if not self._close_end(merged, point, tol):
                        leftover.append(point)

        # closing an open end can join two neighbours
        merged = self._merge(merged, tol)
        members: list[MathValue] = list(merged)
        if leftover:
            members.append(Set(elements=leftover, context=self.context).reduce(tol))
        return Union(members=members, context=self.context)

    def _close_end(self, intervals: list[Interval], point: Real, tol: Tolerance) -> bool:
        """Close an open end of an interval that sits on ``point``."""
        for index, interval in enumerate(intervals):
            open_left, open_right = interval.open_left, interval.open_right
            if open_left and isinstance(interval.left, Real) and tol.equal(point.value, interval.left.value):
                open_left = False
            elif open_right and isinstance(interval.right, Real) and tol.equal(point.value, interval.right.value):
                open_right = False
            else:
                continue
            intervals[index] = Interval(
                left=interval.left, right=interval.right, open_left=open_left,
                open_right=open_right, context=self.context,
            )
            return True
        return False

    def is_reduced(self, tol: Tolerance | None = None) -> bool:
        """
        True if the union is already in canonical form: no overlapping or
        adjacent-mergeable intervals, no redundant set points, no repeats.
        """
        tol = self.tolerance(tol)
        reduced = self.reduce(tol)
        if len(reduced.members) != len(self.members):
            return False
        sets = [m for m in self.members if isinstance(m, Set)]
        if any(not s.is_reduced(tol) for s in sets):
            return False
        reduced_sets = [m for m in reduced.members if isinstance(m, Set)]
        if sum(len(s.elements) for s in sets) != sum(len(s.elements) for s in reduced_sets):
            return False
        return all(
            any(member.compare(candidate, tol) for candidate in reduced.members)
            for member in self.members
        )

    def compare(self, other: MathValue, tol: Tolerance | None = None) -> bool:
        if isinstance(other, (Interval, Set)):
            other = Union(other, context=other.context)
        if not isinstance(other, Union):
            return False
        tol = self.tolerance(tol)
        mine, theirs = self.reduce(tol).members, other.reduce(tol).members
        if len(mine) != len(theirs):
            return False
        return all(a.compare(b, tol) for a, b in zip(mine, theirs))

    def contains(self, x: Any) -> bool:
        return any(member.contains(x) for member in self.members)

    def to_string(self) -> str:
        return " U ".join(m.to_string() for m in self.members)

    def to_python(self) -> list:
        return [m.to_python() for m in self.members]

    def to_ast(self):
        from mathcheck.parser.ast import BinaryOp

        node = self.members[0].to_ast()
        for member in self.members[1:]:
            node = BinaryOp(node, "U", member.to_ast())
        return node

    def length(self) -> int:
        return len(self.members)
