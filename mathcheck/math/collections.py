"""
Collection MathValue types: List and String.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from .value import MathValue, TypePrecedence


def _coerce_entries(raw: Any, context: Any) -> tuple[MathValue, ...]:
    return tuple(MathValue.from_python(item, context) for item in raw)


class List(MathValue):
    """
    Ordered list of values; entries may have different types.

    A list built without parentheses (``List(1, 2)`` or the text ``1, 2``)
    renders without them, matching how students type lists.
    """

    type_precedence = TypePrecedence.LIST
    type_name = "List"
    type_phrase = "a list"

    elements: tuple[MathValue, ...] = Field(default_factory=tuple)
    open: str = ""
    close: str = ""

    def __init__(self, *args: Any, context: Any = None, open: str = "", close: str = "", **kwargs: Any):
        """
        Build a list from values, a Python list, or text.

        Examples:
            List(1, -1, 0)
            List([1, 2, 3])
            List("(1,2), (3,4)")
        """
        if "elements" in kwargs:
            elements = _coerce_entries(kwargs.pop("elements"), context)
        elif len(args) == 1 and isinstance(args[0], str):
            from .compute import compute

            parsed = compute(args[0], context, expected="List")
            if isinstance(parsed, List):
                elements, open, close = parsed.elements, parsed.open, parsed.close
            else:
                elements = (parsed,)
        elif len(args) == 1 and isinstance(args[0], (list, tuple)) and not isinstance(args[0], MathValue):
            elements = _coerce_entries(args[0], context)
        else:
            elements = _coerce_entries(args, context)
        super().__init__(elements=elements, open=open, close=close, context=context, **kwargs)

    def compare(self, other: MathValue, tol=None) -> bool:
        """Ordered comparison; unordered matching is done by the answer checker."""
        if not isinstance(other, List) or len(other.elements) != len(self.elements):
            return False
        tol = self.tolerance(tol)
        return all(a.compare(b, tol) for a, b in zip(self.elements, other.elements))

    def to_string(self) -> str:
        inner = ", ".join(_entry_string(e) for e in self.elements)
        return f"{self.open}{inner}{self.close}"

    def to_python(self) -> list:
        return [e.to_python() for e in self.elements]

    def to_ast(self):
        from mathcheck.parser.ast import List as ListNode

        return ListNode([e.to_ast() for e in self.elements], self.open, self.close)

    def with_parens(self, open: str, close: str) -> "List":
        return List(elements=self.elements, open=open, close=close, context=self.context)

    def length(self) -> int:
        return len(self.elements)

    def __len__(self) -> int:
        return len(self.elements)

    def __getitem__(self, index: int) -> MathValue:
        return self.elements[index]


def _entry_string(entry: MathValue) -> str:
    # Nested bare lists need brackets to stay nested when parsed again
    if isinstance(entry, List) and not entry.open:
        return f"[{entry.to_string()}]"
    return entry.to_string()


class String(MathValue):
    """
    A word answer such as NONE or DNE.

    Comparison ignores case and follows the context's string aliases.
    """

    type_precedence = TypePrecedence.STRING
    type_name = "String"
    type_phrase = "a word"

    value: str

    def __init__(self, value: str = "", context: Any = None, **kwargs: Any):
        super().__init__(value=value, context=context, **kwargs)

    def canonical(self) -> str:
        canonical = self.get_context().strings.get_canonical(self.value)
        return canonical if canonical is not None else self.value

    def compare(self, other: MathValue, tol=None) -> bool:
        if not isinstance(other, String):
            return False
        return self.canonical().lower() == other.canonical().lower()

    def to_string(self) -> str:
        return self.value

    def to_python(self) -> str:
        return self.value

    def to_ast(self):
        from mathcheck.parser.ast import String as StringNode

        return StringNode(self.value)
