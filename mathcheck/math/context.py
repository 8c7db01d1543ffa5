"""
Context system for parsing and comparing math answers.

The Context controls which operators, functions, parentheses, variables,
constants and strings are available when parsing student text, and holds
the tolerance flags used when comparing values.

Named contexts (Numeric, Complex, Point, Vector, Matrix, Interval, Full) are
kept as private templates. ``get_context()`` always hands out an independent
copy so that one problem's changes never leak into another.
"""

from __future__ import annotations

import math
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, PrivateAttr

from mathcheck.core.config import settings
from mathcheck.core.errors import ContextError
from mathcheck.core.logging import get_logger

logger = get_logger(__name__)


# Leaf function categories
FUNCTION_CATEGORIES: Dict[str, tuple[str, ...]] = {
    "SimpleTrig": ("sin", "cos", "tan", "sec", "csc", "cot"),
    "InverseTrig": ("asin", "acos", "atan", "asec", "acsc", "acot", "atan2"),
    "SimpleHyperbolic": ("sinh", "cosh", "tanh", "sech", "csch", "coth"),
    "InverseHyperbolic": ("asinh", "acosh", "atanh", "asech", "acsch", "acoth"),
    "Numeric": ("ln", "log", "log10", "exp", "sqrt", "abs", "int", "sgn"),
    "Vector": ("norm", "unit"),
    "Complex": ("arg", "mod", "Re", "Im", "conj"),
}

# Composite categories are unions of other categories
COMPOSITE_CATEGORIES: Dict[str, tuple[str, ...]] = {
    "Hyperbolic": ("SimpleHyperbolic", "InverseHyperbolic"),
    "Trig": ("SimpleTrig", "InverseTrig", "Hyperbolic"),
    "All": ("Trig", "Numeric", "Vector", "Complex"),
}

FUNCTION_ARITY: Dict[str, int] = {"atan2": 2}

# token -> (precedence, associativity, kind)
DEFAULT_OPERATORS: Dict[str, tuple[int, str, str]] = {
    "U": (1, "left", "binary"),
    "+": (2, "left", "binary"),
    "-": (2, "left", "binary"),
    "*": (3, "left", "binary"),
    "/": (3, "left", "binary"),
    "//": (3, "left", "binary"),
    " ": (3, "left", "binary"),
    "u-": (4, "right", "unary"),
    "u+": (4, "right", "unary"),
    "": (5, "left", "binary"),
    "^": (7, "right", "binary"),
    "**": (7, "right", "binary"),
}

VECTOR_OPERATORS: Dict[str, tuple[int, str, str]] = {
    ".": (3, "left", "binary"),
    "><": (3, "left", "binary"),
}

TOL_TYPES = ("relative", "absolute")


def category_functions(name: str) -> list[str]:
    """
    Expand a function category (leaf or composite) into function names.

    Args:
        name: Category name such as "Trig" or "InverseHyperbolic"

    Returns:
        Function names in category order, without duplicates

    Raises:
        ContextError: If the category is unknown
    """
    if name in FUNCTION_CATEGORIES:
        return list(FUNCTION_CATEGORIES[name])
    if name in COMPOSITE_CATEGORIES:
        names: list[str] = []
        for part in COMPOSITE_CATEGORIES[name]:
            for func in category_functions(part):
                if func not in names:
                    names.append(func)
        return names
    raise ContextError(f"Unknown function category '{name}'")


def _function_category(func: str) -> Optional[str]:
    for category, names in FUNCTION_CATEGORIES.items():
        if func in names:
            return category
    return None


def is_category(name: str) -> bool:
    return name in FUNCTION_CATEGORIES or name in COMPOSITE_CATEGORIES


class VariableManager(BaseModel):
    """Manages variables (name -> {type, limits}) available in the context."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    _variables: Dict[str, dict] = PrivateAttr(default_factory=dict)

    def add(self, name: str, type_: str = "Real", limits: Optional[tuple[float, float]] = None):
        """
        Add a variable.

        Args:
            name: Variable name
            type_: "Real" or "Complex"
            limits: Optional (low, high) sampling domain
        """
        if type_ not in ("Real", "Complex"):
            raise ContextError(f"Variables can't be of type '{type_}'")
        options: dict[str, Any] = {}
        if limits is not None:
            options["limits"] = _validate_limits(limits)
        self._variables[name] = {"type": type_, "options": options}

    def set(self, name: str, **options):
        """Set variable options (e.g. limits)."""
        if name not in self._variables:
            raise ContextError(f"Variable '{name}' is not defined in this context")
        if "limits" in options and options["limits"] is not None:
            options["limits"] = _validate_limits(options["limits"])
        self._variables[name]["options"].update(options)

    def remove(self, name: str):
        self._variables.pop(name, None)

    def are(self, **variables: str):
        """Replace all variables, e.g. ``are(x="Real", t="Real")``."""
        self._variables = {}
        for name, type_ in variables.items():
            self.add(name, type_)

    def get(self, name: str) -> Optional[dict]:
        return self._variables.get(name)

    def type_of(self, name: str) -> str:
        return self._variables[name]["type"]

    def limits(self, name: str) -> Optional[tuple[float, float]]:
        entry = self._variables.get(name)
        if entry is None:
            return None
        return entry["options"].get("limits")

    def list(self) -> list:
        return list(self._variables.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._variables

    def copy(self):
        new_mgr = VariableManager()
        new_mgr._variables = deepcopy(self._variables)
        return new_mgr


class ConstantManager(BaseModel):
    """Manages named constants (pi, e, i, ...)."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    _constants: Dict[str, Any] = PrivateAttr(default_factory=dict)

    def add(self, name: str, value: Any):
        self._constants[name] = value

    def get(self, name: str) -> Any:
        return self._constants.get(name)

    def remove(self, name: str):
        self._constants.pop(name, None)

    def list(self) -> list:
        return list(self._constants.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._constants

    def copy(self):
        new_mgr = ConstantManager()
        new_mgr._constants = dict(self._constants)
        return new_mgr


class FunctionManager(BaseModel):
    """
    Manages functions available in the context.

    Disabling keeps a function's definition so that using it produces a
    "not allowed" error; undefining removes it entirely.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    _functions: Dict[str, dict] = PrivateAttr(default_factory=dict)

    def add(self, name: str, category: Optional[str] = None, nargs: Optional[int] = None):
        self._functions[name] = {
            "category": category or _function_category(name),
            "nargs": nargs if nargs is not None else FUNCTION_ARITY.get(name, 1),
            "disabled": False,
        }

    def get(self, name: str) -> Optional[dict]:
        return self._functions.get(name)

    def remove(self, name: str):
        self._functions.pop(name, None)

    def undefine(self, *names):
        """Undefine (remove) one or more functions or categories."""
        for name in self._expand(names):
            self.remove(name)

    def disable(self, *names):
        """Disable functions; categories are expanded transitively."""
        for name in self._expand(names):
            if name in self._functions:
                self._functions[name]["disabled"] = True

    def enable(self, *names):
        """Enable functions, re-adding any that were undefined."""
        for name in self._expand(names):
            if name in self._functions:
                self._functions[name]["disabled"] = False
            else:
                self.add(name)

    def is_enabled(self, name: str) -> bool:
        entry = self._functions.get(name)
        return entry is not None and not entry["disabled"]

    def list(self, enabled_only: bool = False) -> list:
        if enabled_only:
            return [name for name, entry in self._functions.items() if not entry["disabled"]]
        return list(self._functions.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._functions

    def copy(self):
        new_mgr = FunctionManager()
        new_mgr._functions = deepcopy(self._functions)
        return new_mgr

    def _expand(self, names) -> list[str]:
        expanded: list[str] = []
        for name in names:
            if is_category(name):
                expanded.extend(category_functions(name))
            elif name in self._functions or _function_category(name) is not None:
                expanded.append(name)
            else:
                raise ContextError(f"Unknown function or category '{name}'")
        return expanded


class OperatorManager(BaseModel):
    """
    Manages operators available in the context.

    Implicit multiplication has two surface forms: ``""`` for tight
    juxtaposition (``2x``) and ``" "`` for whitespace-separated factors
    (``2 x``). Unary operators are stored as ``u-`` and ``u+``.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    _operators: Dict[str, dict] = PrivateAttr(default_factory=dict)

    def add(self, name: str, precedence: int, associativity: str = "left", kind: str = "binary"):
        if associativity not in ("left", "right"):
            raise ContextError(f"Unknown associativity '{associativity}'")
        if kind not in ("binary", "unary"):
            raise ContextError(f"Unknown operator kind '{kind}'")
        self._operators[name] = {
            "precedence": precedence,
            "associativity": associativity,
            "kind": kind,
        }

    def set(self, name: str, **options):
        if name not in self._operators:
            raise ContextError(f"Operator '{name}' is not defined in this context")
        self._operators[name].update(options)

    def get(self, name: str) -> Optional[dict]:
        return self._operators.get(name)

    def remove(self, name: str):
        self._operators.pop(name, None)

    def undefine(self, *names):
        for name in names:
            self.remove(name)

    def list(self) -> list:
        return list(self._operators.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._operators

    def copy(self):
        new_mgr = OperatorManager()
        new_mgr._operators = deepcopy(self._operators)
        return new_mgr


class ParensManager(BaseModel):
    """
    Manages parenthesis styles.

    Each open character maps to ``{close, type, formInterval}`` where type is
    one of List, Point, Vector, Matrix, Interval, Set or Abs.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    _parens: Dict[str, dict] = PrivateAttr(default_factory=dict)

    def set(self, paren_type: str, **options):
        if paren_type not in self._parens:
            self._parens[paren_type] = {"close": _CLOSERS[paren_type], "type": "List", "formInterval": False}
        self._parens[paren_type].update(options)

    def get(self, paren_type: str) -> Optional[dict]:
        return self._parens.get(paren_type)

    def remove(self, paren_type: str):
        self._parens.pop(paren_type, None)

    def close_for(self, paren_type: str) -> Optional[str]:
        entry = self._parens.get(paren_type)
        return entry["close"] if entry else None

    def is_close(self, char: str) -> bool:
        return any(entry["close"] == char for entry in self._parens.values())

    def opener_for(self, close: str) -> Optional[str]:
        for open_char, entry in self._parens.items():
            if entry["close"] == close:
                return open_char
        return None

    def list(self) -> list:
        return list(self._parens.keys())

    def __contains__(self, paren_type: str) -> bool:
        return paren_type in self._parens

    def copy(self):
        new_mgr = ParensManager()
        new_mgr._parens = deepcopy(self._parens)
        return new_mgr


_CLOSERS = {"(": ")", "[": "]", "{": "}", "<": ">", "|": "|"}


class StringConfig(BaseModel):
    """Configuration for a string value in the context."""

    value: str
    alias: Optional[str] = None
    case_sensitive: bool = False


class StringsManager(BaseModel):
    """Manager for answer strings such as NONE or DNE."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    _strings: Dict[str, StringConfig] = PrivateAttr(default_factory=dict)

    def add(self, **strings: Optional[dict]) -> None:
        """
        Add strings to the context.

        Args:
            **strings: String names with optional configuration dicts,
                e.g. ``add(NONE={}, N={"alias": "NONE"})``
        """
        for name, config in strings.items():
            config = config or {}
            self._strings[name] = StringConfig(
                value=name,
                alias=config.get("alias"),
                case_sensitive=config.get("caseSensitive", False),
            )

    def remove(self, name: str) -> None:
        self._strings.pop(name, None)

    def get_canonical(self, value: str) -> Optional[str]:
        """Get the canonical form of a string value, following aliases."""
        for name, config in self._strings.items():
            if config.case_sensitive:
                matched = value == name
            else:
                matched = value.lower() == name.lower()
            if matched:
                return self.get_canonical(config.alias) if config.alias else name
        return None

    def contains(self, value: str) -> bool:
        return self.get_canonical(value) is not None

    def list(self) -> list:
        return list(self._strings.keys())

    def copy(self):
        new_mgr = StringsManager()
        new_mgr._strings = {
            k: StringConfig(value=v.value, alias=v.alias, case_sensitive=v.case_sensitive)
            for k, v in self._strings.items()
        }
        return new_mgr


def _validate_limits(limits: Any) -> tuple[float, float]:
    try:
        low, high = (float(v) for v in limits)
    except (TypeError, ValueError) as e:
        raise ContextError(f"Limits must be a pair of numbers, got {limits!r}") from e
    if not low < high:
        raise ContextError(f"Lower limit must be less than upper limit, got {limits!r}")
    return (low, high)


class ContextFlags(BaseModel):
    """
    Manages context flags.

    Comparison flags: tolerance, tolType, zeroLevel, zeroLevelTol.
    Sampling flags: limits, num_points, max_undefined.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    _flags: Dict[str, Any] = PrivateAttr(default_factory=dict)

    def __init__(self, **kwargs):
        super().__init__()
        self._flags = {
            "tolerance": settings.DEFAULT_TOLERANCE,
            "tolType": settings.DEFAULT_TOL_TYPE,
            "zeroLevel": settings.DEFAULT_ZERO_LEVEL,
            "zeroLevelTol": settings.DEFAULT_ZERO_LEVEL_TOL,
            "limits": tuple(settings.DEFAULT_LIMITS),
            "num_points": settings.DEFAULT_NUM_POINTS,
            "max_undefined": settings.MAX_UNDEFINED_POINTS,
        }
        if kwargs:
            self.set(**kwargs)

    def set(self, **kwargs):
        """Set flag values, validating the ones the comparison code relies on."""
        for name, value in kwargs.items():
            if name == "tolType" and value not in TOL_TYPES:
                raise ContextError(f"tolType must be one of {TOL_TYPES}, got '{value}'")
            if name in ("tolerance", "zeroLevel", "zeroLevelTol"):
                if not isinstance(value, (int, float)) or value < 0:
                    raise ContextError(f"{name} must be a non-negative number, got {value!r}")
                value = float(value)
            if name in ("num_points", "max_undefined"):
                if not isinstance(value, int) or value < 0:
                    raise ContextError(f"{name} must be a non-negative integer, got {value!r}")
            if name == "limits":
                value = _validate_limits(value)
            self._flags[name] = value

    def get(self, name: str, default: Any = None) -> Any:
        return self._flags.get(name, default)

    def as_dict(self) -> dict:
        return dict(self._flags)

    def copy(self):
        new_flags = ContextFlags()
        new_flags._flags = dict(self._flags)
        return new_flags


class Context(BaseModel):
    """
    Grammar and comparison environment for one problem.

    Created once per problem, read by the parser and answer checkers, and not
    changed while a comparison runs.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str = "Numeric"
    variables: VariableManager
    constants: ConstantManager
    functions: FunctionManager
    operators: OperatorManager
    strings: StringsManager
    flags: ContextFlags
    parens: ParensManager

    def __init__(self, name: str = "Numeric", **kwargs):
        """
        Create a context, initialized from the named template when known.

        Args:
            name: Numeric, Complex, Point, Vector, Matrix, Interval or Full.
                Any other name yields an empty context.
        """
        for field, factory in (
            ("variables", VariableManager),
            ("constants", ConstantManager),
            ("functions", FunctionManager),
            ("operators", OperatorManager),
            ("strings", StringsManager),
            ("flags", ContextFlags),
            ("parens", ParensManager),
        ):
            if field not in kwargs:
                kwargs[field] = factory()
        super().__init__(name=name, **kwargs)

        initializer = getattr(self, f"_init_{name.lower()}", None)
        if initializer is not None:
            initializer()

    def _init_numeric(self):
        """Initialize Numeric context with standard operations."""
        self.variables.add("x", "Real")

        self.constants.add("pi", math.pi)
        self.constants.add("e", math.e)
        self.constants.add("inf", math.inf)
        self.constants.add("infinity", math.inf)

        self.functions.enable("Trig", "Numeric")

        for token, (precedence, assoc, kind) in DEFAULT_OPERATORS.items():
            if token != "U":
                self.operators.add(token, precedence, assoc, kind)

        self.parens.set("(", type="List")
        self.parens.set("[", type="List")
        self.parens.set("|", type="Abs")

        self.strings.add(NONE={}, DNE={})

    def _init_complex(self):
        """Initialize Complex context."""
        self._init_numeric()
        self.constants.add("i", complex(0, 1))
        self.variables.add("z", "Complex")
        self.functions.enable("Complex")

    def _init_point(self):
        """Initialize Point context."""
        self._init_numeric()
        self.variables.add("y", "Real")
        self.variables.add("z", "Real")
        self.parens.set("(", type="Point")

    def _init_vector(self):
        """Initialize Vector context."""
        self._init_point()
        self.constants.add("i", (1.0, 0.0, 0.0))
        self.constants.add("j", (0.0, 1.0, 0.0))
        self.constants.add("k", (0.0, 0.0, 1.0))
        self.functions.enable("Vector")
        for token, (precedence, assoc, kind) in VECTOR_OPERATORS.items():
            self.operators.add(token, precedence, assoc, kind)
        self.parens.set("<", type="Vector")

    def _init_matrix(self):
        """Initialize Matrix context."""
        self._init_vector()
        self.parens.set("[", type="Matrix")

    def _init_interval(self):
        """Initialize Interval context for interval notation."""
        self._init_numeric()
        self.operators.add("U", *DEFAULT_OPERATORS["U"])
        self.parens.set("(", type="Interval", formInterval=True)
        self.parens.set("[", type="Interval", formInterval=True)
        self.parens.set("{", type="Set")

    def _init_full(self):
        """Initialize Full context: everything the other contexts allow."""
        self._init_vector()
        self.constants.add("i", complex(0, 1))
        self.constants.remove("j")
        self.constants.remove("k")
        self.functions.enable("All")
        self.operators.add("U", *DEFAULT_OPERATORS["U"])
        self.parens.set("(", type="Point", formInterval=True)
        self.parens.set("[", type="Matrix", formInterval=True)
        self.parens.set("{", type="Set")

    # Problem-level configuration

    def enable_function(self, *names: str) -> "Context":
        """Enable functions or whole categories (e.g. "Trig")."""
        self.functions.enable(*names)
        return self

    def disable_function(self, *names: str) -> "Context":
        """Disable functions or whole categories; operators are left alone."""
        self.functions.disable(*names)
        return self

    def undefine_function(self, *names: str) -> "Context":
        self.functions.undefine(*names)
        return self

    def define_operator(
        self,
        token: str,
        precedence: Optional[int] = None,
        associativity: Optional[str] = None,
        kind: Optional[str] = None,
    ) -> "Context":
        """
        Define (or re-enable) an operator token.

        Omitted settings fall back to the standard table, so
        ``define_operator("*")`` restores explicit multiplication.
        """
        standard = DEFAULT_OPERATORS.get(token) or VECTOR_OPERATORS.get(token)
        if standard is None and precedence is None:
            raise ContextError(f"Operator '{token}' needs a precedence")
        default_prec, default_assoc, default_kind = standard or (precedence, "left", "binary")
        self.operators.add(
            token,
            precedence if precedence is not None else default_prec,
            associativity or default_assoc,
            kind or default_kind,
        )
        return self

    def undefine_operator(self, *tokens: str) -> "Context":
        self.operators.undefine(*tokens)
        return self

    def remove_paren(self, *styles: str) -> "Context":
        """Remove parenthesis styles, e.g. ``remove_paren("[")`` or ``"|"``."""
        for style in styles:
            self.parens.remove(style)
        return self

    def declare_variable(
        self, name: str, type_: str = "Real", limits: Optional[tuple[float, float]] = None
    ) -> "Context":
        self.variables.add(name, type_, limits)
        return self

    def set_flags(self, **flags: Any) -> "Context":
        self.flags.set(**flags)
        return self

    def get_flag(self, name: str, default: Any = None) -> Any:
        return self.flags.get(name, default)

    def get_operator_precedence(self, op: str, is_unary: bool = False) -> int:
        key = f"u{op}" if is_unary else op
        entry = self.operators.get(key)
        if entry is None:
            return 0
        return entry["precedence"]

    def get_operator_associativity(self, op: str, is_unary: bool = False) -> str:
        key = f"u{op}" if is_unary else op
        entry = self.operators.get(key)
        if entry is None:
            return "left"
        return entry["associativity"]

    def copy(self, name: Optional[str] = None) -> "Context":
        """Create an independent copy of this context."""
        return Context.model_construct(
            name=name if name is not None else self.name,
            variables=self.variables.copy(),
            constants=self.constants.copy(),
            functions=self.functions.copy(),
            operators=self.operators.copy(),
            strings=self.strings.copy(),
            flags=self.flags.copy(),
            parens=self.parens.copy(),
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Context":
        """
        Load a context from a YAML file.

        The document may name a ``base`` context and then adjust it::

            name: Kinematics
            base: Numeric
            variables:
              - t
              - {name: v0, limits: [1, 5]}
            constants: {g: 9.8}
            functions:
              disable: [Trig]
            operators:
              undefine: [" "]
            parens:
              remove: ["["]
            flags: {tolerance: 0.01, tolType: absolute}

        Args:
            path: Path to YAML configuration file

        Returns:
            Context instance
        """
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> "Context":
        if "name" not in data:
            raise ContextError("Context definition needs a name")
        base = data.get("base")
        context = _template(base).copy(name=data["name"]) if base else cls(data["name"])

        for var in data.get("variables", []):
            if isinstance(var, dict):
                context.declare_variable(var["name"], var.get("type", "Real"), var.get("limits"))
            else:
                context.declare_variable(var)

        for name, value in (data.get("constants") or {}).items():
            context.constants.add(name, value)

        functions = data.get("functions") or {}
        context.enable_function(*functions.get("enable", []))
        context.disable_function(*functions.get("disable", []))
        context.undefine_function(*functions.get("undefine", []))

        operators = data.get("operators") or {}
        for op in operators.get("define", []):
            if isinstance(op, dict):
                context.define_operator(
                    op["symbol"], op.get("precedence"), op.get("associativity"), op.get("kind")
                )
            else:
                context.define_operator(op)
        context.undefine_operator(*operators.get("undefine", []))

        parens = data.get("parens") or {}
        for open_char, options in (parens.get("set") or {}).items():
            context.parens.set(open_char, **options)
        context.remove_paren(*parens.get("remove", []))

        strings = data.get("strings") or {}
        if isinstance(strings, list):
            strings = {name: {} for name in strings}
        context.strings.add(**strings)

        context.set_flags(**(data.get("flags") or {}))
        logger.debug("Loaded context %s", context.name)
        return context

    def __repr__(self):
        return f"Context({self.name!r})"


# Named context templates; handed out as copies
CONTEXT_NAMES = ("Numeric", "Complex", "Point", "Vector", "Matrix", "Interval", "Full")
_templates: Dict[str, Context] = {}


def _template(name: str) -> Context:
    if name not in _templates:
        if name not in CONTEXT_NAMES:
            raise ContextError(f"Unknown context '{name}'")
        _templates[name] = Context(name)
    return _templates[name]


def get_context(name: Optional[str] = None) -> Context:
    """
    Get a fresh copy of a named context.

    Args:
        name: Context name (None = the configured default)

    Returns:
        An independent Context the caller may modify

    Examples:
        >>> ctx = get_context("Interval")
        >>> ctx.declare_variable("t", limits=(0, 10))
    """
    return _template(name or settings.DEFAULT_CONTEXT).copy()


def register_context(context: Context) -> None:
    """Make a customized context available to ``get_context()`` by name."""
    _templates[context.name] = context.copy()


def default_context() -> Context:
    """The shared default template, for read-only use by values built without a context."""
    return _template(settings.DEFAULT_CONTEXT)
