"""
Checker flags accepted by ``cmp()``.

Flag names keep the camelCase spelling problem authors already use. Flags
that default to None get a type-specific default from the checker class.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from mathcheck.core.config import settings


class CheckerFlags(BaseModel):
    """
    Per-call configuration of an answer checker.

    Unknown flag names are rejected so that a misspelled flag does not
    silently fall back to its default.
    """

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    # Common to all types
    showTypeWarnings: bool = True
    showEqualErrors: bool = True
    ignoreStrings: bool = True
    studentsMustReduceUnions: bool = True
    showUnionReduceWarnings: bool = True

    # Points, vectors and matrices
    showDimensionHints: bool = True
    showCoordinateHints: bool = True
    promotePoints: Optional[bool] = None
    parallel: bool = False
    sameDirection: bool = False

    # Intervals
    showEndpointHints: bool = True
    showEndTypeHints: bool = True
    requireParenMatch: bool = True

    # Lists, sets and unions
    showHints: Optional[bool] = None
    showLengthHints: Optional[bool] = None
    partialCredit: Optional[bool] = None
    ordered: bool = False
    entry_type: Optional[str] = None
    list_type: Optional[str] = None
    extra: Any = None
    typeMatch: Any = None
    removeParens: Optional[bool] = None
    implicitList: bool = True

    # Formulas
    upToConstant: bool = False
    showDomainErrors: bool = True
    limits: Optional[tuple[float, float]] = None

    # Reals
    ignoreInfinity: bool = True

    # Tolerance overrides (None = context flag)
    tolerance: Optional[float] = None
    tolType: Optional[str] = None
    zeroLevel: Optional[float] = None
    zeroLevelTol: Optional[float] = None

    # Custom comparison hooks
    checker: Optional[Callable] = None
    list_checker: Optional[Callable] = None

    @field_validator("limits", mode="before")
    @classmethod
    def validate_limits(cls, v: Any) -> Any:
        if v is None:
            return v
        low, high = (float(x) for x in v)
        if not low < high:
            raise ValueError("limits must be an increasing (low, high) pair")
        return (low, high)

    @field_validator("tolType")
    @classmethod
    def validate_tol_type(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in ("relative", "absolute"):
            raise ValueError(f"tolType must be 'relative' or 'absolute', got '{v}'")
        return v

    def resolved(self, **type_defaults: Any) -> "CheckerFlags":
        """
        Fill unset (None) flags from type defaults, then global settings.

        Args:
            **type_defaults: Defaults chosen by the checker class
        """
        updates = {
            name: value
            for name, value in type_defaults.items()
            if getattr(self, name) is None
        }
        if self.partialCredit is None and "partialCredit" not in updates:
            updates["partialCredit"] = settings.PARTIAL_CREDIT
        return self.model_copy(update=updates)

    def tolerance_overrides(self) -> dict[str, Any]:
        return {
            "tolerance": self.tolerance,
            "tolType": self.tolType,
            "zeroLevel": self.zeroLevel,
            "zeroLevelTol": self.zeroLevelTol,
        }
