"""Settings, logging and the error taxonomy shared by all mathcheck packages."""

from .config import Settings, get_settings, settings
from .errors import (
    CheckerError,
    ComparisonError,
    ContextError,
    DimensionError,
    DomainError,
    MathCheckError,
    ParseError,
    TypeMismatchError,
)
from .logging import get_context_logger, get_logger, setup_logging

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "MathCheckError",
    "ContextError",
    "ParseError",
    "TypeMismatchError",
    "DimensionError",
    "ComparisonError",
    "DomainError",
    "CheckerError",
    "get_logger",
    "get_context_logger",
    "setup_logging",
]
