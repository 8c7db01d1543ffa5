"""
Library configuration.

Centralized defaults for comparisons and logging, overridable through
environment variables prefixed with ``MATHCHECK_`` or a ``.env`` file.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-wide settings"""

    model_config = SettingsConfigDict(
        env_prefix="MATHCHECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Logging
    LOG_LEVEL: str = "WARNING"
    LOG_FORMAT: str = "text"  # json or text
    LOG_FILE: Optional[str] = None

    # Contexts
    DEFAULT_CONTEXT: str = "Full"

    # Numeric comparison
    DEFAULT_TOLERANCE: float = 0.001
    DEFAULT_TOL_TYPE: str = "relative"  # relative or absolute
    DEFAULT_ZERO_LEVEL: float = 1e-14
    DEFAULT_ZERO_LEVEL_TOL: float = 1e-12

    # Formula sampling
    DEFAULT_LIMITS: tuple[float, float] = (-2.0, 2.0)
    DEFAULT_NUM_POINTS: int = 5
    MAX_UNDEFINED_POINTS: int = 20

    # Answer checking
    PARTIAL_CREDIT: bool = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()
