"""Tests for library settings."""

from mathcheck.core.config import Settings, get_settings, settings


class TestSettings:
    def test_defaults(self):
        defaults = Settings()
        assert defaults.DEFAULT_TOLERANCE == 0.001
        assert defaults.DEFAULT_TOL_TYPE == "relative"
        assert defaults.DEFAULT_LIMITS == (-2.0, 2.0)
        assert defaults.DEFAULT_NUM_POINTS == 5
        assert defaults.PARTIAL_CREDIT is True

    def test_environment_override(self, monkeypatch):
        """Settings read MATHCHECK_-prefixed environment variables."""
        monkeypatch.setenv("MATHCHECK_DEFAULT_TOLERANCE", "0.05")
        monkeypatch.setenv("MATHCHECK_DEFAULT_CONTEXT", "Numeric")
        overridden = Settings()
        assert overridden.DEFAULT_TOLERANCE == 0.05
        assert overridden.DEFAULT_CONTEXT == "Numeric"

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
        assert settings is get_settings()
