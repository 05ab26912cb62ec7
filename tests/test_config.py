"""Tests for settings and logging setup."""

import logging

import pytest
from pydantic import ValidationError
from rich.logging import RichHandler

from fm_match.core.config import Settings, get_settings
from fm_match.core.logging import configure_logging


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        """Test defaults."""
        for name in ("DEBUG", "FM_MATCH_LOG_LEVEL", "FM_MATCH_SEED", "FM_MATCH_TRACE"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.random_seed is None
        assert settings.trace_enabled is False
        assert settings.effective_log_level == "INFO"

    def test_environment_aliases(self, monkeypatch):
        """Test environment aliases."""
        monkeypatch.setenv("FM_MATCH_SEED", "1234")
        monkeypatch.setenv("FM_MATCH_TRACE", "true")
        monkeypatch.setenv("FM_MATCH_TRACE_SAMPLE_RATE", "0.5")
        settings = Settings(_env_file=None)
        assert settings.random_seed == 1234
        assert settings.trace_enabled is True
        assert settings.trace_sample_rate == 0.5

    def test_sample_rate_validated(self):
        """Test sample rate validated."""
        with pytest.raises(ValidationError):
            Settings(_env_file=None, trace_sample_rate=2)

    def test_debug_forces_debug_level(self):
        """Test debug forces debug level."""
        settings = Settings(_env_file=None, debug=True, log_level="WARNING")
        assert settings.effective_log_level == "DEBUG"

    def test_settings_cached(self):
        """Test settings cached."""
        assert get_settings() is get_settings()


class TestLogging:
    """Tests for rich logging setup."""

    def test_single_rich_handler(self):
        """Test single rich handler."""
        settings = Settings(_env_file=None, log_level="WARNING")
        configure_logging(settings)
        logger = configure_logging(settings)

        handlers = [h for h in logger.handlers if isinstance(h, RichHandler)]
        assert len(handlers) == 1
        assert logger.level == logging.WARNING
        assert logger.name == "fm_match"
