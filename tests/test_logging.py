"""Tests for logging configuration."""

import logging

import pytest

from app.utils.logging import LogConfig, get_logger, setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLoggingSetup:
    """Tests for root logger setup and module loggers."""

    def test_level_from_environment(self, monkeypatch, restore_logging):
        """Test that LOG_LEVEL sets the root level when no config is given."""
        monkeypatch.setenv("LOG_LEVEL", "debug")

        setup_logging()

        assert logging.getLogger().level == logging.DEBUG

    def test_provider_loggers_quieted(self, restore_logging):
        """Test that provider SDK and HTTP client loggers only report warnings."""
        setup_logging(LogConfig(level="DEBUG"))

        for name in ("anthropic", "openai", "httpx", "httpcore"):
            assert logging.getLogger(name).level == logging.WARNING

    def test_module_logger_level(self, monkeypatch):
        """Test that module loggers follow an explicit level or LOG_LEVEL."""
        monkeypatch.setenv("LOG_LEVEL", "error")

        assert get_logger("tests.env_level").level == logging.ERROR
        assert get_logger("tests.explicit_level", "info").level == logging.INFO
