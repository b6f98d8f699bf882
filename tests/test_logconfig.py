"""Tests for structlog configuration used by the CLI."""

import logging
from io import StringIO

import pytest
import structlog

from fstx.utils.logconfig import configure_logging, resolve_log_level


class TestResolveLogLevel:
    """Test level resolution."""

    def test_default_is_warning(self) -> None:
        assert resolve_log_level() == logging.WARNING

    def test_environment_and_argument(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that the argument beats FSTX_LOG_LEVEL."""
        monkeypatch.setenv("FSTX_LOG_LEVEL", "debug")

        assert resolve_log_level() == logging.DEBUG
        assert resolve_log_level("error") == logging.ERROR

    def test_unknown_level(self) -> None:
        with pytest.raises(ValueError, match="Unknown log level: LOUD"):
            resolve_log_level("loud")


class TestConfigureLogging:
    """Test where events end up."""

    def test_events_below_level_are_dropped(self) -> None:
        """Test filtering and routing to the given stream."""
        stream = StringIO()
        configure_logging("warning", stream=stream)
        logger = structlog.get_logger()

        logger.info("transaction.commit")
        logger.warning("transaction.rollback_incomplete", processed=2)

        text = stream.getvalue()
        assert "transaction.commit" not in text
        assert "transaction.rollback_incomplete" in text
        assert "processed=2" in text
