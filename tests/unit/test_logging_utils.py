"""Unit tests for logging setup."""

from __future__ import annotations

import logging
from unittest.mock import Mock, patch

import pytest

from cryptsetup_generator import logging_utils


class TestParseLevel:
    """Test log level parsing."""

    @pytest.mark.parametrize(
        "name, level",
        [
            ("debug", logging.DEBUG),
            ("INFO", logging.INFO),
            ("notice", logging.INFO),
            ("warning", logging.WARNING),
            ("err", logging.ERROR),
            ("crit", logging.CRITICAL),
            ("7", logging.DEBUG),
            ("3", logging.ERROR),
            ("0", logging.CRITICAL),
        ],
    )
    def test_names(self, name, level):
        """Test systemd level names and syslog priorities."""
        assert logging_utils.parse_level(name) == level

    def test_unknown_uses_default(self):
        """Test unknown or missing levels use the default."""
        assert logging_utils.parse_level("loud") == logging.INFO
        assert logging_utils.parse_level(None, logging.WARNING) == logging.WARNING


class TestSetupLogging:
    """Test logger setup."""

    def test_environment_level_wins(self, monkeypatch):
        """Test SYSTEMD_LOG_LEVEL overrides the configured level."""
        monkeypatch.setenv("SYSTEMD_LOG_LEVEL", "debug")
        logger = logging_utils.setup_logging("err")
        assert logger.name == "systemd-cryptsetup-generator"
        assert logger.level == logging.DEBUG

    def test_handler_added_once(self, monkeypatch):
        """Test repeated setup adds no second handler."""
        monkeypatch.delenv("SYSTEMD_LOG_LEVEL", raising=False)
        logger = logging_utils.setup_logging()
        count = len(logger.handlers)
        logging_utils.setup_logging("warning")
        assert len(logger.handlers) == count >= 1
        assert logger.level == logging.WARNING


class TestLogStructured:
    """Test structured log records."""

    def test_fields_inline_without_journal(self):
        """Test fields are appended to the message without journald."""
        logger = Mock()
        logger.handlers = []
        with patch.object(logging_utils, "JournalHandler", None):
            logging_utils.log_structured(logger, "Generated x", {"UNIT": "x.service"})
        logger.info.assert_called_once_with("Generated x UNIT=x.service")

    def test_plain_message_without_fields(self):
        """Test a message without fields is logged as is."""
        logger = Mock()
        logger.handlers = []
        with patch.object(logging_utils, "JournalHandler", None):
            logging_utils.log_structured(logger, "Generated x", {})
        logger.info.assert_called_once_with("Generated x")

    def test_journal_gets_extra_fields(self):
        """Test journald handlers receive the fields as extra."""
        class FakeJournalHandler(logging.Handler):
            def emit(self, record):
                pass

        logger = Mock()
        logger.handlers = [FakeJournalHandler()]
        with patch.object(logging_utils, "JournalHandler", FakeJournalHandler):
            logging_utils.log_structured(logger, "Generated x", {"UNIT": "x.service"})
        logger.info.assert_called_once_with("Generated x", extra={"UNIT": "x.service"})
