"""Tests for logging setup."""

import logging

import pytest

import vigil.logging_setup as ls
from vigil.config import LoggingConfig
from vigil.errors import ConfigError


class TestSetupLogging:
    def setup_method(self):
        # Reset the module-level flag for each test
        ls._CONFIGURED = False
        logger = logging.getLogger("vigil")
        logger.handlers.clear()

    def test_setup_creates_handler(self):
        ls.setup_logging()
        logger = logging.getLogger("vigil")
        assert len(logger.handlers) == 1
        assert logger.level == logging.INFO
        assert logger.propagate is False

    def test_idempotent(self):
        ls.setup_logging()
        ls.setup_logging()
        logger = logging.getLogger("vigil")
        assert len(logger.handlers) == 1

    def test_custom_level(self):
        ls.setup_logging(level=logging.DEBUG)
        logger = logging.getLogger("vigil")
        assert logger.level == logging.DEBUG

    def test_level_name(self):
        ls.setup_logging(level="WARNING")
        logger = logging.getLogger("vigil")
        assert logger.level == logging.WARNING

    def test_from_logging_config(self):
        ls.setup_logging(LoggingConfig(level="DEBUG", format="%(message)s"))
        logger = logging.getLogger("vigil")
        assert logger.level == logging.DEBUG
        assert logger.handlers[0].formatter._fmt == "%(message)s"

    def test_level_overrides_config(self):
        ls.setup_logging(LoggingConfig(level="DEBUG"), level="ERROR")
        assert logging.getLogger("vigil").level == logging.ERROR

    def test_unknown_level_name(self):
        with pytest.raises(ConfigError):
            ls.setup_logging(level="bogus")
        assert ls._CONFIGURED is False
