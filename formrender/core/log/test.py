"""Tests for core logging module."""

import logging
from io import StringIO

import pytest

from .lib import get_logger, setup_logging


class TestLogging:
    """Test core logging API."""

    @pytest.mark.unit
    def test_get_logger(self) -> None:
        """Verify logger instance creation."""
        logger = get_logger("test")
        assert logger.name == "test"
        assert isinstance(logger, logging.Logger)

    @pytest.mark.unit
    def test_get_logger_default_name(self) -> None:
        """Verify default logger name."""
        logger = get_logger()
        assert logger.name == "formrender"

    @pytest.mark.unit
    def test_setup_logging_accepts_level_name(self) -> None:
        """Level names are resolved without raising."""
        stream = StringIO()
        setup_logging(level="debug", stream=stream)
        logger = get_logger("test_setup")
        logger.debug("test message")
        assert logger.level == logging.NOTSET

    @pytest.mark.unit
    def test_setup_logging_unknown_level_name(self) -> None:
        """Unknown level names fall back to INFO instead of failing."""
        setup_logging(level="not-a-level", stream=StringIO())
