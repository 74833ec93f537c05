"""
Unit tests for logging setup.

Basic tests to check that the dictConfig loggers and formatter behave.
"""

import logging

import pytest

from config.logging import ColoredFormatter, get_logger


@pytest.mark.unit
def test_logging_handlers():
    """Check the processing logger writes to its own file handler"""

    processing_logger = get_logger("data_processing")

    assert processing_logger is not None
    assert processing_logger.propagate is False
    assert "data_processing" in [handler.name for handler in processing_logger.handlers]
    assert "file_error" in [handler.name for handler in processing_logger.handlers]


@pytest.mark.unit
def test_child_loggers_inherit_handlers():
    """Check module loggers reach the configured parent"""

    child = get_logger("data_processing.normalizer")

    assert child.parent is get_logger("data_processing")


@pytest.mark.unit
def test_colored_formatter_restores_levelname():
    """Check the console colours do not leak into other handlers"""

    formatter = ColoredFormatter("%(levelname)s %(message)s")
    record = logging.LogRecord("x", logging.WARNING, __file__, 1, "hello", None, None)

    output = formatter.format(record)

    assert "\033[33m" in output
    assert record.levelname == "WARNING"
