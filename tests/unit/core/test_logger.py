"""
Tests for logger access.
"""

import logging
from unittest.mock import MagicMock

import pytest

from stowage.core.logger import get_logger, set_logger


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    set_logger(None)


class TestLogger:
    """Tests for get_logger and set_logger."""

    def test_standard_logger_by_name(self):
        """Test a stdlib logger with a NullHandler is returned."""
        logger = get_logger("stowage.tests")

        assert isinstance(logger, logging.Logger)
        assert logger.name == "stowage.tests"
        assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)

    def test_custom_logger_wins(self):
        """Test set_logger replaces every named logger."""
        custom = MagicMock()
        set_logger(custom)

        assert get_logger("stowage.anything") is custom

    def test_reset_to_standard(self):
        """Test passing None restores standard logging."""
        set_logger(MagicMock())
        set_logger(None)

        assert isinstance(get_logger("stowage.reset"), logging.Logger)
