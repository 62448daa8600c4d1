"""
Tests for the shared rate-limited logging implementation.
"""
from unittest.mock import MagicMock

from aidchain_sdk._rate_limited_log import rate_limited_log, reset


def test_first_message_is_logged():
    mock_logger = MagicMock()

    assert rate_limited_log("Sponsor error: boom", level="error", logger_instance=mock_logger)
    mock_logger.error.assert_called_once_with("Sponsor error: boom")


def test_repeat_is_suppressed():
    mock_logger = MagicMock()

    rate_limited_log("Test message", logger_instance=mock_logger)
    assert not rate_limited_log("Test message", logger_instance=mock_logger)
    assert mock_logger.warning.call_count == 1


def test_levels_are_tracked_separately():
    mock_logger = MagicMock()

    rate_limited_log("Test message", level="warning", logger_instance=mock_logger)
    rate_limited_log("Test message", level="error", logger_instance=mock_logger)

    mock_logger.warning.assert_called_once_with("Test message")
    mock_logger.error.assert_called_once_with("Test message")


def test_intervals_are_tracked_separately():
    mock_logger = MagicMock()

    rate_limited_log("Test message", interval=60, logger_instance=mock_logger)
    rate_limited_log("Test message", interval=5, logger_instance=mock_logger)

    assert mock_logger.warning.call_count == 2


def test_reset():
    mock_logger = MagicMock()

    rate_limited_log("Test message", logger_instance=mock_logger)
    reset()
    rate_limited_log("Test message", logger_instance=mock_logger)

    assert mock_logger.warning.call_count == 2


def test_unknown_level_falls_back_to_warning():
    mock_logger = MagicMock(spec=["warning"])

    rate_limited_log("Test message", level="verbose", logger_instance=mock_logger)
    mock_logger.warning.assert_called_once_with("Test message")
