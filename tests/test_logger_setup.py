"""
Unit Tests for Logger Setup
===========================
"""

import sys
from unittest.mock import MagicMock, patch

from taskflow.core.logger_setup import CONSOLE_FORMAT, FILE_FORMAT, configure_logger


def settings_mock(log_level="INFO", debug=False, log_file_path=None, log_json=False):
    mock_settings = MagicMock()
    mock_settings.log_level = log_level
    mock_settings.debug = debug
    mock_settings.log_file_path = log_file_path
    mock_settings.log_file_rotation = "100 MB"
    mock_settings.log_file_retention = "14 days"
    mock_settings.log_json = log_json
    return mock_settings


class TestLoggerSetup:
    @patch("taskflow.core.logger_setup.logger")
    def test_replaces_default_handler_with_stdout(self, mock_logger):
        configure_logger(settings_mock())

        mock_logger.remove.assert_called_once()
        mock_logger.add.assert_called_once()
        args, kwargs = mock_logger.add.call_args
        assert args[0] is sys.stdout
        assert kwargs["level"] == "INFO"
        assert kwargs["format"] == CONSOLE_FORMAT
        assert kwargs["diagnose"] is False

    @patch("taskflow.core.logger_setup.logger")
    def test_request_id_defaults_outside_requests(self, mock_logger):
        configure_logger(settings_mock())

        mock_logger.configure.assert_called_once_with(extra={"request_id": "-"})
        assert "{extra[request_id]}" in CONSOLE_FORMAT
        assert "{extra[request_id]}" in FILE_FORMAT

    @patch("taskflow.core.logger_setup.logger")
    def test_debug_mode_enables_diagnose(self, mock_logger):
        configure_logger(settings_mock(log_level="DEBUG", debug=True))

        _, kwargs = mock_logger.add.call_args
        assert kwargs["level"] == "DEBUG"
        assert kwargs["diagnose"] is True

    @patch("taskflow.core.logger_setup.logger")
    def test_json_mode_serializes_records(self, mock_logger):
        configure_logger(settings_mock(log_json=True, debug=True))

        args, kwargs = mock_logger.add.call_args
        assert args[0] is sys.stdout
        assert kwargs["serialize"] is True
        assert "format" not in kwargs
        assert kwargs["diagnose"] is False

    @patch("taskflow.core.logger_setup.logger")
    def test_file_sink_added_when_configured(self, mock_logger):
        configure_logger(settings_mock(log_file_path="logs/taskflow.log"))

        assert mock_logger.add.call_count == 2
        args, kwargs = mock_logger.add.call_args_list[1]
        assert args[0] == "logs/taskflow.log"
        assert kwargs["rotation"] == "100 MB"
        assert kwargs["retention"] == "14 days"
        assert kwargs["enqueue"] is True

    @patch("taskflow.core.logger_setup.logger")
    @patch("taskflow.core.logger_setup.settings")
    def test_defaults_to_global_settings(self, mock_settings, mock_logger):
        mock_settings.log_level = "WARNING"
        mock_settings.debug = False
        mock_settings.log_file_path = None
        mock_settings.log_json = False

        configure_logger()

        _, kwargs = mock_logger.add.call_args
        assert kwargs["level"] == "WARNING"
