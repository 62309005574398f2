"""
Tests for the centralized logging framework.

Tests logging configuration, server logger routing, module integration and
output formatting.
"""

import logging
import logging.handlers
import os
from unittest.mock import patch

import pytest

from soil_analyzer.logging_config import (
    NOISY_LOGGERS,
    SERVER_LOGGERS,
    configure_from_env,
    get_logger,
    route_server_loggers,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _restore_logging():
    """Drop handlers installed by setup_logging so they don't leak into other tests."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if type(handler) in (logging.StreamHandler, logging.handlers.RotatingFileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    for name in (*SERVER_LOGGERS, *NOISY_LOGGERS):
        logging.getLogger(name).setLevel(logging.NOTSET)


def _file_handlers():
    return [
        h
        for h in logging.getLogger().handlers
        if isinstance(h, logging.handlers.RotatingFileHandler)
    ]


class TestLoggingConfiguration:
    """Test the logging configuration functionality."""

    def test_console_only_by_default(self):
        logger = setup_logging()

        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "test.log"

        logger = setup_logging(log_file=str(log_file))
        logger.info("Test message")

        assert len(logger.handlers) == 2  # Console + file
        assert "Test message" in log_file.read_text()

    @pytest.mark.parametrize(
        "level_str,expected_level",
        [
            ("DEBUG", logging.DEBUG),
            ("INFO", logging.INFO),
            ("WARNING", logging.WARNING),
            ("ERROR", logging.ERROR),
            ("critical", logging.CRITICAL),
        ],
    )
    def test_setup_logging_levels(self, level_str, expected_level):
        logger = setup_logging(level=level_str)
        assert logger.level == expected_level

    def test_log_directory_created(self, tmp_path):
        log_file = tmp_path / "subdir" / "nested" / "test.log"

        setup_logging(log_file=str(log_file)).info("Test message")

        assert log_file.exists()

    def test_file_handler_rotates(self, tmp_path):
        setup_logging(log_file=str(tmp_path / "rotating.log"))

        file_handlers = _file_handlers()
        assert len(file_handlers) == 1
        assert file_handlers[0].backupCount == 5
        assert file_handlers[0].maxBytes == 10 * 1024 * 1024

    def test_reconfiguring_closes_old_file_handler(self, tmp_path):
        setup_logging(log_file=str(tmp_path / "first.log"))
        first = _file_handlers()[0]

        setup_logging(log_file=str(tmp_path / "second.log"))

        assert first not in logging.getLogger().handlers
        assert first.stream is None

    def test_library_loggers_quiet_unless_debug(self):
        setup_logging(level="INFO")
        assert logging.getLogger("urllib3").level == logging.WARNING

        setup_logging(level="DEBUG")
        assert logging.getLogger("urllib3").level == logging.NOTSET

    def test_get_logger(self):
        """Test logger retrieval with names."""
        logger1 = get_logger("test.module1")
        logger2 = get_logger("test.module2")
        logger3 = get_logger("test.module1")

        assert logger1.name == "test.module1"
        assert logger2.name == "test.module2"
        assert logger1 is logger3


class TestConfigureFromEnv:
    @patch.dict(os.environ, {}, clear=True)
    def test_defaults_write_no_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        logger = configure_from_env()

        assert logger.level == logging.INFO
        assert _file_handlers() == []
        assert not (tmp_path / "logs").exists()

    def test_log_file_from_environment(self, tmp_path):
        log_file = tmp_path / "server.log"

        with patch.dict(os.environ, {"LOG_LEVEL": "DEBUG", "LOG_FILE": str(log_file)}):
            logger = configure_from_env()

        assert logger.level == logging.DEBUG
        assert len(_file_handlers()) == 1
        assert log_file.exists()

    @patch.dict(os.environ, {"LOG_LEVEL": "ERROR"})
    def test_explicit_level_wins(self):
        assert configure_from_env(level="DEBUG").level == logging.DEBUG


class TestServerLoggers:
    def test_route_server_loggers(self):
        access = logging.getLogger("uvicorn.access")
        access.addHandler(logging.NullHandler())
        access.propagate = False

        route_server_loggers()

        for name in SERVER_LOGGERS:
            server_logger = logging.getLogger(name)
            assert server_logger.handlers == []
            assert server_logger.propagate is True

    def test_server_records_reach_log_file(self, tmp_path):
        log_file = tmp_path / "server.log"

        with patch.dict(os.environ, {"LOG_FILE": str(log_file)}):
            configure_from_env(server=True)

        logging.getLogger("uvicorn.access").info('127.0.0.1 - "GET /health" 200')

        assert '"GET /health" 200' in log_file.read_text()


class TestLoggingIntegration:
    """Test logging integration with actual modules."""

    def test_service_logging(self, tmp_path, settings, scripted_provider):
        from soil_analyzer.soil.service import SoilAnalysisService

        log_file = tmp_path / "integration.log"
        setup_logging(level="DEBUG", log_file=str(log_file))

        service = SoilAnalysisService(
            settings=settings, provider=scripted_provider({"clay": {"0-5": 30}})
        )
        service.analyze_location(-26.2, 28.0, depths="0-5")

        log_content = log_file.read_text()
        assert "Fetching comprehensive soil data for coordinates: -26.2, 28.0" in log_content
        assert "Found 1 soil properties across 1 depth layers" in log_content

    def test_http_cache_logging(self, tmp_path, monkeypatch):
        """Test that the HTTP session factory logs the backend choice."""
        from soil_analyzer.http_cache import get_session

        monkeypatch.setenv("CACHE_BACKEND", "sqlite")
        monkeypatch.setenv("CACHE_NAME", str(tmp_path / "http_cache"))
        log_file = tmp_path / "cache.log"
        setup_logging(level="DEBUG", log_file=str(log_file))

        get_session()

        assert "Using SQLite cache backend" in log_file.read_text()


class TestLoggingOutput:
    """Test logging output formatting and content."""

    def test_console_format(self, capsys):
        setup_logging(level="INFO")

        get_logger("test_console").info("Test console message")

        output = capsys.readouterr().out
        assert "test_console" in output
        assert "INFO" in output
        assert "Test console message" in output
        # Timestamp format YYYY-MM-DD HH:MM:SS
        assert len(output.split(" - ")[0]) == 19

    def test_file_format(self, tmp_path):
        """Test file logging format includes path and line number."""
        log_file = tmp_path / "format_test.log"
        setup_logging(level="DEBUG", log_file=str(log_file))

        get_logger("test_file").debug("Test file message")

        content = log_file.read_text()
        assert "test_file" in content
        assert "DEBUG" in content
        assert "Test file message" in content
        assert "test_logging.py:" in content


class TestLoggingErrorHandling:
    """Test logging error handling and edge cases."""

    def test_invalid_log_level(self):
        """Invalid levels fall back to INFO."""
        logger = setup_logging(level="INVALID")
        assert logger.level == logging.INFO

    def test_multiple_setup_calls(self):
        """Test that multiple setup calls replace handlers."""
        logger1 = setup_logging(level="INFO")
        initial_handlers = len(logger1.handlers)

        logger2 = setup_logging(level="DEBUG")

        assert logger1 is logger2
        assert len(logger2.handlers) == initial_handlers


if __name__ == "__main__":
    pytest.main([__file__])
