"""
Centralized logging configuration for soil-analyzer.

Everything logs through the root logger: one stdout handler and, when a log
file is requested, a rotating file handler. The HTTP server's own loggers
(uvicorn) are routed to the same handlers instead of installing their own.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path

DEFAULT_LOG_FILE = "logs/soil_analyzer.log"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_LOG_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - %(pathname)s:%(lineno)d - %(message)s"
)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Loggers uvicorn configures for itself when given a log_config
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

# Per-request chatter from HTTP and cache libraries, shown only at DEBUG
NOISY_LOGGERS = ("urllib3", "requests_cache", "pymongo")


def setup_logging(level: str = "INFO", log_file: str | None = None) -> logging.Logger:
    """
    Configure the root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Also write to this rotating log file (console only if None)

    Returns:
        Configured root logger
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(numeric_level)

    # Reconfiguring replaces handlers instead of stacking them
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

        # Rotating file handler (max 10MB, keep 5 backups)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=10 * 1024 * 1024, backupCount=5
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    library_level = logging.NOTSET if numeric_level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    return logger


def route_server_loggers() -> None:
    """Send uvicorn's log records to the root handlers."""
    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.setLevel(logging.NOTSET)
        server_logger.propagate = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def configure_from_env(level: str | None = None, server: bool = False) -> logging.Logger:
    """
    Configure logging for a long-running process from environment variables.

    Environment variables:
        LOG_LEVEL: Logging level (default: INFO), overridden by ``level``
        LOG_FILE: Rotating log file path; file logging is off when unset

    Args:
        level: Explicit level taking precedence over LOG_LEVEL
        server: Also route the HTTP server's loggers through the root handlers

    Returns:
        Configured root logger
    """
    logger = setup_logging(
        level=level or os.getenv("LOG_LEVEL", "INFO"),
        log_file=os.getenv("LOG_FILE") or None,
    )
    if server:
        route_server_loggers()
    return logger
