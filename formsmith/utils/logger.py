"""Logging helpers for formsmith.

Every module grabs its logger with ``get_logger(__name__)``.  Applications
call :func:`setup_logging` once to attach a handler to the ``formsmith``
logger; the library itself never configures the root logger.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

ROOT_LOGGER_NAME = "formsmith"


class JsonFormatter(logging.Formatter):
    """One JSON object per record, for log shippers."""

    def __init__(self, include_timestamp: bool = True):
        super().__init__()
        self.include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.include_timestamp:
            payload["timestamp"] = self.formatTime(record)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``formsmith`` namespace."""
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def setup_logging(
    level: str = "INFO",
    format_type: str = "console",
    include_timestamp: bool = True,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """Configure the ``formsmith`` logger.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        format_type: ``"console"`` for human-readable lines, ``"json"`` for
            one JSON object per line.
        include_timestamp: Prefix records with their creation time.
        log_file: Optional file path; records are written there as well.

    Returns:
        The configured ``formsmith`` logger.
    """
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter(include_timestamp=include_timestamp)
    elif format_type == "console":
        fmt = "%(levelname)-8s %(name)s: %(message)s"
        if include_timestamp:
            fmt = "%(asctime)s " + fmt
        formatter = logging.Formatter(fmt)
    else:
        raise ValueError(f"Unknown format_type '{format_type}' (expected 'console' or 'json')")

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(numeric_level)

    handler: logging.Handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
