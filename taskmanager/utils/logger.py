"""
Logging Utility for the task manager.

Provides structured JSON logging with keyword context on every record.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

ROOT_LOGGER_NAME = "taskmanager"


def configure_logging(level: str = "INFO") -> None:
    """
    Set up the package logger once per process.

    Args:
        level: Logging level name (DEBUG, INFO, ...)
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(logging.getLevelName(level.upper()))

    # Prevent adding handlers multiple times
    if root.handlers:
        return

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(console_handler)


class StructuredLogger:
    """Structured logger emitting one JSON object per record."""

    def __init__(self, name: str):
        """
        Initialize structured logger.

        Args:
            name: Logger name, usually the calling module's ``__name__``
        """
        self.logger = logging.getLogger(name)

    def _render(self, level: int, message: str, **kwargs: Any) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": logging.getLevelName(level),
            "message": message,
            "service": self.logger.name,
        }
        log_data.update(kwargs)
        return json.dumps(log_data, default=str)

    def _log_structured(self, level: int, message: str, **kwargs: Any) -> None:
        """
        Log a structured message.

        Args:
            level: Logging level
            message: Log message
            **kwargs: Additional structured data
        """
        if self.logger.isEnabledFor(level):
            self.logger.log(level, self._render(level, message, **kwargs))

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log_structured(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log_structured(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log_structured(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log_structured(logging.ERROR, message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log an error together with the active traceback."""
        if self.logger.isEnabledFor(logging.ERROR):
            self.logger.exception(self._render(logging.ERROR, message, exception=True, **kwargs))


def get_logger(name: str) -> StructuredLogger:
    """
    Get a structured logger for the given module.

    Args:
        name: Module name; should live under the ``taskmanager`` namespace

    Returns:
        StructuredLogger instance
    """
    return StructuredLogger(name)
