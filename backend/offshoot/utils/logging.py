"""
Offshoot Structured Logging
Centralized loguru configuration; palette and harvest runs log under a
request id so one run can be followed across services.
"""
import sys
from typing import Any, Dict, Optional

from loguru import logger

from offshoot.config import config

LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level} | {extra[request_id]} | {name} | {message}"
)


class StructuredLogger:
    """Structured logger for Offshoot services."""

    def __init__(self, level: Optional[str] = None):
        self.level = level or config.LOG_LEVEL
        self._configure_logger()

    def _configure_logger(self):
        """Replace loguru's default sink with the Offshoot format."""
        logger.remove()
        # Records logged outside a request still need the field for the format
        logger.configure(extra={"request_id": "-"})
        logger.add(
            sys.stdout,
            format=LOG_FORMAT,
            level=self.level,
            serialize=config.LOG_JSON
        )

    def for_request(self, request_id: str, **fields: Any):
        """Logger bound to one palette or harvest request."""
        return logger.bind(request_id=request_id, **fields)

    def _emit(self, level: str, message: str, extra: Optional[Dict[str, Any]]):
        (logger.bind(**extra) if extra else logger).log(level, message)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit("INFO", message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit("WARNING", message, extra)

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit("ERROR", message, extra)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit("DEBUG", message, extra)


# Global logger instance
_logger: Optional[StructuredLogger] = None


def get_logger() -> StructuredLogger:
    """Get or create global logger instance."""
    global _logger
    if _logger is None:
        _logger = StructuredLogger()
    return _logger
