"""
Dominant Colours Structured Logging
Centralized logging configuration using loguru.
"""
import sys
from typing import Any, Dict, Optional

from loguru import logger

from dominant_colours.config import config


class StructuredLogger:
    """Structured logger for the extraction pipeline."""

    def __init__(self, level: Optional[str] = None):
        """Initialize structured logger."""
        self._configure_logger(level or config.LOG_LEVEL)

    def _configure_logger(self, level: str):
        """Configure loguru with a single stderr sink so stdout stays clean for results."""
        logger.remove()
        # Resolve sys.stderr per message so redirected streams are honoured
        logger.add(
            lambda message: sys.stderr.write(message),
            format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message} | {extra}",
            level=level.upper(),
            serialize=False  # Set to True for JSON output
        )

    def _emit(self, level: str, message: str, extra: Optional[Dict[str, Any]] = None):
        """Extra fields are bound, never formatted into the message. depth=2 skips this
        helper and the level method so the record points at the caller."""
        logger.bind(**(extra or {})).opt(depth=2).log(level, message)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit("DEBUG", message, extra)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit("INFO", message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit("WARNING", message, extra)

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit("ERROR", message, extra)


# Global logger instance
_logger: Optional[StructuredLogger] = None


def get_logger(level: Optional[str] = None) -> StructuredLogger:
    """Get or create global logger instance; a new level reconfigures the sink."""
    global _logger
    if _logger is None:
        _logger = StructuredLogger(level)
    elif level is not None:
        _logger._configure_logger(level)
    return _logger
