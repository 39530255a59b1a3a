"""
Wardrobe Colors Structured Logging
Centralized logging configuration using loguru.
"""
import sys
from typing import Dict, Any, Optional

from loguru import logger

from wardrobe.config import config


def configure_logging(level: Optional[str] = None, serialize: Optional[bool] = None) -> None:
    """
    Replace loguru's default sink with the service format.

    Args:
        level: Minimum level (defaults to WARDROBE_LOG_LEVEL)
        serialize: Emit JSON lines instead of text (defaults to WARDROBE_LOG_JSON)
    """
    logger.remove()
    logger.add(
        sys.stdout,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function} | {message} | {extra}",
        level=level or config.LOG_LEVEL,
        serialize=config.LOG_JSON if serialize is None else serialize,
    )


class StructuredLogger:
    """Structured logger for the color extraction and harmony endpoints."""

    def __init__(self):
        configure_logging()

    def _emit(self, level: str, message: str, extra: Optional[Dict[str, Any]]):
        # depth=2 reports the caller of info()/warning(), not this helper
        target = logger.bind(**extra) if extra else logger
        target.opt(depth=2).log(level, message)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log info message with optional extra data."""
        self._emit("INFO", message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log warning message with optional extra data."""
        self._emit("WARNING", message, extra)

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log error message with optional extra data."""
        self._emit("ERROR", message, extra)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log debug message with optional extra data."""
        self._emit("DEBUG", message, extra)


# Global logger instance
_logger: Optional[StructuredLogger] = None


def get_logger() -> StructuredLogger:
    """Get or create global logger instance."""
    global _logger
    if _logger is None:
        _logger = StructuredLogger()
    return _logger
