"""Logging utilities for optengine.

Provides namespaced, cached loggers shared by the executor, observers and
checkpoints. The default level can be overridden with the
``OPTENGINE_LOG_LEVEL`` environment variable.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

_LEVEL_ENV_VAR = "OPTENGINE_LOG_LEVEL"
_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def _level_from_env() -> int:
    value = os.getenv(_LEVEL_ENV_VAR)
    if not value:
        return logging.WARNING
    return _coerce_level(value)


def _coerce_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return level


# Defaults applied to loggers created after configure_logging()
_DEFAULT_LEVEL = _level_from_env()
_DEFAULT_STREAM: Optional[object] = None
_DEFAULT_FORMAT = _FORMAT

# Module-level logger cache
_loggers: dict[str, logging.Logger] = {}


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get or create a logger for the given module name.

    Loggers are cached to avoid duplicate handlers. The logger name should
    typically be `__name__` from the calling module.

    Args:
        name: Logger name (typically `__name__`). If None, returns the package
            root logger.

    Returns:
        Configured logger instance.

    Example:
        >>> from optengine.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Starting optimization run")
    """
    if name is None:
        name = "optengine"

    if name == "optengine" or name.startswith("optengine."):
        logger_name = name
    else:
        logger_name = f"optengine.{name}"

    if logger_name in _loggers:
        return _loggers[logger_name]

    logger = logging.getLogger(logger_name)

    # Only configure if not already configured (avoid duplicate handlers)
    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)
        handler = logging.StreamHandler(_DEFAULT_STREAM or sys.stderr)
        handler.setLevel(_DEFAULT_LEVEL)
        handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    _loggers[logger_name] = logger
    return logger


def set_log_level(level: int | str) -> None:
    """Set the logging level for all optengine loggers.

    Args:
        level: Logging level (logging.DEBUG, logging.INFO, etc.) or string
            ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL').
    """
    level = _coerce_level(level)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)

    global _DEFAULT_LEVEL
    _DEFAULT_LEVEL = level


def configure_logging(
    level: int | str = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[object] = None,
) -> None:
    """Configure logging for optengine.

    Replaces the handlers of every cached logger with a single stream handler.
    It should typically be called once at application startup.

    Args:
        level: Logging level (default: WARNING).
        format_string: Custom format string. If None, uses default.
        stream: Output stream (default: sys.stderr).

    Example:
        >>> from optengine.logging import configure_logging
        >>> import logging
        >>> configure_logging(level=logging.INFO)
    """
    level = _coerce_level(level)

    if stream is None:
        stream = sys.stderr

    format_string = format_string or _FORMAT
    formatter = logging.Formatter(format_string)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        handler = logging.StreamHandler(stream)
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    global _DEFAULT_LEVEL, _DEFAULT_STREAM, _DEFAULT_FORMAT
    _DEFAULT_LEVEL = level
    _DEFAULT_STREAM = stream
    _DEFAULT_FORMAT = format_string


__all__ = ["configure_logging", "get_logger", "set_log_level"]
