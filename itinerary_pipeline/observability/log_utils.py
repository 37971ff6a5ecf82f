"""
Logging utilities for safe structured logging.

Context values are stringified and truncated before they reach `extra=`,
so scraped payloads and store responses never flood the log stream.

Dependencies: logging (stdlib)
System role: Logging helper functions
"""

import logging
from typing import Any

ERROR_TEXT_LIMIT = 2000


def safe_log_value(value: Any, max_length: int = 500) -> str:
    """
    Convert any value to a bounded string for logging.

    Collections are summarised by size instead of being rendered.

    Args:
        value: Value to convert
        max_length: Maximum length before truncating

    Returns:
        str: Safe string representation
    """
    if value is None:
        return "None"
    if isinstance(value, str):
        text = value
    elif isinstance(value, (list, tuple, set)):
        text = f"{type(value).__name__}({len(value)} items)"
    elif isinstance(value, dict):
        text = f"dict({len(value)} keys)"
    else:
        text = repr(value)

    if len(text) > max_length:
        return text[:max_length] + f"... (truncated, {len(text)} total)"
    return text


def truncate_error(error: BaseException | str, limit: int = ERROR_TEXT_LIMIT) -> str:
    """Render an error as text that fits a store error field."""
    text = error if isinstance(error, str) else f"{type(error).__name__}: {error}"
    return text[:limit]


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context: Any,
) -> None:
    """
    Log a message with structured context, safely converting all values.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        message: Log message
        **context: Arbitrary key-value context
    """
    logger.log(level, message, extra={key: safe_log_value(val) for key, val in context.items()})


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context: Any,
) -> None:
    """
    Log an exception with traceback and structured context.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception instance
        **context: Additional context
    """
    extra = {key: safe_log_value(val) for key, val in context.items()}
    extra["error_type"] = type(exc).__name__
    extra["error_msg"] = safe_log_value(str(exc))
    logger.error(message, exc_info=exc, extra=extra)
