"""
Logger configuration.

Configures stdout logging once per process (Lambda containers reuse the
root logger between invocations, so handlers are replaced rather than added).

Dependencies: logging (stdlib)
System role: Centralized logging configuration
"""

import logging
import sys

_NOISY_LOGGERS = ("urllib3", "botocore", "boto3", "s3transfer", "httpx", "httpcore")


def configure_logging(level: str | int = logging.INFO) -> None:
    """
    Configure root logging with a timestamped single-line format.

    Args:
        level: Root log level name or number
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root_logger.setLevel(level.upper() if isinstance(level, str) else level)
    root_logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a named logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        logging.Logger: Logger instance
    """
    return logging.getLogger(name)
