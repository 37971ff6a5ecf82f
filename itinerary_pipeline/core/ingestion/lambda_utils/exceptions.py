"""
Exceptions for the Lambda entrypoints.
"""


class EventParseError(Exception):
    """Raised when a trigger event cannot be parsed into its model."""


class ConfigurationError(Exception):
    """Raised when required environment configuration is missing."""
