"""
Lambda entrypoint utilities: environment, secrets and event parsing.
"""

from itinerary_pipeline.core.ingestion.lambda_utils.config import configure_secrets, validate_environment
from itinerary_pipeline.core.ingestion.lambda_utils.event_parser import parse_event, unwrap_event
from itinerary_pipeline.core.ingestion.lambda_utils.exceptions import ConfigurationError, EventParseError

__all__ = [
    "ConfigurationError",
    "EventParseError",
    "configure_secrets",
    "parse_event",
    "unwrap_event",
    "validate_environment",
]
