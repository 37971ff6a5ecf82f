"""
Observability helpers: logging configuration and structured log utilities.
"""

from itinerary_pipeline.observability.logger import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
