"""
JSON-LD generation and validation for itinerary pages.
"""

from itinerary_pipeline.core.schema.generator import SchemaGenerator, image_urls, price_valid_until
from itinerary_pipeline.core.schema.validator import format_validation_result, validate_schema

__all__ = [
    "SchemaGenerator",
    "format_validation_result",
    "image_urls",
    "price_valid_until",
    "validate_schema",
]
