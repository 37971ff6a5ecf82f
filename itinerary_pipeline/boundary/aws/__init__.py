"""
AWS adapters.
"""

from itinerary_pipeline.boundary.aws.s3_media_client import S3MediaClient

__all__ = ["S3MediaClient"]
