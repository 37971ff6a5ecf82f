"""
Scraping phase: portal capture, media reference extraction and price parsing.
"""

from itinerary_pipeline.core.scraping.endpoint_discovery import group_api_responses, suggest_endpoints
from itinerary_pipeline.core.scraping.media_references import (
    MediaReferenceVisitor,
    extract_media_references,
)
from itinerary_pipeline.core.scraping.portal_scraper import PortalScraper, ResponseCapture
from itinerary_pipeline.core.scraping.price import extract_price_minor_units
from itinerary_pipeline.core.scraping.url_parser import PortalUrl, parse_portal_url

__all__ = [
    "MediaReferenceVisitor",
    "PortalScraper",
    "PortalUrl",
    "ResponseCapture",
    "extract_media_references",
    "extract_price_minor_units",
    "group_api_responses",
    "parse_portal_url",
    "suggest_endpoints",
]
