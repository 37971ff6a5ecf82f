"""
Scraper output models.

Dependencies: pydantic
System role: Contract between the scraper and the intake orchestrator
"""

from typing import Any

from pydantic import BaseModel, Field


class ObservedResponse(BaseModel):
    """A response intercepted during a scrape attempt, kept for diagnostics."""

    url: str
    status: int
    content_type: str = ""


class VideoReference(BaseModel):
    hls_url: str
    context: str = "hero"


class ScrapeResult(BaseModel):
    """Raw portal data for one itinerary."""

    itinerary_id: str
    access_key: str
    raw_itinerary: dict[str, Any]
    media_references: list[str] = Field(default_factory=list)
    price_minor_units: int | None = None
    videos: list[VideoReference] = Field(default_factory=list)
