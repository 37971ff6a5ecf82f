"""
Portal URL parsing.

Portal links carry the access key and itinerary id either as query
parameters or as ``/portal/{accessKey}/{itineraryId}`` path segments.

Dependencies: None
System role: Scraper input validation
"""

from typing import NamedTuple
from urllib.parse import parse_qs, urlparse

from itinerary_pipeline.core.exceptions import InvalidPortalUrlError


class PortalUrl(NamedTuple):
    access_key: str
    itinerary_id: str


def parse_portal_url(url: str) -> PortalUrl:
    """
    Extract the access key and itinerary id from a portal URL.

    Raises:
        InvalidPortalUrlError: Neither format yields both values
    """
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise InvalidPortalUrlError(url)

    query = parse_qs(parsed.query)
    access_key = (query.get("accessKey") or [None])[0]
    itinerary_id = (query.get("itineraryId") or [None])[0]

    if not access_key or not itinerary_id:
        parts = [part for part in parsed.path.split("/") if part]
        if "portal" in parts:
            index = parts.index("portal")
            if len(parts) >= index + 3:
                access_key, itinerary_id = parts[index + 1], parts[index + 2]

    if not access_key or not itinerary_id:
        raise InvalidPortalUrlError(url)
    return PortalUrl(access_key=access_key, itinerary_id=itinerary_id)
