"""
Price extraction.

Dependencies: None
System role: Scraper price normalization
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)

# Below this the selling price is assumed to be whole currency units.
MAJOR_UNIT_CEILING = 100_000


def _to_number(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def extract_price_minor_units(itineraries: Any, itinerary_id: str) -> int | None:
    """
    Selling price of the matching itinerary entry, in minor currency units.

    The portal does not state the unit of ``finance.sellingPrice``. Values
    strictly between 0 and 100000 are treated as major units and scaled by
    100; anything else is taken as already being minor units.

    Args:
        itineraries: Captured itinerary metadata (a list of entries)
        itinerary_id: Itinerary id parsed from the portal URL

    Returns:
        Price in minor units, or None when no entry or price is found
    """
    if isinstance(itineraries, dict):
        itineraries = itineraries.get("itineraries") or itineraries.get("data") or [itineraries]
    if not isinstance(itineraries, list):
        return None

    entry = next(
        (
            item
            for item in itineraries
            if isinstance(item, dict) and itinerary_id in (item.get("id"), item.get("itineraryId"))
        ),
        None,
    )
    if entry is None:
        return None

    price = _to_number((entry.get("finance") or {}).get("sellingPrice"))
    if price <= 0:
        return None
    if price < MAJOR_UNIT_CEILING:
        logger.info(
            "%s:extract_price_minor_units - Treating %s as major units for %s",
            __name__,
            price,
            itinerary_id,
        )
        return round(price * 100)
    return round(price)
