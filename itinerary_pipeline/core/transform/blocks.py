"""
Segment to block mapping.

Raw portal segments map onto a closed set of block variants. Anything
outside the dispatch table is dropped with a warning.

Dependencies: itinerary_pipeline.models.itinerary
System role: Segment-level transform
"""

import logging
import re
from typing import Any

from itinerary_pipeline.core.transform.rich_text import text_to_rich_text
from itinerary_pipeline.models.itinerary import ActivityBlock, Segment, StayBlock, TransferBlock

logger = logging.getLogger(__name__)

BLOCK_TYPES: dict[str, str] = {
    "stay": "stay",
    "accommodation": "stay",
    "service": "activity",
    "activity": "activity",
    "flight": "transfer",
    "road": "transfer",
    "transfer": "transfer",
    "boat": "transfer",
    "entry": "transfer",
    "exit": "transfer",
    "point": "transfer",
}

_NAMED_TRANSFER_TYPES = frozenset({"flight", "boat", "entry", "exit", "point"})
_HUB_TYPES = frozenset({"entry", "exit", "point"})

_TO_PATTERN = re.compile(r"(?:transfer|flight|drive|road)\s+to\s+([^,\-]+)", re.IGNORECASE)
_TRAILING_TO_PATTERN = re.compile(r"\bto\s+([^,\-]+)$", re.IGNORECASE)


def segment_type(segment: dict[str, Any]) -> str:
    return (segment.get("type") or "").lower()


def block_type_for(segment: dict[str, Any]) -> str | None:
    """Block variant for a raw segment, or None when the type is not mapped."""
    return BLOCK_TYPES.get(segment_type(segment))


def segment_name(segment: dict[str, Any]) -> str | None:
    """Display name of a raw segment; the portal often leaves ``name`` null."""
    return segment.get("name") or segment.get("title") or segment.get("supplierName")


def segment_location(segment: dict[str, Any]) -> str | None:
    return segment.get("location") or segment.get("locationName")


def segment_country(segment: dict[str, Any]) -> str | None:
    return segment.get("country") or segment.get("countryName")


def image_refs(segment: dict[str, Any]) -> list[str]:
    """Source references attached to a raw segment, in order."""
    refs = []
    for image in segment.get("images") or []:
        ref = image if isinstance(image, str) else (image.get("s3Key") or image.get("key"))
        if ref:
            refs.append(ref)
    return refs


def parse_destination(title: str) -> str | None:
    """Extract the destination from titles like 'Transfer to Arusha' or 'Nairobi to Mara'."""
    match = _TO_PATTERN.search(title) or _TRAILING_TO_PATTERN.search(title)
    return match.group(1).strip() if match else None


def _media_ids(segment: dict[str, Any], media_mapping: dict[str, str]) -> list[str]:
    return [media_mapping[ref] for ref in image_refs(segment) if ref in media_mapping]


def _stay_block(segment: dict[str, Any], images: list[str]) -> StayBlock:
    name = segment_name(segment) or "Accommodation"
    inclusions = segment.get("clientIncludeExclude") or segment.get("inclusions") or segment.get("included")
    return StayBlock(
        accommodation_name=name,
        description=text_to_rich_text(segment.get("description")),
        nights=segment.get("nights") or 1,
        location=segment_location(segment),
        country=segment_country(segment),
        images=images,
        inclusions=text_to_rich_text(inclusions),
        room_type=segment.get("roomType"),
    )


def _activity_block(segment: dict[str, Any], images: list[str]) -> ActivityBlock:
    return ActivityBlock(
        title=segment_name(segment) or "Activity",
        description=text_to_rich_text(segment.get("description")),
        images=images,
    )


def _transfer_block(segment: dict[str, Any], images: list[str]) -> TransferBlock:
    kind = segment_type(segment)
    title = segment.get("name") or segment.get("title") or segment.get("description") or "Transfer"
    if kind in _HUB_TYPES:
        code = segment.get("travelHubCode") or segment.get("transitPointCode") or ""
        if code and code not in title:
            title = f"{title} ({code})".strip()

    destination = (segment.get("endLocation") or {}).get("name") or segment.get("to")
    if not destination:
        destination = parse_destination(title)
    if not destination and kind == "exit":
        destination = segment.get("travelHubCode") or segment.get("transitPointCode")

    origin = (segment.get("startLocation") or {}).get("name") or segment.get("from") or segment.get("location")
    return TransferBlock(
        transfer_type=kind if kind in _NAMED_TRANSFER_TYPES else "road",
        title=title,
        from_location=origin,
        to_location=destination,
        departure_time=segment.get("departureTime"),
        arrival_time=segment.get("arrivalTime"),
        description=text_to_rich_text(segment.get("description")),
        images=images,
    )


_BUILDERS = {
    "stay": _stay_block,
    "activity": _activity_block,
    "transfer": _transfer_block,
}


def map_segment_to_block(segment: dict[str, Any], media_mapping: dict[str, str] | None = None) -> Segment | None:
    """
    Map one raw segment onto its block variant.

    Args:
        segment: Raw portal segment
        media_mapping: Optional source reference → media id mapping

    Returns:
        The block, or None for unmapped segment types (logged, not raised)
    """
    block_type = block_type_for(segment)
    if block_type is None:
        logger.warning(
            "%s:map_segment_to_block - Dropping segment with unknown type %r",
            __name__,
            segment.get("type"),
        )
        return None
    return _BUILDERS[block_type](segment, _media_ids(segment, media_mapping or {}))
