"""
Segment linking.

Joins resolved media back onto the itinerary's day/segment tree. A segment
and a status row match when they derive the same key; both sides go through
``normalize_key`` so the keys cannot diverge.

Dependencies: pydantic models only
System role: Finalization step that populates segment media lists
"""

import logging

from itinerary_pipeline.models.image_status import ImageStatus
from itinerary_pipeline.models.itinerary import Day, StayBlock

logger = logging.getLogger(__name__)


def normalize_key(block_type: str, name: str | None) -> str:
    return f"{block_type}-{name or ''}".strip().lower()


def segment_key(block) -> str:
    """Key for an itinerary segment block."""
    if isinstance(block, StayBlock):
        return normalize_key("stay", block.accommodation_name or block.title)
    return normalize_key(block.block_type, block.title)


def status_key(row: ImageStatus) -> str | None:
    """Key for a status row, from its stored context tags."""
    if not row.segment_type:
        return None
    if row.segment_type == "stay":
        return normalize_key("stay", row.property_name or row.segment_title)
    return normalize_key(row.segment_type, row.segment_title or row.property_name)


def group_media_by_key(rows: list[ImageStatus]) -> dict[str, list[str]]:
    """Resolved media ids per segment key, deduplicated, in row order."""
    groups: dict[str, list[str]] = {}
    for row in rows:
        if not row.is_resolved or row.is_video:
            continue
        key = status_key(row)
        if key is None:
            continue
        media_ids = groups.setdefault(key, [])
        if row.media_id not in media_ids:
            media_ids.append(row.media_id)
    return groups


def link_segments(days: list[Day], rows: list[ImageStatus]) -> list[Day]:
    """
    Return a copy of ``days`` with every segment's media list populated.

    Segments without a matching group get an empty list.
    """
    groups = group_media_by_key(rows)
    linked_days = []
    linked = 0
    for day in days:
        segments = []
        for block in day.segments:
            media_ids = groups.get(segment_key(block), [])
            linked += len(media_ids)
            segments.append(block.model_copy(update={"images": list(media_ids)}))
        linked_days.append(day.model_copy(update={"segments": segments}))
    logger.info(
        "%s:link_segments - Linked %d media across %d groups", __name__, linked, len(groups)
    )
    return linked_days
