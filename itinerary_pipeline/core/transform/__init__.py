"""
Transform phase: raw scraped segments to draft itinerary documents.
"""

from itinerary_pipeline.core.transform.blocks import map_segment_to_block
from itinerary_pipeline.core.transform.day_grouping import (
    DayGroup,
    day_number_for,
    generate_day_title,
    group_segments_by_day,
)
from itinerary_pipeline.core.transform.itinerary_transformer import (
    MediaSeed,
    build_media_seeds,
    primary_itinerary,
    transform_itinerary,
)

__all__ = [
    "DayGroup",
    "MediaSeed",
    "build_media_seeds",
    "day_number_for",
    "generate_day_title",
    "group_segments_by_day",
    "map_segment_to_block",
    "primary_itinerary",
    "transform_itinerary",
]
