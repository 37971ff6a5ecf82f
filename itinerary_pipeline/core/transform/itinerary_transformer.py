"""
Itinerary transform.

Pure mapping from raw scraped data to a draft itinerary document, plus
the media seeds (one per source reference) that become image status rows.

Dependencies: itinerary_pipeline.models
System role: Phase 1 transform between scraping and draft persistence
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from itinerary_pipeline.core.transform.blocks import (
    image_refs,
    map_segment_to_block,
    segment_country,
    segment_name,
)
from itinerary_pipeline.core.transform.content import (
    calculate_nights,
    extract_countries,
    extract_highlights,
    first_country,
    generate_faq_items,
    generate_investment_includes,
    generate_meta_fields,
    generate_slug,
)
from itinerary_pipeline.core.transform.day_grouping import day_number_for, group_segments_by_day
from itinerary_pipeline.core.transform.rich_text import text_to_rich_text
from itinerary_pipeline.models.image_status import MediaContext, MediaType
from itinerary_pipeline.models.itinerary import (
    Day,
    InvestmentLevel,
    Itinerary,
    ItinerarySource,
    Overview,
    StayBlock,
)
from itinerary_pipeline.models.scrape_result import ScrapeResult

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Safari Itinerary"


@dataclass
class MediaSeed:
    """A media reference discovered at intake, with its itinerary context."""

    source_ref: str
    media_type: MediaType = MediaType.IMAGE
    context: MediaContext = field(default_factory=MediaContext)


def primary_itinerary(raw: dict[str, Any]) -> dict[str, Any]:
    """The portal itinerary entry inside a raw scrape payload."""
    container = raw.get("itinerary") or {}
    itineraries = container.get("itineraries") if isinstance(container, dict) else None
    if itineraries:
        return itineraries[0]
    return container or raw


def transform_itinerary(
    raw: dict[str, Any],
    source_url: str | None,
    media_mapping: dict[str, str] | None = None,
    scraped_at: datetime | None = None,
) -> Itinerary:
    """
    Build a draft itinerary from raw scraped data.

    Args:
        raw: Raw scrape payload (``itinerary``, ``images``, ``price``, ``videos``)
        source_url: Portal URL the data was scraped from
        media_mapping: Optional source reference → media id mapping
        scraped_at: Scrape timestamp (defaults to now)

    Returns:
        Itinerary: Unsaved draft document
    """
    media_mapping = media_mapping or {}
    entry = primary_itinerary(raw)
    segments = entry.get("segments") or []
    title = (entry.get("name") or entry.get("itineraryName") or DEFAULT_TITLE).strip()
    upstream_id = entry.get("id") or raw.get("itineraryId") or ""
    price_minor = raw.get("price") or entry.get("sellFinance") or 0

    nights = calculate_nights(segments, entry)
    countries = extract_countries(segments)
    highlights = extract_highlights(segments)
    logger.info(
        "%s:transform_itinerary - Transforming %r: %d segments, %d nights",
        __name__,
        title,
        len(segments),
        nights,
    )

    days = []
    for group in group_segments_by_day(segments, entry.get("startDate")):
        blocks = [b for b in (map_segment_to_block(s, media_mapping) for s in group.segments) if b is not None]
        days.append(Day(day_number=group.day_number, date=group.date, title=group.title, location=group.location, segments=blocks))

    meta_title, meta_description = generate_meta_fields(title, nights, countries)
    summary = entry.get("summary") or entry.get("description") or (
        f"A {nights}-night luxury safari through {' and '.join(countries)}."
    )

    return Itinerary(
        title=title,
        slug=generate_slug(title),
        itinerary_id=str(upstream_id),
        days=days,
        overview=Overview(
            summary=text_to_rich_text(summary),
            nights=nights,
            countries=[{"country": c} for c in countries],
            highlights=[{"highlight": h} for h in highlights],
        ),
        investment_level=InvestmentLevel(
            from_price=round(price_minor / 100) if price_minor else None,
            currency="USD",
            includes=text_to_rich_text(generate_investment_includes(segments, nights)),
        ),
        faq_items=generate_faq_items(segments, countries),
        meta_title=meta_title,
        meta_description=meta_description,
        images=list(dict.fromkeys(media_mapping.values())),
        source=ItinerarySource(itrvl_url=source_url, last_scraped_at=scraped_at or datetime.now(timezone.utc)),
    )


def _segment_context(
    segment: dict[str, Any],
    index: int,
    trip_start: str | None,
    default_country: str | None,
) -> MediaContext:
    """
    Context tags for images of one segment.

    Tags come from the mapped block so they normalize to the same linking
    key as the block itself.
    """
    block = map_segment_to_block(segment)
    if block is None:
        segment_kind, property_name, title = None, segment_name(segment), segment_name(segment)
    elif isinstance(block, StayBlock):
        segment_kind, property_name, title = block.block_type, block.accommodation_name, block.accommodation_name
    else:
        segment_kind, property_name, title = block.block_type, segment_name(segment), block.title
    return MediaContext(
        segment_type=segment_kind,
        property_name=property_name,
        segment_title=title,
        day_index=day_number_for(segment.get("startDate"), trip_start),
        segment_index=index,
        country=segment_country(segment) or default_country,
    )


def build_media_seeds(scrape: ScrapeResult) -> list[MediaSeed]:
    """
    One seed per distinct source reference, images first, then videos.

    Segment images carry their segment's context. When no segment lists
    images, the flat reference list from the scrape is used without context.
    """
    entry = primary_itinerary(scrape.raw_itinerary)
    segments = entry.get("segments") or []
    default_country = first_country(segments, entry)
    trip_start = entry.get("startDate")

    seeds: dict[str, MediaSeed] = {}
    for index, segment in enumerate(segments):
        refs = image_refs(segment)
        if not refs:
            continue
        context = _segment_context(segment, index, trip_start, default_country)
        for ref in refs:
            seeds.setdefault(ref, MediaSeed(source_ref=ref, context=context))

    if not seeds and scrape.media_references:
        logger.warning(
            "%s:build_media_seeds - No segment images, using %d flat references without context",
            __name__,
            len(scrape.media_references),
        )
        for ref in scrape.media_references:
            seeds.setdefault(ref, MediaSeed(source_ref=ref, context=MediaContext(country=default_country)))

    for video in scrape.videos:
        seeds.setdefault(
            video.hls_url,
            MediaSeed(
                source_ref=video.hls_url,
                media_type=MediaType.VIDEO,
                context=MediaContext(video_context=video.context, country=default_country),
            ),
        )
    return list(seeds.values())
