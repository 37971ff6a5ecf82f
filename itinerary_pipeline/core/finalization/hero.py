"""
Hero media selection.

Pure priority rules over resolved media records. Callers skip selection
entirely when an editor has locked the hero.
"""

from typing import Callable

from itinerary_pipeline.models.media import Media

HERO_VIDEO_CONTEXT = "hero"
HIGH_QUALITY = "high"

_IMAGE_RULES: list[Callable[[Media], bool]] = [
    lambda m: m.quality == HIGH_QUALITY and m.image_type == "wildlife",
    lambda m: m.quality == HIGH_QUALITY and m.image_type == "landscape",
    lambda m: m.quality == HIGH_QUALITY,
    lambda m: m.image_type == "wildlife",
    lambda m: m.image_type == "landscape",
]


def _first(media: list[Media], rule: Callable[[Media], bool]) -> Media | None:
    return next((m for m in media if rule(m)), None)


def select_hero_image(media: list[Media]) -> str | None:
    """
    Pick the hero image id.

    Order: hero-flagged (high quality first), high-quality wildlife,
    high-quality landscape, any high quality, wildlife, landscape, first.
    """
    images = [m for m in media if m.media_type != "video"]
    if not images:
        return None

    flagged = [m for m in images if m.is_hero]
    if flagged:
        return (_first(flagged, lambda m: m.quality == HIGH_QUALITY) or flagged[0]).id

    for rule in _IMAGE_RULES:
        match = _first(images, rule)
        if match is not None:
            return match.id
    return images[0].id


def select_hero_video(media: list[Media], itinerary_id: str) -> str | None:
    """
    Pick the hero video id.

    Order: hero-context video of this itinerary, any video of this
    itinerary, any hero-context video, first video.
    """
    videos = [m for m in media if m.media_type == "video"]
    if not videos:
        return None

    def own(m: Media) -> bool:
        return itinerary_id in m.used_in_itineraries

    def hero(m: Media) -> bool:
        return m.video_context == HERO_VIDEO_CONTEXT

    for rule in (lambda m: hero(m) and own(m), own, hero):
        match = _first(videos, rule)
        if match is not None:
            return match.id
    return videos[0].id
