"""
Editorial scaffolding derived from raw segments.

Slug, countries, highlights, nights, FAQ, meta fields and the investment
summary. Everything here is a draft for editors to enhance later.

Dependencies: None
System role: Content generation helpers for the transform
"""

import re
from typing import Any

from itinerary_pipeline.core.transform.blocks import segment_country, segment_name, segment_type
from itinerary_pipeline.core.transform.rich_text import text_to_rich_text
from itinerary_pipeline.models.itinerary import FaqItem

MAX_SLUG_LENGTH = 100
MAX_HIGHLIGHTS = 8
MAX_FAQ_STAYS = 3
MAX_META_TITLE = 60
MAX_META_DESCRIPTION = 160
DEFAULT_NIGHTS = 7
PLACEHOLDER = "unknown"

_STAY_TYPES = frozenset({"stay", "accommodation"})

# keyword groups → summary phrase
_INCLUSION_KEYWORDS: list[tuple[tuple[str, ...], str]] = [
    (("meal", "breakfast", "dinner", "full board"), "all meals"),
    (("drink", "beverage", "wine", "beer"), "premium beverages"),
    (("game drive", "safari"), "daily game drives"),
    (("transfer", "transport"), "all transfers"),
    (("park fee", "conservation"), "park fees"),
    (("laundry",), "laundry service"),
    (("wifi", "wi-fi"), "WiFi"),
]


def _unique(values) -> list:
    seen: dict = {}
    for value in values:
        seen.setdefault(value, None)
    return list(seen)


def _stays(segments: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [s for s in segments if segment_type(s) in _STAY_TYPES]


def generate_slug(title: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return slug[:MAX_SLUG_LENGTH]


def extract_countries(segments: list[dict[str, Any]]) -> list[str]:
    """Distinct segment countries in first-seen order, placeholders removed."""
    countries = []
    for segment in segments:
        countries.extend(c for c in (segment.get("country"), segment.get("countryName")) if c)
    return [c for c in _unique(countries) if PLACEHOLDER not in c.lower()]


def extract_highlights(segments: list[dict[str, Any]]) -> list[str]:
    """Distinct stay names, at most eight."""
    names = [segment_name(s) for s in _stays(segments)]
    return [n for n in _unique(n for n in names if n) if PLACEHOLDER not in n.lower()][:MAX_HIGHLIGHTS]


def calculate_nights(segments: list[dict[str, Any]], itinerary: dict[str, Any]) -> int:
    if itinerary.get("nights"):
        return int(itinerary["nights"])
    total = sum(int(s.get("nights") or 0) for s in _stays(segments))
    return total or DEFAULT_NIGHTS


def generate_faq_items(segments: list[dict[str, Any]], countries: list[str]) -> list[FaqItem]:
    items = []
    for stay in _stays(segments)[:MAX_FAQ_STAYS]:
        name = stay.get("name")
        if not name:
            continue
        answer = (
            stay.get("inclusions")
            or stay.get("description")
            or f"{name} offers luxury accommodation with full board and activities as specified in the itinerary."
        )
        items.append(FaqItem(question=f"What is included at {name}?", answer=text_to_rich_text(answer)))

    country_list = " and ".join(countries) if countries else "East Africa"
    stock = [
        (
            f"What is the best time to visit {country_list}?",
            f"{country_list} offers excellent wildlife viewing year-round. Our travel designers can "
            "advise on the optimal timing based on your specific interests.",
        ),
        (
            "What level of fitness is required for this safari?",
            "This safari is suitable for most fitness levels. Game drives involve sitting in comfortable "
            "vehicles, and bush walks can be adjusted to your pace.",
        ),
        (
            "Is this safari suitable for children?",
            "Family safaris are a specialty. Some lodges have age restrictions for certain activities, "
            "but we can customize the itinerary for travelers of all ages.",
        ),
        (
            "What should I pack for this safari?",
            "We recommend neutral-colored clothing, comfortable walking shoes, sun protection, binoculars, "
            "and a camera. A detailed packing list will be provided upon booking.",
        ),
    ]
    items.extend(FaqItem(question=q, answer=text_to_rich_text(a)) for q, a in stock)
    return items


def generate_meta_fields(title: str, nights: int, countries: list[str]) -> tuple[str, str]:
    """Return (meta_title, meta_description) within search engine length limits."""
    country_list = " & ".join(countries) if countries else "Africa"
    meta_title = f"{title} | {nights}-Night Luxury Safari".strip()[:MAX_META_TITLE]
    meta_description = (
        f"Experience a {nights}-night luxury safari through {country_list}. Exclusive lodges, "
        "expert guides, and unforgettable wildlife encounters. Inquire with Kiuli today."
    )[:MAX_META_DESCRIPTION]
    return meta_title, meta_description


def generate_investment_includes(segments: list[dict[str, Any]], nights: int) -> str:
    """Summarise stays and recognised inclusions into one sentence block."""
    names = []
    inclusions: list[str] = []
    for stay in _stays(segments):
        name = stay.get("name") or stay.get("title")
        if name:
            names.append(name)
        text = (stay.get("clientIncludeExclude") or stay.get("inclusions") or stay.get("included") or "").lower()
        for keywords, phrase in _INCLUSION_KEYWORDS:
            if text and any(k in text for k in keywords):
                inclusions.append(phrase)

    parts = []
    unique_names = _unique(names)
    if unique_names:
        more = " and more" if len(unique_names) > 3 else ""
        parts.append(f"{nights} nights at {', '.join(unique_names[:3])}{more}")
    unique_inclusions = _unique(inclusions)
    if unique_inclusions:
        parts.append(", ".join(unique_inclusions[:5]))

    if not parts:
        return (
            f"Luxury accommodation for {nights} nights with full board, game activities, "
            "and expert guiding throughout your safari experience."
        )
    return ". ".join(parts) + "."


def first_country(segments: list[dict[str, Any]], itinerary: dict[str, Any]) -> str | None:
    """Itinerary-level default country for media context."""
    countries = itinerary.get("countries") or []
    if countries:
        return countries[0] if isinstance(countries[0], str) else countries[0].get("name")
    return next((segment_country(s) for s in segments if segment_country(s)), None)
