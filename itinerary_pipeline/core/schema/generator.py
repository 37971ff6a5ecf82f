"""
JSON-LD generation.

Builds the structured markup blocks for an itinerary page: a Product, an
optional FAQPage and a BreadcrumbList. Each block is rendered as its own
``application/ld+json`` script by the site.

Dependencies: pydantic models only
System role: Pure collaborator called by the finalizer
"""

import logging
import re
from datetime import date
from typing import Any

from itinerary_pipeline.core.transform.rich_text import rich_text_to_plain
from itinerary_pipeline.models.itinerary import Itinerary
from itinerary_pipeline.models.media import Media

logger = logging.getLogger(__name__)

SCHEMA_CONTEXT = "https://schema.org"
BRAND_NAME = "Kiuli"
MAX_SCHEMA_IMAGES = 10
DEFAULT_NIGHTS = 7
DEFAULT_DESTINATION = "Africa"

_PLACEHOLDER = re.compile(r"unknown", re.IGNORECASE)


def price_valid_until(today: date | None = None) -> str:
    """ISO date one year after ``today``."""
    today = today or date.today()
    try:
        return today.replace(year=today.year + 1).isoformat()
    except ValueError:
        # 29 February
        return today.replace(year=today.year + 1, day=28).isoformat()


def image_urls(media: list[Media], hero_image_id: str | None) -> list[str]:
    """Up to ten image URLs, hero first, without duplicates."""
    urls = [m.public_url for m in media if m.media_type != "video" and m.public_url][:MAX_SCHEMA_IMAGES]
    hero = next((m for m in media if m.id == hero_image_id), None)
    if hero is not None and hero.public_url:
        urls = [hero.public_url, *urls]
    return list(dict.fromkeys(urls))[:MAX_SCHEMA_IMAGES]


class SchemaGenerator:
    """
    Generates JSON-LD for itinerary pages.

    Usage:
        generator = SchemaGenerator("https://kiuli.com", "/safaris")
        blocks = generator.generate(itinerary, media, hero_image_id)
    """

    def __init__(self, site_url: str, path_prefix: str = "/safaris") -> None:
        self._site_url = site_url.rstrip("/")
        self._path_prefix = "/" + path_prefix.strip("/")

    @property
    def listing_url(self) -> str:
        return f"{self._site_url}{self._path_prefix}"

    def page_url(self, slug: str) -> str:
        return f"{self.listing_url}/{slug}"

    def generate(
        self,
        itinerary: Itinerary,
        media: list[Media],
        hero_image_id: str | None,
        today: date | None = None,
    ) -> list[dict[str, Any]]:
        blocks = [self.product(itinerary, media, hero_image_id, today)]
        faq = self.faq_page(itinerary)
        if faq is not None:
            blocks.append(faq)
        blocks.append(self.breadcrumbs(itinerary))
        return blocks

    def product(
        self,
        itinerary: Itinerary,
        media: list[Media],
        hero_image_id: str | None,
        today: date | None = None,
    ) -> dict[str, Any]:
        nights = itinerary.overview.nights or DEFAULT_NIGHTS
        countries = [c.get("country") for c in itinerary.overview.countries if c.get("country")]
        destinations = ", ".join(countries) or DEFAULT_DESTINATION
        url = self.page_url(itinerary.slug)
        return {
            "@context": SCHEMA_CONTEXT,
            "@type": "Product",
            "name": itinerary.title.strip(),
            "description": itinerary.meta_description
            or f"A {nights}-night luxury safari through {destinations}",
            "url": url,
            "brand": {"@type": "Brand", "name": BRAND_NAME, "url": self._site_url},
            "category": "Safari Tours",
            "image": image_urls(media, hero_image_id),
            "offers": {
                "@type": "Offer",
                "priceCurrency": itinerary.investment_level.currency or "USD",
                "price": itinerary.investment_level.from_price or 0,
                "priceValidUntil": price_valid_until(today),
                "availability": "https://schema.org/InStock",
                "url": url,
                "seller": {"@type": "TravelAgency", "name": BRAND_NAME, "url": self._site_url},
            },
            "additionalProperty": [
                {"@type": "PropertyValue", "name": "Duration", "value": f"{nights} nights"},
                {"@type": "PropertyValue", "name": "Destinations", "value": destinations},
            ],
        }

    def faq_page(self, itinerary: Itinerary) -> dict[str, Any] | None:
        """FAQPage from items with a real question and answer, or None."""
        entities = []
        for item in itinerary.faq_items:
            answer = rich_text_to_plain(item.answer)
            if not answer.strip() or _PLACEHOLDER.search(item.question) or _PLACEHOLDER.search(answer):
                continue
            entities.append(
                {
                    "@type": "Question",
                    "name": item.question,
                    "acceptedAnswer": {"@type": "Answer", "text": answer},
                }
            )
        dropped = len(itinerary.faq_items) - len(entities)
        if dropped:
            logger.info("%s:faq_page - Dropped %d placeholder or empty FAQ items", __name__, dropped)
        if not entities:
            return None
        return {"@context": SCHEMA_CONTEXT, "@type": "FAQPage", "mainEntity": entities}

    def breadcrumbs(self, itinerary: Itinerary) -> dict[str, Any]:
        trail = [
            ("Home", self._site_url),
            ("Safaris", self.listing_url),
            (itinerary.title.strip(), self.page_url(itinerary.slug)),
        ]
        return {
            "@context": SCHEMA_CONTEXT,
            "@type": "BreadcrumbList",
            "itemListElement": [
                {"@type": "ListItem", "position": position, "name": name, "item": item}
                for position, (name, item) in enumerate(trail, start=1)
            ],
        }
