"""
Itinerary document models.

An itinerary is a nested day → segment tree. Segments are a closed set of
block variants discriminated by ``blockType``.

Dependencies: pydantic
System role: Draft itinerary document written by intake and finalization
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import Field, field_validator

from itinerary_pipeline.models.base import StoreModel, relation_id


class _Block(StoreModel):
    images: list[str] = Field(default_factory=list)

    @field_validator("images", mode="before")
    @classmethod
    def _collapse_images(cls, value):
        return [relation_id(item) for item in value or []]


class StayBlock(_Block):
    block_type: Literal["stay"] = "stay"
    accommodation_name: str = ""
    title: str | None = None
    description: dict[str, Any] | None = None
    nights: int = 1
    location: str | None = None
    country: str | None = None
    inclusions: dict[str, Any] | None = None
    room_type: str | None = None


class ActivityBlock(_Block):
    block_type: Literal["activity"] = "activity"
    title: str = ""
    description: dict[str, Any] | None = None


class TransferBlock(_Block):
    block_type: Literal["transfer"] = "transfer"
    transfer_type: str = Field(default="transfer", alias="type")
    title: str = ""
    from_location: str | None = Field(default=None, alias="from")
    to_location: str | None = Field(default=None, alias="to")
    departure_time: str | None = None
    arrival_time: str | None = None
    description: dict[str, Any] | None = None


Segment = Annotated[
    Union[StayBlock, ActivityBlock, TransferBlock],
    Field(discriminator="block_type"),
]


class Day(StoreModel):
    day_number: int
    date: str | None = None
    title: str
    location: str | None = None
    segments: list[Segment] = Field(default_factory=list)


class Overview(StoreModel):
    summary: dict[str, Any] | None = None
    nights: int = 0
    countries: list[dict[str, str]] = Field(default_factory=list)
    highlights: list[dict[str, str]] = Field(default_factory=list)


class InvestmentLevel(StoreModel):
    from_price: float | None = None
    currency: str = "USD"
    includes: dict[str, Any] | None = None


class FaqItem(StoreModel):
    question: str
    answer: dict[str, Any]


class BlockerSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class PublishBlocker(StoreModel):
    reason: str
    severity: BlockerSeverity


class PublishChecklist(StoreModel):
    all_images_processed: bool = False
    no_failed_images: bool = False
    hero_image_selected: bool = False
    content_enhanced: bool = False
    schema_generated: bool = False
    schema_valid: bool = False
    meta_fields_filled: bool = False


class VersionSnapshot(StoreModel):
    version_number: int
    scraped_at: datetime | None = None
    title: str | None = None
    nights: int | None = None
    day_count: int | None = None


class ItinerarySource(StoreModel):
    itrvl_url: str | None = None
    last_scraped_at: datetime | None = None


class Itinerary(StoreModel):
    """Row of the ``itineraries`` collection."""

    id: str | None = None
    title: str
    slug: str
    itinerary_id: str
    status: str = "draft"

    days: list[Day] = Field(default_factory=list)
    overview: Overview = Field(default_factory=Overview)
    investment_level: InvestmentLevel = Field(default_factory=InvestmentLevel)
    faq_items: list[FaqItem] = Field(default_factory=list)
    meta_title: str | None = None
    meta_description: str | None = None

    hero_image: str | None = None
    hero_image_locked: bool = False
    hero_video: str | None = None
    hero_video_locked: bool = False
    images: list[str] = Field(default_factory=list)
    videos: list[str] = Field(default_factory=list)

    json_ld: Any = Field(default=None, alias="schema")
    schema_status: str | None = None
    publish_checklist: PublishChecklist = Field(default_factory=PublishChecklist)
    publish_blockers: list[PublishBlocker] = Field(default_factory=list)

    version: int = 1
    previous_versions: list[VersionSnapshot] = Field(default_factory=list)
    source: ItinerarySource = Field(default_factory=ItinerarySource)

    @field_validator("hero_image", "hero_video", mode="before")
    @classmethod
    def _collapse_hero(cls, value):
        return relation_id(value)

    @field_validator("images", "videos", mode="before")
    @classmethod
    def _collapse_media(cls, value):
        return [relation_id(item) for item in value or []]

    @property
    def nights(self) -> int:
        return self.overview.nights

    def snapshot(self) -> VersionSnapshot:
        """Summarise the current version before it is replaced by a re-scrape."""
        return VersionSnapshot(
            version_number=self.version,
            scraped_at=self.source.last_scraped_at,
            title=self.title,
            nights=self.overview.nights,
            day_count=len(self.days),
        )
