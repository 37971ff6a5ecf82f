"""
Media model.

Global rehosted media record. ``source_s3_key`` is unique across the
whole store and is the deduplication key.

Dependencies: pydantic
System role: Store-level binary media record
"""

from pydantic import Field, field_validator

from itinerary_pipeline.models.base import StoreModel, relation_id


class Media(StoreModel):
    """Row of the ``media`` collection."""

    id: str
    source_s3_key: str
    url: str | None = None
    imgix_url: str | None = None
    original_s3_key: str | None = None
    mime_type: str | None = None
    filesize: int | None = None
    alt: str | None = None
    used_in_itineraries: list[str] = Field(default_factory=list)

    source_property: str | None = None
    source_segment_type: str | None = None
    source_segment_title: str | None = None
    source_day_index: int | None = None
    country: str | None = None

    media_type: str = "image"
    image_type: str | None = None
    quality: str | None = None
    is_hero: bool = False
    video_context: str | None = None
    labeling_status: str | None = None

    @field_validator("used_in_itineraries", mode="before")
    @classmethod
    def _collapse_relations(cls, value):
        if value is None:
            return []
        return [relation_id(item) for item in value]

    @property
    def public_url(self) -> str | None:
        return self.imgix_url or self.url
