"""
Image status model.

One row per (job, source reference). The rows form the append-only log
that media processing state and job counters are derived from.

Dependencies: pydantic
System role: Per-media processing log
"""

from datetime import datetime
from enum import Enum

from pydantic import field_validator

from itinerary_pipeline.models.base import StoreModel, relation_id


class ProcessingStatus(str, Enum):
    """Processing state of a single media reference within a job."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETE = "complete"
    SKIPPED = "skipped"
    FAILED = "failed"


RESOLVED_STATUSES = frozenset({ProcessingStatus.COMPLETE, ProcessingStatus.SKIPPED})


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


class MediaContext(StoreModel):
    """Where in the itinerary a media reference was found."""

    segment_type: str | None = None
    property_name: str | None = None
    segment_title: str | None = None
    day_index: int | None = None
    segment_index: int | None = None
    country: str | None = None
    video_context: str | None = None


class ImageStatus(MediaContext):
    """Row of the ``image-statuses`` collection."""

    id: str
    job: str
    source_s3_key: str
    status: ProcessingStatus = ProcessingStatus.PENDING
    media_type: MediaType = MediaType.IMAGE
    media_id: str | None = None
    error: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @field_validator("job", "media_id", mode="before")
    @classmethod
    def _collapse_relation(cls, value):
        return relation_id(value)

    @property
    def is_resolved(self) -> bool:
        """True when usable media exists for this reference."""
        return self.status in RESOLVED_STATUSES and bool(self.media_id)

    @property
    def is_video(self) -> bool:
        return self.media_type == MediaType.VIDEO

    @property
    def context(self) -> MediaContext:
        return MediaContext.model_validate(self.model_dump(include=set(MediaContext.model_fields)))
