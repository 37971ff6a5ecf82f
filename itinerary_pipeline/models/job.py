"""
Ingestion job model.

Dependencies: pydantic
System role: Unit-of-work record tracking one itinerary ingestion run
"""

from datetime import datetime
from enum import Enum

from pydantic import Field

from itinerary_pipeline.models.base import StoreModel

MAX_PROVISIONAL_PROGRESS = 99


class JobStatus(str, Enum):
    """Pipeline lifecycle of a job."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class PipelinePhase(str, Enum):
    """Phase names recorded as the job's current phase and as the failing phase."""

    INTAKE = "intake"
    SCRAPING = "scraping"
    IMAGE_PROCESSING = "image_processing"
    VIDEO_PROCESSING = "video_processing"
    FINALIZING = "finalizing"
    COMPLETE = "complete"


class JobCounters(StoreModel):
    """Media counters derivable from the job's image status rows."""

    total_images: int = 0
    processed_images: int = 0
    skipped_images: int = 0
    failed_images: int = 0
    total_videos: int = 0

    def diff(self, other: "JobCounters") -> dict[str, tuple[int, int]]:
        """Return ``{field: (self_value, other_value)}`` for every differing field."""
        return {
            name: (getattr(self, name), getattr(other, name))
            for name in type(self).model_fields
            if getattr(self, name) != getattr(other, name)
        }


class Job(StoreModel):
    """
    Ingestion job as stored in the ``itinerary-jobs`` collection.

    Counters on the job are a cache written incrementally by concurrent
    chunk workers. They only become authoritative after reconciliation.
    """

    id: str
    status: JobStatus = JobStatus.PENDING
    current_phase: str | None = None
    itrvl_url: str | None = None
    itinerary_id: str | None = None
    processed_itinerary: str | None = None

    total_images: int = 0
    processed_images: int = 0
    skipped_images: int = 0
    failed_images: int = 0
    total_videos: int = 0
    progress: int = Field(default=0, ge=0, le=100)

    notes: str | None = None
    error_message: str | None = None
    error_phase: str | None = None

    started_at: datetime | None = None
    phase1_completed_at: datetime | None = None
    phase2_completed_at: datetime | None = None
    phase3_completed_at: datetime | None = None
    phase4_completed_at: datetime | None = None
    completed_at: datetime | None = None
    failed_at: datetime | None = None
    duration: float | None = None

    @property
    def counters(self) -> JobCounters:
        return JobCounters(
            total_images=self.total_images,
            processed_images=self.processed_images,
            skipped_images=self.skipped_images,
            failed_images=self.failed_images,
            total_videos=self.total_videos,
        )
