"""
Pipeline trigger and result payloads.

Each phase is started by a JSON event from the external step driver and
returns a JSON result the driver branches on.

Dependencies: pydantic
System role: Wire contracts for the Lambda entrypoints
"""

from enum import Enum

from pydantic import AliasChoices, Field

from itinerary_pipeline.models.base import StoreModel


class IntakeMode(str, Enum):
    CREATE = "create"
    UPDATE = "update"


class IntakeEvent(StoreModel):
    """Starts the pipeline for one portal URL."""

    job_id: str
    source_url: str = Field(validation_alias=AliasChoices("sourceUrl", "itrvlUrl", "source_url"))
    mode: IntakeMode = IntakeMode.CREATE


class IntakeResult(StoreModel):
    job_id: str
    itinerary_id: str
    mode: IntakeMode
    total_images: int
    total_videos: int
    version: int


class ChunkEvent(StoreModel):
    """One invocation of the media processor."""

    job_id: str
    itinerary_id: str
    chunk_index: int = 0
    process_videos_only: bool = False


class ChunkResult(StoreModel):
    """Processed delta plus the new pending count; the driver loops while remaining > 0."""

    job_id: str
    itinerary_id: str
    chunk_index: int
    remaining: int
    processed: int = 0
    skipped: int = 0
    failed: int = 0


class FinalizeEvent(StoreModel):
    job_id: str
    itinerary_id: str


class FinalizeResult(StoreModel):
    job_id: str
    itinerary_id: str
    final_status: str
    blockers: list[str] = Field(default_factory=list)
    hero_image: str | None = None
    hero_video: str | None = None
    schema_status: str | None = None
