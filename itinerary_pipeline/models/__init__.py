"""
Pydantic models for store documents, phase events and scraper output.
"""

from itinerary_pipeline.models.base import StoreModel, relation_id
from itinerary_pipeline.models.events import (
    ChunkEvent,
    ChunkResult,
    FinalizeEvent,
    FinalizeResult,
    IntakeEvent,
    IntakeMode,
    IntakeResult,
)
from itinerary_pipeline.models.image_status import (
    RESOLVED_STATUSES,
    ImageStatus,
    MediaContext,
    MediaType,
    ProcessingStatus,
)
from itinerary_pipeline.models.itinerary import (
    ActivityBlock,
    BlockerSeverity,
    Day,
    FaqItem,
    InvestmentLevel,
    Itinerary,
    ItinerarySource,
    Overview,
    PublishBlocker,
    PublishChecklist,
    Segment,
    StayBlock,
    TransferBlock,
    VersionSnapshot,
)
from itinerary_pipeline.models.job import (
    MAX_PROVISIONAL_PROGRESS,
    Job,
    JobCounters,
    JobStatus,
    PipelinePhase,
)
from itinerary_pipeline.models.media import Media
from itinerary_pipeline.models.schema_report import SchemaStatus, SchemaValidationResult
from itinerary_pipeline.models.scrape_result import ObservedResponse, ScrapeResult, VideoReference

__all__ = [
    "ActivityBlock",
    "BlockerSeverity",
    "ChunkEvent",
    "ChunkResult",
    "Day",
    "FaqItem",
    "FinalizeEvent",
    "FinalizeResult",
    "ImageStatus",
    "IntakeEvent",
    "IntakeMode",
    "IntakeResult",
    "InvestmentLevel",
    "Itinerary",
    "ItinerarySource",
    "Job",
    "JobCounters",
    "JobStatus",
    "MAX_PROVISIONAL_PROGRESS",
    "Media",
    "MediaContext",
    "MediaType",
    "ObservedResponse",
    "PipelinePhase",
    "Overview",
    "ProcessingStatus",
    "PublishBlocker",
    "PublishChecklist",
    "RESOLVED_STATUSES",
    "SchemaStatus",
    "SchemaValidationResult",
    "ScrapeResult",
    "Segment",
    "StayBlock",
    "StoreModel",
    "TransferBlock",
    "VersionSnapshot",
    "VideoReference",
    "relation_id",
]
