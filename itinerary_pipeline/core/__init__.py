"""
Core business logic module.

Contains the pipeline phases (scraping, transform, media processing,
finalization) and the exception hierarchy they share.
"""

from itinerary_pipeline.core.exceptions import (
    BrowserLaunchError,
    InvalidPortalUrlError,
    ItineraryNotFoundError,
    JobNotFoundError,
    MediaDownloadError,
    MediaProcessingError,
    MediaUploadError,
    PipelineError,
    RecordNotFoundError,
    ScrapeError,
    StoreError,
    StoreRequestError,
    StoreUnavailableError,
    UniqueConstraintError,
    VideoConversionError,
)

__all__ = [
    "BrowserLaunchError",
    "InvalidPortalUrlError",
    "ItineraryNotFoundError",
    "JobNotFoundError",
    "MediaDownloadError",
    "MediaProcessingError",
    "MediaUploadError",
    "PipelineError",
    "RecordNotFoundError",
    "ScrapeError",
    "StoreError",
    "StoreRequestError",
    "StoreUnavailableError",
    "UniqueConstraintError",
    "VideoConversionError",
]
