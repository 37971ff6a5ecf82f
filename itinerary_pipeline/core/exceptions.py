"""
Exception hierarchy for the itinerary ingestion pipeline.

Errors are grouped by how the pipeline reacts to them: transient store
failures are retried, permanent request errors surface immediately,
per-media failures are recorded on their status row, uniqueness conflicts
are recovered by re-reading, and phase-fatal errors fail the job.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the pipeline
"""

from typing import Any


class PipelineError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class StoreError(PipelineError):
    """Base exception for document store failures."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        collection: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if status_code is not None:
            details["status_code"] = status_code
        if collection:
            details["collection"] = collection
        self.status_code = status_code
        self.collection = collection
        super().__init__(message, details)


class StoreUnavailableError(StoreError):
    """Raised on 5xx responses and network failures. Retried with backoff."""


class StoreRequestError(StoreError):
    """Raised on 4xx responses. Permanent, never retried."""


class UniqueConstraintError(StoreRequestError):
    """Raised when a create violates a unique field in the store."""


class RecordNotFoundError(PipelineError):
    """Raised when a required store record is missing."""

    def __init__(self, collection: str, record_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details.update({"collection": collection, "id": record_id})
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"{collection} record not found: {record_id}", details)


class JobNotFoundError(RecordNotFoundError):
    """Raised when an ingestion job cannot be found."""

    def __init__(self, job_id: str) -> None:
        super().__init__("itinerary-jobs", job_id)


class ItineraryNotFoundError(RecordNotFoundError):
    """Raised when an itinerary document cannot be found."""

    def __init__(self, itinerary_id: str) -> None:
        super().__init__("itineraries", itinerary_id)


# ---------------------------------------------------------------------------
# Scraping
# ---------------------------------------------------------------------------


class ScrapeError(PipelineError):
    """
    Raised when the expected portal responses were not captured.

    Carries every response observed during the attempt so operators can see
    whether the portal renamed an endpoint.
    """

    def __init__(
        self,
        message: str,
        observed_responses: list[dict[str, Any]] | None = None,
        suggestions: dict[str, list[str]] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        self.observed_responses = observed_responses or []
        self.suggestions = suggestions or {}
        details["observed_count"] = len(self.observed_responses)
        if self.suggestions:
            details["suggestions"] = self.suggestions
        super().__init__(message, details)


class BrowserLaunchError(PipelineError):
    """Raised when the headless browser cannot start. Not retried."""


class InvalidPortalUrlError(PipelineError):
    """Raised when a portal URL carries no access key or itinerary id."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Invalid portal URL: {url}", {"url": url})


# ---------------------------------------------------------------------------
# Media
# ---------------------------------------------------------------------------


class MediaProcessingError(PipelineError):
    """Base exception for a single media reference that could not be rehosted."""

    def __init__(self, message: str, source_ref: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["source_ref"] = source_ref
        self.source_ref = source_ref
        super().__init__(message, details)


class MediaDownloadError(MediaProcessingError):
    """Raised when the origin CDN download fails."""


class MediaUploadError(MediaProcessingError):
    """Raised when the upload to owned storage fails."""


class VideoConversionError(MediaProcessingError):
    """Raised when HLS to MP4 conversion fails or yields an unusable file."""
