"""
Per-row media processing.

Each pending status row is processed in isolation: whatever goes wrong with
one row is written to that row as ``failed`` and the next row proceeds.

Dependencies: itinerary_pipeline.boundary.store.CRUD
System role: Shared row lifecycle for image and video processing
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from itinerary_pipeline.boundary.store.CRUD.image_status_crud import ImageStatusCRUD
from itinerary_pipeline.core.exceptions import PipelineError, StoreError
from itinerary_pipeline.core.media.deduplicator import MediaDeduplicator, Resolution
from itinerary_pipeline.models.image_status import ImageStatus, ProcessingStatus
from itinerary_pipeline.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


@dataclass
class ChunkTally:
    processed: int = 0
    skipped: int = 0
    failed: int = 0

    def add(self, status: ProcessingStatus) -> None:
        if status == ProcessingStatus.COMPLETE:
            self.processed += 1
        elif status == ProcessingStatus.SKIPPED:
            self.skipped += 1
        else:
            self.failed += 1

    @property
    def total(self) -> int:
        return self.processed + self.skipped + self.failed


class MediaRowProcessor(ABC):
    """Runs status rows through the dedup protocol with per-row failure isolation."""

    def __init__(self, statuses: ImageStatusCRUD, deduplicator: MediaDeduplicator) -> None:
        self._statuses = statuses
        self._deduplicator = deduplicator

    @abstractmethod
    def resolve(self, row: ImageStatus, itinerary_id: str) -> Resolution:
        """Resolve one row's source reference to a media record."""

    def after_resolved(self, row: ImageStatus, resolution: Resolution, itinerary_id: str) -> None:
        """Hook run after a row is marked resolved."""

    def process_rows(self, rows: list[ImageStatus], itinerary_id: str) -> ChunkTally:
        tally = ChunkTally()
        for row in rows:
            tally.add(self.process_row(row, itinerary_id))
        return tally

    def process_row(self, row: ImageStatus, itinerary_id: str) -> ProcessingStatus:
        """
        Process one row end to end.

        A failure after the row is marked resolved never turns it into
        ``failed``: the media record exists and stays usable.

        Returns:
            The row's resulting status: COMPLETE, SKIPPED or FAILED
        """
        try:
            self._statuses.mark_processing(row.id)
            resolution = self.resolve(row, itinerary_id)
            self._statuses.mark_resolved(row.id, resolution.status, resolution.media_id)
        except Exception as e:  # pylint: disable=broad-except
            log_exception_with_context(
                logger,
                f"{__name__}:process_row - Row failed",
                e,
                row_id=row.id,
                source_ref=row.source_s3_key,
                job_id=row.job,
            )
            self._mark_failed(row, e)
            return ProcessingStatus.FAILED

        self._run_after_resolved(row, resolution, itinerary_id)
        return resolution.status

    def _run_after_resolved(self, row: ImageStatus, resolution: Resolution, itinerary_id: str) -> None:
        """Best effort; failures are logged, the row keeps its resolved status."""
        try:
            self.after_resolved(row, resolution, itinerary_id)
        except PipelineError as e:
            logger.warning(
                "%s:_run_after_resolved - Follow-up for row %s (media %s) failed: %s",
                __name__,
                row.id,
                resolution.media_id,
                e,
            )

    def _mark_failed(self, row: ImageStatus, error: Exception) -> None:
        try:
            self._statuses.mark_failed(row.id, error)
        except StoreError as mark_error:
            logger.error(
                "%s:_mark_failed - Could not mark row %s failed: %s", __name__, row.id, mark_error
            )
