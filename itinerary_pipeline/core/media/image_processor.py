"""
Chunked image processing.

Each invocation takes up to ``chunk_size`` pending image rows of a job,
resolves them through the dedup protocol and reports how many rows are
still pending. The external driver re-invokes while ``remaining > 0``.
Nothing is carried between invocations: the status rows are the cursor.

Dependencies: itinerary_pipeline.boundary (store, S3, origin CDN)
System role: Phase 2 media processing
"""

import logging
from datetime import datetime, timezone
from typing import Any

from itinerary_pipeline.boundary.aws.s3_media_client import S3MediaClient
from itinerary_pipeline.boundary.cdn.origin_cdn_client import OriginCdnClient
from itinerary_pipeline.boundary.store.CRUD.image_status_crud import ImageStatusCRUD
from itinerary_pipeline.boundary.store.CRUD.job_crud import JobCRUD
from itinerary_pipeline.core.media.deduplicator import MediaDeduplicator, Resolution
from itinerary_pipeline.core.media.row_processor import MediaRowProcessor
from itinerary_pipeline.core.media.storage_keys import alt_text, image_storage_key
from itinerary_pipeline.core.notifier import Notifier
from itinerary_pipeline.models.events import ChunkEvent, ChunkResult
from itinerary_pipeline.models.image_status import ImageStatus, MediaType
from itinerary_pipeline.models.job import PipelinePhase

logger = logging.getLogger(__name__)


def media_fields(
    row: ImageStatus,
    itinerary_id: str,
    storage_key: str,
    url: str,
    content_type: str,
    size: int | None,
    **extra: Any,
) -> dict[str, Any]:
    """Store fields for a new media record, carrying the row's context tags."""
    data = {
        "sourceS3Key": row.source_s3_key,
        "originalS3Key": storage_key,
        "url": url,
        "mimeType": content_type,
        "filesize": size,
        "alt": alt_text(row.source_s3_key),
        "usedInItineraries": [itinerary_id],
        "sourceProperty": row.property_name,
        "sourceSegmentType": row.segment_type,
        "sourceSegmentTitle": row.segment_title,
        "sourceDayIndex": row.day_index,
        "country": row.country,
        "mediaType": row.media_type.value,
    }
    data.update(extra)
    return {key: value for key, value in data.items() if value is not None}


class ImageChunkProcessor(MediaRowProcessor):
    """
    Processes one chunk of a job's pending images.

    Usage:
        processor = ImageChunkProcessor(statuses, jobs, deduplicator, cdn, s3, notifier, chunk_size=20)
        result = processor.process_chunk(ChunkEvent(job_id="1", itinerary_id="7"))
    """

    def __init__(
        self,
        statuses: ImageStatusCRUD,
        jobs: JobCRUD,
        deduplicator: MediaDeduplicator,
        cdn_client: OriginCdnClient,
        s3_client: S3MediaClient,
        notifier: Notifier,
        chunk_size: int = 20,
    ) -> None:
        super().__init__(statuses, deduplicator)
        self._jobs = jobs
        self._cdn = cdn_client
        self._s3 = s3_client
        self._notifier = notifier
        self._chunk_size = chunk_size

    def resolve(self, row: ImageStatus, itinerary_id: str) -> Resolution:
        return self._deduplicator.resolve(
            row.source_s3_key,
            itinerary_id,
            acquire=lambda: self._rehost(row, itinerary_id),
        )

    def _rehost(self, row: ImageStatus, itinerary_id: str) -> dict[str, Any]:
        """Download from the origin CDN and upload to owned storage."""
        asset = self._cdn.download(row.source_s3_key)
        key = image_storage_key(row.source_s3_key, itinerary_id)
        url = self._s3.upload_bytes(key, asset.body, asset.content_type, row.source_s3_key)
        return media_fields(
            row,
            itinerary_id,
            key,
            url,
            asset.content_type,
            len(asset.body),
            imgixUrl=self._s3.imgix_url(key),
            labelingStatus="pending",
        )

    def process_chunk(self, event: ChunkEvent) -> ChunkResult:
        """
        Process up to ``chunk_size`` pending image rows.

        A job with no pending rows returns ``remaining=0`` without writing
        anything.

        Returns:
            ChunkResult with this chunk's tallies and the new pending count
        """
        pending = self._statuses.list_pending(event.job_id, MediaType.IMAGE, limit=self._chunk_size)
        if not pending:
            logger.info("%s:process_chunk - Job %s has no pending images", __name__, event.job_id)
            return ChunkResult(
                job_id=event.job_id,
                itinerary_id=event.itinerary_id,
                chunk_index=event.chunk_index,
                remaining=0,
            )

        logger.info(
            "%s:process_chunk - Chunk %d: %d pending rows for job %s",
            __name__,
            event.chunk_index,
            len(pending),
            event.job_id,
        )
        tally = self.process_rows(pending, event.itinerary_id)
        self._jobs.record_chunk(event.job_id, tally.processed, tally.skipped, tally.failed)

        remaining = self._statuses.count_pending(event.job_id, MediaType.IMAGE)
        if remaining == 0:
            self._finish_images(event)

        logger.info(
            "%s:process_chunk - Chunk %d done: %d processed, %d skipped, %d failed, %d remaining",
            __name__,
            event.chunk_index,
            tally.processed,
            tally.skipped,
            tally.failed,
            remaining,
        )
        return ChunkResult(
            job_id=event.job_id,
            itinerary_id=event.itinerary_id,
            chunk_index=event.chunk_index,
            remaining=remaining,
            processed=tally.processed,
            skipped=tally.skipped,
            failed=tally.failed,
        )

    def _finish_images(self, event: ChunkEvent) -> None:
        job = self._jobs.start_phase(
            event.job_id,
            PipelinePhase.VIDEO_PROCESSING,
            phase2_completed_at=datetime.now(timezone.utc),
        )
        self._notifier.images_processed(
            event.job_id,
            event.itinerary_id,
            job.processed_images + job.skipped_images,
            job.failed_images,
        )
