"""
Video processing.

Runs once per job rather than in chunks: every pending video row is
converted, rehosted and linked onto the itinerary. Deduplication follows
the same protocol as images, keyed by the HLS URL.

Dependencies: itinerary_pipeline.boundary (store, S3), ffmpeg
System role: Phase 3 media processing
"""

import logging
from datetime import datetime, timezone
from typing import Any

from itinerary_pipeline.boundary.aws.s3_media_client import S3MediaClient
from itinerary_pipeline.boundary.store.CRUD.image_status_crud import ImageStatusCRUD
from itinerary_pipeline.boundary.store.CRUD.itinerary_crud import ItineraryCRUD
from itinerary_pipeline.boundary.store.CRUD.job_crud import JobCRUD
from itinerary_pipeline.core.media.deduplicator import MediaDeduplicator, Resolution
from itinerary_pipeline.core.media.image_processor import media_fields
from itinerary_pipeline.core.media.row_processor import MediaRowProcessor
from itinerary_pipeline.core.media.storage_keys import video_storage_key
from itinerary_pipeline.core.media.video_converter import HlsVideoConverter
from itinerary_pipeline.models.events import ChunkEvent, ChunkResult
from itinerary_pipeline.models.image_status import ImageStatus, MediaType, ProcessingStatus
from itinerary_pipeline.models.job import PipelinePhase

logger = logging.getLogger(__name__)

VIDEO_CONTENT_TYPE = "video/mp4"
HERO_CONTEXT = "hero"


class VideoProcessor(MediaRowProcessor):
    """Processes every pending video row of a job."""

    def __init__(
        self,
        statuses: ImageStatusCRUD,
        jobs: JobCRUD,
        itineraries: ItineraryCRUD,
        deduplicator: MediaDeduplicator,
        converter: HlsVideoConverter,
        s3_client: S3MediaClient,
    ) -> None:
        super().__init__(statuses, deduplicator)
        self._jobs = jobs
        self._itineraries = itineraries
        self._converter = converter
        self._s3 = s3_client

    def resolve(self, row: ImageStatus, itinerary_id: str) -> Resolution:
        return self._deduplicator.resolve(
            row.source_s3_key,
            itinerary_id,
            acquire=lambda: self._rehost(row, itinerary_id),
        )

    def _rehost(self, row: ImageStatus, itinerary_id: str) -> dict[str, Any]:
        key = video_storage_key(row.source_s3_key, itinerary_id)
        context = row.video_context or HERO_CONTEXT
        size = None
        if self._s3.object_exists(key):
            logger.info("%s:_rehost - %s already uploaded, skipping conversion", __name__, key)
        else:
            body = self._converter.convert(row.source_s3_key)
            self._s3.upload_bytes(key, body, VIDEO_CONTENT_TYPE, row.source_s3_key)
            size = len(body)
        cdn_url = self._s3.imgix_url(key, params="")
        return media_fields(
            row,
            itinerary_id,
            key,
            cdn_url,
            VIDEO_CONTENT_TYPE,
            size,
            imgixUrl=cdn_url,
            alt=f"{context.capitalize()} video for itinerary {itinerary_id}",
            videoContext=context,
            labelingStatus="skipped",
        )

    def after_resolved(self, row: ImageStatus, resolution: Resolution, itinerary_id: str) -> None:
        """Attach the video to the itinerary; hero-context videos fill an empty, unlocked hero slot."""
        itinerary = self._itineraries.get(itinerary_id)
        if resolution.media_id in itinerary.videos:
            return
        fields: dict[str, Any] = {"videos": [*itinerary.videos, resolution.media_id]}
        is_hero = (row.video_context or HERO_CONTEXT) == HERO_CONTEXT
        if is_hero and not itinerary.hero_video and not itinerary.hero_video_locked:
            fields["hero_video"] = resolution.media_id
        self._itineraries.update(itinerary_id, **fields)

    def process_videos(self, event: ChunkEvent) -> ChunkResult:
        """
        Process all pending video rows of the job.

        Returns:
            ChunkResult with ``remaining`` as the pending video count afterwards
        """
        rows = list(
            self._statuses.iter_all(
                self._statuses.job_filter(event.job_id, ProcessingStatus.PENDING, MediaType.VIDEO)
            )
        )
        if not rows:
            logger.info("%s:process_videos - Job %s has no pending videos", __name__, event.job_id)
            return ChunkResult(
                job_id=event.job_id,
                itinerary_id=event.itinerary_id,
                chunk_index=event.chunk_index,
                remaining=0,
            )

        tally = self.process_rows(rows, event.itinerary_id)
        remaining = self._statuses.count_pending(event.job_id, MediaType.VIDEO)
        self._jobs.start_phase(
            event.job_id,
            PipelinePhase.FINALIZING,
            phase3_completed_at=datetime.now(timezone.utc),
        )
        logger.info(
            "%s:process_videos - Job %s videos: %d processed, %d skipped, %d failed",
            __name__,
            event.job_id,
            tally.processed,
            tally.skipped,
            tally.failed,
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
