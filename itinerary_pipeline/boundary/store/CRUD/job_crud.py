"""
Job CRUD operations.

Lifecycle transitions for ingestion jobs: phase changes, provisional
counter updates from chunk workers, completion and failure.

Dependencies: itinerary_pipeline.boundary.store.CRUD.base_crud
System role: Job persistence operations for pipeline tracking
"""

import logging
from datetime import datetime, timezone

from itinerary_pipeline.boundary.store.CRUD.base_crud import BaseCRUD
from itinerary_pipeline.boundary.store.store_client import StoreClient
from itinerary_pipeline.core.exceptions import JobNotFoundError
from itinerary_pipeline.models.job import (
    MAX_PROVISIONAL_PROGRESS,
    Job,
    JobCounters,
    JobStatus,
    PipelinePhase,
)
from itinerary_pipeline.observability.log_utils import truncate_error

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class JobCRUD(BaseCRUD[Job]):
    """
    CRUD operations for ingestion jobs.

    Counter writes made here are provisional: concurrent chunk workers
    read-modify-write the same job, so values can drift until the
    finalizer reconciles them from the image status log.
    """

    collection = "itinerary-jobs"

    def __init__(self, client: StoreClient) -> None:
        super().__init__(client, Job)

    def get(self, job_id: str) -> Job:
        """
        Retrieve a job, failing loudly when it does not exist.

        Raises:
            JobNotFoundError: No job with this id
        """
        job = self.get_by_id(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def start_phase(self, job_id: str, phase: PipelinePhase, **fields) -> Job:
        """Mark the job processing in ``phase``, patching any extra fields."""
        logger.info("%s:start_phase - Job %s entering %s", __name__, job_id, phase.value)
        return self.update(job_id, status=JobStatus.PROCESSING, current_phase=phase.value, **fields)

    def record_chunk(self, job_id: str, processed: int, skipped: int, failed: int) -> Job:
        """
        Add a chunk's outcome to the job's provisional counters.

        Progress is capped below 100; only the finalizer completes a job.
        """
        job = self.get(job_id)
        processed_images = job.processed_images + processed
        skipped_images = job.skipped_images + skipped
        failed_images = job.failed_images + failed
        progress = job.progress
        if job.total_images > 0:
            done = processed_images + skipped_images + failed_images
            progress = min(MAX_PROVISIONAL_PROGRESS, round(done / job.total_images * 100))
        return self.update(
            job_id,
            processed_images=processed_images,
            skipped_images=skipped_images,
            failed_images=failed_images,
            progress=progress,
        )

    def set_counters(self, job_id: str, counters: JobCounters) -> Job:
        return self.update(job_id, **counters.model_dump())

    def complete(self, job_id: str, notes: str | None, itinerary_id: str) -> Job:
        """Move the job to its terminal completed state."""
        job = self.get(job_id)
        completed_at = _now()
        duration = None
        if job.started_at is not None:
            duration = round((completed_at - job.started_at).total_seconds(), 3)
        return self.update(
            job_id,
            status=JobStatus.COMPLETED,
            current_phase=PipelinePhase.COMPLETE.value,
            phase4_completed_at=completed_at,
            completed_at=completed_at,
            duration=duration,
            progress=100,
            processed_itinerary=itinerary_id,
            notes=notes,
        )

    def fail(self, job_id: str, error: BaseException | str, phase: PipelinePhase) -> Job:
        """Move the job to failed, attributing the failure to ``phase``."""
        message = truncate_error(error)
        logger.error(
            "%s:fail - Job %s failed in %s: %s", __name__, job_id, phase.value, message
        )
        return self.update(
            job_id,
            status=JobStatus.FAILED,
            error_message=message,
            error_phase=phase.value,
            failed_at=_now(),
        )
