"""
Counter reconciliation.

Job counters are written incrementally by concurrent chunk workers and can
drift. The image status log is authoritative: counters are recomputed by
grouping the job's rows by status and persisted only when they differ.

Dependencies: itinerary_pipeline.boundary.store.CRUD
System role: First step of finalization; runs before anything reads counters
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from itinerary_pipeline.boundary.store.CRUD.image_status_crud import ImageStatusCRUD
from itinerary_pipeline.boundary.store.CRUD.job_crud import JobCRUD
from itinerary_pipeline.models.image_status import ImageStatus, ProcessingStatus
from itinerary_pipeline.models.job import JobCounters

logger = logging.getLogger(__name__)


def compute_counters(rows: Iterable[ImageStatus]) -> JobCounters:
    """
    Derive job counters from status rows.

    Video rows count toward ``total_videos`` only, never toward the image
    totals.
    """
    counters = JobCounters()
    for row in rows:
        if row.is_video:
            counters.total_videos += 1
            continue
        counters.total_images += 1
        if row.status == ProcessingStatus.COMPLETE:
            counters.processed_images += 1
        elif row.status == ProcessingStatus.SKIPPED:
            counters.skipped_images += 1
        elif row.status == ProcessingStatus.FAILED:
            counters.failed_images += 1
    return counters


@dataclass
class ReconcileResult:
    counters: JobCounters
    drifted: bool = False
    changes: dict[str, tuple[int, int]] = field(default_factory=dict)


class CounterReconciler:
    """Repairs a job's cached counters from its image status rows."""

    def __init__(self, jobs: JobCRUD, statuses: ImageStatusCRUD) -> None:
        self._jobs = jobs
        self._statuses = statuses

    def reconcile(self, job_id: str, rows: list[ImageStatus] | None = None) -> ReconcileResult:
        """
        Recompute and, if needed, persist the job's counters.

        Args:
            job_id: Job to reconcile
            rows: The job's status rows, when the caller already loaded them

        Returns:
            ReconcileResult with the authoritative counters
        """
        job = self._jobs.get(job_id)
        if rows is None:
            rows = self._statuses.list_for_job(job_id)
        actual = compute_counters(rows)
        changes = job.counters.diff(actual)
        if not changes:
            logger.info("%s:reconcile - Job %s counters consistent", __name__, job_id)
            return ReconcileResult(counters=actual)

        logger.warning(
            "%s:reconcile - Job %s counter drift repaired: %s",
            __name__,
            job_id,
            ", ".join(f"{name} {before}->{after}" for name, (before, after) in changes.items()),
        )
        self._jobs.set_counters(job_id, actual)
        return ReconcileResult(counters=actual, drifted=True, changes=changes)
