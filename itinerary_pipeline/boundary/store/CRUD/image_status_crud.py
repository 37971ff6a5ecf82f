"""
Image status CRUD operations.

Queries and transitions on the per-media status log. Every transition
is a single-document patch, so re-running a transition is harmless.

Dependencies: itinerary_pipeline.boundary.store.CRUD.base_crud
System role: Persistence of the append-only media processing log
"""

from datetime import datetime, timezone
from typing import Any

from itinerary_pipeline.boundary.store.CRUD.base_crud import BaseCRUD
from itinerary_pipeline.boundary.store.store_client import StoreClient
from itinerary_pipeline.models.image_status import (
    ImageStatus,
    MediaContext,
    MediaType,
    ProcessingStatus,
)
from itinerary_pipeline.observability.log_utils import truncate_error


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ImageStatusCRUD(BaseCRUD[ImageStatus]):
    """CRUD operations for ``image-statuses`` rows."""

    collection = "image-statuses"

    def __init__(self, client: StoreClient) -> None:
        super().__init__(client, ImageStatus)

    @staticmethod
    def job_filter(
        job_id: str,
        status: ProcessingStatus | None = None,
        media_type: MediaType | None = None,
    ) -> dict[str, Any]:
        where: dict[str, Any] = {"job": {"equals": job_id}}
        if status is not None:
            where["status"] = {"equals": status.value}
        if media_type is not None:
            where["mediaType"] = {"equals": media_type.value}
        return where

    def list_for_job(self, job_id: str) -> list[ImageStatus]:
        """Every row of a job, in store order."""
        return list(self.iter_all(self.job_filter(job_id)))

    def list_pending(self, job_id: str, media_type: MediaType, limit: int) -> list[ImageStatus]:
        return self.find(self.job_filter(job_id, ProcessingStatus.PENDING, media_type), limit=limit)

    def count_pending(self, job_id: str, media_type: MediaType) -> int:
        return self.count(self.job_filter(job_id, ProcessingStatus.PENDING, media_type))

    def find_for_reference(self, job_id: str, source_ref: str) -> ImageStatus | None:
        return self.find_one({"job": {"equals": job_id}, "sourceS3Key": {"equals": source_ref}})

    def create_pending(
        self,
        job_id: str,
        source_ref: str,
        media_type: MediaType,
        context: MediaContext,
    ) -> tuple[ImageStatus, bool]:
        """
        Create the row for (job, source_ref) unless it already exists.

        Returns:
            (row, created) where created is False for a pre-existing row
        """
        existing = self.find_for_reference(job_id, source_ref)
        if existing is not None:
            return existing, False
        data = context.to_store()
        data.update(
            {
                "job": job_id,
                "sourceS3Key": source_ref,
                "mediaType": media_type.value,
                "status": ProcessingStatus.PENDING.value,
            }
        )
        return self.create(data), True

    def mark_processing(self, row_id: str) -> ImageStatus:
        return self.update(row_id, status=ProcessingStatus.PROCESSING, started_at=_now())

    def mark_resolved(self, row_id: str, status: ProcessingStatus, media_id: str) -> ImageStatus:
        """Record a usable media id; ``status`` is complete (new) or skipped (existing)."""
        return self.update(row_id, status=status, media_id=media_id, completed_at=_now())

    def mark_failed(self, row_id: str, error: BaseException | str) -> ImageStatus:
        return self.update(
            row_id,
            status=ProcessingStatus.FAILED,
            error=truncate_error(error),
            completed_at=_now(),
        )
