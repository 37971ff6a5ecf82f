"""
Global media deduplication.

Media records are unique on their origin source reference across the whole
store. Resolving a reference follows an idempotent upsert protocol:

1. Look up the media record by source reference.
2. Hit: record this itinerary in the record's usage list (best effort) and
   reuse the record.
3. Miss: acquire the asset (download, upload) and create the record.
4. Create rejected by the unique constraint: a concurrent writer won. Look
   the record up again and continue as a hit.

No application-level locking is involved; the store's unique constraint is
the only coordination between concurrent workers.

Dependencies: itinerary_pipeline.boundary.store.CRUD.media_crud
System role: Core dedup contract shared by image and video processing
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable

from itinerary_pipeline.boundary.store.CRUD.media_crud import MediaCRUD
from itinerary_pipeline.core.exceptions import StoreError, UniqueConstraintError
from itinerary_pipeline.models.image_status import ProcessingStatus
from itinerary_pipeline.models.media import Media

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """
    Outcome of resolving one source reference.

    ``status`` is COMPLETE when this call created the record and SKIPPED
    when an existing record was reused.
    """

    media: Media
    status: ProcessingStatus
    recovered_conflict: bool = False

    @property
    def media_id(self) -> str:
        return self.media.id


class MediaDeduplicator:
    """Resolves source references to global media records."""

    def __init__(self, media: MediaCRUD) -> None:
        self._media = media

    def resolve(
        self,
        source_ref: str,
        itinerary_id: str,
        acquire: Callable[[], dict[str, Any]],
    ) -> Resolution:
        """
        Resolve ``source_ref`` to a media record, creating it if needed.

        Args:
            source_ref: Origin source reference (the dedup key)
            itinerary_id: Itinerary the reference was found in
            acquire: Rehosts the asset and returns the new record's fields;
                only called on a miss

        Returns:
            Resolution for the existing or newly created record

        Raises:
            MediaProcessingError: ``acquire`` could not rehost the asset
            StoreError: Lookup or create failed for a reason other than a conflict
        """
        existing = self._media.find_by_source_ref(source_ref)
        if existing is not None:
            logger.info("%s:resolve - Dedup hit %s -> %s", __name__, source_ref, existing.id)
            return Resolution(self._record_usage(existing, itinerary_id), ProcessingStatus.SKIPPED)

        data = acquire()
        try:
            created = self._media.create(data)
        except UniqueConstraintError:
            winner = self._media.find_by_source_ref(source_ref)
            if winner is None:
                raise
            logger.info(
                "%s:resolve - Lost create race for %s, reusing %s", __name__, source_ref, winner.id
            )
            return Resolution(
                self._record_usage(winner, itinerary_id),
                ProcessingStatus.SKIPPED,
                recovered_conflict=True,
            )

        logger.info("%s:resolve - Created media %s for %s", __name__, created.id, source_ref)
        return Resolution(created, ProcessingStatus.COMPLETE)

    def _record_usage(self, media: Media, itinerary_id: str) -> Media:
        """Append the itinerary to the usage list; failures are logged, not raised."""
        try:
            return self._media.add_usage(media, itinerary_id)
        except StoreError as e:
            logger.warning(
                "%s:_record_usage - Could not record usage of %s by %s: %s",
                __name__,
                media.id,
                itinerary_id,
                e,
            )
            return media
