"""
Finalizer.

Last pipeline phase. Runs in strict order:

1. Reconcile job counters from the image status log
2. Link resolved media onto day segments
3. Select hero image and video unless locked
4. Generate and validate JSON-LD
5. Compute checklist and blockers
6. Write the itinerary in one update
7. Complete the job with the review outcome in its notes
8. Notify

Nothing is rolled back on failure. Every step is a function of store state,
so re-running the phase converges on the same document.

Dependencies: itinerary_pipeline.boundary.store.CRUD, itinerary_pipeline.core.schema
System role: Phase 4 of the ingestion pipeline
"""

import logging

from itinerary_pipeline.boundary.store.CRUD.image_status_crud import ImageStatusCRUD
from itinerary_pipeline.boundary.store.CRUD.itinerary_crud import ItineraryCRUD
from itinerary_pipeline.boundary.store.CRUD.job_crud import JobCRUD
from itinerary_pipeline.boundary.store.CRUD.media_crud import MediaCRUD
from itinerary_pipeline.core.exceptions import StoreError
from itinerary_pipeline.core.finalization.checklist import (
    build_blockers,
    build_checklist,
    outcome_notes,
    review_outcome,
)
from itinerary_pipeline.core.finalization.hero import select_hero_image, select_hero_video
from itinerary_pipeline.core.finalization.reconciler import CounterReconciler
from itinerary_pipeline.core.finalization.segment_linker import link_segments
from itinerary_pipeline.core.notifier import Notifier
from itinerary_pipeline.core.schema.generator import SchemaGenerator
from itinerary_pipeline.core.schema.validator import format_validation_result, validate_schema
from itinerary_pipeline.models.events import FinalizeEvent, FinalizeResult
from itinerary_pipeline.models.image_status import ImageStatus
from itinerary_pipeline.models.itinerary import Itinerary
from itinerary_pipeline.models.job import PipelinePhase
from itinerary_pipeline.models.media import Media
from itinerary_pipeline.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


def _resolved_ids(rows: list[ImageStatus], videos: bool) -> list[str]:
    ids = [row.media_id for row in rows if row.is_resolved and row.is_video == videos]
    return list(dict.fromkeys(ids))


class Finalizer:
    """
    Finalizes one job's itinerary.

    Usage:
        finalizer = Finalizer(jobs, statuses, media, itineraries, notifier, generator)
        result = finalizer.finalize(FinalizeEvent(job_id="1", itinerary_id="7"))
    """

    def __init__(
        self,
        jobs: JobCRUD,
        statuses: ImageStatusCRUD,
        media: MediaCRUD,
        itineraries: ItineraryCRUD,
        notifier: Notifier,
        schema_generator: SchemaGenerator,
        media_lookup_limit: int = 500,
    ) -> None:
        self._jobs = jobs
        self._statuses = statuses
        self._media = media
        self._itineraries = itineraries
        self._notifier = notifier
        self._schema_generator = schema_generator
        self._media_lookup_limit = media_lookup_limit
        self._reconciler = CounterReconciler(jobs, statuses)

    def finalize(self, event: FinalizeEvent) -> FinalizeResult:
        """
        Run the finalization sequence.

        Raises:
            Exception: Any failure, after the job has been marked failed
        """
        try:
            return self._finalize(event)
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:finalize - Finalization failed",
                e,
                job_id=event.job_id,
                itinerary_id=event.itinerary_id,
            )
            self._fail_job(event.job_id, e)
            raise

    def _fail_job(self, job_id: str, error: Exception) -> None:
        try:
            self._jobs.fail(job_id, error, PipelinePhase.FINALIZING)
        except StoreError as store_error:
            logger.error("%s:_fail_job - Could not mark job %s failed: %s", __name__, job_id, store_error)
            return
        self._notifier.job_failed(job_id, str(error))

    def _finalize(self, event: FinalizeEvent) -> FinalizeResult:
        job_id, itinerary_id = event.job_id, event.itinerary_id
        logger.info("%s:_finalize - Finalizing job %s, itinerary %s", __name__, job_id, itinerary_id)
        self._jobs.start_phase(job_id, PipelinePhase.FINALIZING)

        rows = self._statuses.list_for_job(job_id)
        counters = self._reconciler.reconcile(job_id, rows).counters

        itinerary = self._itineraries.get(itinerary_id)
        days = link_segments(itinerary.days, rows)

        media = self._load_media(itinerary_id, rows)
        hero_image = self._choose_hero_image(itinerary, media)
        hero_video = self._choose_hero_video(itinerary, media, itinerary_id)

        json_ld = self._schema_generator.generate(itinerary, media, hero_image)
        validation = validate_schema(json_ld)
        logger.info("%s:_finalize - %s", __name__, format_validation_result(validation))

        checklist = build_checklist(
            counters,
            hero_image,
            schema_generated=bool(json_ld),
            validation=validation,
            meta_title=itinerary.meta_title,
            meta_description=itinerary.meta_description,
        )
        blockers = build_blockers(checklist, counters, validation)
        outcome = review_outcome(blockers)

        self._itineraries.update(
            itinerary_id,
            days=days,
            images=_resolved_ids(rows, videos=False),
            videos=list(dict.fromkeys([*itinerary.videos, *_resolved_ids(rows, videos=True)])),
            hero_image=hero_image,
            hero_video=hero_video,
            json_ld=json_ld,
            schema_status=validation.status.value,
            publish_checklist=checklist,
            publish_blockers=blockers,
        )
        self._jobs.complete(job_id, outcome_notes(outcome, blockers), itinerary_id)
        self._notifier.job_completed(job_id, itinerary_id, itinerary.title, outcome.value)

        logger.info(
            "%s:_finalize - Job %s complete: %s with %d blocker(s)",
            __name__,
            job_id,
            outcome.value,
            len(blockers),
        )
        return FinalizeResult(
            job_id=job_id,
            itinerary_id=itinerary_id,
            final_status=outcome.value,
            blockers=[b.reason for b in blockers],
            hero_image=hero_image,
            hero_video=hero_video,
            schema_status=validation.status.value,
        )

    def _load_media(self, itinerary_id: str, rows: list[ImageStatus]) -> list[Media]:
        """
        Media used by the itinerary plus any the job resolved to.

        A dedup hit whose usage update failed is still picked up through the
        job's rows.
        """
        media = self._media.list_for_itinerary(itinerary_id, limit=self._media_lookup_limit)
        known = {m.id for m in media}
        for media_id in _resolved_ids(rows, videos=False) + _resolved_ids(rows, videos=True):
            if media_id in known:
                continue
            record = self._media.get_by_id(media_id)
            if record is not None:
                media.append(record)
                known.add(media_id)
        logger.info("%s:_load_media - %d media records for %s", __name__, len(media), itinerary_id)
        return media

    @staticmethod
    def _choose_hero_image(itinerary: Itinerary, media: list[Media]) -> str | None:
        if itinerary.hero_image_locked and itinerary.hero_image:
            logger.info("%s:_choose_hero_image - Hero image locked: %s", __name__, itinerary.hero_image)
            return itinerary.hero_image
        return select_hero_image(media)

    @staticmethod
    def _choose_hero_video(itinerary: Itinerary, media: list[Media], itinerary_id: str) -> str | None:
        if itinerary.hero_video_locked and itinerary.hero_video:
            logger.info("%s:_choose_hero_video - Hero video locked: %s", __name__, itinerary.hero_video)
            return itinerary.hero_video
        return select_hero_video(media, itinerary_id) or itinerary.hero_video
