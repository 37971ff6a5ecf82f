"""
Intake orchestration.

Phase 1 of the pipeline: scrape the portal, transform the capture into a
draft itinerary, create or re-version the itinerary document and seed one
image status row per discovered media reference.

Re-running intake for the same job is safe: status rows are created only
when missing and an existing itinerary is re-versioned rather than
duplicated.

Dependencies: itinerary_pipeline.core.scraping, itinerary_pipeline.core.transform,
    itinerary_pipeline.boundary.store.CRUD
System role: Phase 1 of the ingestion pipeline
"""

import logging
from datetime import datetime, timezone

from itinerary_pipeline.boundary.store.CRUD.image_status_crud import ImageStatusCRUD
from itinerary_pipeline.boundary.store.CRUD.itinerary_crud import ItineraryCRUD
from itinerary_pipeline.boundary.store.CRUD.job_crud import JobCRUD
from itinerary_pipeline.core.exceptions import StoreError
from itinerary_pipeline.core.notifier import Notifier
from itinerary_pipeline.core.scraping.portal_scraper import PortalScraper
from itinerary_pipeline.core.transform.itinerary_transformer import (
    MediaSeed,
    build_media_seeds,
    transform_itinerary,
)
from itinerary_pipeline.models.events import IntakeEvent, IntakeMode, IntakeResult
from itinerary_pipeline.models.image_status import MediaType
from itinerary_pipeline.models.itinerary import Itinerary, PublishChecklist
from itinerary_pipeline.models.job import PipelinePhase
from itinerary_pipeline.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


class IntakeOrchestrator:
    """
    Runs the intake phase for one job.

    Usage:
        orchestrator = IntakeOrchestrator(scraper, jobs, statuses, itineraries, notifier)
        result = orchestrator.run(IntakeEvent(job_id="1", source_url=url))
    """

    def __init__(
        self,
        scraper: PortalScraper,
        jobs: JobCRUD,
        statuses: ImageStatusCRUD,
        itineraries: ItineraryCRUD,
        notifier: Notifier,
    ) -> None:
        self._scraper = scraper
        self._jobs = jobs
        self._statuses = statuses
        self._itineraries = itineraries
        self._notifier = notifier

    def run(self, event: IntakeEvent) -> IntakeResult:
        """
        Scrape, transform, persist the draft and seed status rows.

        Raises:
            Exception: Any failure, after the job has been marked failed
                with the phase it failed in
        """
        phase = PipelinePhase.SCRAPING
        try:
            self._jobs.start_phase(
                event.job_id,
                PipelinePhase.SCRAPING,
                started_at=datetime.now(timezone.utc),
                itrvl_url=event.source_url,
            )
            scrape = self._scraper.scrape(event.source_url)
            scraped_at = datetime.now(timezone.utc)
            self._jobs.update(event.job_id, phase1_completed_at=scraped_at, itinerary_id=scrape.itinerary_id)

            phase = PipelinePhase.INTAKE
            draft = transform_itinerary(scrape.raw_itinerary, event.source_url, scraped_at=scraped_at)
            itinerary, mode = self._save_itinerary(draft, event.mode)

            seeds = build_media_seeds(scrape)
            total_images, total_videos = self._seed_statuses(event.job_id, seeds)
            self._jobs.start_phase(
                event.job_id,
                PipelinePhase.IMAGE_PROCESSING,
                processed_itinerary=itinerary.id,
                total_images=total_images,
                total_videos=total_videos,
                processed_images=0,
                skipped_images=0,
                failed_images=0,
                progress=0,
            )
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:run - Intake failed",
                e,
                job_id=event.job_id,
                source_url=event.source_url,
                phase=phase.value,
            )
            self._fail_job(event.job_id, e, phase)
            raise

        self._notifier.job_started(event.job_id, itinerary.title)
        logger.info(
            "%s:run - Job %s seeded %d images and %d videos for itinerary %s (%s, v%d)",
            __name__,
            event.job_id,
            total_images,
            total_videos,
            itinerary.id,
            mode.value,
            itinerary.version,
        )
        return IntakeResult(
            job_id=event.job_id,
            itinerary_id=itinerary.id,
            mode=mode,
            total_images=total_images,
            total_videos=total_videos,
            version=itinerary.version,
        )

    def _save_itinerary(self, draft: Itinerary, requested: IntakeMode) -> tuple[Itinerary, IntakeMode]:
        """
        Create the draft, or re-version the itinerary already ingested from
        the same portal itinerary.

        An existing itinerary always wins over the requested mode, so a
        repeated create never duplicates the document.
        """
        existing = self._itineraries.find_by_upstream_id(draft.itinerary_id)
        if existing is None:
            if requested == IntakeMode.UPDATE:
                logger.warning(
                    "%s:_save_itinerary - Update requested but %s not found, creating",
                    __name__,
                    draft.itinerary_id,
                )
            return self._itineraries.create_draft(draft), IntakeMode.CREATE

        if requested == IntakeMode.CREATE:
            logger.info(
                "%s:_save_itinerary - %s already exists as %s, updating",
                __name__,
                draft.itinerary_id,
                existing.id,
            )
        return self._itineraries.update(existing.id, **self._reversioned_fields(draft, existing)), IntakeMode.UPDATE

    @staticmethod
    def _reversioned_fields(draft: Itinerary, existing: Itinerary) -> dict:
        """Fields replacing ``existing`` with ``draft`` as its next version; locked heroes survive."""
        fields = {name: getattr(draft, name) for name in type(draft).model_fields if name not in ("id", "version")}
        fields.update(
            version=existing.version + 1,
            previous_versions=[*existing.previous_versions, existing.snapshot()],
            hero_image=existing.hero_image if existing.hero_image_locked else None,
            hero_image_locked=existing.hero_image_locked,
            hero_video=existing.hero_video if existing.hero_video_locked else None,
            hero_video_locked=existing.hero_video_locked,
            publish_checklist=PublishChecklist(
                hero_image_selected=bool(existing.hero_image_locked and existing.hero_image),
            ),
            publish_blockers=[],
        )
        return fields

    def _seed_statuses(self, job_id: str, seeds: list[MediaSeed]) -> tuple[int, int]:
        """Create missing status rows; returns (image count, video count)."""
        created = 0
        for seed in seeds:
            _, is_new = self._statuses.create_pending(job_id, seed.source_ref, seed.media_type, seed.context)
            created += is_new
        total_videos = sum(1 for seed in seeds if seed.media_type == MediaType.VIDEO)
        logger.info(
            "%s:_seed_statuses - %d of %d status rows created for job %s",
            __name__,
            created,
            len(seeds),
            job_id,
        )
        return len(seeds) - total_videos, total_videos

    def _fail_job(self, job_id: str, error: Exception, phase: PipelinePhase) -> None:
        try:
            self._jobs.fail(job_id, error, phase)
        except StoreError as store_error:
            logger.error("%s:_fail_job - Could not mark job %s failed: %s", __name__, job_id, store_error)
            return
        self._notifier.job_failed(job_id, str(error))
