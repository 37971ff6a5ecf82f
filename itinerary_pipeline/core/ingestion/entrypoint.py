"""
Ingestion pipeline composition.

Builds every phase from settings and exposes one method per pipeline
trigger. Clients are created once and shared by the phases.

Dependencies: All phase modules, configs
System role: Pipeline composition (wires only, no business logic)
"""

from itinerary_pipeline.boundary.aws.s3_media_client import S3MediaClient
from itinerary_pipeline.boundary.cdn.origin_cdn_client import OriginCdnClient
from itinerary_pipeline.boundary.store.CRUD import (
    ImageStatusCRUD,
    ItineraryCRUD,
    JobCRUD,
    MediaCRUD,
    NotificationCRUD,
)
from itinerary_pipeline.boundary.store.store_client import StoreClient
from itinerary_pipeline.configs.settings import Settings, get_settings
from itinerary_pipeline.core.finalization.finalizer import Finalizer
from itinerary_pipeline.core.ingestion.orchestrator import IntakeOrchestrator
from itinerary_pipeline.core.media.deduplicator import MediaDeduplicator
from itinerary_pipeline.core.media.image_processor import ImageChunkProcessor
from itinerary_pipeline.core.media.video_converter import HlsVideoConverter
from itinerary_pipeline.core.media.video_processor import VideoProcessor
from itinerary_pipeline.core.notifier import Notifier
from itinerary_pipeline.core.schema.generator import SchemaGenerator
from itinerary_pipeline.core.scraping.portal_scraper import PortalScraper
from itinerary_pipeline.models.events import (
    ChunkEvent,
    ChunkResult,
    FinalizeEvent,
    FinalizeResult,
    IntakeEvent,
    IntakeResult,
)


class IngestionPipeline:
    """Entry point for the three pipeline triggers: intake, media chunks and finalize."""

    def __init__(
        self,
        settings: Settings | None = None,
        store_client: StoreClient | None = None,
        cdn_client: OriginCdnClient | None = None,
        s3_client: S3MediaClient | None = None,
        scraper: PortalScraper | None = None,
        converter: HlsVideoConverter | None = None,
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            settings: Application settings (uses environment if None)
            store_client: Store client (tests pass one backed by a fake store)
            cdn_client: Origin CDN client
            s3_client: Owned media storage client
            scraper: Portal scraper
            converter: HLS to MP4 converter
        """
        self._settings = settings or get_settings()
        pipeline = self._settings.pipeline

        self._store = store_client or StoreClient(self._settings.store)
        cdn = cdn_client or OriginCdnClient(self._settings.media_storage)
        s3 = s3_client or S3MediaClient(self._settings.media_storage)

        jobs = JobCRUD(self._store)
        statuses = ImageStatusCRUD(self._store)
        media = MediaCRUD(self._store)
        itineraries = ItineraryCRUD(self._store)
        notifier = Notifier(NotificationCRUD(self._store))
        deduplicator = MediaDeduplicator(media)

        self.intake_orchestrator = IntakeOrchestrator(
            scraper=scraper
            or PortalScraper(
                self._settings.scraper,
                cdn_client=cdn,
                video_cdn_base=self._settings.media_storage.video_cdn_base,
            ),
            jobs=jobs,
            statuses=statuses,
            itineraries=itineraries,
            notifier=notifier,
        )
        self.image_processor = ImageChunkProcessor(
            statuses=statuses,
            jobs=jobs,
            deduplicator=deduplicator,
            cdn_client=cdn,
            s3_client=s3,
            notifier=notifier,
            chunk_size=pipeline.chunk_size,
        )
        self.video_processor = VideoProcessor(
            statuses=statuses,
            jobs=jobs,
            itineraries=itineraries,
            deduplicator=deduplicator,
            converter=converter
            or HlsVideoConverter(
                ffmpeg_path=pipeline.ffmpeg_path,
                timeout_seconds=pipeline.ffmpeg_timeout_seconds,
                min_bytes=pipeline.min_video_bytes,
            ),
            s3_client=s3,
        )
        self.finalizer = Finalizer(
            jobs=jobs,
            statuses=statuses,
            media=media,
            itineraries=itineraries,
            notifier=notifier,
            schema_generator=SchemaGenerator(pipeline.site_url, pipeline.itinerary_path_prefix),
            media_lookup_limit=pipeline.media_lookup_limit,
        )

    def intake(self, event: IntakeEvent) -> IntakeResult:
        return self.intake_orchestrator.run(event)

    def process_media(self, event: ChunkEvent) -> ChunkResult:
        """Image chunk, or the single video pass when ``process_videos_only`` is set."""
        if event.process_videos_only:
            return self.video_processor.process_videos(event)
        return self.image_processor.process_chunk(event)

    def finalize(self, event: FinalizeEvent) -> FinalizeResult:
        return self.finalizer.finalize(event)
