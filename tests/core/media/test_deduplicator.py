"""
Tests for global media deduplication.
"""

from unittest.mock import MagicMock

import pytest

from itinerary_pipeline.core.exceptions import StoreUnavailableError, UniqueConstraintError
from itinerary_pipeline.core.media.deduplicator import MediaDeduplicator
from itinerary_pipeline.core.media.storage_keys import (
    alt_text,
    image_storage_key,
    source_filename,
    video_storage_key,
)
from itinerary_pipeline.models.image_status import ProcessingStatus


def media_data(source_ref: str, itinerary_id: str) -> dict:
    return {"sourceS3Key": source_ref, "url": f"https://s3.test/{source_ref}", "usedInItineraries": [itinerary_id]}


class TestMediaDeduplicator:
    """Test suite for the lookup, acquire, create, recover protocol."""

    def test_miss_should_acquire_and_create(self, fake_store, deduplicator: MediaDeduplicator) -> None:
        """Should rehost on a miss and report COMPLETE."""
        acquire = MagicMock(return_value=media_data("a.jpg", "it-1"))

        resolution = deduplicator.resolve("a.jpg", "it-1", acquire)

        acquire.assert_called_once()
        assert resolution.status == ProcessingStatus.COMPLETE
        assert len(fake_store.docs("media")) == 1

    def test_hit_across_itineraries_should_reuse_record(self, fake_store, deduplicator: MediaDeduplicator) -> None:
        """Should keep one record per source reference across jobs."""
        first = deduplicator.resolve("a.jpg", "it-1", lambda: media_data("a.jpg", "it-1"))
        acquire = MagicMock()

        second = deduplicator.resolve("a.jpg", "it-2", acquire)

        acquire.assert_not_called()
        assert second.status == ProcessingStatus.SKIPPED
        assert second.media_id == first.media_id
        assert len(fake_store.docs("media")) == 1
        assert fake_store.docs("media")[0]["usedInItineraries"] == ["it-1", "it-2"]

    def test_lost_create_race_should_reuse_winner(self, fake_store, deduplicator: MediaDeduplicator) -> None:
        """Should recover from a unique conflict by re-reading the winner."""
        winner = {}

        def concurrent_writer(collection: str, data: dict) -> None:
            if collection == "media" and not winner:
                winner.update(fake_store.insert("media", media_data(data["sourceS3Key"], "it-other")))

        fake_store.before_create = concurrent_writer

        resolution = deduplicator.resolve("a.jpg", "it-1", lambda: media_data("a.jpg", "it-1"))

        assert resolution.recovered_conflict is True
        assert resolution.status == ProcessingStatus.SKIPPED
        assert resolution.media_id == winner["id"]
        assert resolution.media.used_in_itineraries == ["it-other", "it-1"]
        assert len(fake_store.docs("media")) == 1

    def test_conflict_without_winner_should_propagate(self, media_crud) -> None:
        """Should re-raise when the conflicting record cannot be found."""
        media = MagicMock(wraps=media_crud)
        media.find_by_source_ref.return_value = None
        media.create.side_effect = UniqueConstraintError("conflict", status_code=409)

        with pytest.raises(UniqueConstraintError):
            MediaDeduplicator(media).resolve("a.jpg", "it-1", lambda: media_data("a.jpg", "it-1"))

    def test_usage_update_failure_should_not_fail_hit(self, fake_store, deduplicator: MediaDeduplicator) -> None:
        """Should still resolve a hit when recording usage fails."""
        fake_store.insert("media", {"id": "m1", "sourceS3Key": "a.jpg", "usedInItineraries": ["it-1"]})
        fake_store.fail_updates["media"] = StoreUnavailableError("down", status_code=503)

        resolution = deduplicator.resolve("a.jpg", "it-2", MagicMock())

        assert resolution.media_id == "m1"
        assert resolution.status == ProcessingStatus.SKIPPED


class TestStorageKeys:
    """Test suite for deterministic storage keys."""

    def test_image_key_should_be_stable_and_scoped(self) -> None:
        """Should derive the same key for the same inputs."""
        key = image_storage_key("origin/Camp Photo.jpg", "it-1")

        assert key == image_storage_key("origin/Camp Photo.jpg", "it-1")
        assert key.startswith("media/originals/it-1/")
        assert key.endswith("-Camp_Photo.jpg")
        assert key != image_storage_key("other/Camp Photo.jpg", "it-1")

    def test_video_key_should_use_mp4_suffix(self) -> None:
        """Should place videos under the itinerary's videos prefix."""
        key = video_storage_key("https://video.test/hls/a.m3u8", "it-1")

        assert key.startswith("media/originals/it-1/videos/")
        assert key.endswith(".mp4")

    def test_filename_and_alt_text_should_be_readable(self) -> None:
        """Should strip URL parts and humanise separators."""
        assert source_filename("https://cdn.test/a/b/lion-pride_01.jpg?w=1") == "lion-pride_01.jpg"
        assert alt_text("origin/lion-pride_01.jpg") == "lion pride 01"
        assert source_filename("dir/") == "dir"
