"""
Tests for the Finalizer against the in-memory store.
"""

import pytest

from itinerary_pipeline.core.exceptions import ItineraryNotFoundError
from itinerary_pipeline.core.finalization import Finalizer
from itinerary_pipeline.core.schema import SchemaGenerator
from itinerary_pipeline.core.transform import transform_itinerary
from itinerary_pipeline.models.events import FinalizeEvent

STAY = {"segmentType": "stay", "propertyName": "Ol Donyo Lodge", "segmentTitle": "Ol Donyo Lodge"}
ACTIVITY = {"segmentType": "activity", "propertyName": "Horseback Safari", "segmentTitle": "Horseback Safari"}


@pytest.fixture
def finalizer(jobs, statuses, media_crud, itineraries, notifier) -> Finalizer:
    """Provide a Finalizer wired to the in-memory store."""
    return Finalizer(jobs, statuses, media_crud, itineraries, notifier, SchemaGenerator("https://kiuli.test"))


@pytest.fixture
def itinerary_id(itineraries, raw_scrape) -> str:
    """Provide a saved draft itinerary built from the sample scrape."""
    return itineraries.create_draft(transform_itinerary(raw_scrape, "https://portal.test/portal/k/itin-123")).id


@pytest.fixture
def job_id(fake_store, make_job, make_status, itinerary_id) -> str:
    """Provide a job whose three images resolved, with drifted counters."""
    for media_id, ref, extra, used_in in [
        ("m1", "origin/oldonyo-1.jpg", {"quality": "high", "imageType": "wildlife"}, [itinerary_id]),
        ("m2", "origin/oldonyo-2.jpg", {}, ["it-other"]),
        ("m3", "origin/horse.jpg", {}, [itinerary_id]),
    ]:
        fake_store.insert(
            "media",
            {"id": media_id, "sourceS3Key": ref, "imgixUrl": f"https://cdn.test/{media_id}.jpg", "usedInItineraries": used_in, **extra},
        )
    job = make_job(totalImages=3, processedImages=1, currentPhase="finalizing")
    make_status(job, "origin/oldonyo-1.jpg", status="complete", mediaId="m1", **STAY)
    make_status(job, "origin/oldonyo-2.jpg", status="skipped", mediaId="m2", **STAY)
    make_status(job, "origin/horse.jpg", status="complete", mediaId="m3", **ACTIVITY)
    return job


class TestFinalizer:
    """Test suite for the finalization sequence."""

    def test_finalize_should_produce_review_ready_itinerary(
        self, fake_store, finalizer, job_id, itinerary_id
    ) -> None:
        """Should link media, pick a hero, validate schema and complete the job."""
        result = finalizer.finalize(FinalizeEvent(job_id=job_id, itinerary_id=itinerary_id))

        assert result.final_status == "ready_for_review"
        assert result.blockers == ["Content not yet enhanced (use Enhance buttons)"]
        assert result.hero_image == "m1"
        assert result.schema_status == "pass"

        itinerary = fake_store.get_by_id("itineraries", itinerary_id)
        assert itinerary["days"][0]["segments"][1]["images"] == ["m1", "m2"]
        assert itinerary["days"][1]["segments"][0]["images"] == ["m3"]
        assert itinerary["images"] == ["m1", "m2", "m3"]
        assert itinerary["heroImage"] == "m1"
        assert itinerary["schemaStatus"] == "pass"
        assert [block["@type"] for block in itinerary["schema"]] == ["Product", "FAQPage", "BreadcrumbList"]
        assert "https://cdn.test/m2.jpg" in itinerary["schema"][0]["image"]
        assert itinerary["publishChecklist"]["allImagesProcessed"] is True
        assert itinerary["publishBlockers"] == [
            {"reason": "Content not yet enhanced (use Enhance buttons)", "severity": "warning"}
        ]

    def test_finalize_should_reconcile_and_complete_job(self, fake_store, finalizer, job_id, itinerary_id) -> None:
        """Should repair counters and write the terminal job state."""
        finalizer.finalize(FinalizeEvent(job_id=job_id, itinerary_id=itinerary_id))

        job = fake_store.get_by_id("itinerary-jobs", job_id)
        assert (job["processedImages"], job["skippedImages"], job["failedImages"]) == (2, 1, 0)
        assert job["status"] == "completed"
        assert job["currentPhase"] == "complete"
        assert job["progress"] == 100
        assert job["processedItinerary"] == itinerary_id
        assert job["notes"] == "Final status: ready_for_review. Blockers: Content not yet enhanced (use Enhance buttons)"
        notification = fake_store.docs("notifications")[-1]
        assert notification["type"] == "success"
        assert notification["message"] == "Completed: Kenya Highlights is ready for review"

    def test_unprocessed_images_should_need_attention(
        self, fake_store, finalizer, job_id, itinerary_id, make_status
    ) -> None:
        """Should surface stuck and failed rows as error blockers."""
        make_status(job_id, "origin/stuck.jpg", status="processing")
        make_status(job_id, "origin/broken.jpg", status="failed", error="HTTP 404")

        result = finalizer.finalize(FinalizeEvent(job_id=job_id, itinerary_id=itinerary_id))

        assert result.final_status == "needs_attention"
        assert result.blockers[:2] == ["2 images not yet processed", "1 images failed to process"]
        assert fake_store.docs("notifications")[-1]["message"] == "Completed: Kenya Highlights needs attention"

    def test_locked_hero_should_be_kept(self, fake_store, finalizer, job_id, itinerary_id) -> None:
        """Should not reselect a locked hero image."""
        fake_store.update("itineraries", itinerary_id, {"heroImage": "m3", "heroImageLocked": True})

        result = finalizer.finalize(FinalizeEvent(job_id=job_id, itinerary_id=itinerary_id))

        assert result.hero_image == "m3"
        assert fake_store.get_by_id("itineraries", itinerary_id)["heroImage"] == "m3"

    def test_rerun_should_converge(self, fake_store, finalizer, job_id, itinerary_id) -> None:
        """Should produce the same itinerary and result when run twice."""
        event = FinalizeEvent(job_id=job_id, itinerary_id=itinerary_id)

        first = finalizer.finalize(event)
        first_doc = fake_store.get_by_id("itineraries", itinerary_id)
        second = finalizer.finalize(event)

        assert second == first
        assert fake_store.get_by_id("itineraries", itinerary_id) == first_doc

    def test_missing_itinerary_should_fail_job(self, fake_store, finalizer, job_id) -> None:
        """Should mark the job failed in finalizing and re-raise."""
        with pytest.raises(ItineraryNotFoundError):
            finalizer.finalize(FinalizeEvent(job_id=job_id, itinerary_id="missing"))

        job = fake_store.get_by_id("itinerary-jobs", job_id)
        assert job["status"] == "failed"
        assert job["errorPhase"] == "finalizing"
        assert "missing" in job["errorMessage"]
        assert fake_store.docs("notifications")[-1]["type"] == "error"
