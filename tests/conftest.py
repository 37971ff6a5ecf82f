"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory document store, CRUD and notifier fixtures, settings,
sample raw portal payloads
Dependencies: pytest
System role: Test infrastructure and fixture management
"""

import copy
import itertools
from typing import Any, Callable

import pytest

from itinerary_pipeline.boundary.store.CRUD import (
    ImageStatusCRUD,
    ItineraryCRUD,
    JobCRUD,
    MediaCRUD,
    NotificationCRUD,
)
from itinerary_pipeline.configs.media_storage import MediaStorageSettings
from itinerary_pipeline.configs.scraper import ScraperSettings
from itinerary_pipeline.configs.store import StoreSettings
from itinerary_pipeline.core.exceptions import StoreRequestError, UniqueConstraintError
from itinerary_pipeline.core.media.deduplicator import MediaDeduplicator
from itinerary_pipeline.core.notifier import Notifier


class FakeStoreClient:
    """
    In-memory stand-in for StoreClient.

    Implements the collection surface used by the CRUD layer, the
    ``equals``/``contains``/``in`` filter operators, pagination, and the
    unique constraint on ``media.sourceS3Key``.

    ``before_create`` runs before every create and may write competing
    documents to simulate a concurrent writer.
    """

    UNIQUE_FIELDS = {"media": ("sourceS3Key",)}

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict[str, Any]]] = {}
        self.before_create: Callable[[str, dict[str, Any]], None] | None = None
        self.fail_updates: dict[str, Exception] = {}
        self.calls: list[tuple[str, str]] = []
        self._ids = itertools.count(1)

    # -- helpers -----------------------------------------------------------

    def docs(self, collection: str) -> list[dict[str, Any]]:
        return [copy.deepcopy(doc) for doc in self.collections.get(collection, {}).values()]

    def insert(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """Write a document directly, bypassing hooks and constraints."""
        doc = copy.deepcopy(data)
        doc.setdefault("id", str(next(self._ids)))
        self.collections.setdefault(collection, {})[doc["id"]] = doc
        return copy.deepcopy(doc)

    @staticmethod
    def _matches(doc: dict[str, Any], where: dict[str, Any] | None) -> bool:
        for field, clause in (where or {}).items():
            if field == "and":
                if not all(FakeStoreClient._matches(doc, sub) for sub in clause):
                    return False
                continue
            value = doc.get(field)
            for operator, operand in clause.items():
                if operator == "equals" and str(value) != str(operand):
                    return False
                if operator == "contains" and str(operand) not in [str(v) for v in value or []]:
                    return False
                if operator == "in" and str(value) not in [str(v) for v in operand]:
                    return False
        return True

    # -- StoreClient surface ------------------------------------------------

    def find(self, collection, where=None, limit=100, depth=0, sort=None, page=None):
        self.calls.append(("find", collection))
        matched = [doc for doc in self.docs(collection) if self._matches(doc, where)]
        page = page or 1
        start = (page - 1) * limit
        return {
            "docs": matched[start : start + limit],
            "totalDocs": len(matched),
            "hasNextPage": start + limit < len(matched),
        }

    def find_one(self, collection, where):
        docs = self.find(collection, where, limit=1)["docs"]
        return docs[0] if docs else None

    def count(self, collection, where=None):
        return self.find(collection, where, limit=1)["totalDocs"]

    def get_by_id(self, collection, doc_id, depth=0):
        self.calls.append(("get_by_id", collection))
        doc = self.collections.get(collection, {}).get(str(doc_id))
        return copy.deepcopy(doc) if doc else None

    def create(self, collection, data):
        self.calls.append(("create", collection))
        if self.before_create is not None:
            self.before_create(collection, data)
        for field in self.UNIQUE_FIELDS.get(collection, ()):
            if any(doc.get(field) == data.get(field) for doc in self.collections.get(collection, {}).values()):
                raise UniqueConstraintError(
                    f"POST /{collection} returned 400",
                    status_code=400,
                    collection=collection,
                    details={"body": f"Value must be unique: {field}"},
                )
        return self.insert(collection, data)

    def update(self, collection, doc_id, data):
        self.calls.append(("update", collection))
        if collection in self.fail_updates:
            raise self.fail_updates[collection]
        doc = self.collections.get(collection, {}).get(str(doc_id))
        if doc is None:
            raise StoreRequestError(f"PATCH /{collection}/{doc_id} returned 404", status_code=404)
        doc.update(copy.deepcopy(data))
        return copy.deepcopy(doc)

    def close(self) -> None:
        pass


@pytest.fixture
def fake_store() -> FakeStoreClient:
    return FakeStoreClient()


@pytest.fixture
def jobs(fake_store: FakeStoreClient) -> JobCRUD:
    return JobCRUD(fake_store)


@pytest.fixture
def statuses(fake_store: FakeStoreClient) -> ImageStatusCRUD:
    return ImageStatusCRUD(fake_store)


@pytest.fixture
def media_crud(fake_store: FakeStoreClient) -> MediaCRUD:
    return MediaCRUD(fake_store)


@pytest.fixture
def itineraries(fake_store: FakeStoreClient) -> ItineraryCRUD:
    return ItineraryCRUD(fake_store)


@pytest.fixture
def notifier(fake_store: FakeStoreClient) -> Notifier:
    return Notifier(NotificationCRUD(fake_store))


@pytest.fixture
def deduplicator(media_crud: MediaCRUD) -> MediaDeduplicator:
    return MediaDeduplicator(media_crud)


@pytest.fixture
def store_settings() -> StoreSettings:
    return StoreSettings(
        api_url="https://store.test/api",
        api_key="test-key",
        max_attempts=3,
        backoff_initial=0,
        backoff_max=0,
    )


@pytest.fixture
def media_settings() -> MediaStorageSettings:
    return MediaStorageSettings(
        bucket="media-bucket",
        region="eu-north-1",
        imgix_domain="cdn.test",
        origin_cdn_base="https://origin.test",
        video_cdn_base="https://video.test",
    )


@pytest.fixture
def scraper_settings() -> ScraperSettings:
    return ScraperSettings(max_attempts=2, backoff_initial=0, backoff_max=0, settle_delay_ms=10)


@pytest.fixture
def make_job(fake_store: FakeStoreClient) -> Callable[..., str]:
    """Insert a job document and return its id."""

    def _make(**fields: Any) -> str:
        data = {"status": "processing", "currentPhase": "image_processing"}
        data.update(fields)
        return fake_store.insert("itinerary-jobs", data)["id"]

    return _make


@pytest.fixture
def make_status(fake_store: FakeStoreClient) -> Callable[..., dict[str, Any]]:
    """Insert an image status row and return it."""

    def _make(job_id: str, source_ref: str, status: str = "pending", **fields: Any) -> dict[str, Any]:
        data = {"job": job_id, "sourceS3Key": source_ref, "status": status, "mediaType": "image"}
        data.update(fields)
        return fake_store.insert("image-statuses", data)

    return _make


@pytest.fixture
def raw_portal_itinerary() -> dict[str, Any]:
    """Rendered portal payload for a short three-day trip."""
    return {
        "itineraries": [
            {
                "id": "itin-123",
                "name": "Kenya Highlights ",
                "startDate": "2026-06-14T00:00:00Z",
                "nights": 3,
                "countries": ["Kenya"],
                "segments": [
                    {
                        "type": "entry",
                        "title": "Arrive Nairobi",
                        "travelHubCode": "NBO",
                        "startDate": "2026-06-14T09:00:00Z",
                        "country": "Kenya",
                    },
                    {
                        "type": "stay",
                        "name": "Ol Donyo Lodge",
                        "nights": 2,
                        "location": "Chyulu Hills",
                        "country": "Kenya",
                        "startDate": "2026-06-14T14:00:00Z",
                        "images": ["origin/oldonyo-1.jpg", {"s3Key": "origin/oldonyo-2.jpg"}],
                        "clientIncludeExclude": "All meals and daily game drives",
                    },
                    {
                        "type": "service",
                        "name": "Horseback Safari",
                        "location": "Chyulu Hills",
                        "startDate": "2026-06-15T08:00:00Z",
                        "images": ["origin/horse.jpg"],
                    },
                    {
                        "type": "flight",
                        "title": "Flight to Nairobi",
                        "startDate": "2026-06-16T10:00:00Z",
                    },
                    {"type": "note", "title": "Packing reminder"},
                ],
            }
        ],
        "agency": {"headerImage": "agency/logo.png"},
    }


@pytest.fixture
def raw_scrape(raw_portal_itinerary: dict[str, Any]) -> dict[str, Any]:
    """Raw itinerary dict as assembled by the scraper."""
    return {
        "itinerary": raw_portal_itinerary,
        "itineraryId": "itin-123",
        "accessKey": "key-abc",
        "images": ["origin/oldonyo-1.jpg", "origin/oldonyo-2.jpg", "origin/horse.jpg"],
        "price": 1250000,
        "videos": [],
    }
