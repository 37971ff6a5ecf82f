"""
Media CRUD operations.

Lookups keyed by the origin source reference, which the store enforces
as unique across every itinerary.

Dependencies: itinerary_pipeline.boundary.store.CRUD.base_crud
System role: Persistence of global rehosted media records
"""

from itinerary_pipeline.boundary.store.CRUD.base_crud import BaseCRUD
from itinerary_pipeline.boundary.store.store_client import StoreClient
from itinerary_pipeline.models.media import Media


class MediaCRUD(BaseCRUD[Media]):
    """CRUD operations for ``media`` records."""

    collection = "media"

    def __init__(self, client: StoreClient) -> None:
        super().__init__(client, Media)

    def find_by_source_ref(self, source_ref: str) -> Media | None:
        return self.find_one({"sourceS3Key": {"equals": source_ref}})

    def list_for_itinerary(self, itinerary_id: str, limit: int) -> list[Media]:
        """Media whose usage list contains ``itinerary_id``."""
        return self.find({"usedInItineraries": {"contains": itinerary_id}}, limit=limit)

    def add_usage(self, media: Media, itinerary_id: str) -> Media:
        """Append ``itinerary_id`` to the usage list if absent."""
        if itinerary_id in media.used_in_itineraries:
            return media
        return self.update(media.id, used_in_itineraries=[*media.used_in_itineraries, itinerary_id])
