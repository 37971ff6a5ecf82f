"""
Itinerary CRUD operations.

Dependencies: itinerary_pipeline.boundary.store.CRUD.base_crud
System role: Persistence of draft itinerary documents
"""

from itinerary_pipeline.boundary.store.CRUD.base_crud import BaseCRUD
from itinerary_pipeline.boundary.store.store_client import StoreClient
from itinerary_pipeline.core.exceptions import ItineraryNotFoundError
from itinerary_pipeline.models.itinerary import Itinerary


class ItineraryCRUD(BaseCRUD[Itinerary]):
    """CRUD operations for ``itineraries`` documents."""

    collection = "itineraries"

    def __init__(self, client: StoreClient) -> None:
        super().__init__(client, Itinerary)

    def get(self, itinerary_id: str) -> Itinerary:
        """
        Raises:
            ItineraryNotFoundError: No itinerary with this id
        """
        itinerary = self.get_by_id(itinerary_id)
        if itinerary is None:
            raise ItineraryNotFoundError(itinerary_id)
        return itinerary

    def find_by_upstream_id(self, upstream_id: str) -> Itinerary | None:
        """Find the itinerary previously ingested from this portal itinerary id."""
        return self.find_one({"itineraryId": {"equals": upstream_id}})

    def create_draft(self, itinerary: Itinerary) -> Itinerary:
        return self.create(itinerary.to_store(exclude={"id"}))
