"""
Notification CRUD operations.

Dependencies: itinerary_pipeline.boundary.store.CRUD.base_crud
System role: Persistence of operator notifications
"""

from itinerary_pipeline.boundary.store.CRUD.base_crud import BaseCRUD
from itinerary_pipeline.boundary.store.store_client import StoreClient
from itinerary_pipeline.models.base import StoreModel


class Notification(StoreModel):
    id: str
    type: str
    message: str
    read: bool = False
    job: str | None = None
    itinerary: str | None = None


class NotificationCRUD(BaseCRUD[Notification]):
    collection = "notifications"

    def __init__(self, client: StoreClient) -> None:
        super().__init__(client, Notification)

    def post(self, notification_type: str, message: str, job_id: str | None, itinerary_id: str | None) -> Notification:
        data = {"type": notification_type, "message": message, "read": False}
        if job_id:
            data["job"] = job_id
        if itinerary_id:
            data["itinerary"] = itinerary_id
        return self.create(data)
