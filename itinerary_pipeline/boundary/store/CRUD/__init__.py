"""
CRUD operations for store collections.
"""

from itinerary_pipeline.boundary.store.CRUD.base_crud import BaseCRUD
from itinerary_pipeline.boundary.store.CRUD.image_status_crud import ImageStatusCRUD
from itinerary_pipeline.boundary.store.CRUD.itinerary_crud import ItineraryCRUD
from itinerary_pipeline.boundary.store.CRUD.job_crud import JobCRUD
from itinerary_pipeline.boundary.store.CRUD.media_crud import MediaCRUD
from itinerary_pipeline.boundary.store.CRUD.notification_crud import Notification, NotificationCRUD

__all__ = [
    "BaseCRUD",
    "ImageStatusCRUD",
    "ItineraryCRUD",
    "JobCRUD",
    "MediaCRUD",
    "Notification",
    "NotificationCRUD",
]
