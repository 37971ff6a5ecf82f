"""
Operator notifications.

Fire-and-forget: a failed notification is logged and never interrupts
the pipeline phase that sent it.

Dependencies: itinerary_pipeline.boundary.store.CRUD
System role: One-way side effect for job lifecycle events
"""

import logging
from enum import Enum

from itinerary_pipeline.boundary.store.CRUD.notification_crud import NotificationCRUD
from itinerary_pipeline.core.exceptions import StoreError

logger = logging.getLogger(__name__)


class NotificationType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notifier:
    """Posts job lifecycle notifications to the store."""

    def __init__(self, notifications: NotificationCRUD) -> None:
        self._notifications = notifications

    def send(
        self,
        notification_type: NotificationType,
        message: str,
        job_id: str | None = None,
        itinerary_id: str | None = None,
    ) -> None:
        try:
            self._notifications.post(notification_type.value, message, job_id, itinerary_id)
        except StoreError as e:
            logger.warning("%s:send - Notification dropped (%s): %s", __name__, message, e)
            return
        logger.info("%s:send - %s: %s", __name__, notification_type.value, message)

    def job_started(self, job_id: str, title: str) -> None:
        self.send(NotificationType.INFO, f"Started processing: {title}", job_id)

    def images_processed(self, job_id: str, itinerary_id: str, processed: int, failed: int) -> None:
        if failed:
            self.send(
                NotificationType.WARNING,
                f"Image processing complete: {processed} processed, {failed} failed",
                job_id,
                itinerary_id,
            )
        else:
            self.send(
                NotificationType.SUCCESS,
                f"Image processing complete: {processed} images processed",
                job_id,
                itinerary_id,
            )

    def job_completed(self, job_id: str, itinerary_id: str, title: str, final_status: str) -> None:
        if final_status == "ready_for_review":
            self.send(NotificationType.SUCCESS, f"Completed: {title} is ready for review", job_id, itinerary_id)
        else:
            self.send(NotificationType.WARNING, f"Completed: {title} needs attention", job_id, itinerary_id)

    def job_failed(self, job_id: str, error: str) -> None:
        self.send(NotificationType.ERROR, f"Failed: {error}", job_id)
