# backend/trailblazers/services/notification_service.py
"""
Notification inbox service.

Every mutation records a ``NotificationEvent`` in ``pending_events``;
callers publish them after the write has committed (``flush_events`` from
async code, ``publish_events_blocking`` from workers).
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.enums import NotificationType
from ..core.exceptions import NotFoundException
from ..models.notification import Notification
from ..repositories.factory import RepositoryFactory
from ..repositories.notification_repository import NotificationRepository
from .base import BaseService
from .notification_feed import (
    EVENT_CREATED,
    EVENT_READ,
    EVENT_READ_ALL,
    NotificationEvent,
    publish_events,
)


class NotificationService(BaseService):
    def __init__(
        self,
        db: Session,
        notification_repository: Optional[NotificationRepository] = None,
    ):
        super().__init__(db)
        self.notification_repository = (
            notification_repository or RepositoryFactory.create_notification_repository(db)
        )
        self.pending_events: List[NotificationEvent] = []

    def _record(self, kind: str, user_id: str, notification: Optional[Notification] = None) -> None:
        self.pending_events.append(
            NotificationEvent(
                kind=kind,
                user_id=user_id,
                unread_count=self.notification_repository.unread_count(user_id),
                notification_id=notification.id if notification else None,
                title=notification.title if notification else None,
                hike_id=notification.hike_id if notification else None,
            )
        )

    def take_events(self) -> List[NotificationEvent]:
        events, self.pending_events = self.pending_events, []
        return events

    async def flush_events(self) -> None:
        await publish_events(self.take_events())

    @BaseService.measure_operation("create_notification")
    def create_notification(
        self,
        user_id: str,
        title: str,
        message: str,
        hike_id: Optional[str] = None,
        notification_type: NotificationType = NotificationType.HIKE_ASSIGNMENT,
    ) -> Notification:
        with self.transaction():
            notification = self.notification_repository.create(
                user_id=user_id,
                type=notification_type.value,
                title=title,
                message=message,
                hike_id=hike_id,
                read=False,
            )
        self._record(EVENT_CREATED, user_id, notification)
        self.log_operation(
            "create_notification", notification_id=notification.id, user_id=user_id
        )
        return notification

    def list_notifications(
        self, user_id: str, *, unread_only: bool = False, limit: int = 50
    ) -> List[Notification]:
        return self.notification_repository.list_for_user(
            user_id, unread_only=unread_only, limit=limit
        )

    def unread_count(self, user_id: str) -> int:
        return self.notification_repository.unread_count(user_id)

    def mark_read(self, notification_id: str, user_id: str) -> Notification:
        """Mark one of the user's notifications read."""
        with self.transaction():
            notification = self.notification_repository.mark_read(notification_id, user_id)
            if notification is None:
                raise NotFoundException(
                    "Notification not found",
                    code="NOTIFICATION_NOT_FOUND",
                    details={"notification_id": notification_id},
                )
        self._record(EVENT_READ, user_id, notification)
        return notification

    def mark_all_read(self, user_id: str) -> int:
        with self.transaction():
            updated = self.notification_repository.mark_all_read(user_id)
        self._record(EVENT_READ_ALL, user_id)
        return updated
