# backend/trailblazers/repositories/notification_repository.py
"""Notification repository: guide inbox queries."""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.notification import Notification
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class NotificationRepository(BaseRepository[Notification]):
    def __init__(self, db: Session):
        super().__init__(db, Notification)
        self.logger = logging.getLogger(__name__)

    def list_for_user(
        self, user_id: str, *, unread_only: bool = False, limit: int = 50
    ) -> List[Notification]:
        """Newest first."""
        try:
            query = self.db.query(Notification).filter(Notification.user_id == user_id)
            if unread_only:
                query = query.filter(Notification.read.is_(False))
            return query.order_by(Notification.created_at.desc()).limit(limit).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing notifications for {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to list notifications: {str(e)}")

    def unread_count(self, user_id: str) -> int:
        try:
            return (
                self.db.query(Notification)
                .filter(Notification.user_id == user_id, Notification.read.is_(False))
                .count()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting unread notifications: {str(e)}")
            raise RepositoryException(f"Failed to count notifications: {str(e)}")

    def mark_read(self, notification_id: str, user_id: str) -> Optional[Notification]:
        notification = self.find_one_by(id=notification_id, user_id=user_id)
        if notification is None:
            return None
        notification.read = True
        self.flush()
        return notification

    def mark_all_read(self, user_id: str) -> int:
        try:
            return (
                self.db.query(Notification)
                .filter(Notification.user_id == user_id, Notification.read.is_(False))
                .update({"read": True}, synchronize_session="fetch")
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error marking notifications read: {str(e)}")
            raise RepositoryException(f"Failed to mark notifications read: {str(e)}")
