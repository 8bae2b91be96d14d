# backend/trailblazers/repositories/factory.py
"""
Repository Factory for the TrailBlazers booking backend.

Centralizes repository creation so services can be handed mocks in tests.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from .base_repository import BaseRepository

if TYPE_CHECKING:
    from .booking_repository import BookingRepository
    from .hike_repository import HikeRepository
    from .notification_repository import NotificationRepository
    from .user_repository import UserRepository


class RepositoryFactory:
    @staticmethod
    def create_base_repository(db: Session, model) -> BaseRepository:
        return BaseRepository(db, model)

    @staticmethod
    def create_hike_repository(db: Session) -> "HikeRepository":
        from .hike_repository import HikeRepository

        return HikeRepository(db)

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_user_repository(db: Session) -> "UserRepository":
        from .user_repository import UserRepository

        return UserRepository(db)

    @staticmethod
    def create_notification_repository(db: Session) -> "NotificationRepository":
        from .notification_repository import NotificationRepository

        return NotificationRepository(db)
