"""
Repository layer for the TrailBlazers booking backend.

Usage:
    from trailblazers.repositories import RepositoryFactory

    hike_repository = RepositoryFactory.create_hike_repository(db)
    if not hike_repository.reserve_seats(hike_id, 2):
        ...
"""

from .base_repository import BaseRepository, IRepository
from .booking_repository import BookingRepository
from .factory import RepositoryFactory
from .hike_repository import HikeRepository
from .notification_repository import NotificationRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "IRepository",
    "BookingRepository",
    "HikeRepository",
    "NotificationRepository",
    "RepositoryFactory",
    "UserRepository",
]
