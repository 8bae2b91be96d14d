# backend/trailblazers/repositories/booking_repository.py
"""
Booking Repository for the TrailBlazers booking backend.

Handles:
- Booking CRUD (via BaseRepository)
- Guest dashboard queries (bookings for a user)
- Guide roster queries (bookings for a hike)
- Lifecycle sweeps (upcoming bookings whose date has passed)
"""

from datetime import date
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.enums import BookingStatus
from ..core.exceptions import RepositoryException
from ..models.booking import Booking
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    def __init__(self, db: Session):
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    def list_for_user(self, user_id: str) -> List[Booking]:
        """
        All bookings owned by a guest, soonest first.

        Args:
            user_id: Owner of the bookings

        Returns:
            List of bookings ordered by date then time slot
        """
        try:
            return (
                self.db.query(Booking)
                .filter(Booking.user_id == user_id)
                .order_by(Booking.date.asc(), Booking.time.asc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing bookings for user {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to list bookings: {str(e)}")

    def list_for_hike(self, hike_id: str) -> List[Booking]:
        try:
            return (
                self.db.query(Booking)
                .filter(Booking.hike_id == hike_id)
                .order_by(Booking.date.asc(), Booking.time.asc(), Booking.created_at.asc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing bookings for hike {hike_id}: {str(e)}")
            raise RepositoryException(f"Failed to list hike bookings: {str(e)}")

    def list_upcoming_before(self, cutoff: date) -> List[Booking]:
        """Upcoming bookings dated strictly before ``cutoff``."""
        try:
            return (
                self.db.query(Booking)
                .filter(
                    Booking.status == BookingStatus.UPCOMING.value,
                    Booking.date < cutoff,
                )
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing past upcoming bookings: {str(e)}")
            raise RepositoryException(f"Failed to list past bookings: {str(e)}")

    def update_participants(
        self, booking_id: str, participants: List[Dict[str, Any]], waiver_status: str
    ) -> Optional[Booking]:
        """Replace the embedded participant list and its derived waiver status together."""
        return self.update(
            booking_id,
            participants=[dict(p) for p in participants],
            waiver_status=waiver_status,
        )

    def get_for_update(self, booking_id: str) -> Optional[Booking]:
        """
        Load a booking with its row locked until the transaction ends.

        Values are refreshed from the database even if the booking is
        already in the session, so a read-modify-write starts from the
        latest committed participant list.
        """
        try:
            return (
                self.db.query(Booking)
                .filter(Booking.id == booking_id)
                .populate_existing()
                .with_for_update()
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to lock booking: {str(e)}")
