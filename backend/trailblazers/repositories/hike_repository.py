# backend/trailblazers/repositories/hike_repository.py
"""
Hike repository.

Owns the seat counter. ``reserve_seats`` and ``release_seats`` are single
conditional UPDATE statements, so two concurrent bookings can never push
``current_participants`` past ``max_participants`` or below zero. They do
not commit: callers run them in the same transaction as the booking write.
"""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.hike import Hike
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class HikeRepository(BaseRepository[Hike]):
    def __init__(self, db: Session):
        super().__init__(db, Hike)
        self.logger = logging.getLogger(__name__)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(joinedload(Hike.assigned_guide))

    def list_hikes(self, skip: int = 0, limit: int = 100) -> List[Hike]:
        try:
            return (
                self.db.query(Hike)
                .order_by(Hike.start_date.asc(), Hike.title.asc())
                .offset(skip)
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing hikes: {str(e)}")
            raise RepositoryException(f"Failed to list hikes: {str(e)}")

    def list_assigned_to(self, guide_id: str) -> List[Hike]:
        """Hikes currently assigned to a guide."""
        try:
            return (
                self.db.query(Hike)
                .filter(Hike.assigned_guide_id == guide_id)
                .order_by(Hike.start_date.asc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing hikes for guide {guide_id}: {str(e)}")
            raise RepositoryException(f"Failed to list assigned hikes: {str(e)}")

    def reserve_seats(self, hike_id: str, count: int) -> bool:
        """
        Atomically add ``count`` seats if capacity allows.

        Returns:
            True if the seats were reserved, False if the hike is missing or
            the reservation would exceed ``max_participants``.
        """
        if count <= 0:
            raise ValueError("count must be positive")
        try:
            updated = (
                self.db.query(Hike)
                .filter(
                    Hike.id == hike_id,
                    Hike.current_participants + count <= Hike.max_participants,
                )
                .update(
                    {Hike.current_participants: Hike.current_participants + count},
                    synchronize_session="fetch",
                )
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error reserving {count} seats on hike {hike_id}: {str(e)}")
            raise RepositoryException(f"Failed to reserve seats: {str(e)}")

        if updated != 1:
            self.logger.info(
                "Seat reservation refused for hike %s (requested %d)", hike_id, count
            )
            return False
        return True

    def release_seats(self, hike_id: str, count: int) -> bool:
        """
        Atomically give back ``count`` seats.

        Returns:
            False if the hike is missing or holds fewer than ``count`` seats.
        """
        if count <= 0:
            raise ValueError("count must be positive")
        try:
            updated = (
                self.db.query(Hike)
                .filter(Hike.id == hike_id, Hike.current_participants >= count)
                .update(
                    {Hike.current_participants: Hike.current_participants - count},
                    synchronize_session="fetch",
                )
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error releasing {count} seats on hike {hike_id}: {str(e)}")
            raise RepositoryException(f"Failed to release seats: {str(e)}")

        if updated != 1:
            self.logger.warning(
                "Seat release refused for hike %s (releasing %d)", hike_id, count
            )
            return False
        return True

    def set_assigned_guide(
        self, hike_id: str, guide_id: Optional[str], assigned_at: Optional[datetime]
    ) -> Optional[Hike]:
        return self.update(hike_id, assigned_guide_id=guide_id, assigned_at=assigned_at)
