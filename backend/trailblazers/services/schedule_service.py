# backend/trailblazers/services/schedule_service.py
"""
Guide schedule management (admin).

Assigning or un-assigning a guide writes ``assigned_guide_id`` and
``assigned_at``; once that write has committed a ``HikeAssignmentChanged``
event is published for the assignment notifier.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.enums import RoleName
from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..events.hike_events import HikeAssignmentChanged
from ..events.publisher import EventPublisher
from ..models.hike import Hike
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..repositories.hike_repository import HikeRepository
from ..repositories.user_repository import UserRepository
from .base import BaseService
from .identity_service import AuthUser


class ScheduleService(BaseService):
    def __init__(
        self,
        db: Session,
        hike_repository: Optional[HikeRepository] = None,
        user_repository: Optional[UserRepository] = None,
        publisher: Optional[EventPublisher] = None,
    ):
        super().__init__(db)
        self.hike_repository = hike_repository or RepositoryFactory.create_hike_repository(db)
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)
        self.publisher = publisher or EventPublisher()

    @staticmethod
    def _require_admin(actor: AuthUser) -> None:
        if not actor.has_role(RoleName.ADMIN):
            raise ForbiddenException("Only admins can manage guide schedules")

    def _get_hike(self, hike_id: str) -> Hike:
        hike = self.hike_repository.get_by_id(hike_id, load_relationships=False)
        if hike is None:
            raise NotFoundException(
                "Hike not found", code="HIKE_NOT_FOUND", details={"hike_id": hike_id}
            )
        return hike

    def list_guides(self, actor: AuthUser) -> List[User]:
        self._require_admin(actor)
        return self.user_repository.list_by_role(RoleName.GUIDE.value)

    @BaseService.measure_operation("assign_guide")
    def assign_guide(self, hike_id: str, guide_id: str, actor: AuthUser) -> Hike:
        self._require_admin(actor)
        guide = self.user_repository.get_by_id(guide_id)
        if guide is None:
            raise NotFoundException(
                "Guide not found", code="GUIDE_NOT_FOUND", details={"guide_id": guide_id}
            )
        if guide.role != RoleName.GUIDE.value:
            raise ValidationException(
                "Selected user is not a guide", code="NOT_A_GUIDE", details={"guide_id": guide_id}
            )
        return self._change_assignment(hike_id, guide.id)

    @BaseService.measure_operation("unassign_guide")
    def unassign_guide(self, hike_id: str, actor: AuthUser) -> Hike:
        self._require_admin(actor)
        return self._change_assignment(hike_id, None)

    def _change_assignment(self, hike_id: str, guide_id: Optional[str]) -> Hike:
        hike = self._get_hike(hike_id)
        previous = hike.assigned_guide_id
        changed_at = datetime.now(timezone.utc)

        with self.transaction():
            hike = self.hike_repository.set_assigned_guide(
                hike_id, guide_id, changed_at if guide_id else None
            )

        self.log_operation(
            "change_assignment", hike_id=hike_id, previous_guide_id=previous, guide_id=guide_id
        )
        self.publisher.publish(
            HikeAssignmentChanged(
                hike_id=hike_id,
                previous_guide_id=previous,
                new_guide_id=guide_id,
                changed_at=changed_at,
            )
        )
        return hike
