# backend/trailblazers/services/assignment_notifier.py
"""
Assignment notifier.

Reacts to a hike's guide assignment changing to a new, non-null guide:
issues a password-setup link pointing at the guide dashboard, appends the
hike to the guide's ``assignedHikes`` claim and leaves the guide an in-app
notification. Best effort: failures are logged, never raised, never
retried, and never undo the assignment itself. A hike already present in
the guide's claim makes the whole run a no-op.
"""

from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import HIKE_ASSIGNMENT_TITLE
from ..events.hike_events import HikeAssignmentChanged
from ..repositories.factory import RepositoryFactory
from ..repositories.hike_repository import HikeRepository
from .base import BaseService
from .identity_service import IdentityService
from .notification_feed import NotificationEvent, publish_events_blocking
from .notification_service import NotificationService

NotificationPublisher = Callable[[Iterable[NotificationEvent]], None]


@dataclass(frozen=True)
class AssignmentOutcome:
    hike_id: str
    guide_id: str
    reset_link: str
    notification_id: str


class AssignmentNotifier(BaseService):
    def __init__(
        self,
        db: Session,
        identity: Optional[IdentityService] = None,
        notification_service: Optional[NotificationService] = None,
        hike_repository: Optional[HikeRepository] = None,
        publish_notifications: Optional[NotificationPublisher] = None,
    ):
        super().__init__(db)
        self.identity = identity or IdentityService(db)
        self.notification_service = notification_service or NotificationService(db)
        self.hike_repository = hike_repository or RepositoryFactory.create_hike_repository(db)
        self.publish_notifications = publish_notifications or publish_events_blocking

    def handle(self, event: HikeAssignmentChanged) -> Optional[AssignmentOutcome]:
        """Returns the outcome, or None when nothing was done."""
        if not event.should_notify:
            self.logger.debug("Assignment change on hike %s needs no notification", event.hike_id)
            return None
        try:
            return self._notify(event.hike_id, event.new_guide_id)
        except Exception as e:
            self.logger.error(
                f"Error handling guide assignment for hike {event.hike_id}: {str(e)}",
                exc_info=True,
            )
            return None

    @BaseService.measure_operation("notify_assignment")
    def _notify(self, hike_id: str, guide_id: str) -> Optional[AssignmentOutcome]:
        hike = self.hike_repository.get_by_id(hike_id, load_relationships=False)
        if hike is None:
            self.logger.warning("Hike %s no longer exists; skipping notification", hike_id)
            return None

        guide = self.identity.get_user(guide_id)
        account = self.identity.get_user_by_email(guide.email)

        claims = account.claims
        assigned = list(claims.get("assignedHikes", []))
        if hike.id in assigned:
            self.logger.info("Hike %s already in claims of guide %s", hike.id, account.id)
            return None

        reset_link = self.identity.generate_password_reset_link(
            account.email, settings.guide_dashboard_url
        )

        assigned.append(hike.id)
        claims["assignedHikes"] = assigned
        self.identity.set_custom_claims(account.id, claims)

        notification = self.notification_service.create_notification(
            user_id=account.id,
            title=HIKE_ASSIGNMENT_TITLE,
            message=f'You have been assigned to guide "{hike.title}"',
            hike_id=hike.id,
        )
        self.publish_notifications(self.notification_service.take_events())

        self.log_operation("notify_assignment", hike_id=hike.id, guide_id=account.id)
        return AssignmentOutcome(
            hike_id=hike.id,
            guide_id=account.id,
            reset_link=reset_link,
            notification_id=notification.id,
        )
