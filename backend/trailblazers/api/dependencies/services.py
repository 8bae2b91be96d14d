# backend/trailblazers/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

Factory functions that create service instances with the request's
database session.
"""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.booking_service import BookingService
from ...services.guide_invitation_service import (
    GuideInvitationService,
    KeyValueStore,
    RedisKeyValueStore,
)
from ...services.identity_service import IdentityService
from ...services.notification_service import NotificationService
from ...services.schedule_service import ScheduleService
from ...services.waiver_service import WaiverService
from .auth import get_identity_service
from .database import get_db


@lru_cache(maxsize=1)
def get_kv_store() -> KeyValueStore:
    """Process-wide key-value store client."""
    return RedisKeyValueStore()


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    return BookingService(db)


def get_waiver_service(db: Session = Depends(get_db)) -> WaiverService:
    return WaiverService(db)


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_schedule_service(db: Session = Depends(get_db)) -> ScheduleService:
    return ScheduleService(db)


def get_guide_invitation_service(
    db: Session = Depends(get_db),
    store: KeyValueStore = Depends(get_kv_store),
    identity: IdentityService = Depends(get_identity_service),
) -> GuideInvitationService:
    return GuideInvitationService(db, store, identity)
