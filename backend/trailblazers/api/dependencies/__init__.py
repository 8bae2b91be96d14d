# backend/trailblazers/api/dependencies/__init__.py
"""
Central export point for all dependencies.
"""

from .auth import (
    get_auth_session,
    get_current_user,
    get_identity_service,
    get_stream_user,
    require_admin,
    require_roles,
)
from .database import get_db
from .services import (
    get_booking_service,
    get_guide_invitation_service,
    get_kv_store,
    get_notification_service,
    get_schedule_service,
    get_waiver_service,
)

__all__ = [
    # Auth
    "get_auth_session",
    "get_current_user",
    "get_identity_service",
    "get_stream_user",
    "require_admin",
    "require_roles",
    # Database
    "get_db",
    # Services
    "get_booking_service",
    "get_guide_invitation_service",
    "get_kv_store",
    "get_notification_service",
    "get_schedule_service",
    "get_waiver_service",
]
