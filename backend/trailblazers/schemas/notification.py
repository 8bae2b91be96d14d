# backend/trailblazers/schemas/notification.py
"""Schemas for the guide notification inbox."""

from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field

from ._strict_base import StrictModel


class NotificationResponse(StrictModel):
    """Notification inbox entry."""

    model_config = ConfigDict(from_attributes=True, extra="forbid")

    id: str
    user_id: str
    type: str
    title: str
    message: str
    hike_id: Optional[str] = None
    read: bool
    created_at: Optional[datetime] = None


class NotificationListResponse(StrictModel):
    notifications: List[NotificationResponse]
    total: int
    unread_count: int


class NotificationUnreadCountResponse(StrictModel):
    unread_count: int = Field(..., ge=0)


class MarkAllReadResponse(StrictModel):
    updated: int
