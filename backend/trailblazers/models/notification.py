# backend/trailblazers/models/notification.py
"""
In-app notification model (guide-facing messages).
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.sql import func
import ulid

from ..core.enums import NotificationType
from ..database import Base


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type = Column(String(50), nullable=False, default=NotificationType.HIKE_ASSIGNMENT.value)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    hike_id = Column(String(26), ForeignKey("hikes.id", ondelete="SET NULL"), nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (Index("ix_notifications_user_read", "user_id", "read"),)
