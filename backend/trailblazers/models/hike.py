# backend/trailblazers/models/hike.py
"""
Hike model.

A hike is a recurring guided offering: bookable on the weekdays in ``days``
between ``start_date`` and ``end_date`` (inclusive), at each of ``times``.
``max_participants`` caps the whole hike, not each occurrence; the seat
counter ``current_participants`` is only ever changed through the
conditional updates in HikeRepository.
"""

from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import JSON
import ulid

from ..core.enums import Difficulty, normalize_difficulty
from ..database import Base

HIKE_SCHEMA_VERSION = 1


class Hike(Base):
    __tablename__ = "hikes"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    title = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    image = Column(String(1024), nullable=True)
    description = Column(Text, nullable=True)

    # Recurring schedule
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    days = Column(JSON, nullable=False, default=list)
    times = Column(JSON, nullable=False, default=list)
    duration = Column(String(100), nullable=True)
    difficulty = Column(String(50), nullable=True)

    # Capacity and pricing
    max_participants = Column(Integer, nullable=False)
    current_participants = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(10, 2), nullable=False)

    # Guide assignment (keyed by the guide's user id)
    assigned_guide_id = Column(
        String(26), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    assigned_at = Column(DateTime(timezone=True), nullable=True)

    schema_version = Column(Integer, nullable=False, default=HIKE_SCHEMA_VERSION)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    assigned_guide = relationship("User", foreign_keys=[assigned_guide_id])

    __table_args__ = (
        CheckConstraint("max_participants >= 0", name="ck_hikes_max_participants"),
        CheckConstraint(
            "current_participants >= 0 AND current_participants <= max_participants",
            name="ck_hikes_current_participants",
        ),
    )

    @property
    def remaining_spots(self) -> int:
        return max(0, (self.max_participants or 0) - (self.current_participants or 0))

    @property
    def unit_price(self) -> Decimal:
        return Decimal(str(self.price))

    @property
    def difficulty_level(self) -> Difficulty:
        return normalize_difficulty(self.difficulty)

    def __repr__(self) -> str:
        return f"<Hike {self.title} {self.current_participants}/{self.max_participants}>"
