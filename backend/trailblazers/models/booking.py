# backend/trailblazers/models/booking.py
"""
Booking model.

One guest's reservation for one occurrence (date + time slot) of a hike.
Participants are embedded as a JSON list, primary contact first; each entry
is ``{"fullName", "birthdate", "waiverSigned", "signatureData"}``.
Money columns keep full precision; rounding to cents happens at display.
"""

from typing import Any, Dict, List

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import JSON
import ulid

from ..core.enums import BookingStatus, WaiverStatus
from ..core.ulid_helper import confirmation_code as _confirmation_code
from ..database import Base

BOOKING_SCHEMA_VERSION = 1


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    hike_id = Column(String(26), ForeignKey("hikes.id"), nullable=False, index=True)
    user_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    user_email = Column(String(255), nullable=False)

    # Hike snapshot
    title = Column(String(255), nullable=False)
    date = Column(Date, nullable=False, index=True)
    time = Column(String(20), nullable=False)
    duration = Column(String(100), nullable=True)
    location = Column(String(255), nullable=True)

    participants = Column(JSON, nullable=False, default=list)
    number_of_participants = Column(Integer, nullable=False)
    booker_info = Column(JSON, nullable=False, default=dict)

    price = Column(Numeric(12, 4), nullable=False)
    tax = Column(Numeric(12, 4), nullable=False)
    total_amount = Column(Numeric(12, 4), nullable=False)

    status = Column(String(20), nullable=False, default=BookingStatus.UPCOMING.value, index=True)
    waiver_status = Column(String(20), nullable=False, default=WaiverStatus.PENDING.value)

    schema_version = Column(Integer, nullable=False, default=BOOKING_SCHEMA_VERSION)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    hike = relationship("Hike", backref="bookings")
    user = relationship("User", foreign_keys=[user_id])

    __table_args__ = (
        CheckConstraint(
            "number_of_participants >= 1", name="ck_bookings_number_of_participants"
        ),
        CheckConstraint("status IN ('upcoming', 'completed')", name="ck_bookings_status"),
        CheckConstraint(
            "waiver_status IN ('pending', 'completed')", name="ck_bookings_waiver_status"
        ),
    )

    @property
    def confirmation_code(self) -> str:
        return _confirmation_code(self.id)

    @property
    def participant_entries(self) -> List[Dict[str, Any]]:
        return [dict(p) for p in (self.participants or [])]

    @property
    def all_waivers_signed(self) -> bool:
        entries = self.participant_entries
        return bool(entries) and all(p.get("waiverSigned") for p in entries)

    def __repr__(self) -> str:
        return f"<Booking {self.id} hike={self.hike_id} {self.date} {self.time}>"
