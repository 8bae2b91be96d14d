# backend/trailblazers/core/enums.py
"""
Core enums for the TrailBlazers booking backend.

These enums are stored by value in the database and serialized by value
over the API, so their values must stay stable.
"""

from enum import Enum, IntEnum
from typing import Optional


class RoleName(str, Enum):
    """Roles issued by the identity service and carried in the ID token."""

    GUEST = "guest"
    GUIDE = "guide"
    ADMIN = "admin"


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    UPCOMING = "upcoming"
    COMPLETED = "completed"


class WaiverStatus(str, Enum):
    """Aggregate waiver state of a booking."""

    PENDING = "pending"
    COMPLETED = "completed"


class Difficulty(str, Enum):
    """Display categories for free-form hike difficulty values."""

    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"


class Weekday(IntEnum):
    """
    Canonical weekday index.

    Matches ``date.weekday()`` (Monday == 0) so recurring schedules can be
    compared directly against calendar dates.
    """

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def from_name(cls, name: str) -> Optional["Weekday"]:
        """Resolve a weekday name ("Monday", "monday", " MONDAY ") to its index."""
        try:
            return cls[name.strip().upper()]
        except (KeyError, AttributeError):
            return None


class NotificationType(str, Enum):
    HIKE_ASSIGNMENT = "HIKE_ASSIGNMENT"


def normalize_difficulty(value: Optional[str]) -> Difficulty:
    """
    Map a free-form difficulty to a display category.

    "easy" and "moderate" map to themselves; everything else ("challenging",
    "difficult", "hard", unknown values) maps to hard.
    """
    normalized = (value or "").strip().lower()
    if normalized == Difficulty.EASY.value:
        return Difficulty.EASY
    if normalized == Difficulty.MODERATE.value:
        return Difficulty.MODERATE
    return Difficulty.HARD
