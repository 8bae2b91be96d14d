"""
Database models for the TrailBlazers booking backend.

One explicit record type per collection:
- User: identity-provider accounts with role and custom claims
- Hike: recurring guided offerings with a seat counter
- Booking: reservations with embedded participants and waiver state
- Notification: guide-facing in-app messages
"""

from .booking import Booking
from .hike import Hike
from .notification import Notification
from .user import User

__all__ = ["Booking", "Hike", "Notification", "User"]
