# backend/trailblazers/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import auth, bookings, health, hikes, notifications

__all__ = [
    "auth",
    "bookings",
    "health",
    "hikes",
    "notifications",
]
