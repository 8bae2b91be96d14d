# backend/trailblazers/tasks/__init__.py
"""
Celery tasks package for TrailBlazers.

- Guide assignment notifications
- Past-booking housekeeping
"""

from .booking_tasks import complete_past_bookings
from .celery_app import BaseTask, celery_app
from .hike_tasks import EVENT_TASKS, on_assignment_changed

__all__ = [
    "celery_app",
    "BaseTask",
    "EVENT_TASKS",
    "on_assignment_changed",
    "complete_past_bookings",
]
