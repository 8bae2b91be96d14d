# backend/trailblazers/tasks/beat_schedule.py
"""Celery Beat schedule for TrailBlazers periodic tasks."""

from typing import Any, Dict

from celery.schedules import crontab

CELERYBEAT_SCHEDULE: Dict[str, Dict[str, Any]] = {
    # Bookings whose hike date has passed move to "completed" shortly after midnight
    "complete-past-bookings": {
        "task": "bookings.complete_past",
        "schedule": crontab(hour=0, minute=15),
        "options": {"queue": "maintenance", "priority": 3},
    },
}

SCHEDULE_CONFIG: Dict[str, Dict[str, Dict[str, Any]]] = {
    "development": {
        "complete-past-bookings": {
            "task": "bookings.complete_past",
            "schedule": crontab(minute=0),
            "options": {"queue": "celery"},
        },
    },
}


def get_beat_schedule(environment: str = "production") -> Dict[str, Dict[str, Any]]:
    """
    Get the beat schedule for the specified environment.

    Args:
        environment: The environment name (production, development, testing)
    """
    base = dict(CELERYBEAT_SCHEDULE)
    overrides = SCHEDULE_CONFIG.get(environment)
    if overrides:
        base.update(overrides)
    return base
