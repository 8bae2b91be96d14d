# backend/trailblazers/tasks/booking_tasks.py
"""Periodic booking housekeeping."""

from celery.utils.log import get_task_logger

from ..services.booking_service import BookingService
from .hike_tasks import _session_scope
from .celery_app import celery_app

logger = get_task_logger(__name__)


@celery_app.task(name="bookings.complete_past", max_retries=2, queue="maintenance")
def complete_past_bookings() -> int:
    """Mark upcoming bookings dated before today (site time) as completed."""
    with _session_scope() as session:
        updated = BookingService(session).mark_past_bookings_completed()
    if updated:
        logger.info("Marked %s past booking(s) completed", updated)
    return updated
