# backend/trailblazers/tasks/hike_tasks.py
"""
Celery tasks reacting to hike domain events.

``hikes.on_assignment_changed`` runs the assignment notifier. It is never
retried: the notifier is best effort and a retry could notify a guide twice.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from celery.utils.log import get_task_logger
from sqlalchemy.orm import Session

from ..database import SessionLocal
from ..events.hike_events import HikeAssignmentChanged
from ..services.assignment_notifier import AssignmentNotifier
from .celery_app import celery_app

logger = get_task_logger(__name__)


@contextmanager
def _session_scope() -> Iterator[Session]:
    """Provide transactional scope for use in tasks."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@celery_app.task(name="hikes.on_assignment_changed", max_retries=0, queue="notifications")
def on_assignment_changed(payload: Dict[str, Any]) -> Optional[Dict[str, str]]:
    """Notify the newly assigned guide; returns the outcome or None."""
    event = HikeAssignmentChanged.from_dict(payload)
    with _session_scope() as session:
        outcome = AssignmentNotifier(session).handle(event)
    if outcome is None:
        return None
    logger.info("Guide %s notified about hike %s", outcome.guide_id, outcome.hike_id)
    return {
        "hike_id": outcome.hike_id,
        "guide_id": outcome.guide_id,
        "notification_id": outcome.notification_id,
    }


EVENT_TASKS = {
    "HikeAssignmentChanged": on_assignment_changed,
}
