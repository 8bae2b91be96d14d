"""Event publisher - hands domain events to background processing."""
from datetime import datetime
import logging
from typing import Any, Callable, Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class Event(Protocol):
    """Protocol for event types."""

    def to_dict(self) -> Dict[str, Any]:
        ...


Dispatcher = Callable[[str, Dict[str, Any]], None]


def celery_dispatcher(event_type: str, payload: Dict[str, Any]) -> None:
    """Route an event to its Celery task."""
    from ..tasks.hike_tasks import EVENT_TASKS

    task = EVENT_TASKS.get(event_type)
    if task is None:
        logger.warning("No task registered for event %s", event_type)
        return
    task.delay(payload)


class EventPublisher:
    """Publishes domain events for async processing."""

    def __init__(self, dispatcher: Optional[Dispatcher] = None):
        self.dispatch = dispatcher or celery_dispatcher

    def publish(self, event: Event) -> None:
        """
        Queue an event for background processing.

        Publishing happens after the triggering write has committed; a
        failure to enqueue is logged and never undoes that write.
        """
        event_type = type(event).__name__
        payload = event.to_dict()

        # Convert datetime objects to ISO strings for JSON serialization
        for key, value in payload.items():
            if isinstance(value, datetime):
                payload[key] = value.isoformat()

        try:
            self.dispatch(event_type, payload)
        except Exception as e:
            logger.error(f"Failed to publish {event_type}: {str(e)}", exc_info=True)
