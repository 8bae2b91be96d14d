"""Domain events and their publisher."""

from .hike_events import HikeAssignmentChanged
from .publisher import EventPublisher

__all__ = ["EventPublisher", "HikeAssignmentChanged"]
