# backend/trailblazers/services/availability_service.py
"""
Availability calculation for recurring hikes.

A hike recurs on a set of weekdays between two inclusive calendar bounds.
The calculator expands that rule into concrete dates; there are no
exceptions, holidays or blackout dates.
"""

from datetime import date, timedelta
import logging
from typing import FrozenSet, Iterable, Iterator, List, Optional

from ..core.enums import Weekday
from ..core.timezone_utils import get_site_today
from ..models.hike import Hike

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def active_weekdays(day_names: Iterable[str]) -> FrozenSet[Weekday]:
    """Map weekday names to canonical indexes, dropping names that do not resolve."""
    weekdays = set()
    for name in day_names or ():
        weekday = Weekday.from_name(name)
        if weekday is None:
            logger.warning("Ignoring unknown weekday name %r in hike schedule", name)
            continue
        weekdays.add(weekday)
    return frozenset(weekdays)


class AvailabilityCalculator:
    """
    Bookable dates of one hike.

    Iterating the calculator yields every date in ``[start_date, end_date]``
    whose weekday is active, in ascending order. Iteration can be restarted.
    """

    def __init__(self, start_date: date, end_date: date, days: Iterable[str]):
        self.start_date = start_date
        self.end_date = end_date
        self.weekdays = active_weekdays(days)

    @classmethod
    def for_hike(cls, hike: Hike) -> "AvailabilityCalculator":
        return cls(hike.start_date, hike.end_date, hike.days or [])

    def __iter__(self) -> Iterator[date]:
        if not self.weekdays:
            return
        current = self.start_date
        while current <= self.end_date:
            if current.weekday() in self.weekdays:
                yield current
            current += ONE_DAY

    def dates(self) -> List[date]:
        return list(self)

    def contains(self, candidate: date) -> bool:
        return (
            self.start_date <= candidate <= self.end_date
            and candidate.weekday() in self.weekdays
        )

    def selectable_dates(self, today: Optional[date] = None) -> List[date]:
        """Available dates on or after today (site-local midnight)."""
        cutoff = today or get_site_today()
        return [d for d in self if d >= cutoff]

    def is_selectable(self, candidate: date, today: Optional[date] = None) -> bool:
        cutoff = today or get_site_today()
        return candidate >= cutoff and self.contains(candidate)
