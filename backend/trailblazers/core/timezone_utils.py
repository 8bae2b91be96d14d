"""
Timezone utilities for the booking calendar.

Hikes are scheduled in the organization's local calendar, so "today" and the
instant a hike occurrence starts are both resolved in the site timezone.
"""

from datetime import date, datetime, time, timezone
from typing import Optional

import pytz

from .config import settings


def get_site_timezone(name: Optional[str] = None) -> pytz.BaseTzInfo:
    return pytz.timezone(name or settings.site_timezone)


def get_site_now(tz_name: Optional[str] = None) -> datetime:
    """Current datetime in the site timezone."""
    return datetime.now(get_site_timezone(tz_name))


def get_site_today(tz_name: Optional[str] = None) -> date:
    """'Today' at local midnight in the site timezone."""
    return get_site_now(tz_name).date()


def parse_slot_time(value: str) -> time:
    """
    Parse a hike time slot ("08:00", "8:00 AM", "14:30") to a time.

    Raises:
        ValueError: if the slot is not a recognised clock time
    """
    candidate = value.strip().upper()
    for fmt in ("%H:%M", "%I:%M %p", "%I:%M%p", "%H:%M:%S"):
        try:
            return datetime.strptime(candidate, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Unrecognised time slot: {value!r}")


def occurrence_start(occurrence_date: date, slot: str, tz_name: Optional[str] = None) -> datetime:
    """Timezone-aware start of a hike occurrence, normalised to UTC."""
    tz = get_site_timezone(tz_name)
    local = tz.localize(datetime.combine(occurrence_date, parse_slot_time(slot)))
    return local.astimezone(timezone.utc)
