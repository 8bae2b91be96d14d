# backend/trailblazers/schemas/hike.py
"""Hike catalog, availability and price quote schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import ConfigDict, Field

from ._strict_base import StrictModel, StrictRequestModel


class HikeResponse(StrictModel):
    model_config = ConfigDict(from_attributes=True, extra="forbid")

    id: str
    title: str
    location: str
    image: Optional[str] = None
    description: Optional[str] = None
    start_date: date
    end_date: date
    days: List[str]
    times: List[str]
    duration: Optional[str] = None
    difficulty: str = Field(..., description="Normalized to easy, moderate or hard")
    max_participants: int
    current_participants: int
    remaining_spots: int
    price: Decimal
    assigned_guide_id: Optional[str] = None
    assigned_at: Optional[datetime] = None


class AvailabilityResponse(StrictModel):
    """Bookable occurrences of a hike from today on."""

    hike_id: str
    dates: List[date]
    times: List[str]
    remaining_spots: int
    max_selectable_participants: int


class PriceQuoteResponse(StrictModel):
    unit_price: Decimal
    number_of_participants: int
    price: Decimal
    tax: Decimal
    total_amount: Decimal


class AssignGuideRequest(StrictRequestModel):
    guide_id: str = Field(..., min_length=1)


def hike_response(hike: Any) -> HikeResponse:
    """Catalog view of a hike with its difficulty normalized."""
    return HikeResponse(
        id=hike.id,
        title=hike.title,
        location=hike.location,
        image=hike.image,
        description=hike.description,
        start_date=hike.start_date,
        end_date=hike.end_date,
        days=list(hike.days or []),
        times=list(hike.times or []),
        duration=hike.duration,
        difficulty=hike.difficulty_level.value,
        max_participants=hike.max_participants,
        current_participants=hike.current_participants,
        remaining_spots=hike.remaining_spots,
        price=hike.unit_price,
        assigned_guide_id=hike.assigned_guide_id,
        assigned_at=hike.assigned_at,
    )
