# backend/trailblazers/routes/v1/hikes.py
"""
Hike routes - API v1

Endpoints (static routes before dynamic routes):
    GET / - Hike catalog
    GET /assigned - Hikes assigned to the calling guide
    GET /guides - Guides available for assignment (admin)
    GET /{hike_id} - One hike
    GET /{hike_id}/availability - Bookable dates, times and seats
    GET /{hike_id}/quote - Price quote for a group size
    GET /{hike_id}/roster - Participants across the hike's bookings (guide/admin)
    POST /{hike_id}/guide - Assign a guide (admin)
    DELETE /{hike_id}/guide - Remove the guide (admin)
"""

from datetime import date
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ...api.dependencies import (
    get_booking_service,
    get_current_user,
    get_schedule_service,
    require_admin,
)
from ...core.config import settings
from ...core.timezone_utils import get_site_today
from ...schemas.auth import UserResponse
from ...schemas.booking import HikeRosterResponse, RosterEntry
from ...schemas.hike import (
    AssignGuideRequest,
    AvailabilityResponse,
    HikeResponse,
    PriceQuoteResponse,
    hike_response,
)
from ...services.availability_service import AvailabilityCalculator
from ...services.booking_service import BookingService
from ...services.identity_service import AuthUser
from ...services.pricing_service import quote
from ...services.schedule_service import ScheduleService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["hikes-v1"])


@router.get("", response_model=List[HikeResponse])
def list_hikes(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=200),
    service: BookingService = Depends(get_booking_service),
) -> List[HikeResponse]:
    return [hike_response(h) for h in service.list_hikes(skip=skip, limit=limit)]


@router.get("/assigned", response_model=List[HikeResponse])
def list_assigned_hikes(
    current_user: AuthUser = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
) -> List[HikeResponse]:
    return [hike_response(h) for h in service.list_guide_hikes(current_user)]


@router.get("/guides", response_model=List[UserResponse])
def list_guides(
    admin: AuthUser = Depends(require_admin),
    service: ScheduleService = Depends(get_schedule_service),
) -> List[UserResponse]:
    return [UserResponse.model_validate(u) for u in service.list_guides(admin)]


@router.get("/{hike_id}", response_model=HikeResponse)
def get_hike(
    hike_id: str,
    service: BookingService = Depends(get_booking_service),
) -> HikeResponse:
    return hike_response(service.get_hike(hike_id))


@router.get("/{hike_id}/availability", response_model=AvailabilityResponse)
def get_availability(
    hike_id: str,
    today: Optional[date] = Query(None, description="Override the site-local date"),
    service: BookingService = Depends(get_booking_service),
) -> AvailabilityResponse:
    hike = service.get_hike(hike_id)
    calendar = AvailabilityCalculator.for_hike(hike)
    remaining = hike.remaining_spots
    return AvailabilityResponse(
        hike_id=hike.id,
        dates=calendar.selectable_dates(today or get_site_today()),
        times=list(hike.times or []),
        remaining_spots=remaining,
        max_selectable_participants=min(settings.max_participants_per_booking, remaining),
    )


@router.get("/{hike_id}/quote", response_model=PriceQuoteResponse)
def get_quote(
    hike_id: str,
    participants: int = Query(1, ge=1),
    service: BookingService = Depends(get_booking_service),
) -> PriceQuoteResponse:
    hike = service.get_hike(hike_id)
    rounded = quote(hike.unit_price, participants).rounded()
    return PriceQuoteResponse(**rounded.to_dict())


@router.get("/{hike_id}/roster", response_model=HikeRosterResponse)
def get_roster(
    hike_id: str,
    current_user: AuthUser = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
) -> HikeRosterResponse:
    rows = service.get_hike_roster(hike_id, current_user)
    return HikeRosterResponse(
        hike_id=hike_id,
        entries=[RosterEntry(**vars(row)) for row in rows],
        total_participants=len(rows),
    )


@router.post("/{hike_id}/guide", response_model=HikeResponse)
def assign_guide(
    hike_id: str,
    payload: AssignGuideRequest,
    admin: AuthUser = Depends(require_admin),
    service: ScheduleService = Depends(get_schedule_service),
) -> HikeResponse:
    return hike_response(service.assign_guide(hike_id, payload.guide_id, admin))


@router.delete("/{hike_id}/guide", response_model=HikeResponse)
def unassign_guide(
    hike_id: str,
    admin: AuthUser = Depends(require_admin),
    service: ScheduleService = Depends(get_schedule_service),
) -> HikeResponse:
    return hike_response(service.unassign_guide(hike_id, admin))
