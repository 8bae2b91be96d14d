# backend/trailblazers/routes/v1/bookings.py
"""
Guest booking routes - API v1

All business logic delegated to BookingService, BookingWizard and
WaiverService.

Endpoints:
    POST / - Book a hike from a complete draft (wizard replayed server-side)
    GET / - The caller's bookings, optionally filtered by status
    GET /{booking_id} - One booking (owner or admin)
    DELETE /{booking_id} - Cancel a booking (24-hour notice)
    GET /{booking_id}/waivers/pending - Participants still to sign
    POST /{booking_id}/participants/{participant_index}/waiver - Sign a waiver
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Response, status

from ...api.dependencies import (
    get_auth_session,
    get_booking_service,
    get_current_user,
    get_waiver_service,
)
from ...core.enums import BookingStatus
from ...schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    WaiverSubmission,
    WaiverSubmissionResponse,
    booking_response,
)
from ...services.auth_session import AuthSession
from ...services.booking_service import BookingService
from ...services.booking_wizard import BookingWizard, replay_booking
from ...services.identity_service import AuthUser
from ...services.waiver_service import WaiverService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["bookings-v1"])


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingCreate,
    session: AuthSession = Depends(get_auth_session),
    service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """
    Book a hike.

    The draft runs through the same steps as the interactive wizard, so the
    same validation, availability and capacity rules apply.
    """
    session.require_user()
    hike = service.get_hike(payload.hike_id)
    wizard = BookingWizard(hike, session, service)
    booking = replay_booking(
        wizard,
        selected_date=payload.date,
        selected_time=payload.time,
        number_of_participants=payload.number_of_participants,
        booker_info=payload.booker_info,
        participants=payload.participants,
        agree_to_terms=payload.agree_to_terms,
        waivers=payload.waivers,
    )
    return booking_response(booking)


@router.get("", response_model=BookingListResponse)
def list_bookings(
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    current_user: AuthUser = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
) -> BookingListResponse:
    bookings = service.list_bookings(current_user, status_filter)
    return BookingListResponse(
        bookings=[booking_response(b) for b in bookings],
        total=len(bookings),
    )


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: str,
    current_user: AuthUser = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    return booking_response(service.get_booking(booking_id, current_user))


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
def cancel_booking(
    booking_id: str,
    current_user: AuthUser = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
) -> Response:
    service.cancel_booking(booking_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{booking_id}/waivers/pending", response_model=List[int])
def pending_waivers(
    booking_id: str,
    current_user: AuthUser = Depends(get_current_user),
    service: WaiverService = Depends(get_waiver_service),
) -> List[int]:
    return service.pending_participants(booking_id, current_user)


@router.post(
    "/{booking_id}/participants/{participant_index}/waiver",
    response_model=WaiverSubmissionResponse,
)
def submit_waiver(
    payload: WaiverSubmission,
    booking_id: str,
    participant_index: int = Path(..., ge=0),
    current_user: AuthUser = Depends(get_current_user),
    service: WaiverService = Depends(get_waiver_service),
) -> WaiverSubmissionResponse:
    result = service.submit_waiver(booking_id, participant_index, payload.strokes, current_user)
    return WaiverSubmissionResponse(
        booking_id=booking_id,
        participant_index=participant_index,
        waiver_status=result.waiver_status.value,
        all_signed=result.all_signed,
    )
