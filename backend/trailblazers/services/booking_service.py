# backend/trailblazers/services/booking_service.py
"""
Booking Service for the TrailBlazers booking backend.

Handles all booking-related business logic including:
- Persisting a completed wizard draft together with its seat reservation
- Guest cancellation under the notice-window rule
- Booking queries for guests, guides and admins
- Marking past bookings completed
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import BookingStatus, RoleName
from ..core.exceptions import (
    CancellationWindowException,
    CapacityExceededException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from ..core.timezone_utils import get_site_today, occurrence_start
from ..core.ulid_helper import generate_ulid
from ..models.booking import Booking
from ..models.hike import Hike
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.hike_repository import HikeRepository
from ..schemas.booking import BookerInfo, Participant
from .base import BaseService
from .identity_service import AuthUser
from .pricing_service import PriceQuote
from .waiver_service import waiver_status_for

logger = logging.getLogger(__name__)


@dataclass
class BookingDraft:
    """Everything the payment step needs to write a booking."""

    hike_id: str
    date: date
    time: str
    participants: List[Participant]
    booker_info: BookerInfo
    quote: PriceQuote
    booking_id: str = field(default_factory=generate_ulid)

    @property
    def number_of_participants(self) -> int:
        return len(self.participants)

    def participant_documents(self) -> List[Dict[str, Any]]:
        """Participant records with the primary contact's blanks filled from booker info."""
        documents = []
        for index, participant in enumerate(self.participants):
            document = participant.to_document()
            if index == 0:
                document["fullName"] = document["fullName"] or self.booker_info.full_name
                document["birthdate"] = document["birthdate"] or self.booker_info.birthdate
            documents.append(document)
        return documents


@dataclass(frozen=True)
class RosterRow:
    booking_id: str
    date: date
    time: str
    participant_index: int
    full_name: str
    birthdate: str
    waiver_signed: bool
    booker_email: str


class BookingService(BaseService):
    def __init__(
        self,
        db: Session,
        hike_repository: Optional[HikeRepository] = None,
        booking_repository: Optional[BookingRepository] = None,
    ):
        super().__init__(db)
        self.hike_repository = hike_repository or RepositoryFactory.create_hike_repository(db)
        self.booking_repository = (
            booking_repository or RepositoryFactory.create_booking_repository(db)
        )

    def get_hike(self, hike_id: str) -> Hike:
        hike = self.hike_repository.get_by_id(hike_id)
        if hike is None:
            raise NotFoundException(
                "Hike not found", code="HIKE_NOT_FOUND", details={"hike_id": hike_id}
            )
        return hike

    def list_hikes(self, skip: int = 0, limit: int = 100) -> List[Hike]:
        return self.hike_repository.list_hikes(skip=skip, limit=limit)

    def list_guide_hikes(self, user: AuthUser) -> List[Hike]:
        """Hikes currently assigned to the calling guide."""
        if not user.has_role(RoleName.GUIDE):
            raise ForbiddenException("Only guides have assigned hikes")
        return self.hike_repository.list_assigned_to(user.uid)

    @BaseService.measure_operation("create_booking")
    def create_booking(self, draft: BookingDraft, user: AuthUser) -> Booking:
        """
        Reserve seats and write the booking in one transaction.

        Raises:
            ValidationException: booker name or email missing
            CapacityExceededException: the hike no longer has enough seats
        """
        hike = self.get_hike(draft.hike_id)
        booker = draft.booker_info
        if not booker.full_name or not booker.email:
            raise ValidationException(
                "Missing required booking information", code="MISSING_BOOKER_INFO"
            )
        if draft.number_of_participants < 1:
            raise ValidationException("At least 1 participant is required")

        participants = draft.participant_documents()
        waiver_status = waiver_status_for(Participant.model_validate(p) for p in participants)

        with self.transaction():
            if not self.hike_repository.reserve_seats(hike.id, draft.number_of_participants):
                raise CapacityExceededException(hike.id, draft.number_of_participants)
            booking = self.booking_repository.create(
                id=draft.booking_id,
                hike_id=hike.id,
                user_id=user.uid,
                user_email=user.email or booker.email,
                title=hike.title,
                date=draft.date,
                time=draft.time,
                duration=hike.duration,
                location=hike.location,
                participants=participants,
                number_of_participants=draft.number_of_participants,
                booker_info=booker.model_dump(by_alias=True),
                price=draft.quote.price,
                tax=draft.quote.tax,
                total_amount=draft.quote.total_amount,
                status=BookingStatus.UPCOMING.value,
                waiver_status=waiver_status.value,
            )

        self.log_operation(
            "create_booking",
            booking_id=booking.id,
            hike_id=hike.id,
            participants=draft.number_of_participants,
        )
        return booking

    def get_booking(self, booking_id: str, user: AuthUser) -> Booking:
        booking = self.booking_repository.get_by_id(booking_id, load_relationships=False)
        if booking is None:
            raise NotFoundException(
                "Booking not found", code="BOOKING_NOT_FOUND", details={"booking_id": booking_id}
            )
        if booking.user_id != user.uid and not user.has_role(RoleName.ADMIN):
            raise ForbiddenException("You do not have access to this booking")
        return booking

    def list_bookings(
        self, user: AuthUser, status: Optional[BookingStatus] = None
    ) -> List[Booking]:
        bookings = self.booking_repository.list_for_user(user.uid)
        if status is not None:
            bookings = [b for b in bookings if b.status == status.value]
        return bookings

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(
        self, booking_id: str, user: AuthUser, now: Optional[datetime] = None
    ) -> None:
        """
        Cancel a booking: give its seats back and delete it.

        Refused without any change when the hike starts within the notice window.
        """
        booking = self.get_booking(booking_id, user)
        current = now or datetime.now(timezone.utc)
        try:
            starts_at = occurrence_start(booking.date, booking.time)
        except ValueError:
            raise ValidationException(
                "Booking has an unrecognised time slot",
                code="INVALID_TIME_SLOT",
                details={"time": booking.time},
            )

        hours_until = (starts_at - current).total_seconds() / 3600
        if hours_until < settings.cancellation_notice_hours:
            raise CancellationWindowException(settings.cancellation_notice_hours, hours_until)

        with self.transaction():
            if not self.hike_repository.release_seats(
                booking.hike_id, booking.number_of_participants
            ):
                raise ConflictException(
                    "Hike seat count is out of step with its bookings",
                    code="SEAT_RELEASE_FAILED",
                    details={"hike_id": booking.hike_id},
                )
            self.booking_repository.delete(booking.id)

        self.log_operation(
            "cancel_booking",
            booking_id=booking_id,
            hike_id=booking.hike_id,
            participants=booking.number_of_participants,
        )

    def get_hike_roster(self, hike_id: str, user: AuthUser) -> List[RosterRow]:
        """Flattened participant list for the hike's guide or an admin."""
        hike = self.get_hike(hike_id)
        is_guide_for_hike = (
            user.has_role(RoleName.GUIDE) and hike.assigned_guide_id == user.uid
        )
        if not (user.has_role(RoleName.ADMIN) or is_guide_for_hike):
            raise ForbiddenException("Only the assigned guide or an admin can view this roster")

        rows = []
        for booking in self.booking_repository.list_for_hike(hike.id):
            for index, entry in enumerate(booking.participant_entries):
                participant = Participant.model_validate(entry)
                rows.append(
                    RosterRow(
                        booking_id=booking.id,
                        date=booking.date,
                        time=booking.time,
                        participant_index=index,
                        full_name=participant.full_name,
                        birthdate=participant.birthdate,
                        waiver_signed=participant.waiver_signed,
                        booker_email=booking.user_email,
                    )
                )
        return rows

    @BaseService.measure_operation("mark_past_bookings_completed")
    def mark_past_bookings_completed(self, today: Optional[date] = None) -> int:
        """Flip upcoming bookings dated before today to completed."""
        cutoff = today or get_site_today()
        with self.transaction():
            bookings = self.booking_repository.list_upcoming_before(cutoff)
            for booking in bookings:
                booking.status = BookingStatus.COMPLETED.value
            self.booking_repository.flush()
        if bookings:
            self.log_operation("mark_past_bookings_completed", count=len(bookings))
        return len(bookings)
