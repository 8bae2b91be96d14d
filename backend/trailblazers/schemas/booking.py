# backend/trailblazers/schemas/booking.py
"""
Booking schemas.

``BookerInfo``, ``ParticipantInfo`` and ``Participant`` mirror the embedded
document shapes (camelCase keys). Field errors are reported with the stored
key names and the messages guests see in the wizard.
"""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ConfigDict, EmailStr, Field, ValidationError
from pydantic.alias_generators import to_camel

from ..core.constants import BIRTHDATE_FORMAT_MESSAGE, BIRTHDATE_PATTERN
from ._strict_base import DocumentModel, StrictModel, StrictRequestModel

FIELD_MESSAGES: Dict[str, str] = {
    "fullName": "Full name is required",
    "email": "Invalid email address",
    "phone": "Phone number is required",
    "address": "Address is required",
    "birthdate": BIRTHDATE_FORMAT_MESSAGE,
}

AGREE_TO_TERMS_MESSAGE = "You must agree to the terms and conditions"

Point = Tuple[float, float]


class BookerInfo(DocumentModel):
    """Contact details of the guest making the booking (primary participant)."""

    full_name: str = Field(..., min_length=2)
    email: EmailStr
    phone: str = Field(..., min_length=10)
    address: str = Field(..., min_length=5)
    birthdate: str = Field(..., pattern=BIRTHDATE_PATTERN)


class ParticipantInfo(DocumentModel):
    """Name and birthdate required for every non-primary participant."""

    full_name: str = Field(..., min_length=2)
    birthdate: str = Field(..., pattern=BIRTHDATE_PATTERN)


class Participant(DocumentModel):
    """A participant record embedded in a booking."""

    full_name: str = ""
    birthdate: str = ""
    waiver_signed: bool = False
    signature_data: Optional[str] = None

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


def field_errors(exc: ValidationError, prefix: str = "") -> Dict[str, str]:
    """
    Flatten a pydantic ValidationError into ``{"path.fieldName": message}``.

    Only the first error per field is kept.
    """
    errors: Dict[str, str] = {}
    for error in exc.errors():
        loc = error.get("loc") or ()
        name = str(loc[0]) if loc else "__root__"
        field = to_camel(name) if "_" in name.strip("_") else name
        path = f"{prefix}{field}"
        if path not in errors:
            errors[path] = FIELD_MESSAGES.get(field, error.get("msg", "Invalid value"))
    return errors


class WaiverSubmission(StrictRequestModel):
    """Free-hand signature strokes captured on the waiver panel."""

    strokes: List[List[Point]] = Field(default_factory=list)


class ParticipantWaiver(WaiverSubmission):
    participant_index: int = Field(..., ge=0)


class BookingCreate(StrictRequestModel):
    """
    A complete booking draft.

    The server replays the wizard steps on it: select, information,
    waivers (signed or skipped), then payment.
    """

    hike_id: str
    date: date
    time: str
    number_of_participants: int = Field(..., ge=1)
    booker_info: Dict[str, Any]
    participants: List[Dict[str, Any]] = Field(default_factory=list)
    agree_to_terms: bool = False
    waivers: List[ParticipantWaiver] = Field(default_factory=list)


class BookingResponse(StrictModel):
    """A stored booking with money rounded to cents."""

    model_config = ConfigDict(from_attributes=True, extra="forbid")

    id: str
    confirmation_code: str
    hike_id: str
    user_id: str
    user_email: str
    title: str
    date: date
    time: str
    duration: Optional[str] = None
    location: Optional[str] = None
    number_of_participants: int
    participants: List[Participant]
    booker_info: Dict[str, Any]
    price: Decimal
    tax: Decimal
    total_amount: Decimal
    status: str
    waiver_status: str
    created_at: Optional[datetime] = None


class BookingListResponse(StrictModel):
    bookings: List[BookingResponse]
    total: int


class WaiverSubmissionResponse(StrictModel):
    booking_id: str
    participant_index: int
    waiver_status: str
    all_signed: bool


class RosterEntry(StrictModel):
    """One participant row in a guide's hike roster."""

    booking_id: str
    date: date
    time: str
    participant_index: int
    full_name: str
    birthdate: str
    waiver_signed: bool
    booker_email: str


class HikeRosterResponse(StrictModel):
    hike_id: str
    entries: List[RosterEntry]
    total_participants: int


def booking_response(booking: Any) -> BookingResponse:
    """Response view of a stored booking; money is rounded to cents here."""
    price = _cents(booking.price)
    tax = _cents(booking.tax)
    return BookingResponse(
        id=booking.id,
        confirmation_code=booking.confirmation_code,
        hike_id=booking.hike_id,
        user_id=booking.user_id,
        user_email=booking.user_email,
        title=booking.title,
        date=booking.date,
        time=booking.time,
        duration=booking.duration,
        location=booking.location,
        number_of_participants=booking.number_of_participants,
        participants=[Participant.model_validate(p) for p in booking.participant_entries],
        booker_info=dict(booking.booker_info or {}),
        price=price,
        tax=tax,
        total_amount=price + tax,
        status=booking.status,
        waiver_status=booking.waiver_status,
        created_at=booking.created_at,
    )


def _cents(amount: Any) -> Decimal:
    return Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
