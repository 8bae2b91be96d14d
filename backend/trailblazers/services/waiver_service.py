# backend/trailblazers/services/waiver_service.py
"""
Waiver signing.

``WaiverSigner`` tracks the per-participant panels (open/closed) and
signature pads over a participant list. The booking wizard embeds one; the
standalone flow in ``WaiverService`` builds one over a stored booking's
participants and persists each signature as it is submitted.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set

from sqlalchemy.orm import Session

from ..core.enums import RoleName, WaiverStatus
from ..core.exceptions import (
    ForbiddenException,
    NotFoundException,
    SignatureRequiredException,
    ValidationException,
)
from ..models.booking import Booking
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..schemas.booking import Participant
from .base import BaseService
from .identity_service import AuthUser
from .signature_pad import Point, SignaturePad


def waiver_status_for(participants: Iterable[Participant]) -> WaiverStatus:
    """COMPLETED iff there is at least one participant and every one has signed."""
    entries = list(participants)
    if entries and all(p.waiver_signed for p in entries):
        return WaiverStatus.COMPLETED
    return WaiverStatus.PENDING


class WaiverSigner:
    def __init__(self, participants: List[Participant]):
        self.participants = participants
        self._open: Set[int] = set()
        self._pads: Dict[int, SignaturePad] = {}
        self.signing_index: Optional[int] = None

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.participants):
            raise ValidationException(
                "No such participant",
                code="INVALID_PARTICIPANT",
                details={"participant_index": index, "participants": len(self.participants)},
            )

    def is_open(self, index: int) -> bool:
        return index in self._open

    @property
    def open_panels(self) -> List[int]:
        return sorted(self._open)

    def toggle(self, index: int) -> bool:
        """
        Open or close a participant's panel; the signature surface is reset
        either way. Returns whether the panel is now open.
        """
        self._check_index(index)
        self._pads[index] = SignaturePad()
        if index in self._open:
            self._open.discard(index)
            if self.signing_index == index:
                self.signing_index = None
            return False
        self._open.add(index)
        self.signing_index = index
        return True

    def pad(self, index: int) -> SignaturePad:
        self._check_index(index)
        if index not in self._open:
            raise ValidationException(
                "Open the waiver before signing",
                code="WAIVER_NOT_OPEN",
                details={"participant_index": index},
            )
        return self._pads.setdefault(index, SignaturePad())

    def submit(self, index: int) -> Participant:
        """Record the drawn signature for a participant and close the panel."""
        pad = self.pad(index)
        signature = pad.to_data_url()
        if signature is None:
            raise SignatureRequiredException()

        participant = self.participants[index]
        participant.waiver_signed = True
        participant.signature_data = signature
        self._open.discard(index)
        self._pads.pop(index, None)
        if self.signing_index == index:
            self.signing_index = None
        return participant

    def sign(self, index: int, strokes: Iterable[Sequence[Point]]) -> Participant:
        """Open the panel if needed, replay the strokes and submit."""
        if not self.is_open(index):
            self.toggle(index)
        pad = self.pad(index)
        pad.clear()
        for stroke in strokes:
            points = list(stroke)
            if not points:
                continue
            pad.pointer_down(*points[0])
            for point in points[1:]:
                pad.pointer_move(*point)
            pad.pointer_up()
        return self.submit(index)

    @property
    def all_signed(self) -> bool:
        return waiver_status_for(self.participants) == WaiverStatus.COMPLETED

    @property
    def waiver_status(self) -> WaiverStatus:
        return waiver_status_for(self.participants)


@dataclass(frozen=True)
class WaiverResult:
    booking: Booking
    participant_index: int
    waiver_status: WaiverStatus

    @property
    def all_signed(self) -> bool:
        # Caller sends the guest back to the dashboard when True
        return self.waiver_status == WaiverStatus.COMPLETED


class WaiverService(BaseService):
    """Post-booking waiver signing from the guest dashboard."""

    def __init__(self, db: Session, booking_repository: Optional[BookingRepository] = None):
        super().__init__(db)
        self.booking_repository = (
            booking_repository or RepositoryFactory.create_booking_repository(db)
        )

    def _load_booking(self, booking_id: str, user: AuthUser, for_update: bool = False) -> Booking:
        if for_update:
            booking = self.booking_repository.get_for_update(booking_id)
        else:
            booking = self.booking_repository.get_by_id(booking_id, load_relationships=False)
        if booking is None:
            raise NotFoundException(
                "Booking not found", code="BOOKING_NOT_FOUND", details={"booking_id": booking_id}
            )
        if booking.user_id != user.uid and not user.has_role(RoleName.ADMIN):
            raise ForbiddenException("You can only sign waivers for your own bookings")
        return booking

    def pending_participants(self, booking_id: str, user: AuthUser) -> List[int]:
        booking = self._load_booking(booking_id, user)
        return [
            index
            for index, entry in enumerate(booking.participant_entries)
            if not Participant.model_validate(entry).waiver_signed
        ]

    @BaseService.measure_operation("submit_waiver")
    def submit_waiver(
        self,
        booking_id: str,
        participant_index: int,
        strokes: Iterable[Sequence[Point]],
        user: AuthUser,
    ) -> WaiverResult:
        """
        Sign one participant's waiver on a stored booking.

        The booking row is locked for the whole read-sign-write, so
        concurrent signatures on the same booking are applied one after the
        other and none is lost.
        """
        with self.transaction():
            booking = self._load_booking(booking_id, user, for_update=True)
            participants = [Participant.model_validate(p) for p in booking.participant_entries]
            signer = WaiverSigner(participants)
            signer.sign(participant_index, strokes)
            status = signer.waiver_status
            booking = self.booking_repository.update_participants(
                booking_id,
                [p.to_document() for p in participants],
                status.value,
            )

        self.log_operation(
            "submit_waiver",
            booking_id=booking_id,
            participant_index=participant_index,
            waiver_status=status.value,
        )
        return WaiverResult(
            booking=booking, participant_index=participant_index, waiver_status=status
        )
