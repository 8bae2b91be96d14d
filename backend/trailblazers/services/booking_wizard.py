# backend/trailblazers/services/booking_wizard.py
"""
Booking wizard state machine.

Drives one guest through SelectParticipants -> EnterInformation -> Waivers
-> Payment -> Confirmation for a single hike, accumulating the booking
draft. Forward moves validate the current step; ``back`` is allowed only
from EnterInformation and Waivers; ``skip_waivers`` jumps from Waivers to
Payment without signing. Capacity is only consumed when the payment step
persists the booking.
"""

from datetime import date
from enum import IntEnum
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import ValidationError

from ..core.config import settings
from ..core.constants import (
    MIN_PARTICIPANTS_PER_BOOKING,
    WAIVER_SKIP_DETAIL,
    WAIVER_SKIP_NOTICE,
)
from ..core.exceptions import (
    AvailabilityException,
    CapacityExceededException,
    HikeFullException,
    InvalidTransitionException,
    ValidationException,
)
from ..core.ulid_helper import confirmation_code
from ..models.booking import Booking
from ..models.hike import Hike
from ..schemas.booking import (
    AGREE_TO_TERMS_MESSAGE,
    BookerInfo,
    Participant,
    ParticipantInfo,
    field_errors,
)
from .auth_session import AuthSession
from .availability_service import AvailabilityCalculator
from .booking_service import BookingDraft, BookingService
from .pricing_service import PriceQuote, quote
from .waiver_service import WaiverSigner

logger = logging.getLogger(__name__)


class BookingStep(IntEnum):
    SELECT_PARTICIPANTS = 0
    ENTER_INFORMATION = 1
    WAIVERS = 2
    PAYMENT = 3
    CONFIRMATION = 4


class BookingWizard:
    def __init__(
        self,
        hike: Hike,
        session: AuthSession,
        booking_service: BookingService,
        *,
        today: Optional[date] = None,
    ):
        self.hike = hike
        self.session = session
        self.booking_service = booking_service
        self.today = today
        self.calendar = AvailabilityCalculator.for_hike(hike)

        if self.max_selectable_participants <= 0:
            logger.info("Hike %s is full; wizard refused", hike.id)
            raise HikeFullException(hike.id)

        self.step = BookingStep.SELECT_PARTICIPANTS
        self.selected_date: Optional[date] = None
        self.selected_time: Optional[str] = None
        self.number_of_participants = MIN_PARTICIPANTS_PER_BOOKING
        self.participants: List[Participant] = [Participant()]
        self.booker_info: Dict[str, Any] = {}
        self.agree_to_terms = False
        self.quote: PriceQuote = quote(hike.unit_price, self.number_of_participants)
        self.waivers = WaiverSigner(self.participants)
        self.waivers_skipped = False
        self.notices: List[str] = []
        self.booking: Optional[Booking] = None
        self._draft: Optional[BookingDraft] = None

    # Derived state

    @property
    def remaining_spots(self) -> int:
        return self.hike.remaining_spots

    @property
    def max_selectable_participants(self) -> int:
        return min(settings.max_participants_per_booking, self.remaining_spots)

    def available_dates(self) -> List[date]:
        return self.calendar.selectable_dates(self.today)

    @property
    def confirmation_code(self) -> Optional[str]:
        return confirmation_code(self.booking.id) if self.booking else None

    def _require_step(self, expected: BookingStep, action: str) -> None:
        if self.step != expected:
            raise InvalidTransitionException(self.step.name, action)

    # SelectParticipants

    def select_date(self, selected: date) -> None:
        self._require_step(BookingStep.SELECT_PARTICIPANTS, "select a date")
        if not self.calendar.is_selectable(selected, self.today):
            raise AvailabilityException(
                "This date is not available for booking",
                details={"date": selected.isoformat()},
            )
        self.selected_date = selected

    def select_time(self, slot: str) -> None:
        self._require_step(BookingStep.SELECT_PARTICIPANTS, "select a time")
        if slot not in (self.hike.times or []):
            raise AvailabilityException(
                "This time is not offered for this hike", details={"time": slot}
            )
        self.selected_time = slot

    def set_number_of_participants(self, requested: int) -> int:
        """
        Clamp to [1, min(10, remaining seats)], reprice and resize the
        participant list. Returns the value actually applied.
        """
        self._require_step(BookingStep.SELECT_PARTICIPANTS, "change participants")
        upper = self.max_selectable_participants
        if upper <= 0:
            raise HikeFullException(self.hike.id)
        count = max(MIN_PARTICIPANTS_PER_BOOKING, min(int(requested), upper))
        if count != requested:
            logger.debug("Participants clamped from %s to %s", requested, count)

        self.number_of_participants = count
        self.quote = quote(self.hike.unit_price, count)
        self._resize_participants(count)
        return count

    def _resize_participants(self, count: int) -> None:
        # In place: the waiver signer shares this list
        if len(self.participants) > count:
            del self.participants[count:]
        while len(self.participants) < count:
            self.participants.append(Participant())

    # EnterInformation

    def set_booker_info(self, info: Mapping[str, Any]) -> None:
        self._require_step(BookingStep.ENTER_INFORMATION, "edit booker information")
        self.booker_info = dict(info)

    def set_participant(self, index: int, full_name: str, birthdate: str) -> None:
        self._require_step(BookingStep.ENTER_INFORMATION, "edit participants")
        if not 0 <= index < len(self.participants):
            raise ValidationException(
                "No such participant",
                code="INVALID_PARTICIPANT",
                details={"participant_index": index},
            )
        participant = self.participants[index]
        participant.full_name = full_name
        participant.birthdate = birthdate

    def set_agree_to_terms(self, agreed: bool) -> None:
        self._require_step(BookingStep.ENTER_INFORMATION, "accept terms")
        self.agree_to_terms = bool(agreed)

    def _validate_information(self) -> BookerInfo:
        errors: Dict[str, str] = {}
        booker: Optional[BookerInfo] = None
        try:
            booker = BookerInfo.model_validate(self.booker_info)
        except ValidationError as exc:
            errors.update(field_errors(exc, prefix="bookerInfo."))

        if not self.agree_to_terms:
            errors["agreeToTerms"] = AGREE_TO_TERMS_MESSAGE

        # The primary participant is taken from the booker
        for index in range(1, len(self.participants)):
            participant = self.participants[index]
            try:
                ParticipantInfo(
                    full_name=participant.full_name, birthdate=participant.birthdate
                )
            except ValidationError as exc:
                errors.update(field_errors(exc, prefix=f"participants.{index}."))

        if errors or booker is None:
            raise ValidationException(
                "Please fill in all required fields",
                code="VALIDATION_ERROR",
                details={"fields": errors},
            )
        return booker

    # Transitions

    def next(self) -> BookingStep:
        if self.step == BookingStep.SELECT_PARTICIPANTS:
            if self.selected_date is None or self.selected_time is None:
                raise AvailabilityException("Please select a date and time")
            if not self.calendar.is_selectable(self.selected_date, self.today):
                raise AvailabilityException(
                    "This date is not available for booking",
                    details={"date": self.selected_date.isoformat()},
                )
            if self.max_selectable_participants <= 0:
                raise HikeFullException(self.hike.id)
            self._resize_participants(self.number_of_participants)
            self.step = BookingStep.ENTER_INFORMATION
        elif self.step == BookingStep.ENTER_INFORMATION:
            booker = self._validate_information()
            primary = self.participants[0]
            primary.full_name = booker.full_name
            primary.birthdate = booker.birthdate
            self.step = BookingStep.WAIVERS
        elif self.step == BookingStep.WAIVERS:
            self.step = BookingStep.PAYMENT
        else:
            raise InvalidTransitionException(self.step.name, "continue")
        return self.step

    def back(self) -> BookingStep:
        if self.step not in (BookingStep.ENTER_INFORMATION, BookingStep.WAIVERS):
            raise InvalidTransitionException(self.step.name, "go back")
        self.step = BookingStep(self.step - 1)
        return self.step

    def skip_waivers(self) -> List[str]:
        """Go to Payment with every waiver left pending."""
        self._require_step(BookingStep.WAIVERS, "skip waivers")
        self.waivers_skipped = True
        self.notices = [WAIVER_SKIP_NOTICE, WAIVER_SKIP_DETAIL]
        self.step = BookingStep.PAYMENT
        return list(self.notices)

    # Waivers

    def toggle_waiver(self, index: int) -> bool:
        self._require_step(BookingStep.WAIVERS, "open a waiver")
        return self.waivers.toggle(index)

    def sign_waiver(self, index: int, strokes: Sequence[Sequence[Any]]) -> Participant:
        self._require_step(BookingStep.WAIVERS, "sign a waiver")
        return self.waivers.sign(index, strokes)

    def submit_waiver(self, index: int) -> Participant:
        self._require_step(BookingStep.WAIVERS, "submit a waiver")
        return self.waivers.submit(index)

    # Payment

    def build_draft(self) -> BookingDraft:
        """
        The booking to be written. The booking id is allocated once and kept
        across payment retries.
        """
        if self.selected_date is None or self.selected_time is None:
            raise AvailabilityException("Please select a date and time")
        booker = BookerInfo.model_validate(self.booker_info)
        if self._draft is None:
            self._draft = BookingDraft(
                hike_id=self.hike.id,
                date=self.selected_date,
                time=self.selected_time,
                participants=self.participants,
                booker_info=booker,
                quote=self.quote,
            )
        else:
            self._draft.participants = self.participants
            self._draft.booker_info = booker
            self._draft.quote = self.quote
        return self._draft

    def submit_payment(self) -> Booking:
        """
        Persist the booking and move to Confirmation.

        On any failure the wizard stays at Payment and the error propagates.
        """
        self._require_step(BookingStep.PAYMENT, "pay")
        user = self.session.require_user()
        draft = self.build_draft()
        try:
            booking = self.booking_service.create_booking(draft, user)
        except Exception:
            logger.warning(
                "Booking %s for hike %s failed at payment", draft.booking_id, self.hike.id
            )
            raise
        self.booking = booking
        self.step = BookingStep.CONFIRMATION
        logger.info("Booking %s confirmed for hike %s", booking.id, self.hike.id)
        return booking


def replay_booking(
    wizard: BookingWizard,
    *,
    selected_date: date,
    selected_time: str,
    number_of_participants: int,
    booker_info: Mapping[str, Any],
    participants: Sequence[Mapping[str, Any]] = (),
    agree_to_terms: bool = False,
    waivers: Sequence[Any] = (),
) -> Booking:
    """
    Drive a fresh wizard through every step from a complete draft.

    ``participants`` holds name/birthdate entries by position (the primary
    entry is taken from the booker). ``waivers`` carries signed waivers as
    objects with ``participant_index`` and ``strokes``; with none given the
    waiver step is skipped. A group larger than the seats left is refused
    rather than clamped.
    """
    if number_of_participants > settings.max_participants_per_booking:
        raise ValidationException(
            f"At most {settings.max_participants_per_booking} participants per booking",
            code="TOO_MANY_PARTICIPANTS",
            details={"number_of_participants": number_of_participants},
        )
    wizard.select_date(selected_date)
    wizard.select_time(selected_time)
    applied = wizard.set_number_of_participants(number_of_participants)
    if applied < number_of_participants:
        raise CapacityExceededException(wizard.hike.id, number_of_participants)
    wizard.next()

    wizard.set_booker_info(booker_info)
    for index in range(1, len(wizard.participants)):
        entry = participants[index] if index < len(participants) else {}
        wizard.set_participant(
            index,
            str(entry.get("fullName", entry.get("full_name", "")) or ""),
            str(entry.get("birthdate", "") or ""),
        )
    wizard.set_agree_to_terms(agree_to_terms)
    wizard.next()

    if waivers:
        for waiver in waivers:
            wizard.sign_waiver(waiver.participant_index, waiver.strokes)
        wizard.next()
    else:
        wizard.skip_waivers()

    return wizard.submit_payment()
