"""BookingWizard driven end to end against SQLite."""

from datetime import date
from decimal import Decimal

import pytest

from trailblazers.core.exceptions import (
    AvailabilityException,
    HikeFullException,
    InvalidTransitionException,
    UnauthorizedException,
    ValidationException,
)
from trailblazers.models.booking import Booking
from trailblazers.services.auth_session import AuthSession
from trailblazers.services.booking_service import BookingService
from trailblazers.services.booking_wizard import BookingStep, BookingWizard
from trailblazers.services.identity_service import IdentityService

TODAY = date(2024, 6, 1)
MONDAY = date(2024, 6, 3)
STROKES = [[(10, 10), (90, 60), (180, 30)]]


@pytest.fixture
def session(db, guest):
    auth = AuthSession(IdentityService(db))
    auth.sign_in(guest.email, "trail-secret")
    yield auth
    auth.close()


@pytest.fixture
def hike(make_hike):
    return make_hike()


@pytest.fixture
def wizard(db, hike, session):
    return BookingWizard(hike, session, BookingService(db), today=TODAY)


def _to_payment(wizard, booker_info, count=2, sign=False):
    wizard.select_date(MONDAY)
    wizard.select_time("08:00")
    wizard.set_number_of_participants(count)
    wizard.next()
    wizard.set_booker_info(booker_info)
    for index in range(1, count):
        wizard.set_participant(index, f"Companion {index}", "01/01/2000")
    wizard.set_agree_to_terms(True)
    wizard.next()
    if sign:
        for index in range(count):
            wizard.sign_waiver(index, STROKES)
        wizard.next()
    else:
        wizard.skip_waivers()
    assert wizard.step == BookingStep.PAYMENT


class TestSelectParticipants:
    def test_available_dates_from_today(self, wizard):
        assert wizard.available_dates() == [
            date(2024, 6, 3),
            date(2024, 6, 7),
            date(2024, 6, 10),
            date(2024, 6, 14),
        ]

    def test_participants_clamped_to_remaining_seats(self, db, make_hike, session):
        hike = make_hike(max_participants=10, current_participants=8)
        wizard = BookingWizard(hike, session, BookingService(db), today=TODAY)

        assert wizard.max_selectable_participants == 2
        assert wizard.set_number_of_participants(5) == 2
        assert len(wizard.participants) == 2
        assert wizard.set_number_of_participants(0) == 1
        assert len(wizard.participants) == 1

    def test_participants_clamped_to_ten(self, db, make_hike, session):
        hike = make_hike(max_participants=40)
        wizard = BookingWizard(hike, session, BookingService(db), today=TODAY)

        assert wizard.set_number_of_participants(25) == 10

    def test_quote_follows_participant_count(self, wizard):
        wizard.set_number_of_participants(2)

        shown = wizard.quote.rounded()
        assert (shown.price, shown.tax, shown.total_amount) == (
            Decimal("159.98"),
            Decimal("20.80"),
            Decimal("180.78"),
        )

    def test_full_hike_refuses_wizard(self, db, make_hike, session):
        hike = make_hike(max_participants=4, current_participants=4)

        with pytest.raises(HikeFullException):
            BookingWizard(hike, session, BookingService(db), today=TODAY)

    def test_date_must_match_schedule(self, wizard):
        with pytest.raises(AvailabilityException):
            wizard.select_date(date(2024, 6, 4))  # Tuesday
        with pytest.raises(AvailabilityException):
            wizard.select_date(date(2024, 6, 21))  # after end date

    def test_time_must_be_offered(self, wizard):
        with pytest.raises(AvailabilityException):
            wizard.select_time("17:00")

    def test_next_requires_date_and_time(self, wizard):
        wizard.select_date(MONDAY)

        with pytest.raises(AvailabilityException):
            wizard.next()
        assert wizard.step == BookingStep.SELECT_PARTICIPANTS


class TestEnterInformation:
    def test_participant_list_matches_count(self, wizard, booker_info):
        wizard.select_date(MONDAY)
        wizard.select_time("13:00")
        wizard.set_number_of_participants(3)
        wizard.next()

        assert len(wizard.participants) == 3

        wizard.set_booker_info(booker_info)
        wizard.set_participant(1, "Sam Walker", "11/02/2012")
        wizard.set_participant(2, "Jo Walker", "23/09/2015")
        wizard.set_agree_to_terms(True)
        wizard.next()

        assert wizard.step == BookingStep.WAIVERS
        assert len(wizard.participants) == 3
        assert wizard.participants[0].full_name == "Alex Walker"
        assert wizard.participants[0].birthdate == "04/07/1990"

    def test_field_errors_are_reported_by_path(self, wizard):
        wizard.select_date(MONDAY)
        wizard.select_time("08:00")
        wizard.set_number_of_participants(2)
        wizard.next()
        wizard.set_booker_info(
            {
                "fullName": "Alex Walker",
                "email": "not-an-email",
                "phone": "416",
                "address": "12 Trailhead Road",
                "birthdate": "1990-07-04",
            }
        )

        with pytest.raises(ValidationException) as exc:
            wizard.next()

        fields = exc.value.field_errors
        assert fields["bookerInfo.email"] == "Invalid email address"
        assert fields["bookerInfo.phone"] == "Phone number is required"
        assert fields["bookerInfo.birthdate"] == "Date must be in DD/MM/YYYY format"
        assert fields["agreeToTerms"] == "You must agree to the terms and conditions"
        assert fields["participants.1.fullName"] == "Full name is required"
        assert "bookerInfo.fullName" not in fields
        assert wizard.step == BookingStep.ENTER_INFORMATION

    def test_back_keeps_entered_data(self, wizard, booker_info):
        wizard.select_date(MONDAY)
        wizard.select_time("08:00")
        wizard.next()
        wizard.set_booker_info(booker_info)

        assert wizard.back() == BookingStep.SELECT_PARTICIPANTS
        assert wizard.selected_date == MONDAY
        assert wizard.booker_info == booker_info


class TestTransitions:
    def test_back_not_allowed_from_first_step(self, wizard):
        with pytest.raises(InvalidTransitionException):
            wizard.back()

    def test_back_not_allowed_from_payment(self, wizard, booker_info):
        _to_payment(wizard, booker_info)

        with pytest.raises(InvalidTransitionException):
            wizard.back()

    def test_skip_waivers_returns_notices(self, wizard, booker_info):
        wizard.select_date(MONDAY)
        wizard.select_time("08:00")
        wizard.next()
        wizard.set_booker_info(booker_info)
        wizard.set_agree_to_terms(True)
        wizard.next()

        notices = wizard.skip_waivers()

        assert wizard.step == BookingStep.PAYMENT
        assert notices == [
            "You can complete the waivers later from your dashboard",
            "All waivers must be completed before the hike begins",
        ]

    def test_waiver_actions_only_on_waiver_step(self, wizard):
        with pytest.raises(InvalidTransitionException):
            wizard.toggle_waiver(0)


class TestPayment:
    def test_skipped_waivers_leave_booking_pending(self, db, wizard, booker_info, hike, guest):
        _to_payment(wizard, booker_info, count=2)

        booking = wizard.submit_payment()

        assert wizard.step == BookingStep.CONFIRMATION
        assert wizard.confirmation_code == booking.id[-8:].upper()
        assert booking.user_id == guest.id
        assert booking.waiver_status == "pending"
        assert booking.number_of_participants == 2
        assert [p["waiverSigned"] for p in booking.participants] == [False, False]
        assert booking.participants[0]["fullName"] == "Alex Walker"
        db.refresh(hike)
        assert hike.current_participants == 2

    def test_signed_waivers_are_persisted(self, db, wizard, booker_info):
        _to_payment(wizard, booker_info, count=2, sign=True)

        booking = wizard.submit_payment()

        stored = db.get(Booking, booking.id)
        assert stored.waiver_status == "completed"
        assert all(p["waiverSigned"] for p in stored.participants)
        assert all(
            p["signatureData"].startswith("data:image/png;base64,") for p in stored.participants
        )

    def test_money_stored_unrounded(self, db, wizard, booker_info):
        _to_payment(wizard, booker_info, count=2)

        booking = wizard.submit_payment()

        stored = db.get(Booking, booking.id)
        assert Decimal(str(stored.price)) == Decimal("159.98")
        assert Decimal(str(stored.tax)) == Decimal("20.7974")
        assert Decimal(str(stored.total_amount)) == Decimal("180.7774")

    def test_payment_requires_signed_in_user(self, db, hike, booker_info):
        anonymous = AuthSession(IdentityService(db)).start()
        wizard = BookingWizard(hike, anonymous, BookingService(db), today=TODAY)
        _to_payment(wizard, booker_info, count=1)

        with pytest.raises(UnauthorizedException):
            wizard.submit_payment()
        assert wizard.step == BookingStep.PAYMENT
        assert db.query(Booking).count() == 0
