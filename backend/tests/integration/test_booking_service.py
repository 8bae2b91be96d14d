"""BookingService against SQLite: seat accounting, cancellation and rosters."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from trailblazers.core.enums import BookingStatus
from trailblazers.core.exceptions import (
    CancellationWindowException,
    CapacityExceededException,
    ForbiddenException,
    NotFoundException,
)
from trailblazers.models.booking import Booking
from trailblazers.schemas.booking import BookerInfo, Participant
from trailblazers.services.auth_session import AuthSession
from trailblazers.services.booking_service import BookingDraft, BookingService
from trailblazers.services.booking_wizard import BookingStep, BookingWizard
from trailblazers.services.identity_service import AuthUser, IdentityService
from trailblazers.services.pricing_service import quote

TODAY = date(2024, 6, 1)


@pytest.fixture
def service(db):
    return BookingService(db)


def _draft(hike, booker_info, count=1, when=date(2024, 6, 10), slot="08:00"):
    return BookingDraft(
        hike_id=hike.id,
        date=when,
        time=slot,
        participants=[Participant() for _ in range(count)],
        booker_info=BookerInfo.model_validate(booker_info),
        quote=quote(hike.unit_price, count),
    )


def _wizard_at_payment(db, hike, user, booker_info):
    session = AuthSession(IdentityService(db)).start()
    session.sign_in(user.email, "trail-secret")
    wizard = BookingWizard(hike, session, BookingService(db), today=TODAY)
    wizard.select_date(date(2024, 6, 3))
    wizard.select_time("08:00")
    wizard.set_number_of_participants(1)
    wizard.next()
    wizard.set_booker_info(booker_info)
    wizard.set_agree_to_terms(True)
    wizard.next()
    wizard.skip_waivers()
    return wizard


class TestCreateBooking:
    def test_primary_participant_filled_from_booker(self, service, make_hike, guest_principal, booker_info):
        hike = make_hike()

        booking = service.create_booking(_draft(hike, booker_info, count=2), guest_principal)

        assert booking.participants[0]["fullName"] == "Alex Walker"
        assert booking.participants[0]["birthdate"] == "04/07/1990"
        assert booking.participants[1]["fullName"] == ""
        assert booking.user_email == "guest@example.com"
        assert booking.status == BookingStatus.UPCOMING.value

    def test_last_seat_race_has_one_winner(self, db, make_hike, make_user, booker_info):
        hike = make_hike(max_participants=1)
        first_guest = make_user(email="first@example.com")
        second_guest = make_user(email="second@example.com")

        first = _wizard_at_payment(db, hike, first_guest, booker_info)
        second = _wizard_at_payment(db, hike, second_guest, booker_info)
        assert first.step == second.step == BookingStep.PAYMENT

        first.submit_payment()
        with pytest.raises(CapacityExceededException):
            second.submit_payment()

        db.refresh(hike)
        assert hike.current_participants == 1
        assert db.query(Booking).count() == 1
        assert second.step == BookingStep.PAYMENT
        assert first.step == BookingStep.CONFIRMATION

    def test_retry_keeps_booking_id(self, db, make_hike, guest, booker_info):
        hike = make_hike()
        wizard = _wizard_at_payment(db, hike, guest, booker_info)

        first_draft = wizard.build_draft()
        assert wizard.build_draft().booking_id == first_draft.booking_id
        booking = wizard.submit_payment()
        assert booking.id == first_draft.booking_id

    def test_capacity_never_exceeded(self, service, make_hike, guest_principal, booker_info):
        hike = make_hike(max_participants=3, current_participants=2)

        with pytest.raises(CapacityExceededException):
            service.create_booking(_draft(hike, booker_info, count=2), guest_principal)

        service.db.refresh(hike)
        assert hike.current_participants == 2


class TestCancelBooking:
    def test_cancel_inside_window_changes_nothing(self, db, service, make_hike, guest_principal, booker_info):
        hike = make_hike()
        booking = service.create_booking(_draft(hike, booker_info, count=2), guest_principal)
        # 2024-06-10 08:00 Toronto is 12:00 UTC, ten hours away
        now = datetime(2024, 6, 10, 2, 0, tzinfo=timezone.utc)

        with pytest.raises(CancellationWindowException) as exc:
            service.cancel_booking(booking.id, guest_principal, now=now)

        assert exc.value.details == {"required_hours": 24, "provided_hours": 10.0}
        db.refresh(hike)
        assert hike.current_participants == 2
        assert db.get(Booking, booking.id) is not None

    def test_cancel_outside_window_releases_seats(self, db, service, make_hike, guest_principal, booker_info):
        hike = make_hike()
        booking = service.create_booking(_draft(hike, booker_info, count=2), guest_principal)
        now = datetime(2024, 6, 8, 12, 0, tzinfo=timezone.utc)

        service.cancel_booking(booking.id, guest_principal, now=now)

        db.refresh(hike)
        assert hike.current_participants == 0
        assert db.get(Booking, booking.id) is None

    def test_only_owner_can_cancel(self, service, make_hike, make_user, guest_principal, booker_info):
        hike = make_hike()
        booking = service.create_booking(_draft(hike, booker_info), guest_principal)
        stranger = AuthUser.from_user(make_user(email="stranger@example.com"))

        with pytest.raises(ForbiddenException):
            service.cancel_booking(
                booking.id, stranger, now=datetime(2024, 6, 1, tzinfo=timezone.utc)
            )

    def test_unknown_booking(self, service, guest_principal):
        with pytest.raises(NotFoundException):
            service.cancel_booking("01HZZZZZZZZZZZZZZZZZZZZZZZ", guest_principal)


class TestQueries:
    def test_list_bookings_filters_by_status(self, service, make_hike, guest_principal, booker_info):
        hike = make_hike()
        early = service.create_booking(
            _draft(hike, booker_info, when=date(2024, 6, 3)), guest_principal
        )
        service.create_booking(_draft(hike, booker_info, when=date(2024, 6, 14)), guest_principal)

        completed = service.mark_past_bookings_completed(today=date(2024, 6, 10))

        assert completed == 1
        done = service.list_bookings(guest_principal, status=BookingStatus.COMPLETED)
        assert [b.id for b in done] == [early.id]
        assert len(service.list_bookings(guest_principal)) == 2

    def test_mark_past_bookings_is_repeatable(self, service, make_hike, guest_principal, booker_info):
        hike = make_hike()
        service.create_booking(_draft(hike, booker_info, when=date(2024, 6, 3)), guest_principal)

        assert service.mark_past_bookings_completed(today=date(2024, 6, 10)) == 1
        assert service.mark_past_bookings_completed(today=date(2024, 6, 10)) == 0

    def test_roster_for_assigned_guide(self, db, service, make_hike, guide, guest_principal, booker_info):
        hike = make_hike(assigned_guide_id=guide.id)
        booking = service.create_booking(_draft(hike, booker_info, count=2), guest_principal)

        rows = service.get_hike_roster(hike.id, AuthUser.from_user(guide))

        assert [(r.booking_id, r.participant_index) for r in rows] == [
            (booking.id, 0),
            (booking.id, 1),
        ]
        assert rows[0].full_name == "Alex Walker"
        assert rows[0].booker_email == "guest@example.com"
        assert rows[0].waiver_signed is False

    def test_roster_refused_for_other_guide(self, service, make_hike, make_user, guide):
        from trailblazers.core.enums import RoleName

        other = make_user(email="other-guide@example.com", role=RoleName.GUIDE)
        hike = make_hike(assigned_guide_id=guide.id)

        with pytest.raises(ForbiddenException):
            service.get_hike_roster(hike.id, AuthUser.from_user(other))

    def test_roster_for_admin(self, service, make_hike, admin):
        hike = make_hike()

        assert service.get_hike_roster(hike.id, AuthUser.from_user(admin)) == []

    def test_guide_hikes(self, service, make_hike, guide, guest_principal):
        assigned = make_hike(assigned_guide_id=guide.id)
        make_hike(title="Unassigned")

        assert [h.id for h in service.list_guide_hikes(AuthUser.from_user(guide))] == [assigned.id]
        with pytest.raises(ForbiddenException):
            service.list_guide_hikes(guest_principal)

    def test_stored_money_is_unrounded(self, db, service, make_hike, guest_principal, booker_info):
        hike = make_hike()
        booking = service.create_booking(_draft(hike, booker_info, count=2), guest_principal)

        db.expire_all()
        stored = db.get(Booking, booking.id)
        assert Decimal(str(stored.tax)) == Decimal("20.7974")
