# backend/tests/unit/services/test_booking_service.py
"""
Tests for BookingService: confirmations, atomic cancellation and the
day, display and report listings.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import Mock

import pytest

from simbay.core.exceptions import (
    ForbiddenException,
    NotFoundException,
    RepositoryException,
    ServiceException,
    ValidationException,
)
from simbay.models import Booking, LedgerEntry
from simbay.principal import Actor, Capabilities
from simbay.services.booking_service import BookingService
from simbay.services.notification_service import BookingConfirmation


@pytest.fixture
def service(db):
    return BookingService(db)


class TestCreateBooking:
    def test_confirmation_handed_to_notify(self, service, member, member_actor, slot_start):
        notify = Mock()

        booking = service.create_booking(member_actor, "east", slot_start, notify=notify)

        notify.assert_called_once()
        payload = notify.call_args.args[0]
        assert isinstance(payload, BookingConfirmation)
        assert payload.recipient_email == member.email
        assert payload.recipient_name == member.name
        assert payload.start_time == booking.start_time
        assert payload.booked_by_name is None

    def test_admin_booking_names_the_admin(
        self, service, member, admin, admin_actor, slot_start
    ):
        notify = Mock()

        service.create_booking(
            admin_actor, "west", slot_start, target_user_id=member.id, notify=notify
        )

        payload = notify.call_args.args[0]
        assert payload.recipient_email == member.email
        assert payload.booked_by_name == admin.name

    def test_notify_failure_does_not_undo_booking(self, db, service, member_actor, slot_start):
        notify = Mock(side_effect=RuntimeError("queue down"))

        booking = service.create_booking(member_actor, "east", slot_start, notify=notify)

        assert db.get(Booking, booking.id) is not None


class TestCancelBooking:
    def test_removes_booking_and_its_guest_fees_only(
        self, db, service, member, other_member, member_actor, make_booking, make_entry, slot_start
    ):
        booking = make_booking(member, "east", slot_start)
        other_booking = make_booking(other_member, "west", slot_start)
        make_entry(member, "guest_fee", "20.00", booking=booking)
        make_entry(member, "guest_fee", "20.00", booking=booking)
        payment = make_entry(member, "payment", "-15.00")
        other_fee = make_entry(other_member, "guest_fee", "20.00", booking=other_booking)

        deleted = service.cancel_booking(booking.id, member_actor)

        assert deleted == 2
        assert db.get(Booking, booking.id) is None
        remaining = {entry.id for entry in db.query(LedgerEntry).all()}
        assert remaining == {payment.id, other_fee.id}

    def test_other_member_cannot_cancel(
        self, service, member, other_member, actor_for, make_booking, slot_start
    ):
        booking = make_booking(member, "east", slot_start)

        with pytest.raises(ForbiddenException):
            service.cancel_booking(booking.id, actor_for(other_member))

    def test_admin_can_cancel_any_booking(
        self, db, service, member, admin_actor, make_booking, slot_start
    ):
        booking = make_booking(member, "east", slot_start)

        service.cancel_booking(booking.id, admin_actor)

        assert db.get(Booking, booking.id) is None

    def test_cancel_any_follows_its_own_capability(
        self, db, service, member, other_member, make_booking, slot_start
    ):
        booking = make_booking(member, "east", slot_start)
        booker = Actor(
            user_id=other_member.id,
            email=other_member.email,
            role="user",
            capabilities=Capabilities(can_book_for_others=True),
        )
        with pytest.raises(ForbiddenException):
            service.cancel_booking(booking.id, booker)

        desk = Actor(
            user_id=other_member.id,
            email=other_member.email,
            role="user",
            capabilities=Capabilities(can_cancel_any_booking=True),
        )
        service.cancel_booking(booking.id, desk)

        assert db.get(Booking, booking.id) is None

    def test_missing_booking(self, service, member_actor):
        with pytest.raises(NotFoundException):
            service.cancel_booking(999, member_actor)

    def test_fee_delete_failure_leaves_booking(
        self, db, service, member, member_actor, make_booking, make_entry, slot_start
    ):
        booking = make_booking(member, "east", slot_start)
        make_entry(member, "guest_fee", "20.00", booking=booking)
        service.ledger_repository.delete_guest_fees_for_booking = Mock(
            side_effect=RepositoryException("disk full")
        )

        with pytest.raises(ServiceException) as exc_info:
            service.cancel_booking(booking.id, member_actor)

        assert exc_info.value.code == "DEPENDENCY_FAILURE"
        assert db.query(Booking).filter(Booking.id == booking.id).count() == 1
        assert db.query(LedgerEntry).count() == 1

    def test_booking_delete_failure_restores_fees(
        self, db, service, member, member_actor, make_booking, make_entry, slot_start
    ):
        booking = make_booking(member, "east", slot_start)
        make_entry(member, "guest_fee", "20.00", booking=booking)
        service.booking_repository.delete = Mock(side_effect=RepositoryException("lock timeout"))

        with pytest.raises(ServiceException):
            service.cancel_booking(booking.id, member_actor)

        assert db.query(Booking).filter(Booking.id == booking.id).count() == 1
        assert db.query(LedgerEntry).filter(LedgerEntry.booking_id == booking.id).count() == 1


class TestListings:
    def test_day_uses_facility_calendar(self, service, member, other_member, make_booking):
        # 05:00 UTC on June 2 is still June 1 in Denver
        late_evening = make_booking(member, "east", datetime(2031, 6, 2, 5, 0, tzinfo=timezone.utc))
        morning = make_booking(other_member, "east", datetime(2031, 6, 2, 16, 0, tzinfo=timezone.utc))

        june_1 = service.get_bookings_for_day(None, date(2031, 6, 1))
        june_2 = service.get_bookings_for_day("east", date(2031, 6, 2))

        assert [b.id for b in june_1] == [late_evening.id]
        assert [b.id for b in june_2] == [morning.id]

    def test_day_filters_by_simulator(self, service, member, other_member, make_booking, slot_start):
        make_booking(member, "east", slot_start)
        west = make_booking(other_member, "west", slot_start)

        bookings = service.get_bookings_for_day("west", slot_start.date())

        assert [b.id for b in bookings] == [west.id]

    def test_display_rows_carry_member_name_only(self, service, member, make_booking, slot_start):
        make_booking(member, "east", slot_start)

        rows = service.get_display_bookings(None, slot_start.date())

        assert len(rows) == 1
        assert rows[0].member_name == member.name
        assert not hasattr(rows[0], "email")

    def test_user_bookings_upcoming_only(self, service, member, member_actor, make_booking, slot_start):
        make_booking(member, "east", datetime(2020, 1, 1, 15, 0, tzinfo=timezone.utc))
        upcoming = make_booking(member, "west", slot_start)

        assert [b.id for b in service.get_user_bookings(member_actor)] == [upcoming.id]
        assert len(service.get_user_bookings(member_actor, upcoming_only=False)) == 2


class TestReport:
    def test_report_totals_guest_fees(
        self, service, member, other_member, admin_actor, make_booking, make_entry, slot_start
    ):
        first = make_booking(member, "east", slot_start)
        second = make_booking(other_member, "west", slot_start + timedelta(days=1))
        make_entry(member, "guest_fee", "20.00", booking=first)
        make_entry(member, "guest_fee", "15.50", booking=first)

        rows = service.get_bookings_report(
            admin_actor, slot_start.date(), slot_start.date() + timedelta(days=1)
        )

        totals = {row.booking.id: row.guest_fee_total for row in rows}
        assert totals == {first.id: Decimal("35.50"), second.id: Decimal("0.00")}
        assert rows[0].booking.id == second.id

    def test_report_is_admin_only(self, service, member_actor, slot_start):
        with pytest.raises(ForbiddenException):
            service.get_bookings_report(member_actor, slot_start.date(), slot_start.date())

    def test_report_rejects_inverted_range(self, service, admin_actor, slot_start):
        with pytest.raises(ValidationException):
            service.get_bookings_report(
                admin_actor, slot_start.date(), slot_start.date() - timedelta(days=1)
            )
