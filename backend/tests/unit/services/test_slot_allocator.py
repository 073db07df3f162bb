# backend/tests/unit/services/test_slot_allocator.py
"""
Tests for SlotAllocator: window arithmetic, overlap, quota, authorization
and mapping of storage-level constraint violations.
"""

from datetime import datetime, timedelta, timezone

import pytest

from simbay.core.config import Settings
from simbay.core.exceptions import (
    BookingConflictException,
    ForbiddenException,
    NotFoundException,
    QuotaExceededException,
    ServiceException,
    ValidationException,
)
from simbay.models import Booking
from simbay.services.slot_allocator import SlotAllocator


@pytest.fixture
def allocator(db):
    return SlotAllocator(db)


class TestAllocation:
    def test_books_a_two_hour_window(self, allocator, member, member_actor, slot_start):
        booking = allocator.try_allocate("east", slot_start, member_actor)

        assert booking.id is not None
        assert booking.user_id == member.id
        assert booking.simulator == "east"
        assert booking.start_time == slot_start
        assert booking.end_time == slot_start + timedelta(hours=2)

    def test_window_length_is_not_read_from_environment(
        self, allocator, member_actor, slot_start, monkeypatch
    ):
        monkeypatch.setenv("BOOKING_DURATION_HOURS", "3")

        assert not hasattr(Settings(), "booking_duration_hours")
        booking = allocator.try_allocate("east", slot_start, member_actor)
        assert booking.end_time - booking.start_time == timedelta(hours=2)

    def test_naive_start_is_read_as_utc(self, allocator, member_actor, slot_start):
        booking = allocator.try_allocate("west", slot_start.replace(tzinfo=None), member_actor)

        assert booking.start_time == slot_start

    def test_simulator_name_is_case_insensitive(self, allocator, member_actor, slot_start):
        booking = allocator.try_allocate(" West ", slot_start, member_actor)

        assert booking.simulator == "west"

    def test_unknown_simulator_rejected(self, allocator, member_actor, slot_start):
        with pytest.raises(ValidationException):
            allocator.try_allocate("north", slot_start, member_actor)

    @pytest.mark.parametrize("offset", [timedelta(minutes=30), timedelta(seconds=1)])
    def test_start_must_be_on_the_hour(self, allocator, member_actor, slot_start, offset):
        with pytest.raises(ValidationException) as exc_info:
            allocator.try_allocate("east", slot_start + offset, member_actor)

        assert exc_info.value.code == "VALIDATION_ERROR"


class TestOverlap:
    def test_start_inside_existing_window_conflicts(
        self, db, allocator, make_booking, other_member, member_actor, slot_start
    ):
        existing = make_booking(other_member, "east", slot_start)

        with pytest.raises(BookingConflictException) as exc_info:
            allocator.try_allocate("east", slot_start + timedelta(hours=1), member_actor)

        assert exc_info.value.code == "SLOT_CONFLICT"
        assert exc_info.value.details["conflicting_booking"]["id"] == existing.id
        assert db.query(Booking).count() == 1

    def test_window_covering_existing_start_conflicts(
        self, allocator, make_booking, other_member, member_actor, slot_start
    ):
        make_booking(other_member, "east", slot_start)

        with pytest.raises(BookingConflictException):
            allocator.try_allocate("east", slot_start - timedelta(hours=1), member_actor)

    def test_exact_same_start_conflicts(
        self, allocator, make_booking, other_member, member_actor, slot_start
    ):
        make_booking(other_member, "west", slot_start)

        with pytest.raises(BookingConflictException):
            allocator.try_allocate("west", slot_start, member_actor)

    def test_back_to_back_windows_are_allowed(
        self, allocator, make_booking, other_member, member_actor, slot_start
    ):
        make_booking(other_member, "east", slot_start)

        booking = allocator.try_allocate("east", slot_start + timedelta(hours=2), member_actor)

        assert booking.start_time == slot_start + timedelta(hours=2)

    def test_other_simulator_is_independent(
        self, allocator, make_booking, other_member, member_actor, slot_start
    ):
        make_booking(other_member, "east", slot_start)

        booking = allocator.try_allocate("west", slot_start, member_actor)

        assert booking.simulator == "west"


class TestQuota:
    def test_member_limited_to_one_upcoming_booking(
        self, allocator, make_booking, member, member_actor, slot_start
    ):
        existing = make_booking(member, "west", slot_start + timedelta(days=3))

        with pytest.raises(QuotaExceededException) as exc_info:
            allocator.try_allocate("east", slot_start, member_actor)

        assert exc_info.value.code == "QUOTA_EXCEEDED"
        assert exc_info.value.details["existing_booking_id"] == existing.id

    def test_finished_bookings_do_not_count(
        self, allocator, make_booking, member, member_actor, slot_start
    ):
        make_booking(member, "east", datetime(2020, 1, 1, 15, 0, tzinfo=timezone.utc))

        booking = allocator.try_allocate("east", slot_start, member_actor)

        assert booking.user_id == member.id

    def test_booking_in_progress_counts(self, db, make_booking, member, member_actor, slot_start):
        make_booking(member, "east", slot_start)
        during = SlotAllocator(db, clock=lambda: slot_start + timedelta(hours=1))

        with pytest.raises(QuotaExceededException):
            during.try_allocate("west", slot_start + timedelta(days=1), member_actor)

    def test_admin_is_exempt(self, allocator, admin, admin_actor, slot_start):
        first = allocator.try_allocate("east", slot_start, admin_actor)
        second = allocator.try_allocate("east", slot_start + timedelta(days=1), admin_actor)

        assert first.user_id == second.user_id == admin.id

    def test_admin_booking_for_member_bypasses_quota(
        self, allocator, make_booking, member, admin_actor, slot_start
    ):
        make_booking(member, "west", slot_start + timedelta(days=3))

        booking = allocator.try_allocate("east", slot_start, admin_actor, target_user_id=member.id)

        assert booking.user_id == member.id


class TestAuthorization:
    def test_member_cannot_book_for_someone_else(
        self, db, allocator, other_member, member_actor, slot_start
    ):
        with pytest.raises(ForbiddenException) as exc_info:
            allocator.try_allocate("east", slot_start, member_actor, target_user_id=other_member.id)

        assert exc_info.value.code == "PERMISSION_DENIED"
        assert db.query(Booking).count() == 0

    def test_member_may_name_themselves_as_target(
        self, allocator, member, member_actor, slot_start
    ):
        booking = allocator.try_allocate("east", slot_start, member_actor, target_user_id=member.id)

        assert booking.user_id == member.id

    def test_unknown_beneficiary(self, allocator, admin_actor, slot_start):
        with pytest.raises(NotFoundException):
            allocator.try_allocate("east", slot_start, admin_actor, target_user_id="nobody")


class TestConstraintMapping:
    def test_unique_start_violation_reported_as_slot_conflict(
        self, db, allocator, make_booking, member, other_member, slot_start
    ):
        # Skips the pre-checks, as a concurrent request would
        make_booking(other_member, "east", slot_start)

        with pytest.raises(BookingConflictException):
            allocator._insert(member.id, "east", slot_start, slot_start + timedelta(hours=2))

        assert db.query(Booking).filter(Booking.user_id == member.id).count() == 0

    def test_other_integrity_errors_stay_dependency_failures(self, allocator, slot_start):
        with pytest.raises(ServiceException) as exc_info:
            allocator._insert("ghost", "east", slot_start, slot_start + timedelta(hours=2))

        assert exc_info.value.code == "DEPENDENCY_FAILURE"
