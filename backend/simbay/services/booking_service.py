# backend/simbay/services/booking_service.py
"""
Booking Service for SimBay

Owns creation and cancellation of bookings together with the guest-fee
ledger entries that hang off them, plus the read-side listings used by
the schedule grid, the lobby display and the admin report.

Cancellation removes a booking's guest fees and then the booking inside
one database transaction. If the fee delete fails nothing is removed.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
import logging
from typing import Any, Callable, List, Optional

from sqlalchemy.orm import Session

from ..core.enums import Simulator
from ..core.exceptions import (
    ForbiddenException,
    NotFoundException,
    ServiceException,
    ValidationException,
)
from ..models.booking import Booking
from ..principal import Actor
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.ledger_repository import LedgerRepository
from ..repositories.profile_repository import ProfileRepository
from ..utils.time_utils import facility_day_bounds
from .base import BaseService
from .notification_service import BookingConfirmation
from .slot_allocator import SlotAllocator

logger = logging.getLogger(__name__)

ConfirmationCallback = Callable[[BookingConfirmation], Any]


@dataclass(frozen=True)
class DisplayBooking:
    """Public view of a booking: no contact details."""

    id: int
    simulator: str
    start_time: datetime
    end_time: datetime
    member_name: str


@dataclass(frozen=True)
class BookingReportRow:
    booking: Booking
    guest_fee_total: Decimal


class BookingService(BaseService):
    """
    Service layer for booking operations.

    Allocation rules live in SlotAllocator; this service coordinates the
    allocator, the ledger and notifications.
    """

    def __init__(
        self,
        db: Session,
        slot_allocator: Optional[SlotAllocator] = None,
        booking_repository: Optional[BookingRepository] = None,
        ledger_repository: Optional[LedgerRepository] = None,
        profile_repository: Optional[ProfileRepository] = None,
    ):
        super().__init__(db)
        self.booking_repository = (
            booking_repository or RepositoryFactory.create_booking_repository(db)
        )
        self.ledger_repository = ledger_repository or RepositoryFactory.create_ledger_repository(
            db
        )
        self.profile_repository = (
            profile_repository or RepositoryFactory.create_profile_repository(db)
        )
        self.slot_allocator = slot_allocator or SlotAllocator(
            db,
            booking_repository=self.booking_repository,
            profile_repository=self.profile_repository,
        )

    @BaseService.measure_operation("create_booking")
    def create_booking(
        self,
        actor: Actor,
        simulator: str,
        start_time: datetime,
        target_user_id: Optional[str] = None,
        notify: Optional[ConfirmationCallback] = None,
    ) -> Booking:
        """
        Allocate a slot and hand a confirmation to ``notify``.

        ``notify`` is expected to schedule delivery rather than send inline.
        Any error it raises is logged and dropped; the booking stands.
        """
        booking = self.slot_allocator.try_allocate(
            simulator, start_time, actor, target_user_id=target_user_id
        )

        if notify is not None:
            try:
                notify(self._build_confirmation(booking, actor))
            except Exception:
                self.logger.exception(
                    "Could not schedule confirmation for booking %s", booking.id
                )
        return booking

    def _build_confirmation(self, booking: Booking, actor: Actor) -> BookingConfirmation:
        owner = self.profile_repository.get_by_id(booking.user_id, load_relationships=False)
        if owner is None:
            raise NotFoundException("Booking owner not found", details={"user_id": booking.user_id})
        booked_by_name: Optional[str] = None
        if not actor.owns(booking.user_id):
            requester = self.profile_repository.get_by_id(actor.user_id, load_relationships=False)
            booked_by_name = requester.name if requester else None
        return BookingConfirmation(
            recipient_email=owner.email,
            recipient_name=owner.name,
            simulator=booking.simulator,
            start_time=booking.start_time,
            end_time=booking.end_time,
            booked_by_name=booked_by_name,
        )

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(self, booking_id: int, actor: Actor) -> int:
        """
        Delete a booking and its guest fees atomically.

        Returns:
            Number of guest-fee entries removed

        Raises:
            NotFoundException: Booking does not exist
            ForbiddenException: Requester is neither owner nor admin
            ServiceException: Storage failed; nothing was deleted
        """
        booking = self.booking_repository.get_by_id(booking_id, load_relationships=False)
        if booking is None:
            raise NotFoundException("Booking not found", details={"booking_id": booking_id})
        if not (actor.owns(booking.user_id) or actor.capabilities.can_cancel_any_booking):
            raise ForbiddenException(
                "You can only cancel your own bookings",
                details={"booking_id": booking_id},
            )

        try:
            with self.transaction():
                deleted_fees = self.ledger_repository.delete_guest_fees_for_booking(booking_id)
                self.booking_repository.delete(booking_id)
        except ServiceException as exc:
            self.logger.error("Cancellation of booking %s rolled back: %s", booking_id, exc)
            raise ServiceException(
                "Could not cancel the booking; no changes were made",
                details={"booking_id": booking_id},
            ) from exc

        self.log_operation(
            "cancel_booking",
            booking_id=booking_id,
            requester_id=actor.user_id,
            deleted_guest_fees=deleted_fees,
        )
        return deleted_fees

    @BaseService.measure_operation("get_bookings_for_day")
    def get_bookings_for_day(self, simulator: Optional[str], day: date) -> List[Booking]:
        """Bookings starting on ``day`` in the facility's local calendar."""
        simulator_value = self._normalize_simulator(simulator) if simulator else None
        start, end = facility_day_bounds(day)
        return self.booking_repository.get_for_window(start, end, simulator_value)

    def get_display_bookings(self, simulator: Optional[str], day: date) -> List[DisplayBooking]:
        return [
            DisplayBooking(
                id=booking.id,
                simulator=booking.simulator,
                start_time=booking.start_time,
                end_time=booking.end_time,
                member_name=(booking.user.name if booking.user else "") or "Member",
            )
            for booking in self.get_bookings_for_day(simulator, day)
        ]

    def get_user_bookings(self, actor: Actor, upcoming_only: bool = True) -> List[Booking]:
        since = datetime.now(timezone.utc) if upcoming_only else None
        return self.booking_repository.get_for_user(actor.user_id, since=since)

    @BaseService.measure_operation("get_bookings_report")
    def get_bookings_report(
        self, actor: Actor, start_date: date, end_date: date
    ) -> List[BookingReportRow]:
        """Admin report of bookings starting between two local dates, inclusive."""
        actor.require(actor.capabilities.can_view_reports, "Only admins can view reports")
        if end_date < start_date:
            raise ValidationException(
                "End date must not be before start date",
                details={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
            )
        window_start, _ = facility_day_bounds(start_date)
        _, window_end = facility_day_bounds(end_date)
        bookings = self.booking_repository.get_report(window_start, window_end)
        totals = self.ledger_repository.guest_fee_totals([booking.id for booking in bookings])
        return [
            BookingReportRow(booking=booking, guest_fee_total=totals.get(booking.id, Decimal("0.00")))
            for booking in bookings
        ]

    @staticmethod
    def _normalize_simulator(simulator: str) -> str:
        try:
            return Simulator(simulator.strip().lower()).value
        except ValueError:
            raise ValidationException(
                f"Unknown simulator '{simulator}'",
                details={"allowed": [s.value for s in Simulator]},
            )
