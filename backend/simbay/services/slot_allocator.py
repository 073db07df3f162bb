# backend/simbay/services/slot_allocator.py
"""
Slot Allocator for SimBay

Validates and persists a two-hour simulator reservation. The checks here
(alignment, authorization, quota, overlap) give callers precise errors,
but they can race. The unique/exclusion constraints on ``bookings`` are
the final arbiter, and a violation of them is reported as a slot
conflict rather than a storage failure.
"""

from datetime import datetime, timezone
import logging
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.constants import (
    BOOKING_DURATION,
    BOOKING_EXCLUSION_CONSTRAINT,
    BOOKING_UNIQUE_START_CONSTRAINT,
)
from ..core.enums import Simulator
from ..core.exceptions import (
    BookingConflictException,
    ForbiddenException,
    NotFoundException,
    QuotaExceededException,
    RepositoryException,
    ServiceException,
    ValidationException,
)
from ..models.booking import Booking
from ..models.profile import Profile
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..principal import Actor, resolve_capabilities
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.profile_repository import ProfileRepository
from ..utils.time_utils import ensure_utc, is_hour_aligned
from .base import BaseService

logger = logging.getLogger(__name__)

SLOT_CONFLICT_MESSAGE = "This simulator is already booked for part of that time"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SlotAllocator(BaseService):
    """Allocates simulator slots subject to overlap and quota rules."""

    def __init__(
        self,
        db: Session,
        booking_repository: Optional[BookingRepository] = None,
        profile_repository: Optional[ProfileRepository] = None,
        clock: Callable[[], datetime] = _utc_now,
    ):
        super().__init__(db)
        self.booking_repository = (
            booking_repository or RepositoryFactory.create_booking_repository(db)
        )
        self.profile_repository = (
            profile_repository or RepositoryFactory.create_profile_repository(db)
        )
        self.clock = clock

    @BaseService.measure_operation("try_allocate")
    def try_allocate(
        self,
        simulator: str,
        start_time: datetime,
        actor: Actor,
        target_user_id: Optional[str] = None,
    ) -> Booking:
        """
        Reserve ``simulator`` from ``start_time`` for the configured duration.

        Args:
            simulator: "east" or "west"
            start_time: Hour-aligned start; naive values are read as UTC
            actor: The requester
            target_user_id: Beneficiary when booking on someone else's behalf

        Returns:
            The persisted booking

        Raises:
            ValidationException: Unknown simulator or misaligned start
            ForbiddenException: Booking for someone else without permission
            NotFoundException: Beneficiary profile does not exist
            QuotaExceededException: Beneficiary already holds an upcoming booking
            BookingConflictException: Window overlaps an existing booking
        """
        simulator_value = self._validate_simulator(simulator)
        start = ensure_utc(start_time)
        if not is_hour_aligned(start):
            prometheus_metrics.inc_booking_rejection("validation")
            raise ValidationException(
                "Bookings must start on the hour",
                details={"start_time": start.isoformat()},
            )
        end = start + BOOKING_DURATION

        beneficiary = self._resolve_beneficiary(actor, target_user_id)
        self._check_quota(actor, beneficiary)
        self._check_overlap(simulator_value, start, end)

        self.log_operation(
            "try_allocate",
            simulator=simulator_value,
            start_time=start.isoformat(),
            requester_id=actor.user_id,
            beneficiary_id=beneficiary.id,
        )
        return self._insert(beneficiary.id, simulator_value, start, end)

    def _validate_simulator(self, simulator: str) -> str:
        try:
            return Simulator(str(simulator).strip().lower()).value
        except ValueError:
            prometheus_metrics.inc_booking_rejection("validation")
            raise ValidationException(
                f"Unknown simulator '{simulator}'",
                details={"allowed": [s.value for s in Simulator]},
            )

    def _resolve_beneficiary(self, actor: Actor, target_user_id: Optional[str]) -> Profile:
        beneficiary_id = target_user_id or actor.user_id
        if beneficiary_id != actor.user_id and not actor.capabilities.can_book_for_others:
            prometheus_metrics.inc_booking_rejection("permission_denied")
            raise ForbiddenException(
                "Only admins can book on behalf of other members",
                details={"user_id": actor.user_id, "target_user_id": beneficiary_id},
            )

        beneficiary = self.profile_repository.get_by_id(beneficiary_id, load_relationships=False)
        if beneficiary is None:
            raise NotFoundException(
                "Member profile not found", details={"user_id": beneficiary_id}
            )
        return beneficiary

    def _check_quota(self, actor: Actor, beneficiary: Profile) -> None:
        # Either side being an admin lifts the one-upcoming-booking limit
        if actor.capabilities.can_bypass_quota:
            return
        if resolve_capabilities(beneficiary.role).can_bypass_quota:
            return

        active = self.booking_repository.get_active_for_user(beneficiary.id, self.clock())
        if active:
            prometheus_metrics.inc_booking_rejection("quota_exceeded")
            raise QuotaExceededException(beneficiary.id, existing_booking_id=active[0].id)

    def _check_overlap(self, simulator: str, start: datetime, end: datetime) -> None:
        conflicts = self.booking_repository.find_overlapping(simulator, start, end)
        if conflicts:
            prometheus_metrics.inc_booking_rejection("slot_conflict")
            raise BookingConflictException(
                message=SLOT_CONFLICT_MESSAGE,
                details=self._build_conflict_details(simulator, start, end, conflicts[0]),
            )

    def _insert(self, user_id: str, simulator: str, start: datetime, end: datetime) -> Booking:
        try:
            with self.transaction():
                booking = self.booking_repository.create(
                    user_id=user_id,
                    simulator=simulator,
                    start_time=start,
                    end_time=end,
                )
        except ServiceException as exc:
            integrity_error = self._find_integrity_error(exc)
            if integrity_error is not None and self._is_slot_violation(integrity_error):
                prometheus_metrics.inc_booking_rejection("slot_conflict")
                raise BookingConflictException(
                    message=SLOT_CONFLICT_MESSAGE,
                    details=self._build_conflict_details(simulator, start, end),
                ) from exc
            raise

        self.logger.info(
            "Booking %s created: %s %s-%s for %s",
            booking.id,
            simulator,
            start.isoformat(),
            end.isoformat(),
            user_id,
        )
        return booking

    @staticmethod
    def _find_integrity_error(exc: BaseException) -> Optional[IntegrityError]:
        current: Optional[BaseException] = exc
        while current is not None:
            if isinstance(current, IntegrityError):
                return current
            if not isinstance(current, (ServiceException, RepositoryException)):
                return None
            current = current.__cause__
        return None

    @staticmethod
    def _is_slot_violation(integrity_error: IntegrityError) -> bool:
        """
        True when the violated constraint is one of the booking window guards.

        PostgreSQL exposes the constraint name on ``orig.diag``; SQLite only
        reports the offending columns in the message text.
        """
        orig = getattr(integrity_error, "orig", None)
        diag = getattr(orig, "diag", None)
        constraint_name = getattr(diag, "constraint_name", "") or ""
        if constraint_name:
            return constraint_name in {
                BOOKING_UNIQUE_START_CONSTRAINT,
                BOOKING_EXCLUSION_CONSTRAINT,
            }

        text = str(orig if orig is not None else integrity_error).lower()
        return (
            BOOKING_UNIQUE_START_CONSTRAINT in text
            or BOOKING_EXCLUSION_CONSTRAINT in text
            or "bookings.simulator, bookings.start_time" in text
        )

    @staticmethod
    def _build_conflict_details(
        simulator: str,
        start: datetime,
        end: datetime,
        conflicting: Optional[Booking] = None,
    ) -> Dict[str, Any]:
        details: Dict[str, Any] = {
            "simulator": simulator,
            "start_time": start.isoformat(),
            "end_time": end.isoformat(),
        }
        if conflicting is not None:
            details["conflicting_booking"] = {
                "id": conflicting.id,
                "start_time": conflicting.start_time.isoformat(),
                "end_time": conflicting.end_time.isoformat(),
            }
        return details
