# backend/simbay/services/ledger_service.py
"""
Ledger Service for SimBay

Balances are derived, never stored: a member's balance is the sum of
their ledger entries at read time. All writes append a new entry; the
only deletions are guest-fee removals and booking cancellation.

Sign convention: positive amounts increase what the member owes
(guest fees), negative amounts reduce it (payments).
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
import logging
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import TransactionType
from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..models.ledger import LedgerEntry
from ..models.profile import Profile
from ..principal import Actor
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.ledger_repository import LedgerRepository
from ..repositories.profile_repository import ProfileRepository
from .base import BaseService

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")

AmountLike = Union[Decimal, int, float, str]


def to_money(value: AmountLike, field: str = "amount") -> Decimal:
    """Coerce to a two-place Decimal, rejecting NaN and infinities."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationException(f"{field} must be a number", details={field: str(value)})
    if not amount.is_finite():
        raise ValidationException(f"{field} must be a finite number", details={field: str(value)})
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class UserBalance:
    profile: Profile
    balance: Decimal


class LedgerService(BaseService):
    """Balance calculator and transaction store."""

    def __init__(
        self,
        db: Session,
        ledger_repository: Optional[LedgerRepository] = None,
        booking_repository: Optional[BookingRepository] = None,
        profile_repository: Optional[ProfileRepository] = None,
    ):
        super().__init__(db)
        self.ledger_repository = ledger_repository or RepositoryFactory.create_ledger_repository(
            db
        )
        self.booking_repository = (
            booking_repository or RepositoryFactory.create_booking_repository(db)
        )
        self.profile_repository = (
            profile_repository or RepositoryFactory.create_profile_repository(db)
        )

    # Reads

    def compute_raw_balance(self, user_id: str) -> Decimal:
        """Unclamped sum; negative after an overpayment."""
        return self.ledger_repository.sum_for_user(user_id)

    @BaseService.measure_operation("compute_balance")
    def compute_balance(self, user_id: str) -> Decimal:
        """Amount owed for display. Never below zero."""
        return max(ZERO, self.compute_raw_balance(user_id))

    def get_balance(self, actor: Actor, user_id: Optional[str] = None) -> Decimal:
        target = user_id or actor.user_id
        self._require_ledger_access(actor, target)
        return self.compute_balance(target)

    @BaseService.measure_operation("compute_all_balances")
    def compute_all_balances(self, actor: Actor) -> List[UserBalance]:
        """Every member whose raw sum is above zero, largest balance first."""
        actor.require(
            actor.capabilities.can_manage_ledger_for_any_user,
            "Only admins can view all balances",
        )
        return [
            UserBalance(profile=profile, balance=balance)
            for profile, balance in self.ledger_repository.positive_balances()
        ]

    def list_transactions(self, actor: Actor, user_id: Optional[str] = None) -> List[LedgerEntry]:
        target = user_id or actor.user_id
        self._require_ledger_access(actor, target)
        return self.ledger_repository.list_for_user(target)

    def list_outstanding_guest_fees(
        self, actor: Actor, user_id: Optional[str] = None
    ) -> List[LedgerEntry]:
        target = user_id or actor.user_id
        self._require_ledger_access(actor, target)
        return self.ledger_repository.list_guest_fees_for_user(target)

    def list_adjustments(self, actor: Actor, limit: Optional[int] = None) -> List[LedgerEntry]:
        actor.require(
            actor.capabilities.can_manage_ledger_for_any_user,
            "Only admins can view adjustment history",
        )
        return self.ledger_repository.list_adjustments(limit=limit)

    # Writes

    @BaseService.measure_operation("adjust_to_target")
    def adjust_to_target(
        self, actor: Actor, user_id: str, target_balance: AmountLike, reason: str
    ) -> LedgerEntry:
        """
        Append one adjustment so the member's ledger sums to ``target_balance``.

        The adjustment is taken against the raw sum, so a member who has
        overpaid is brought to exactly the target as well.
        """
        actor.require(
            actor.capabilities.can_manage_ledger_for_any_user,
            "Only admins can adjust balances",
        )
        target = to_money(target_balance, "target_balance")
        if target < ZERO:
            raise ValidationException(
                "Target balance cannot be negative",
                details={"target_balance": str(target)},
            )
        reason = (reason or "").strip()
        self._require_profile(user_id)

        current = self.compute_raw_balance(user_id)
        adjustment = target - current
        description = f"Balance adjusted from ${current:.2f} to ${target:.2f}"
        if reason:
            description = f"{description}: {reason}"

        with self.transaction():
            entry = self.ledger_repository.create(
                user_id=user_id,
                type=TransactionType.ADJUSTMENT.value,
                amount=adjustment,
                description=description,
                created_by=actor.user_id,
            )
        self.log_operation(
            "adjust_to_target",
            user_id=user_id,
            before=str(current),
            after=str(target),
            adjustment=str(adjustment),
            admin_id=actor.user_id,
        )
        return entry

    @BaseService.measure_operation("record_payment")
    def record_payment(
        self,
        actor: Actor,
        user_id: str,
        amount: AmountLike,
        description: Optional[str] = None,
    ) -> LedgerEntry:
        """Store a payment as a negative entry; ``amount`` must be positive."""
        actor.require(
            actor.capabilities.can_manage_ledger_for_any_user,
            "Only admins can record payments",
        )
        value = to_money(amount)
        if value <= ZERO:
            raise ValidationException(
                "Payment amount must be greater than zero", details={"amount": str(value)}
            )
        self._require_profile(user_id)

        with self.transaction():
            entry = self.ledger_repository.create(
                user_id=user_id,
                type=TransactionType.PAYMENT.value,
                amount=-value,
                description=(description or "").strip() or f"Payment of ${value:.2f}",
                created_by=actor.user_id,
            )
        self.log_operation("record_payment", user_id=user_id, amount=str(value))
        return entry

    @BaseService.measure_operation("assess_guest_fee")
    def assess_guest_fee(
        self,
        actor: Actor,
        booking_id: int,
        user_id: Optional[str] = None,
        amount: Optional[AmountLike] = None,
        description: Optional[str] = None,
    ) -> LedgerEntry:
        """
        Charge a guest fee against a booking.

        Members may charge their own bookings; admins any booking. The fee
        is always billed to the booking's owner.
        """
        value = to_money(amount if amount is not None else settings.default_guest_fee)
        if value <= ZERO:
            raise ValidationException(
                "Guest fee must be greater than zero", details={"amount": str(value)}
            )

        booking = self.booking_repository.get_by_id(booking_id, load_relationships=False)
        if booking is None:
            raise NotFoundException("Booking not found", details={"booking_id": booking_id})
        if user_id is not None and user_id != booking.user_id:
            raise ValidationException(
                "Guest fees are charged to the booking's owner",
                details={"booking_id": booking_id, "user_id": user_id},
            )
        if not (
            actor.owns(booking.user_id) or actor.capabilities.can_manage_ledger_for_any_user
        ):
            raise ForbiddenException(
                "You can only add guest fees to your own bookings",
                details={"booking_id": booking_id},
            )

        with self.transaction():
            entry = self.ledger_repository.create(
                user_id=booking.user_id,
                booking_id=booking.id,
                type=TransactionType.GUEST_FEE.value,
                amount=value,
                description=(description or "").strip()
                or f"Guest fee for {booking.simulator} simulator booking",
                created_by=actor.user_id,
            )
        self.log_operation(
            "assess_guest_fee", booking_id=booking_id, user_id=booking.user_id, amount=str(value)
        )
        return entry

    @BaseService.measure_operation("remove_transaction")
    def remove_transaction(self, actor: Actor, transaction_id: str) -> None:
        """Admins may remove any entry; members only their own guest fees."""
        entry = self.ledger_repository.get_by_id(transaction_id, load_relationships=False)
        if entry is None:
            raise NotFoundException(
                "Transaction not found", details={"transaction_id": transaction_id}
            )
        if not actor.capabilities.can_manage_ledger_for_any_user:
            if not actor.owns(entry.user_id) or entry.type != TransactionType.GUEST_FEE.value:
                raise ForbiddenException(
                    "You can only remove your own guest fees",
                    details={"transaction_id": transaction_id},
                )

        with self.transaction():
            self.ledger_repository.delete(transaction_id)
        self.log_operation(
            "remove_transaction",
            transaction_id=transaction_id,
            type=entry.type,
            requester_id=actor.user_id,
        )

    # Helpers

    def _require_ledger_access(self, actor: Actor, user_id: str) -> None:
        if not (actor.owns(user_id) or actor.capabilities.can_manage_ledger_for_any_user):
            raise ForbiddenException(
                "You can only view your own transactions", details={"user_id": user_id}
            )

    def _require_profile(self, user_id: str) -> Profile:
        profile = self.profile_repository.get_by_id(user_id, load_relationships=False)
        if profile is None:
            raise NotFoundException("Member profile not found", details={"user_id": user_id})
        return profile
