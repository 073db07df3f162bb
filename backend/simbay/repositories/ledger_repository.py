# backend/simbay/repositories/ledger_repository.py
"""
Ledger Repository for SimBay

Every balance figure is computed here with SUM() over the ledger at read
time. Nothing in this module writes a running total.
"""

from decimal import Decimal
import logging
from typing import List, Optional, Sequence, Tuple, cast

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.enums import TransactionType
from ..core.exceptions import RepositoryException
from ..models.booking import Booking
from ..models.ledger import LedgerEntry
from ..models.profile import Profile
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


class LedgerRepository(BaseRepository[LedgerEntry]):
    """Repository for the append-only transaction ledger."""

    def __init__(self, db: Session):
        super().__init__(db, LedgerEntry)

    def sum_for_user(self, user_id: str) -> Decimal:
        """Raw (unclamped) sum of all entries for a user."""
        query = self.db.query(func.coalesce(func.sum(LedgerEntry.amount), 0)).filter(
            LedgerEntry.user_id == user_id
        )
        return Decimal(str(self._execute_scalar(query))).quantize(ZERO)

    def positive_balances(self) -> List[Tuple[Profile, Decimal]]:
        """(profile, raw sum) for every user whose raw sum is above zero."""
        try:
            total = func.sum(LedgerEntry.amount).label("total")
            rows: Sequence[Tuple[str, object]] = (
                self.db.query(LedgerEntry.user_id, total)
                .group_by(LedgerEntry.user_id)
                .having(func.sum(LedgerEntry.amount) > 0)
                .all()
            )
            if not rows:
                return []
            quantized = ((user_id, Decimal(str(value)).quantize(ZERO)) for user_id, value in rows)
            # SQLite sums as float; sums that round to zero are settled
            sums = {user_id: amount for user_id, amount in quantized if amount > ZERO}
            if not sums:
                return []
            profiles = self.db.query(Profile).filter(Profile.id.in_(list(sums))).all()
            by_id = {profile.id: profile for profile in profiles}
            return sorted(
                [(by_id[user_id], amount) for user_id, amount in sums.items() if user_id in by_id],
                key=lambda pair: (-pair[1], pair[0].name or ""),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error computing balances: {str(e)}")
            raise RepositoryException(f"Failed to compute balances: {str(e)}") from e

    def list_for_user(self, user_id: str) -> List[LedgerEntry]:
        query = (
            self._build_query()
            .filter(LedgerEntry.user_id == user_id)
            .order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc())
        )
        return self._execute_query(query)

    def list_guest_fees_for_user(self, user_id: str) -> List[LedgerEntry]:
        query = (
            self._build_query()
            .filter(
                LedgerEntry.user_id == user_id,
                LedgerEntry.type == TransactionType.GUEST_FEE.value,
            )
            .order_by(LedgerEntry.created_at.desc())
        )
        return self._execute_query(query)

    def list_adjustments(self, limit: Optional[int] = None) -> List[LedgerEntry]:
        query = (
            self._build_query()
            .options(joinedload(LedgerEntry.user))
            .filter(LedgerEntry.type == TransactionType.ADJUSTMENT.value)
            .order_by(LedgerEntry.created_at.desc(), LedgerEntry.id.desc())
        )
        if limit:
            query = query.limit(limit)
        return self._execute_query(query)

    def guest_fee_totals(self, booking_ids: List[int]) -> dict[int, Decimal]:
        if not booking_ids:
            return {}
        try:
            rows = (
                self.db.query(LedgerEntry.booking_id, func.sum(LedgerEntry.amount))
                .filter(
                    LedgerEntry.booking_id.in_(booking_ids),
                    LedgerEntry.type == TransactionType.GUEST_FEE.value,
                )
                .group_by(LedgerEntry.booking_id)
                .all()
            )
            return {
                cast(int, booking_id): Decimal(str(total)).quantize(ZERO)
                for booking_id, total in rows
            }
        except SQLAlchemyError as e:
            self.logger.error(f"Error totalling guest fees: {str(e)}")
            raise RepositoryException(f"Failed to total guest fees: {str(e)}") from e

    def delete_guest_fees_for_booking(self, booking_id: int) -> int:
        """Delete guest_fee entries that reference ``booking_id``; returns the count."""
        try:
            return int(
                self.db.query(LedgerEntry)
                .filter(
                    LedgerEntry.booking_id == booking_id,
                    LedgerEntry.type == TransactionType.GUEST_FEE.value,
                )
                .delete(synchronize_session="fetch")
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting guest fees for booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to delete guest fees: {str(e)}") from e

    def delete_for_user(self, user_id: str) -> int:
        try:
            return int(
                self.db.query(LedgerEntry)
                .filter(LedgerEntry.user_id == user_id)
                .delete(synchronize_session="fetch")
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting ledger for user {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to delete ledger entries: {str(e)}") from e

    def delete_guest_fees_for_user_bookings(self, user_id: str) -> int:
        """Guest fees charged to anyone on bookings owned by ``user_id``."""
        try:
            booking_ids = select(Booking.id).where(Booking.user_id == user_id)
            return int(
                self.db.query(LedgerEntry)
                .filter(LedgerEntry.booking_id.in_(booking_ids))
                .delete(synchronize_session="fetch")
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting guest fees for user bookings: {str(e)}")
            raise RepositoryException(f"Failed to delete guest fees: {str(e)}") from e
