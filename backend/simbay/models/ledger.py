# backend/simbay/models/ledger.py
"""
Ledger entry model.

Balances are never stored. A member's balance is the live sum of their
entries, so concurrent appends by several admins cannot lose updates.
Entries are append-only and never edited in place.
"""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from .types import UTCDateTime, utc_now


class LedgerEntry(Base):
    """One signed line item. Positive amounts increase what the member owes."""

    __tablename__ = "user_transactions"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(
        String(64), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=True, index=True)
    type = Column(String(20), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
    # Weak reference: the author may later be deleted without touching history
    created_by = Column(String(64), nullable=True)

    booking = relationship("Booking", back_populates="ledger_entries")
    user = relationship("Profile", foreign_keys=[user_id])

    __table_args__ = (
        CheckConstraint(
            "type IN ('guest_fee', 'payment', 'adjustment')", name="ck_user_transactions_type"
        ),
        CheckConstraint(
            "booking_id IS NULL OR type = 'guest_fee'",
            name="ck_user_transactions_booking_only_for_guest_fee",
        ),
        Index("ix_user_transactions_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<LedgerEntry {self.id}: user={self.user_id} {self.type} {self.amount}>"
