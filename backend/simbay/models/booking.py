# backend/simbay/models/booking.py
"""
Booking model for SimBay.

A booking reserves one simulator for a fixed two-hour window. The
(simulator, start_time) unique constraint is the storage-level guard
against double booking on the hourly grid; PostgreSQL deployments also
carry an interval exclusion constraint added by migration.
"""

import logging

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from ..core.constants import BOOKING_UNIQUE_START_CONSTRAINT
from ..database import Base
from .types import UTCDateTime, utc_now

logger = logging.getLogger(__name__)


class Booking(Base):
    """A two-hour reservation of one simulator bay."""

    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        String(64), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    simulator = Column(String(10), nullable=False)
    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    user = relationship("Profile", back_populates="bookings")
    ledger_entries = relationship("LedgerEntry", back_populates="booking", passive_deletes=True)

    __table_args__ = (
        UniqueConstraint("simulator", "start_time", name=BOOKING_UNIQUE_START_CONSTRAINT),
        CheckConstraint("simulator IN ('east', 'west')", name="ck_bookings_simulator"),
        CheckConstraint("end_time > start_time", name="ck_bookings_time_order"),
        Index("ix_bookings_simulator_window", "simulator", "start_time", "end_time"),
        Index("ix_bookings_user_end", "user_id", "end_time"),
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<Booking {self.id}: user={self.user_id}, simulator={self.simulator}, "
            f"time={self.start_time}-{self.end_time}>"
        )
