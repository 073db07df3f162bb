# backend/simbay/repositories/booking_repository.py
"""
Booking Repository for SimBay

Overlap and quota queries used by the slot allocator, plus the day,
member and report listings. Intervals are half-open: a booking ending
at 12:00 does not conflict with one starting at 12:00.
"""

from datetime import datetime
import logging
from typing import List, Optional, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.booking import Booking
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking data access."""

    def __init__(self, db: Session):
        """Initialize with Booking model."""
        super().__init__(db, Booking)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(joinedload(Booking.user))

    # Allocation checks

    def find_overlapping(
        self, simulator: str, start_time: datetime, end_time: datetime
    ) -> List[Booking]:
        """
        Bookings on ``simulator`` whose window intersects [start_time, end_time).

        An exact start match satisfies the same predicate, so no separate
        equality check is needed.
        """
        try:
            query = self.db.query(Booking).filter(
                Booking.simulator == simulator,
                Booking.start_time < end_time,
                Booking.end_time > start_time,
            )
            return cast(List[Booking], query.order_by(Booking.start_time).all())
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking booking overlap: {str(e)}")
            raise RepositoryException(f"Failed to check overlap: {str(e)}") from e

    def get_active_for_user(self, user_id: str, now: datetime) -> List[Booking]:
        """Bookings for ``user_id`` that have not yet ended."""
        try:
            return cast(
                List[Booking],
                self.db.query(Booking)
                .filter(Booking.user_id == user_id, Booking.end_time >= now)
                .order_by(Booking.start_time)
                .all(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting active bookings: {str(e)}")
            raise RepositoryException(f"Failed to get active bookings: {str(e)}") from e

    # Listings

    def get_for_window(
        self, start: datetime, end: datetime, simulator: Optional[str] = None
    ) -> List[Booking]:
        """Bookings starting in [start, end), owner eagerly loaded."""
        query = (
            self._apply_eager_loading(self._build_query())
            .filter(Booking.start_time >= start, Booking.start_time < end)
            .order_by(Booking.start_time)
        )
        if simulator:
            query = query.filter(Booking.simulator == simulator)
        return self._execute_query(query)

    def get_for_user(self, user_id: str, since: Optional[datetime] = None) -> List[Booking]:
        query = self._build_query().filter(Booking.user_id == user_id)
        if since is not None:
            query = query.filter(Booking.end_time >= since)
        return self._execute_query(query.order_by(Booking.start_time))

    def get_report(self, start: datetime, end: datetime) -> List[Booking]:
        """Bookings starting in [start, end), newest first."""
        query = (
            self._apply_eager_loading(self._build_query())
            .filter(Booking.start_time >= start, Booking.start_time < end)
            .order_by(Booking.start_time.desc())
        )
        return self._execute_query(query)

    def delete_for_user(self, user_id: str) -> int:
        try:
            return int(
                self.db.query(Booking)
                .filter(Booking.user_id == user_id)
                .delete(synchronize_session="fetch")
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting bookings for user {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to delete bookings: {str(e)}") from e
