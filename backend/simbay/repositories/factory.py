# backend/simbay/repositories/factory.py
"""
Repository Factory for SimBay

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .booking_repository import BookingRepository
    from .contact_message_repository import ContactMessageRepository
    from .ledger_repository import LedgerRepository
    from .membership_inquiry_repository import MembershipInquiryRepository
    from .profile_repository import ProfileRepository
    from .tournament_message_repository import TournamentMessageRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_profile_repository(db: Session) -> "ProfileRepository":
        """Create repository for member profiles."""
        from .profile_repository import ProfileRepository

        return ProfileRepository(db)

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        """Create repository for booking operations."""
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_ledger_repository(db: Session) -> "LedgerRepository":
        """Create repository for ledger entries and balance sums."""
        from .ledger_repository import LedgerRepository

        return LedgerRepository(db)

    @staticmethod
    def create_tournament_message_repository(db: Session) -> "TournamentMessageRepository":
        from .tournament_message_repository import TournamentMessageRepository

        return TournamentMessageRepository(db)

    @staticmethod
    def create_contact_message_repository(db: Session) -> "ContactMessageRepository":
        from .contact_message_repository import ContactMessageRepository

        return ContactMessageRepository(db)

    @staticmethod
    def create_membership_inquiry_repository(db: Session) -> "MembershipInquiryRepository":
        from .membership_inquiry_repository import MembershipInquiryRepository

        return MembershipInquiryRepository(db)
