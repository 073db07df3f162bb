"""
Database models for SimBay.

Importing this package registers every table on ``Base.metadata``.
"""

from .booking import Booking
from .contact_message import ContactMessage
from .ledger import LedgerEntry
from .membership_inquiry import MembershipInquiry
from .profile import Profile
from .tournament_message import TournamentMessage

__all__ = [
    "Booking",
    "ContactMessage",
    "LedgerEntry",
    "MembershipInquiry",
    "Profile",
    "TournamentMessage",
]
