# backend/simbay/core/enums.py
"""
Core enums for SimBay.

Values are stored as plain strings in the database so they stay readable
from SQL and from the identity provider's user metadata.
"""

from enum import Enum


class RoleName(str, Enum):
    """Roles recognised by the facility."""

    ADMIN = "admin"
    USER = "user"


class Simulator(str, Enum):
    """The two simulator bays."""

    EAST = "east"
    WEST = "west"


class TransactionType(str, Enum):
    """Kinds of ledger entries."""

    GUEST_FEE = "guest_fee"
    PAYMENT = "payment"
    ADJUSTMENT = "adjustment"
