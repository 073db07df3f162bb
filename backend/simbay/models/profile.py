# backend/simbay/models/profile.py
"""
Member profile model.

The profile id is the identity provider's user id, so a verified access
token maps directly onto a row here. Role and membership expiry are only
ever changed by an admin.
"""

from datetime import datetime
import logging
from typing import Optional

from sqlalchemy import CheckConstraint, Column, String
from sqlalchemy.orm import relationship

from ..core.enums import RoleName
from ..database import Base
from .types import UTCDateTime, utc_now

logger = logging.getLogger(__name__)


class Profile(Base):
    """A facility member or administrator."""

    __tablename__ = "profiles"

    id = Column(String(64), primary_key=True)
    name = Column(String(120), nullable=False, default="")
    email = Column(String(255), nullable=False, unique=True, index=True)
    phone = Column(String(40), nullable=True)
    role = Column(String(20), nullable=False, default=RoleName.USER.value)
    profile_picture_url = Column(String(1024), nullable=True)
    active_until = Column(UTCDateTime, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
    updated_at = Column(UTCDateTime, nullable=True, onupdate=utc_now)

    bookings = relationship("Booking", back_populates="user", passive_deletes=True)

    __table_args__ = (
        CheckConstraint("role IN ('user', 'admin')", name="ck_profiles_role"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == RoleName.ADMIN.value

    def membership_expired(self, now: datetime) -> Optional[bool]:
        """Return None when no expiry is recorded."""
        if self.active_until is None:
            return None
        return self.active_until < now

    def __repr__(self) -> str:
        return f"<Profile {self.id}: {self.email} role={self.role}>"
