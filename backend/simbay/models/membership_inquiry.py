# backend/simbay/models/membership_inquiry.py
from sqlalchemy import Boolean, Column, String, Text
import ulid

from ..database import Base
from .types import UTCDateTime, utc_now


class MembershipInquiry(Base):
    """Inquiry submitted from the public site by a prospective member."""

    __tablename__ = "membership_inquiries"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    name = Column(String(120), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(40), nullable=True)
    message = Column(Text, nullable=False)
    submitted_at = Column(UTCDateTime, nullable=False, default=utc_now, index=True)
    is_read = Column(Boolean, nullable=False, default=False)
    is_resolved = Column(Boolean, nullable=False, default=False)
    admin_notes = Column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<MembershipInquiry {self.id}: {self.email}>"
