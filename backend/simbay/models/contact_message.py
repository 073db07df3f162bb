# backend/simbay/models/contact_message.py
"""
Contact message model.

Name, email and phone are snapshotted from the sender's profile at
submission time so the message still reads correctly after the profile
changes or is deleted.
"""

from sqlalchemy import Boolean, Column, String, Text
import ulid

from ..database import Base
from .types import UTCDateTime, utc_now


class ContactMessage(Base):
    __tablename__ = "contact_messages"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(64), nullable=True, index=True)
    user_name = Column(String(120), nullable=True)
    user_email = Column(String(255), nullable=True)
    user_phone = Column(String(40), nullable=True)
    issue_type = Column(String(50), nullable=False)
    subject = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    photo_url = Column(String(1024), nullable=True)
    submitted_at = Column(UTCDateTime, nullable=False, default=utc_now, index=True)
    is_read = Column(Boolean, nullable=False, default=False)
    is_resolved = Column(Boolean, nullable=False, default=False)
    admin_notes = Column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<ContactMessage {self.id}: {self.issue_type} from={self.user_id}>"
