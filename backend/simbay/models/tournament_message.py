# backend/simbay/models/tournament_message.py
from sqlalchemy import Boolean, Column, String, Text
import ulid

from ..database import Base
from .types import UTCDateTime, utc_now


class TournamentMessage(Base):
    """Promotional banner shown to members. ``message`` holds raw HTML."""

    __tablename__ = "tournament_messages"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    message = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
    updated_at = Column(UTCDateTime, nullable=True, onupdate=utc_now)
    created_by = Column(String(64), nullable=True)

    def __repr__(self) -> str:
        return f"<TournamentMessage {self.id}: active={self.is_active}>"
