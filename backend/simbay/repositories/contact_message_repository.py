# backend/simbay/repositories/contact_message_repository.py
from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.contact_message import ContactMessage
from .base_repository import BaseRepository


class ContactMessageRepository(BaseRepository[ContactMessage]):
    def __init__(self, db: Session):
        super().__init__(db, ContactMessage)

    def list_recent(
        self, unresolved_only: bool = False, user_id: Optional[str] = None
    ) -> List[ContactMessage]:
        query = self._build_query()
        if unresolved_only:
            query = query.filter(ContactMessage.is_resolved.is_(False))
        if user_id:
            query = query.filter(ContactMessage.user_id == user_id)
        return self._execute_query(query.order_by(ContactMessage.submitted_at.desc()))
