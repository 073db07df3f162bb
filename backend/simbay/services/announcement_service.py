# backend/simbay/services/announcement_service.py
"""
Tournament announcement service.

Each message is either active or inactive and only changes state through
an explicit admin action. Admins see every message; everyone else sees
active messages only. Both listings are newest-created first.
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException, ValidationException
from ..models.tournament_message import TournamentMessage
from ..models.types import utc_now
from ..principal import ANONYMOUS_CAPABILITIES, Actor, Capabilities
from ..repositories.factory import RepositoryFactory
from ..repositories.tournament_message_repository import TournamentMessageRepository
from .base import BaseService

logger = logging.getLogger(__name__)


class AnnouncementService(BaseService):
    def __init__(
        self,
        db: Session,
        repository: Optional[TournamentMessageRepository] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_tournament_message_repository(db)

    def list_messages(
        self, capabilities: Capabilities = ANONYMOUS_CAPABILITIES
    ) -> List[TournamentMessage]:
        return self.repository.list_messages(
            include_inactive=capabilities.can_manage_announcements
        )

    @BaseService.measure_operation("create_announcement")
    def create_message(self, actor: Actor, message: str) -> TournamentMessage:
        self._require_manager(actor)
        text = self._clean(message)
        with self.transaction():
            created = self.repository.create(
                message=text, is_active=True, created_by=actor.user_id
            )
        self.log_operation("create_announcement", message_id=created.id, admin_id=actor.user_id)
        return created

    @BaseService.measure_operation("update_announcement")
    def update_message(
        self,
        actor: Actor,
        message_id: str,
        message: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> TournamentMessage:
        self._require_manager(actor)
        existing = self._get(message_id)
        with self.transaction():
            if message is not None:
                existing.message = self._clean(message)
            if is_active is not None:
                existing.is_active = is_active
            self._touch(existing)
        return existing

    def toggle_message(self, actor: Actor, message_id: str) -> TournamentMessage:
        """Flip a message between active and inactive."""
        self._require_manager(actor)
        existing = self._get(message_id)
        with self.transaction():
            existing.is_active = not existing.is_active
            self._touch(existing)
        self.log_operation(
            "toggle_announcement", message_id=message_id, is_active=existing.is_active
        )
        return existing

    def delete_message(self, actor: Actor, message_id: str) -> None:
        self._require_manager(actor)
        self._get(message_id)
        with self.transaction():
            self.repository.delete(message_id)
        self.log_operation("delete_announcement", message_id=message_id, admin_id=actor.user_id)

    def _require_manager(self, actor: Actor) -> None:
        actor.require(
            actor.capabilities.can_manage_announcements, "Only admins can manage announcements"
        )

    def _get(self, message_id: str) -> TournamentMessage:
        existing = self.repository.get_by_id(message_id, load_relationships=False)
        if existing is None:
            raise NotFoundException("Message not found", details={"message_id": message_id})
        return existing

    def _touch(self, message: TournamentMessage) -> None:
        message.updated_at = utc_now()
        self.db.flush()

    @staticmethod
    def _clean(message: Optional[str]) -> str:
        text = (message or "").strip()
        if not text:
            raise ValidationException("Message text is required")
        return text
