# backend/simbay/services/contact_service.py
"""
Member contact messages.

Sender details are copied from the profile when the message is filed,
so the admin inbox stays readable after the profile changes.
"""

import logging
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import MAX_MESSAGE_LENGTH, MAX_SUBJECT_LENGTH
from ..core.exceptions import NotFoundException, ValidationException
from ..models.contact_message import ContactMessage
from ..principal import Actor
from ..repositories.contact_message_repository import ContactMessageRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.profile_repository import ProfileRepository
from .base import BaseService

logger = logging.getLogger(__name__)

ISSUE_TYPES = ("booking", "billing", "equipment", "membership", "other")

_UNSET: Any = object()


class ContactService(BaseService):
    def __init__(
        self,
        db: Session,
        repository: Optional[ContactMessageRepository] = None,
        profile_repository: Optional[ProfileRepository] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_contact_message_repository(db)
        self.profile_repository = (
            profile_repository or RepositoryFactory.create_profile_repository(db)
        )

    @BaseService.measure_operation("submit_contact_message")
    def submit(
        self,
        actor: Actor,
        issue_type: str,
        subject: str,
        message: str,
        photo_url: Optional[str] = None,
    ) -> ContactMessage:
        issue = (issue_type or "").strip().lower()
        if issue not in ISSUE_TYPES:
            raise ValidationException(
                f"Unknown issue type '{issue_type}'", details={"allowed": list(ISSUE_TYPES)}
            )
        subject = self._require_text(subject, "subject", MAX_SUBJECT_LENGTH)
        body = self._require_text(message, "message", MAX_MESSAGE_LENGTH)

        profile = self.profile_repository.get_by_id(actor.user_id, load_relationships=False)
        with self.transaction():
            created = self.repository.create(
                user_id=actor.user_id,
                user_name=profile.name if profile else None,
                user_email=profile.email if profile else actor.email,
                user_phone=profile.phone if profile else None,
                issue_type=issue,
                subject=subject,
                message=body,
                photo_url=photo_url,
            )
        self.log_operation("submit_contact_message", message_id=created.id, issue_type=issue)
        return created

    def list_messages(self, actor: Actor, unresolved_only: bool = False) -> List[ContactMessage]:
        self._require_admin(actor)
        return self.repository.list_recent(unresolved_only=unresolved_only)

    def update_message(
        self,
        actor: Actor,
        message_id: str,
        admin_notes: Optional[str] = _UNSET,
        is_read: Optional[bool] = None,
        is_resolved: Optional[bool] = None,
    ) -> ContactMessage:
        self._require_admin(actor)
        existing = self._get(message_id)
        with self.transaction():
            if admin_notes is not _UNSET:
                existing.admin_notes = admin_notes
            if is_read is not None:
                existing.is_read = is_read
            if is_resolved is not None:
                existing.is_resolved = is_resolved
            self.db.flush()
        return existing

    def delete_message(self, actor: Actor, message_id: str) -> None:
        self._require_admin(actor)
        self._get(message_id)
        with self.transaction():
            self.repository.delete(message_id)
        self.log_operation("delete_contact_message", message_id=message_id)

    def _require_admin(self, actor: Actor) -> None:
        actor.require(actor.capabilities.can_manage_messages, "Only admins can manage messages")

    def _get(self, message_id: str) -> ContactMessage:
        existing = self.repository.get_by_id(message_id, load_relationships=False)
        if existing is None:
            raise NotFoundException("Message not found", details={"message_id": message_id})
        return existing

    @staticmethod
    def _require_text(value: Optional[str], field: str, max_length: int) -> str:
        text = (value or "").strip()
        if not text:
            raise ValidationException(f"{field} is required")
        if len(text) > max_length:
            raise ValidationException(
                f"{field} must be at most {max_length} characters",
                details={"max_length": max_length},
            )
        return text
