# backend/simbay/services/membership_inquiry_service.py
"""
Membership inquiries from the public site.

Submission needs no account. The admin notice is handed to ``notify``
after the inquiry is stored; a notice that cannot be scheduled is logged
and the inquiry still stands.
"""

import logging
from typing import Any, Callable, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import MAX_MESSAGE_LENGTH, MAX_NAME_LENGTH
from ..core.exceptions import NotFoundException, ValidationException
from ..models.membership_inquiry import MembershipInquiry
from ..principal import Actor
from ..repositories.factory import RepositoryFactory
from ..repositories.membership_inquiry_repository import MembershipInquiryRepository
from ..utils.email_address import normalize_email
from .base import BaseService
from .notification_service import MembershipInquiryNotice

logger = logging.getLogger(__name__)

_UNSET: Any = object()

InquiryCallback = Callable[[MembershipInquiryNotice], Any]


class MembershipInquiryService(BaseService):
    def __init__(
        self,
        db: Session,
        repository: Optional[MembershipInquiryRepository] = None,
    ):
        super().__init__(db)
        self.repository = (
            repository or RepositoryFactory.create_membership_inquiry_repository(db)
        )

    @BaseService.measure_operation("submit_membership_inquiry")
    def submit(
        self,
        name: str,
        email: str,
        message: str,
        phone: Optional[str] = None,
        notify: Optional[InquiryCallback] = None,
    ) -> MembershipInquiry:
        name = (name or "").strip()
        email = (email or "").strip()
        message = (message or "").strip()
        required = (("name", name), ("email", email), ("message", message))
        missing = [field for field, value in required if not value]
        if missing:
            raise ValidationException(
                "Name, email and message are required", details={"missing": missing}
            )
        email = normalize_email(email)
        if len(name) > MAX_NAME_LENGTH or len(message) > MAX_MESSAGE_LENGTH:
            raise ValidationException("Inquiry is too long")

        with self.transaction():
            inquiry = self.repository.create(
                name=name,
                email=email,
                phone=(phone or "").strip() or None,
                message=message,
            )
        self.log_operation("submit_membership_inquiry", inquiry_id=inquiry.id)

        if notify is not None:
            try:
                notify(
                    MembershipInquiryNotice(
                        name=inquiry.name,
                        email=inquiry.email,
                        phone=inquiry.phone,
                        message=inquiry.message,
                        submitted_at=inquiry.submitted_at,
                    )
                )
            except Exception:
                self.logger.exception("Could not schedule notice for inquiry %s", inquiry.id)
        return inquiry

    def list_inquiries(self, actor: Actor, unresolved_only: bool = False) -> List[MembershipInquiry]:
        self._require_admin(actor)
        return self.repository.list_recent(unresolved_only=unresolved_only)

    def update_inquiry(
        self,
        actor: Actor,
        inquiry_id: str,
        admin_notes: Optional[str] = _UNSET,
        is_read: Optional[bool] = None,
        is_resolved: Optional[bool] = None,
    ) -> MembershipInquiry:
        self._require_admin(actor)
        inquiry = self._get(inquiry_id)
        with self.transaction():
            if admin_notes is not _UNSET:
                inquiry.admin_notes = admin_notes
            if is_read is not None:
                inquiry.is_read = is_read
            if is_resolved is not None:
                inquiry.is_resolved = is_resolved
            self.db.flush()
        return inquiry

    def delete_inquiry(self, actor: Actor, inquiry_id: str) -> None:
        self._require_admin(actor)
        self._get(inquiry_id)
        with self.transaction():
            self.repository.delete(inquiry_id)
        self.log_operation("delete_membership_inquiry", inquiry_id=inquiry_id)

    def _require_admin(self, actor: Actor) -> None:
        actor.require(actor.capabilities.can_manage_messages, "Only admins can manage inquiries")

    def _get(self, inquiry_id: str) -> MembershipInquiry:
        inquiry = self.repository.get_by_id(inquiry_id, load_relationships=False)
        if inquiry is None:
            raise NotFoundException("Inquiry not found", details={"inquiry_id": inquiry_id})
        return inquiry
