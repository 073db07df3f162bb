# backend/simbay/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

from functools import lru_cache
import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...core.config import settings
from ...integrations import FakeIdentityAdminClient, IdentityAdminClient
from ...services.announcement_service import AnnouncementService
from ...services.booking_service import BookingService
from ...services.contact_service import ContactService
from ...services.email import EmailSender, build_email_sender
from ...services.ledger_service import LedgerService
from ...services.membership_inquiry_service import MembershipInquiryService
from ...services.notification_service import NotificationService
from ...services.template_service import TemplateService
from ...services.user_service import UserService
from .database import get_db

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_identity_client() -> IdentityAdminClient:
    """
    Identity admin client shared by the process.

    The fake client keeps accounts in memory, so it must be a singleton
    for created users to survive between requests.
    """
    logger.info(
        "Identity client selection",
        extra={"identity_provider": settings.identity_provider},
    )
    if settings.identity_provider == "fake":
        return FakeIdentityAdminClient()
    if settings.identity_service_key is None:
        raise ValueError("IDENTITY_SERVICE_KEY is required when IDENTITY_PROVIDER=remote")
    return IdentityAdminClient(
        service_key=settings.identity_service_key,
        base_url=settings.identity_api_url,
        timeout=settings.identity_timeout_seconds,
    )


@lru_cache(maxsize=1)
def get_template_service() -> TemplateService:
    return TemplateService()


def get_email_sender() -> EmailSender:
    return build_email_sender()


def get_notification_service(
    email_sender: EmailSender = Depends(get_email_sender),
) -> NotificationService:
    """
    Get notification service instance.

    Needs no database session, so it is safe to run from background tasks.
    """
    return NotificationService(email_sender=email_sender, template_service=get_template_service())


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    return BookingService(db)


def get_ledger_service(db: Session = Depends(get_db)) -> LedgerService:
    return LedgerService(db)


def get_announcement_service(db: Session = Depends(get_db)) -> AnnouncementService:
    return AnnouncementService(db)


def get_user_service(
    db: Session = Depends(get_db),
    identity_client: IdentityAdminClient = Depends(get_identity_client),
) -> UserService:
    return UserService(db, identity_client=identity_client)


def get_contact_service(db: Session = Depends(get_db)) -> ContactService:
    return ContactService(db)


def get_membership_inquiry_service(db: Session = Depends(get_db)) -> MembershipInquiryService:
    return MembershipInquiryService(db)
