# backend/simbay/api/dependencies/__init__.py
"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from .auth import get_current_actor, get_optional_actor
from .database import get_db
from .services import (
    get_announcement_service,
    get_booking_service,
    get_contact_service,
    get_identity_client,
    get_ledger_service,
    get_membership_inquiry_service,
    get_notification_service,
    get_user_service,
)

__all__ = [
    # Auth
    "get_current_actor",
    "get_optional_actor",
    # Database
    "get_db",
    # Services
    "get_announcement_service",
    "get_booking_service",
    "get_contact_service",
    "get_identity_client",
    "get_ledger_service",
    "get_membership_inquiry_service",
    "get_notification_service",
    "get_user_service",
]
