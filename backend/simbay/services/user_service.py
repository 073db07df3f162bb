# backend/simbay/services/user_service.py
"""
User management for SimBay.

Accounts live in two places: the identity provider (credentials) and the
``profiles`` table (name, phone, role, membership expiry). Admin
operations keep the two in step. Members may edit their own contact
details but never their role or membership expiry.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.enums import RoleName
from ..core.exceptions import (
    ConflictException,
    NotFoundException,
    ServiceException,
    ValidationException,
)
from ..integrations.identity_client import IdentityAdminClient, IdentityProviderError
from ..models.profile import Profile
from ..principal import Actor
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.ledger_repository import LedgerRepository
from ..repositories.profile_repository import ProfileRepository
from ..utils.email_address import normalize_email
from .base import BaseService

logger = logging.getLogger(__name__)

_UNSET: Any = object()


@dataclass(frozen=True)
class MembershipStatus:
    profile: Profile
    is_expired: Optional[bool]


class UserService(BaseService):
    def __init__(
        self,
        db: Session,
        identity_client: IdentityAdminClient,
        profile_repository: Optional[ProfileRepository] = None,
        booking_repository: Optional[BookingRepository] = None,
        ledger_repository: Optional[LedgerRepository] = None,
    ):
        super().__init__(db)
        self.identity_client = identity_client
        self.profile_repository = (
            profile_repository or RepositoryFactory.create_profile_repository(db)
        )
        self.booking_repository = (
            booking_repository or RepositoryFactory.create_booking_repository(db)
        )
        self.ledger_repository = ledger_repository or RepositoryFactory.create_ledger_repository(
            db
        )

    # Self service

    def get_profile(self, user_id: str) -> Profile:
        profile = self.profile_repository.get_by_id(user_id, load_relationships=False)
        if profile is None:
            raise NotFoundException("Profile not found", details={"user_id": user_id})
        return profile

    def update_own_profile(
        self,
        actor: Actor,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        profile_picture_url: Optional[str] = _UNSET,
    ) -> Profile:
        """Update contact details. Role and membership expiry are admin-only."""
        profile = self.get_profile(actor.user_id)
        with self.transaction():
            if name is not None:
                profile.name = self._require_text(name, "name")
            if phone is not None:
                profile.phone = phone.strip() or None
            if profile_picture_url is not _UNSET:
                profile.profile_picture_url = profile_picture_url
            self.db.flush()
        return profile

    # Admin

    def list_users(self, actor: Actor) -> List[Profile]:
        self._require_admin(actor)
        return self.profile_repository.list_ordered_by_name()

    @BaseService.measure_operation("create_user")
    def create_user(
        self,
        actor: Actor,
        email: str,
        password: str,
        name: str,
        phone: Optional[str] = None,
        role: str = RoleName.USER.value,
        active_until: Optional[datetime] = None,
    ) -> Profile:
        self._require_admin(actor)
        email = self._normalize_email(email)
        name = self._require_text(name, "name")
        role = self._validate_role(role)
        if not password or len(password) < 6:
            raise ValidationException("Password must be at least 6 characters")
        if self.profile_repository.get_by_email(email) is not None:
            raise ConflictException(
                "A member with this email already exists",
                code="EMAIL_TAKEN",
                details={"email": email},
            )

        account = self._call_identity(
            "create_user",
            email=email,
            password=password,
            user_metadata={"name": name, "phone": phone, "role": role},
        )
        user_id = str(account["id"])

        try:
            with self.transaction():
                profile = self.profile_repository.create(
                    id=user_id,
                    email=email,
                    name=name,
                    phone=(phone or "").strip() or None,
                    role=role,
                    active_until=active_until,
                )
        except ServiceException:
            # Do not leave a login without a profile behind
            self.logger.error("Profile creation failed; removing identity account %s", user_id)
            try:
                self.identity_client.delete_user(user_id)
            except IdentityProviderError as cleanup_error:
                self.logger.error(
                    "Could not remove orphaned identity account %s: %s", user_id, cleanup_error
                )
            raise

        self.log_operation("create_user", user_id=user_id, role=role, admin_id=actor.user_id)
        return profile

    @BaseService.measure_operation("update_user")
    def update_user(
        self,
        actor: Actor,
        user_id: str,
        email: Optional[str] = None,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        role: Optional[str] = None,
        active_until: Optional[datetime] = _UNSET,
    ) -> Profile:
        self._require_admin(actor)
        profile = self.get_profile(user_id)

        changes: Dict[str, Any] = {}
        if email is not None:
            normalized = self._normalize_email(email)
            if normalized != profile.email:
                other = self.profile_repository.get_by_email(normalized)
                if other is not None and other.id != user_id:
                    raise ConflictException(
                        "A member with this email already exists",
                        code="EMAIL_TAKEN",
                        details={"email": normalized},
                    )
                changes["email"] = normalized
        if name is not None:
            changes["name"] = self._require_text(name, "name")
        if phone is not None:
            changes["phone"] = phone.strip() or None
        if role is not None:
            changes["role"] = self._validate_role(role)
        if active_until is not _UNSET:
            changes["active_until"] = active_until

        metadata = {k: changes[k] for k in ("name", "phone", "role") if k in changes}
        if "email" in changes or metadata:
            self._call_identity(
                "update_user", user_id, email=changes.get("email"), user_metadata=metadata
            )

        with self.transaction():
            for key, value in changes.items():
                setattr(profile, key, value)
            self.db.flush()

        self.log_operation(
            "update_user", user_id=user_id, fields=sorted(changes), admin_id=actor.user_id
        )
        return profile

    @BaseService.measure_operation("delete_user")
    def delete_user(self, actor: Actor, user_id: str) -> None:
        """
        Remove a member everywhere.

        The identity account goes first so a failed database step can be
        retried: a second attempt treats an already-missing account as done.
        """
        self._require_admin(actor)
        if actor.owns(user_id):
            raise ValidationException("You cannot delete your own account")
        self.get_profile(user_id)

        try:
            self.identity_client.delete_user(user_id)
        except IdentityProviderError as exc:
            if exc.status_code != 404:
                raise ServiceException(
                    "Identity provider could not delete the account",
                    details={"user_id": user_id, "status_code": exc.status_code},
                ) from exc
            self.logger.info("Identity account %s already absent", user_id)

        with self.transaction():
            fees = self.ledger_repository.delete_guest_fees_for_user_bookings(user_id)
            entries = self.ledger_repository.delete_for_user(user_id)
            bookings = self.booking_repository.delete_for_user(user_id)
            self.profile_repository.delete(user_id)

        self.log_operation(
            "delete_user",
            user_id=user_id,
            deleted_bookings=bookings,
            deleted_entries=entries + fees,
            admin_id=actor.user_id,
        )

    def membership_report(self, actor: Actor) -> List[MembershipStatus]:
        actor.require(actor.capabilities.can_view_reports, "Only admins can view reports")
        now = datetime.now(timezone.utc)
        return [
            MembershipStatus(profile=profile, is_expired=profile.membership_expired(now))
            for profile in self.profile_repository.list_with_membership_expiry()
        ]

    # Helpers

    def _require_admin(self, actor: Actor) -> None:
        actor.require(actor.capabilities.can_manage_users, "Only admins can manage users")

    def _call_identity(self, method: str, *args: Any, **kwargs: Any) -> Dict[str, Any]:
        try:
            return getattr(self.identity_client, method)(*args, **kwargs)
        except IdentityProviderError as exc:
            if exc.status_code in (400, 422):
                raise ValidationException(
                    str(exc), code="IDENTITY_REJECTED", details={"error": exc.error_body}
                ) from exc
            raise ServiceException(
                "Identity provider request failed",
                details={"operation": method, "status_code": exc.status_code},
            ) from exc

    @staticmethod
    def _normalize_email(email: str) -> str:
        return normalize_email(email, "A valid email address is required")

    @staticmethod
    def _require_text(value: str, field: str) -> str:
        text = (value or "").strip()
        if not text:
            raise ValidationException(f"{field} is required")
        return text

    @staticmethod
    def _validate_role(role: str) -> str:
        try:
            return RoleName(role).value
        except ValueError:
            raise ValidationException(
                f"Unknown role '{role}'", details={"allowed": [r.value for r in RoleName]}
            )
