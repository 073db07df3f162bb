"""Principal and capability abstractions for authenticated callers.

Role checks happen exactly once per request in ``resolve_capabilities``.
Services only ever look at the resulting ``Capabilities`` flags.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .core.enums import RoleName
from .core.exceptions import ForbiddenException


@dataclass(frozen=True)
class Capabilities:
    """What the current principal may do beyond acting on their own records."""

    can_book_for_others: bool = False
    can_cancel_any_booking: bool = False
    can_bypass_quota: bool = False
    can_manage_ledger_for_any_user: bool = False
    can_manage_announcements: bool = False
    can_manage_users: bool = False
    can_manage_messages: bool = False
    can_view_reports: bool = False


ANONYMOUS_CAPABILITIES = Capabilities()
MEMBER_CAPABILITIES = Capabilities()
ADMIN_CAPABILITIES = Capabilities(
    can_book_for_others=True,
    can_cancel_any_booking=True,
    can_bypass_quota=True,
    can_manage_ledger_for_any_user=True,
    can_manage_announcements=True,
    can_manage_users=True,
    can_manage_messages=True,
    can_view_reports=True,
)


def resolve_capabilities(role: Optional[str]) -> Capabilities:
    """Map a profile role (or None for anonymous callers) onto a capability set."""
    if role == RoleName.ADMIN.value:
        return ADMIN_CAPABILITIES
    if role == RoleName.USER.value:
        return MEMBER_CAPABILITIES
    return ANONYMOUS_CAPABILITIES


@dataclass(frozen=True)
class UserPrincipal:
    """Identity asserted by a verified access token."""

    user_id: str
    email: str


@dataclass(frozen=True)
class Actor:
    """The requester as seen by services: who they are and what they may do."""

    user_id: str
    email: str
    role: str
    capabilities: Capabilities = field(default=MEMBER_CAPABILITIES)

    @classmethod
    def for_profile(cls, user_id: str, email: str, role: str) -> "Actor":
        return cls(
            user_id=user_id, email=email, role=role, capabilities=resolve_capabilities(role)
        )

    @property
    def is_admin(self) -> bool:
        return self.role == RoleName.ADMIN.value

    def owns(self, user_id: Optional[str]) -> bool:
        return user_id is not None and user_id == self.user_id

    def require(self, allowed: bool, message: str) -> None:
        """Raise ForbiddenException unless ``allowed``."""
        if not allowed:
            raise ForbiddenException(message, details={"user_id": self.user_id})
