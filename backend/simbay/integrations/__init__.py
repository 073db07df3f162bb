"""External service integrations for SimBay."""

from .identity_client import FakeIdentityAdminClient, IdentityAdminClient, IdentityProviderError

__all__ = ["FakeIdentityAdminClient", "IdentityAdminClient", "IdentityProviderError"]
