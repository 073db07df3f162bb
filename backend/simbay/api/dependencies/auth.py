# backend/simbay/api/dependencies/auth.py
"""
Authentication and authorization dependencies.

The verified token gives us the caller's id. The role comes from the
profile row, and capabilities are resolved from it once per request.
"""

import logging
from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from ...auth import get_current_principal, get_current_principal_optional
from ...core.exceptions import UnauthorizedException
from ...models.profile import Profile
from ...principal import Actor, UserPrincipal
from ...repositories.factory import RepositoryFactory
from .database import get_db

logger = logging.getLogger(__name__)


def _load_profile(db: Session, principal: UserPrincipal) -> Optional[Profile]:
    repository = RepositoryFactory.create_profile_repository(db)
    return repository.get_by_id(principal.user_id, load_relationships=False)


def get_current_actor(
    principal: UserPrincipal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> Actor:
    """
    Resolve the authenticated caller to an Actor.

    Raises:
        HTTPException: 401 when the token has no matching profile
    """
    profile = _load_profile(db, principal)
    if profile is None:
        logger.warning("Valid token for %s but no profile found", principal.user_id)
        raise UnauthorizedException("No member profile for this account").to_http_exception()
    return Actor.for_profile(profile.id, profile.email, profile.role)


def get_optional_actor(
    principal: Optional[UserPrincipal] = Depends(get_current_principal_optional),
    db: Session = Depends(get_db),
) -> Optional[Actor]:
    """Actor for signed-in callers, None for anonymous ones."""
    if principal is None:
        return None
    profile = _load_profile(db, principal)
    if profile is None:
        return None
    return Actor.for_profile(profile.id, profile.email, profile.role)
