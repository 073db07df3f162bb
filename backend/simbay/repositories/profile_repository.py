# backend/simbay/repositories/profile_repository.py
"""Profile data access."""

import logging
from typing import List, Optional, cast

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.profile import Profile
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ProfileRepository(BaseRepository[Profile]):
    def __init__(self, db: Session):
        super().__init__(db, Profile)

    def get_by_email(self, email: str) -> Optional[Profile]:
        try:
            return cast(
                Optional[Profile],
                self.db.query(Profile)
                .filter(func.lower(Profile.email) == email.strip().lower())
                .first(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting profile by email: {str(e)}")
            raise RepositoryException(f"Failed to get profile: {str(e)}") from e

    def list_ordered_by_name(self) -> List[Profile]:
        return self._execute_query(self._build_query().order_by(Profile.name, Profile.email))

    def list_with_membership_expiry(self) -> List[Profile]:
        """Profiles ordered by expiry, members with no expiry last."""
        query = self._build_query().order_by(
            Profile.active_until.is_(None), Profile.active_until, Profile.name
        )
        return self._execute_query(query)
