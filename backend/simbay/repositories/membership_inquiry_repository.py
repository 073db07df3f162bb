# backend/simbay/repositories/membership_inquiry_repository.py
from typing import List

from sqlalchemy.orm import Session

from ..models.membership_inquiry import MembershipInquiry
from .base_repository import BaseRepository


class MembershipInquiryRepository(BaseRepository[MembershipInquiry]):
    def __init__(self, db: Session):
        super().__init__(db, MembershipInquiry)

    def list_recent(self, unresolved_only: bool = False) -> List[MembershipInquiry]:
        query = self._build_query()
        if unresolved_only:
            query = query.filter(MembershipInquiry.is_resolved.is_(False))
        return self._execute_query(query.order_by(MembershipInquiry.submitted_at.desc()))
