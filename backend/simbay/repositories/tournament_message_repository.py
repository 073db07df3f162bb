# backend/simbay/repositories/tournament_message_repository.py
from typing import List

from sqlalchemy.orm import Session

from ..models.tournament_message import TournamentMessage
from .base_repository import BaseRepository


class TournamentMessageRepository(BaseRepository[TournamentMessage]):
    def __init__(self, db: Session):
        super().__init__(db, TournamentMessage)

    def list_messages(self, include_inactive: bool) -> List[TournamentMessage]:
        """Newest-created first; inactive rows only when ``include_inactive``."""
        query = self._build_query()
        if not include_inactive:
            query = query.filter(TournamentMessage.is_active.is_(True))
        return self._execute_query(
            query.order_by(TournamentMessage.created_at.desc(), TournamentMessage.id.desc())
        )
