from datetime import datetime
from typing import Optional

from pydantic import Field

from ..core.constants import MAX_MESSAGE_LENGTH
from .base import StrictModel, StrictRequestModel


class TournamentMessageCreate(StrictRequestModel):
    message: str = Field(..., max_length=MAX_MESSAGE_LENGTH)


class TournamentMessageUpdate(StrictRequestModel):
    message: Optional[str] = Field(None, max_length=MAX_MESSAGE_LENGTH)
    is_active: Optional[bool] = None


class TournamentMessageResponse(StrictModel):
    id: str
    message: str
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None
