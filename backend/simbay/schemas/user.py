# backend/simbay/schemas/user.py
"""Profile and user-administration schemas."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import EmailStr, Field

from ..core.constants import MAX_NAME_LENGTH
from .base import StrictModel, StrictRequestModel

RoleLiteral = Literal["user", "admin"]


class ProfileResponse(StrictModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    role: str
    profile_picture_url: Optional[str] = None
    active_until: Optional[datetime] = None
    created_at: datetime


class UserCreate(StrictRequestModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    phone: Optional[str] = Field(None, max_length=40)
    role: RoleLiteral = "user"
    active_until: Optional[datetime] = None


class UserUpdate(StrictRequestModel):
    """Admin edit. Omitted fields are left alone; ``active_until: null`` clears it."""

    email: Optional[EmailStr] = None
    name: Optional[str] = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    phone: Optional[str] = Field(None, max_length=40)
    role: Optional[RoleLiteral] = None
    active_until: Optional[datetime] = None


class OwnProfileUpdate(StrictRequestModel):
    name: Optional[str] = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    phone: Optional[str] = Field(None, max_length=40)
    profile_picture_url: Optional[str] = Field(None, max_length=1024)


class MembershipReportRow(StrictModel):
    id: str
    name: str
    email: str
    active_until: Optional[datetime] = None
    is_expired: Optional[bool] = None
