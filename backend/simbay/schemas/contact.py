"""Contact message and membership inquiry schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from ..core.constants import MAX_MESSAGE_LENGTH, MAX_NAME_LENGTH, MAX_SUBJECT_LENGTH
from .base import StrictModel, StrictRequestModel


class ContactMessageCreate(StrictRequestModel):
    issue_type: str = Field(..., max_length=50)
    subject: str = Field(..., max_length=MAX_SUBJECT_LENGTH)
    message: str = Field(..., max_length=MAX_MESSAGE_LENGTH)
    photo_url: Optional[str] = Field(None, max_length=1024)


class AdminReviewUpdate(StrictRequestModel):
    admin_notes: Optional[str] = Field(None, max_length=MAX_MESSAGE_LENGTH)
    is_read: Optional[bool] = None
    is_resolved: Optional[bool] = None


class ContactMessageResponse(StrictModel):
    id: str
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    user_phone: Optional[str] = None
    issue_type: str
    subject: str
    message: str
    photo_url: Optional[str] = None
    submitted_at: datetime
    is_read: bool
    is_resolved: bool
    admin_notes: Optional[str] = None


class MembershipInquiryCreate(StrictRequestModel):
    name: str = Field("", max_length=MAX_NAME_LENGTH)
    email: str = Field("", max_length=255)
    phone: Optional[str] = Field(None, max_length=40)
    message: str = Field("", max_length=MAX_MESSAGE_LENGTH)


class MembershipInquiryResponse(StrictModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    message: str
    submitted_at: datetime
    is_read: bool
    is_resolved: bool
    admin_notes: Optional[str] = None


class InquiryReceipt(StrictModel):
    success: bool = True
    id: str
