# backend/simbay/routes/v1/membership_inquiries.py
"""
Membership inquiry routes - API v1

``public_router`` is mounted under /api/v1/public and needs no token.
``admin_router`` is mounted under /api/v1/admin.
"""

import asyncio
import logging
from typing import List, NoReturn

from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException, Query, status

from ...api.dependencies import (
    get_current_actor,
    get_membership_inquiry_service,
    get_notification_service,
)
from ...core.exceptions import DomainException
from ...principal import Actor
from ...schemas.base import SuccessResponse
from ...schemas.contact import (
    AdminReviewUpdate,
    InquiryReceipt,
    MembershipInquiryCreate,
    MembershipInquiryResponse,
)
from ...services.membership_inquiry_service import MembershipInquiryService
from ...services.notification_service import MembershipInquiryNotice, NotificationService

logger = logging.getLogger(__name__)

public_router = APIRouter(tags=["public-v1"])
admin_router = APIRouter(tags=["admin-membership-inquiries-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@public_router.post(
    "/membership-inquiries", response_model=InquiryReceipt, status_code=status.HTTP_201_CREATED
)
async def submit_membership_inquiry(
    background_tasks: BackgroundTasks,
    inquiry_data: MembershipInquiryCreate = Body(...),
    inquiry_service: MembershipInquiryService = Depends(get_membership_inquiry_service),
    notification_service: NotificationService = Depends(get_notification_service),
) -> InquiryReceipt:
    def schedule_notice(payload: MembershipInquiryNotice) -> None:
        background_tasks.add_task(notification_service.send_membership_inquiry_notice, payload)

    try:
        inquiry = await asyncio.to_thread(
            inquiry_service.submit,
            inquiry_data.name,
            inquiry_data.email,
            inquiry_data.message,
            phone=inquiry_data.phone,
            notify=schedule_notice,
        )
        return InquiryReceipt(success=True, id=inquiry.id)
    except DomainException as e:
        handle_domain_exception(e)


@admin_router.get("/membership-inquiries", response_model=List[MembershipInquiryResponse])
async def list_membership_inquiries(
    unresolved_only: bool = Query(False),
    current_actor: Actor = Depends(get_current_actor),
    inquiry_service: MembershipInquiryService = Depends(get_membership_inquiry_service),
) -> List[MembershipInquiryResponse]:
    try:
        inquiries = await asyncio.to_thread(
            inquiry_service.list_inquiries, current_actor, unresolved_only
        )
        return [MembershipInquiryResponse.model_validate(inquiry) for inquiry in inquiries]
    except DomainException as e:
        handle_domain_exception(e)


@admin_router.patch("/membership-inquiries/{inquiry_id}", response_model=MembershipInquiryResponse)
async def update_membership_inquiry(
    inquiry_id: str,
    review: AdminReviewUpdate = Body(...),
    current_actor: Actor = Depends(get_current_actor),
    inquiry_service: MembershipInquiryService = Depends(get_membership_inquiry_service),
) -> MembershipInquiryResponse:
    try:
        inquiry = await asyncio.to_thread(
            inquiry_service.update_inquiry,
            current_actor,
            inquiry_id,
            **review.model_dump(exclude_unset=True),
        )
        return MembershipInquiryResponse.model_validate(inquiry)
    except DomainException as e:
        handle_domain_exception(e)


@admin_router.delete("/membership-inquiries/{inquiry_id}", response_model=SuccessResponse)
async def delete_membership_inquiry(
    inquiry_id: str,
    current_actor: Actor = Depends(get_current_actor),
    inquiry_service: MembershipInquiryService = Depends(get_membership_inquiry_service),
) -> SuccessResponse:
    try:
        await asyncio.to_thread(inquiry_service.delete_inquiry, current_actor, inquiry_id)
        return SuccessResponse(message="Inquiry deleted")
    except DomainException as e:
        handle_domain_exception(e)
