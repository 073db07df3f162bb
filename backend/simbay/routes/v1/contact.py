# backend/simbay/routes/v1/contact.py
"""
Contact message routes - API v1

Members file messages; admins read, annotate and delete them.
"""

import asyncio
import logging
from typing import List, NoReturn

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from ...api.dependencies import get_contact_service, get_current_actor
from ...core.exceptions import DomainException
from ...principal import Actor
from ...schemas.base import SuccessResponse
from ...schemas.contact import AdminReviewUpdate, ContactMessageCreate, ContactMessageResponse
from ...services.contact_service import ContactService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["contact-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post("", response_model=ContactMessageResponse, status_code=status.HTTP_201_CREATED)
async def submit_contact_message(
    message_data: ContactMessageCreate = Body(...),
    current_actor: Actor = Depends(get_current_actor),
    contact_service: ContactService = Depends(get_contact_service),
) -> ContactMessageResponse:
    try:
        message = await asyncio.to_thread(
            contact_service.submit, current_actor, **message_data.model_dump()
        )
        return ContactMessageResponse.model_validate(message)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("", response_model=List[ContactMessageResponse])
async def list_contact_messages(
    unresolved_only: bool = Query(False),
    current_actor: Actor = Depends(get_current_actor),
    contact_service: ContactService = Depends(get_contact_service),
) -> List[ContactMessageResponse]:
    try:
        messages = await asyncio.to_thread(
            contact_service.list_messages, current_actor, unresolved_only
        )
        return [ContactMessageResponse.model_validate(message) for message in messages]
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{message_id}", response_model=ContactMessageResponse)
async def update_contact_message(
    message_id: str,
    review: AdminReviewUpdate = Body(...),
    current_actor: Actor = Depends(get_current_actor),
    contact_service: ContactService = Depends(get_contact_service),
) -> ContactMessageResponse:
    try:
        message = await asyncio.to_thread(
            contact_service.update_message,
            current_actor,
            message_id,
            **review.model_dump(exclude_unset=True),
        )
        return ContactMessageResponse.model_validate(message)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{message_id}", response_model=SuccessResponse)
async def delete_contact_message(
    message_id: str,
    current_actor: Actor = Depends(get_current_actor),
    contact_service: ContactService = Depends(get_contact_service),
) -> SuccessResponse:
    try:
        await asyncio.to_thread(contact_service.delete_message, current_actor, message_id)
        return SuccessResponse(message="Message deleted")
    except DomainException as e:
        handle_domain_exception(e)
