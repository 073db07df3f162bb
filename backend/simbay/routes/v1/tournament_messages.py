# backend/simbay/routes/v1/tournament_messages.py
"""
Tournament announcement routes - API v1

Anyone may read active announcements; admins also see inactive ones
and are the only callers allowed to write.
"""

import asyncio
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status

from ...api.dependencies import get_announcement_service, get_current_actor, get_optional_actor
from ...core.exceptions import DomainException
from ...principal import ANONYMOUS_CAPABILITIES, Actor
from ...schemas.base import SuccessResponse
from ...schemas.tournament_message import (
    TournamentMessageCreate,
    TournamentMessageResponse,
    TournamentMessageUpdate,
)
from ...services.announcement_service import AnnouncementService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tournament-messages-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get("", response_model=List[TournamentMessageResponse])
async def list_messages(
    current_actor: Optional[Actor] = Depends(get_optional_actor),
    announcement_service: AnnouncementService = Depends(get_announcement_service),
) -> List[TournamentMessageResponse]:
    capabilities = current_actor.capabilities if current_actor else ANONYMOUS_CAPABILITIES
    messages = await asyncio.to_thread(announcement_service.list_messages, capabilities)
    return [TournamentMessageResponse.model_validate(message) for message in messages]


@router.post("", response_model=TournamentMessageResponse, status_code=status.HTTP_201_CREATED)
async def create_message(
    message_data: TournamentMessageCreate = Body(...),
    current_actor: Actor = Depends(get_current_actor),
    announcement_service: AnnouncementService = Depends(get_announcement_service),
) -> TournamentMessageResponse:
    try:
        message = await asyncio.to_thread(
            announcement_service.create_message, current_actor, message_data.message
        )
        return TournamentMessageResponse.model_validate(message)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{message_id}", response_model=TournamentMessageResponse)
async def update_message(
    message_id: str,
    message_data: TournamentMessageUpdate = Body(...),
    current_actor: Actor = Depends(get_current_actor),
    announcement_service: AnnouncementService = Depends(get_announcement_service),
) -> TournamentMessageResponse:
    try:
        message = await asyncio.to_thread(
            announcement_service.update_message,
            current_actor,
            message_id,
            message=message_data.message,
            is_active=message_data.is_active,
        )
        return TournamentMessageResponse.model_validate(message)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{message_id}/toggle", response_model=TournamentMessageResponse)
async def toggle_message(
    message_id: str,
    current_actor: Actor = Depends(get_current_actor),
    announcement_service: AnnouncementService = Depends(get_announcement_service),
) -> TournamentMessageResponse:
    try:
        message = await asyncio.to_thread(
            announcement_service.toggle_message, current_actor, message_id
        )
        return TournamentMessageResponse.model_validate(message)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{message_id}", response_model=SuccessResponse)
async def delete_message(
    message_id: str,
    current_actor: Actor = Depends(get_current_actor),
    announcement_service: AnnouncementService = Depends(get_announcement_service),
) -> SuccessResponse:
    try:
        await asyncio.to_thread(announcement_service.delete_message, current_actor, message_id)
        return SuccessResponse(message="Message deleted")
    except DomainException as e:
        handle_domain_exception(e)
