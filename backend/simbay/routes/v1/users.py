# backend/simbay/routes/v1/users.py
"""
User routes - API v1

Endpoints:
    GET /me                    → Current member's profile
    PATCH /me                  → Edit own name, phone and picture
    GET /                      → All members (admin)
    POST /                     → Create a member account (admin)
    GET /membership-report     → Membership expiry report (admin)
    PUT /{user_id}             → Edit a member (admin)
    DELETE /{user_id}          → Delete a member and all their records (admin)
"""

import asyncio
import logging
from typing import List, NoReturn

from fastapi import APIRouter, Body, Depends, HTTPException, status

from ...api.dependencies import get_current_actor, get_user_service
from ...core.exceptions import DomainException
from ...principal import Actor
from ...schemas.base import SuccessResponse
from ...schemas.user import (
    MembershipReportRow,
    OwnProfileUpdate,
    ProfileResponse,
    UserCreate,
    UserUpdate,
)
from ...services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


# ============================================================================
# SECTION 1: Self service
# ============================================================================


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    current_actor: Actor = Depends(get_current_actor),
    user_service: UserService = Depends(get_user_service),
) -> ProfileResponse:
    try:
        profile = await asyncio.to_thread(user_service.get_profile, current_actor.user_id)
        return ProfileResponse.model_validate(profile)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: OwnProfileUpdate = Body(...),
    current_actor: Actor = Depends(get_current_actor),
    user_service: UserService = Depends(get_user_service),
) -> ProfileResponse:
    """Role and membership expiry are not accepted here."""
    try:
        profile = await asyncio.to_thread(
            user_service.update_own_profile,
            current_actor,
            **profile_data.model_dump(exclude_unset=True),
        )
        return ProfileResponse.model_validate(profile)
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# SECTION 2: Admin
# ============================================================================


@router.get("", response_model=List[ProfileResponse])
async def list_users(
    current_actor: Actor = Depends(get_current_actor),
    user_service: UserService = Depends(get_user_service),
) -> List[ProfileResponse]:
    try:
        profiles = await asyncio.to_thread(user_service.list_users, current_actor)
        return [ProfileResponse.model_validate(profile) for profile in profiles]
    except DomainException as e:
        handle_domain_exception(e)


@router.post("", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate = Body(...),
    current_actor: Actor = Depends(get_current_actor),
    user_service: UserService = Depends(get_user_service),
) -> ProfileResponse:
    try:
        profile = await asyncio.to_thread(
            user_service.create_user, current_actor, **user_data.model_dump()
        )
        return ProfileResponse.model_validate(profile)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/membership-report", response_model=List[MembershipReportRow])
async def membership_report(
    current_actor: Actor = Depends(get_current_actor),
    user_service: UserService = Depends(get_user_service),
) -> List[MembershipReportRow]:
    try:
        rows = await asyncio.to_thread(user_service.membership_report, current_actor)
        return [
            MembershipReportRow(
                id=row.profile.id,
                name=row.profile.name,
                email=row.profile.email,
                active_until=row.profile.active_until,
                is_expired=row.is_expired,
            )
            for row in rows
        ]
    except DomainException as e:
        handle_domain_exception(e)


@router.put("/{user_id}", response_model=ProfileResponse)
async def update_user(
    user_id: str,
    user_data: UserUpdate = Body(...),
    current_actor: Actor = Depends(get_current_actor),
    user_service: UserService = Depends(get_user_service),
) -> ProfileResponse:
    try:
        profile = await asyncio.to_thread(
            user_service.update_user,
            current_actor,
            user_id,
            **user_data.model_dump(exclude_unset=True),
        )
        return ProfileResponse.model_validate(profile)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{user_id}", response_model=SuccessResponse)
async def delete_user(
    user_id: str,
    current_actor: Actor = Depends(get_current_actor),
    user_service: UserService = Depends(get_user_service),
) -> SuccessResponse:
    try:
        await asyncio.to_thread(user_service.delete_user, current_actor, user_id)
        return SuccessResponse(message="User deleted")
    except DomainException as e:
        handle_domain_exception(e)
