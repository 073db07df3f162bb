# backend/simbay/routes/v1/transactions.py
"""
Transaction (ledger) routes - API v1

Endpoints:
    GET /balance               → Balance owed (own, or any member for admins)
    GET /balances              → Every member with a positive balance (admin)
    GET /                      → Ledger entries (own, or any member for admins)
    GET /guest-fees            → Guest fee entries (own, or any member for admins)
    GET /adjustments           → Adjustment history (admin)
    POST /guest-fees           → Charge a guest fee against a booking
    POST /payments             → Record a payment (admin)
    POST /adjustments          → Adjust a balance to a target (admin)
    DELETE /{transaction_id}   → Remove an entry
"""

import asyncio
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status

from ...api.dependencies import get_current_actor, get_ledger_service
from ...core.exceptions import DomainException
from ...principal import Actor
from ...schemas.base import SuccessResponse
from ...schemas.ledger import (
    AdjustmentCreate,
    AdjustmentHistoryItem,
    BalanceResponse,
    GuestFeeCreate,
    PaymentCreate,
    TransactionResponse,
    UserBalanceResponse,
)
from ...services.ledger_service import LedgerService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["transactions-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get("/balance", response_model=BalanceResponse)
async def get_balance(
    user_id: Optional[str] = Query(None),
    current_actor: Actor = Depends(get_current_actor),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> BalanceResponse:
    try:
        balance = await asyncio.to_thread(ledger_service.get_balance, current_actor, user_id)
        return BalanceResponse(user_id=user_id or current_actor.user_id, balance=balance)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/balances", response_model=List[UserBalanceResponse])
async def get_all_balances(
    current_actor: Actor = Depends(get_current_actor),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> List[UserBalanceResponse]:
    try:
        balances = await asyncio.to_thread(ledger_service.compute_all_balances, current_actor)
        return [
            UserBalanceResponse(
                user_id=item.profile.id,
                name=item.profile.name,
                email=item.profile.email,
                balance=item.balance,
            )
            for item in balances
        ]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("", response_model=List[TransactionResponse])
async def list_transactions(
    user_id: Optional[str] = Query(None),
    current_actor: Actor = Depends(get_current_actor),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> List[TransactionResponse]:
    try:
        entries = await asyncio.to_thread(ledger_service.list_transactions, current_actor, user_id)
        return [TransactionResponse.model_validate(entry) for entry in entries]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/guest-fees", response_model=List[TransactionResponse])
async def list_guest_fees(
    user_id: Optional[str] = Query(None),
    current_actor: Actor = Depends(get_current_actor),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> List[TransactionResponse]:
    try:
        entries = await asyncio.to_thread(
            ledger_service.list_outstanding_guest_fees, current_actor, user_id
        )
        return [TransactionResponse.model_validate(entry) for entry in entries]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/adjustments", response_model=List[AdjustmentHistoryItem])
async def list_adjustments(
    limit: Optional[int] = Query(None, ge=1, le=500),
    current_actor: Actor = Depends(get_current_actor),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> List[AdjustmentHistoryItem]:
    try:
        entries = await asyncio.to_thread(ledger_service.list_adjustments, current_actor, limit)
        return [
            AdjustmentHistoryItem(
                **TransactionResponse.model_validate(entry).model_dump(),
                user_name=entry.user.name if entry.user else None,
            )
            for entry in entries
        ]
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/guest-fees", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def assess_guest_fee(
    fee_data: GuestFeeCreate = Body(...),
    current_actor: Actor = Depends(get_current_actor),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> TransactionResponse:
    try:
        entry = await asyncio.to_thread(
            ledger_service.assess_guest_fee,
            current_actor,
            fee_data.booking_id,
            user_id=fee_data.user_id,
            amount=fee_data.amount,
            description=fee_data.description,
        )
        return TransactionResponse.model_validate(entry)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/payments", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def record_payment(
    payment_data: PaymentCreate = Body(...),
    current_actor: Actor = Depends(get_current_actor),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> TransactionResponse:
    try:
        entry = await asyncio.to_thread(
            ledger_service.record_payment,
            current_actor,
            payment_data.user_id,
            payment_data.amount,
            payment_data.description,
        )
        return TransactionResponse.model_validate(entry)
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/adjustments", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED
)
async def adjust_balance(
    adjustment_data: AdjustmentCreate = Body(...),
    current_actor: Actor = Depends(get_current_actor),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> TransactionResponse:
    """Append one adjustment so the member's balance equals ``target_balance``."""
    try:
        entry = await asyncio.to_thread(
            ledger_service.adjust_to_target,
            current_actor,
            adjustment_data.user_id,
            adjustment_data.target_balance,
            adjustment_data.reason,
        )
        return TransactionResponse.model_validate(entry)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{transaction_id}", response_model=SuccessResponse)
async def remove_transaction(
    transaction_id: str,
    current_actor: Actor = Depends(get_current_actor),
    ledger_service: LedgerService = Depends(get_ledger_service),
) -> SuccessResponse:
    try:
        await asyncio.to_thread(ledger_service.remove_transaction, current_actor, transaction_id)
        return SuccessResponse(message="Transaction removed")
    except DomainException as e:
        handle_domain_exception(e)
