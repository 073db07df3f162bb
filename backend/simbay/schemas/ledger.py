# backend/simbay/schemas/ledger.py
"""Ledger (user transaction) schemas. Amounts serialize as floats."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from ..core.constants import MAX_DESCRIPTION_LENGTH
from .base import Money, StrictModel, StrictRequestModel


class TransactionResponse(StrictModel):
    id: str
    user_id: str
    booking_id: Optional[int] = None
    type: str
    amount: Money
    description: Optional[str] = None
    created_at: datetime
    created_by: Optional[str] = None


class AdjustmentHistoryItem(TransactionResponse):
    user_name: Optional[str] = None


class BalanceResponse(StrictModel):
    user_id: str
    balance: Money


class UserBalanceResponse(StrictModel):
    user_id: str
    name: str
    email: str
    balance: Money


class GuestFeeCreate(StrictRequestModel):
    booking_id: int
    user_id: Optional[str] = None
    amount: Optional[Money] = Field(None, description="Defaults to the standard guest fee")
    description: Optional[str] = Field(None, max_length=MAX_DESCRIPTION_LENGTH)


class PaymentCreate(StrictRequestModel):
    user_id: str
    amount: Money
    description: Optional[str] = Field(None, max_length=MAX_DESCRIPTION_LENGTH)


class AdjustmentCreate(StrictRequestModel):
    user_id: str
    target_balance: Money
    reason: str = Field("", max_length=MAX_DESCRIPTION_LENGTH)
