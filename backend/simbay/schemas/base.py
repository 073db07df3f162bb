"""
Shared schema bases for the SimBay API.

Request bodies reject unknown fields so a typo such as ``end_time`` on a
booking is reported instead of silently ignored. Money travels as a JSON
number and is held as a two-place Decimal in between.
"""
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic_core import core_schema

CENTS = Decimal("0.01")


class StrictModel(BaseModel):
    """Response DTO base, readable straight from ORM rows."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True, from_attributes=True)


class StrictRequestModel(BaseModel):
    """Request DTO base that always forbids unexpected fields."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class StandardizedModel(BaseModel):
    model_config = ConfigDict(use_enum_values=True, populate_by_name=True)


class SuccessResponse(StandardizedModel):
    success: bool = True
    message: str | None = None


def _to_cents(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValueError("Amount must be a number, not a boolean")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid amount '{value}'")
    if not amount.is_finite():
        raise ValueError("Amount must be a finite number")
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


class Money(Decimal):
    """Dollar amount: accepts numbers or numeric strings, rounds to cents, serializes as float."""

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> core_schema.CoreSchema:
        return core_schema.no_info_after_validator_function(
            _to_cents,
            core_schema.union_schema(
                [
                    core_schema.int_schema(),
                    core_schema.float_schema(),
                    core_schema.str_schema(),
                    core_schema.is_instance_schema(Decimal),
                ]
            ),
            serialization=core_schema.plain_serializer_function_ser_schema(
                float,
                info_arg=False,
                return_schema=core_schema.float_schema(),
            ),
        )
