from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class OperationKind(StrEnum):
    BUY = "buy"
    SELL = "sell"


class Operation(BaseModel):
    """A single trade within a batch.

    Field aliases follow the input wire format (`operation`, `unit-cost`, `quantity`).
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    kind: OperationKind = Field(alias="operation")
    unit_cost: Decimal = Field(alias="unit-cost")
    quantity: int = Field(strict=True)

    @field_validator("unit_cost", mode="before")
    @classmethod
    def _require_number(cls, value: Any) -> Any:
        # Numeric strings and booleans would otherwise coerce.
        if isinstance(value, (str, bool)):
            raise ValueError("unit-cost must be a number")
        return value

    @model_validator(mode="after")
    def _validate_fields(self) -> Operation:
        if self.unit_cost < 0:
            raise ValueError("unit-cost must be >= 0")
        if self.quantity < 0:
            raise ValueError("quantity must be >= 0")
        return self

    @property
    def gross_value(self) -> Decimal:
        return self.unit_cost * self.quantity


Batch = list[Operation]


class TaxResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    tax: Decimal = Decimal("0")
