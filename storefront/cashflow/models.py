import math
from datetime import date
from typing import Literal, Optional
from pydantic import BaseModel, Field, field_validator
from storefront.schema.full_schema import MovementType


class CashMovementIn(BaseModel):
    type: MovementType
    category: Literal["sale", "equipment", "accessory", "material", "other"]
    amount: float
    note: Optional[str] = Field(default=None, max_length=500)
    occurredOn: date

    @field_validator("amount")
    @classmethod
    def positive_amount(cls, v: float) -> float:
        if not math.isfinite(v) or v <= 0:
            raise ValueError("amount must be positive")
        return v
