from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class CheckoutItemIn(BaseModel):
    # older clients send the customization under other keys; they are kept as extras
    model_config = ConfigDict(extra="allow")

    productId: str = Field(..., min_length=1, max_length=64)
    qty: int = Field(..., ge=1, le=999)
    customText: Optional[str] = Field(default=None, max_length=500)


class CheckoutIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    phone: str = Field(..., max_length=32)
    pin: str = Field(..., max_length=16)
    items: List[CheckoutItemIn] = Field(..., min_length=1, max_length=100)
    idToken: Optional[str] = None
