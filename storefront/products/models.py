from typing import List, Optional
from pydantic import BaseModel, Field


class ProductCreateIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    salePrice: int = Field(..., ge=0)
    unitCost: int = Field(0, ge=0)
    photos: List[str] = Field(default_factory=list, max_length=10)
    active: bool = True


class ProductUpdateIn(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    salePrice: Optional[int] = Field(None, ge=0)
    unitCost: Optional[int] = Field(None, ge=0)
    photos: Optional[List[str]] = Field(None, max_length=10)
    active: Optional[bool] = None

    model_config = {"extra": "forbid"}


# request field -> column
FIELD_MAP = {"name": "name", "salePrice": "sale_price", "unitCost": "unit_cost",
             "photos": "photos", "active": "active"}
