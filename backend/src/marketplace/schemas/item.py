"""Item schemas for request/response validation."""

from datetime import datetime
from typing import Any

from pydantic import ConfigDict, Field

from marketplace.schemas.bid import CamelModel


class ItemCategory(CamelModel):
    """Stock held for one category; extra keys (unit, rate) pass through."""

    model_config = ConfigDict(extra="allow")

    quantity: int | float = Field(..., ge=0)


class ItemCreate(CamelModel):
    """Schema for item creation request."""

    seller_id: int
    name: str = Field("", max_length=255)
    details: dict[str, ItemCategory]


class ItemResponse(CamelModel):
    """Schema for item response."""

    item_id: int
    seller_id: int
    name: str
    details: dict[str, Any]
    version: int
    created_at: datetime
    updated_at: datetime
