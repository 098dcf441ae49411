"""Bid schemas for request/response validation."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from marketplace.core.exceptions import ValidationError
from marketplace.services.bid_status import BidStatus


class CamelModel(BaseModel):
    """Base schema exposing camelCase field names on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class BidDetail(CamelModel):
    """Requested quantity for one item category."""

    model_config = ConfigDict(extra="allow")

    quantity: int | float = Field(default=0, ge=0)
    bid_quantity: int | float = Field(..., ge=0)


def _parse_status(value: Any) -> Any:
    if value is None:
        return None
    try:
        return BidStatus.parse(value)
    except ValidationError as e:
        raise ValueError(str(e)) from None


def _to_naive_utc(value: datetime | None) -> datetime | None:
    # Columns are timezone-naive UTC
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class BidCreate(CamelModel):
    """Schema for bid creation request."""

    seller_id: int
    contact_name: str = Field(..., min_length=1, max_length=255)
    scheduled_at: datetime = Field(..., alias="pDateTime")
    details: dict[str, BidDetail]
    total_bid: Decimal = Field(..., ge=0)
    status: BidStatus = BidStatus.PENDING

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        return _parse_status(v)

    @field_validator("scheduled_at")
    @classmethod
    def normalize_scheduled_at(cls, v: datetime | None) -> datetime | None:
        return _to_naive_utc(v)


class BidModify(CamelModel):
    """Schema for bid modification; omitted fields keep their stored value."""

    seller_id: int | None = None
    buyer_id: int | None = None
    contact_name: str | None = Field(None, min_length=1, max_length=255)
    scheduled_at: datetime | None = Field(None, alias="pDateTime")
    details: dict[str, BidDetail] | None = None
    total_bid: Decimal | None = Field(None, ge=0)
    status: BidStatus | None = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        return _parse_status(v)

    @field_validator("scheduled_at")
    @classmethod
    def normalize_scheduled_at(cls, v: datetime | None) -> datetime | None:
        return _to_naive_utc(v)


class BidResponse(CamelModel):
    """Schema for bid response."""

    bid_id: int
    buyer_id: int
    seller_id: int
    contact_name: str
    scheduled_at: datetime | None = Field(None, alias="pDateTime")
    details: dict[str, Any]
    total_bid: Decimal | None
    status: str
    created_at: datetime
    updated_at: datetime


class BidCreatedResponse(CamelModel):
    message: str
    bids: BidResponse


class BidSummary(CamelModel):
    seller_id: int
    details: dict[str, Any]


class BidModifiedResponse(CamelModel):
    message: str
    data: BidSummary


class MessageResponse(BaseModel):
    message: str
