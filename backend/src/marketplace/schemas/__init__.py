"""Pydantic schemas for request/response validation."""

from marketplace.schemas.bid import (
    BidCreate,
    BidCreatedResponse,
    BidDetail,
    BidModifiedResponse,
    BidModify,
    BidResponse,
    BidSummary,
    MessageResponse,
)
from marketplace.schemas.item import ItemCategory, ItemCreate, ItemResponse
from marketplace.schemas.template import NotificationTemplate

__all__ = [
    "BidCreate",
    "BidModify",
    "BidDetail",
    "BidResponse",
    "BidCreatedResponse",
    "BidSummary",
    "BidModifiedResponse",
    "MessageResponse",
    "ItemCategory",
    "ItemCreate",
    "ItemResponse",
    "NotificationTemplate",
]
