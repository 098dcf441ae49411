"""SQLAlchemy ORM models."""

from marketplace.models.base import TimestampMixin
from marketplace.models.bid import Bid
from marketplace.models.item import Item
from marketplace.models.user_detail import UserDetail

__all__ = [
    "TimestampMixin",
    "Bid",
    "Item",
    "UserDetail",
]
