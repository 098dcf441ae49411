"""Bid model for buyer offers against a seller's stock."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, CheckConstraint, DateTime, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from marketplace.core.database import Base
from marketplace.models.base import TimestampMixin


class Bid(Base, TimestampMixin):
    """Bid model representing a buyer's offer to a seller.

    ``details`` maps a category key to ``{"quantity": ..., "bidQuantity": ...}``.
    """

    __tablename__ = "bids"

    bid_id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    buyer_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    seller_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    contact_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    scheduled_at: Mapped[datetime | None] = mapped_column(
        DateTime,
        nullable=True,
    )
    details: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )
    # Nullable: a modify that omits the total clears it
    total_bid: Mapped[Decimal | None] = mapped_column(
        Numeric(12, 2),
        nullable=True,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="pending",
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'denied', 'cancelled')",
            name="chk_bid_status",
        ),
        Index("idx_bids_buyer", "buyer_id"),
        Index("idx_bids_seller", "seller_id"),
    )
