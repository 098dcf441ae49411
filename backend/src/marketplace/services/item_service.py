"""Item service: seller stock records and the approval-time decrement.

The decrement follows a two-layer protection:
- Layer 1: PostgreSQL row-level lock (SELECT ... FOR UPDATE)
- Layer 2: Optimistic locking (version check), retried a bounded number of times

Both run inside the caller's transaction so the stock change commits or rolls
back together with the bid update that triggered it.
"""

import copy
import logging
from typing import Any, Mapping

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.config import settings
from marketplace.core.database import commit_or_raise
from marketplace.core.exceptions import (
    ConcurrencyError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from marketplace.models.item import Item
from marketplace.schemas.item import ItemCreate

logger = logging.getLogger(__name__)


def compute_remaining_stock(
    stock: Mapping[str, Any], bid_details: Mapping[str, Any]
) -> dict[str, Any]:
    """Return a copy of ``stock`` with each bid category's bidQuantity removed.

    Raises:
        ValidationError: A bid category is not stocked by the item
        InsufficientStockError: A category would drop below zero
    """
    remaining = copy.deepcopy(dict(stock))
    for category, requested in bid_details.items():
        if category not in remaining:
            raise ValidationError(f"Item does not stock category '{category}'")
        quantity = remaining[category].get("quantity", 0)
        new_quantity = quantity - requested.get("bidQuantity", 0)
        if new_quantity < 0:
            raise InsufficientStockError(
                f"Category '{category}' has {quantity} left, bid requires "
                f"{requested.get('bidQuantity', 0)}"
            )
        remaining[category]["quantity"] = new_quantity
    return remaining


class ItemService:
    """Service class for item operations."""

    def __init__(self, db: AsyncSession, max_retries: int | None = None):
        if max_retries is None:
            max_retries = settings.INVENTORY_MAX_RETRIES
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self.db = db
        self.max_retries = max_retries

    async def get_by_id(self, item_id: int) -> Item | None:
        """Get item by ID."""
        result = await self.db.execute(select(Item).where(Item.item_id == item_id))
        return result.scalar_one_or_none()

    async def get_by_seller(self, seller_id: int) -> Item | None:
        """Get the item record owned by a seller."""
        result = await self.db.execute(
            select(Item).where(Item.seller_id == seller_id).order_by(Item.item_id).limit(1)
        )
        return result.scalar_one_or_none()

    async def create(self, item_data: ItemCreate) -> Item:
        """Create a new item.

        Args:
            item_data: Item creation data

        Returns:
            Created item

        Raises:
            ValidationError: The store rejected the item
            PersistenceError: The store failed
        """
        item = Item(
            seller_id=item_data.seller_id,
            name=item_data.name,
            details={
                key: category.model_dump(by_alias=True)
                for key, category in item_data.details.items()
            },
            version=0,
        )

        self.db.add(item)
        await commit_or_raise(self.db, "Item")
        await self.db.refresh(item)
        return item

    async def apply_bid_quantities(
        self, seller_id: int, bid_details: Mapping[str, Any]
    ) -> Item:
        """Subtract a bid's per-category quantities from the seller's item.

        Does not commit; the caller owns the transaction.

        Raises:
            NotFoundError: Seller has no item
            ValidationError: Bid names a category the item does not stock
            InsufficientStockError: Stock would go negative
            ConcurrencyError: Version conflict persisted after all retries
        """
        for attempt in range(1, self.max_retries + 1):
            try:
                return await self._decrement_with_lock(seller_id, bid_details)
            except ConcurrencyError:
                if attempt == self.max_retries:
                    raise
                logger.warning(
                    f"Stock update conflict for seller {seller_id}, "
                    f"retrying ({attempt}/{self.max_retries})"
                )
        raise ConcurrencyError(f"Stock update for seller {seller_id} did not run")

    async def _lock_item(self, seller_id: int) -> Item:
        # Layer 1: SELECT FOR UPDATE (row-level lock); refresh any cached copy
        result = await self.db.execute(
            select(Item)
            .where(Item.seller_id == seller_id)
            .order_by(Item.item_id)
            .limit(1)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        item = result.scalar_one_or_none()
        if item is None:
            raise NotFoundError(f"No item found for seller {seller_id}")
        return item

    async def _decrement_with_lock(
        self, seller_id: int, bid_details: Mapping[str, Any]
    ) -> Item:
        item = await self._lock_item(seller_id)
        remaining = compute_remaining_stock(item.details, bid_details)
        current_version = item.version

        # Layer 2: Optimistic lock update
        result = await self.db.execute(
            update(Item)
            .where(Item.item_id == item.item_id)
            .where(Item.version == current_version)
            .values(details=remaining, version=Item.version + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ConcurrencyError(f"Concurrent update conflict for item {item.item_id}")

        await self.db.refresh(item)
        logger.info(
            f"Decremented stock for item {item.item_id} (seller {seller_id}) "
            f"to version {item.version}"
        )
        return item
