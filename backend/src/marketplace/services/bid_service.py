"""Bid service: the bid lifecycle and its side effects.

Every operation commits its own transaction. Notifications are scheduled only
after a successful commit and are never awaited here.
"""

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.database import commit_or_raise
from marketplace.core.exceptions import MarketplaceError, NotFoundError, PersistenceError, ValidationError
from marketplace.middleware.metrics import record_bid_transition
from marketplace.models.bid import Bid
from marketplace.schemas.bid import BidCreate, BidDetail, BidModify
from marketplace.services.bid_status import BidStatus, validate_transition
from marketplace.services.item_service import ItemService
from marketplace.services.notification_service import NotificationEvent, NotificationService

logger = logging.getLogger(__name__)


def _dump_details(details: dict[str, BidDetail]) -> dict[str, Any]:
    return {key: detail.model_dump(by_alias=True) for key, detail in details.items()}


def modification_event(status: BidStatus | None) -> NotificationEvent:
    """Pick the single notification pair a modify call sends."""
    if status is BidStatus.APPROVED:
        return NotificationEvent.ORDER_APPROVED
    if status is BidStatus.DENIED:
        return NotificationEvent.ORDER_DECLINED
    return NotificationEvent.ORDER_EDITED


class BidService:
    """Service class for bid lifecycle operations."""

    def __init__(self, db: AsyncSession, notifications: NotificationService | None = None):
        self.db = db
        self.notifications = notifications

    async def create(self, buyer_id: int, bid_data: BidCreate) -> Bid:
        """Create a bid for a buyer and notify both parties.

        Args:
            buyer_id: Buyer placing the bid
            bid_data: Bid creation data

        Returns:
            Created bid

        Raises:
            ValidationError: The store rejected the bid
            PersistenceError: The store failed
        """
        bid = Bid(
            buyer_id=buyer_id,
            seller_id=bid_data.seller_id,
            contact_name=bid_data.contact_name,
            scheduled_at=bid_data.scheduled_at,
            details=_dump_details(bid_data.details),
            total_bid=bid_data.total_bid,
            status=bid_data.status.value,
        )
        self.db.add(bid)
        await self._commit()
        await self.db.refresh(bid)

        logger.info(f"Bid {bid.bid_id} created by buyer {buyer_id} for seller {bid.seller_id}")
        record_bid_transition("created")
        self._notify(NotificationEvent.ORDER_PLACED, bid)
        return bid

    async def list_all(self) -> list[Bid]:
        """Get every bid."""
        result = await self.db.execute(select(Bid).order_by(Bid.bid_id))
        return list(result.scalars().all())

    async def list_by_buyer(self, buyer_id: int) -> list[Bid]:
        """Get all bids placed by a buyer.

        No ownership check is made against the caller.
        """
        result = await self.db.execute(
            select(Bid).where(Bid.buyer_id == buyer_id).order_by(Bid.bid_id)
        )
        return list(result.scalars().all())

    async def get_by_id(self, bid_id: int) -> Bid:
        """Get bid by ID.

        Raises:
            NotFoundError: No bid with this ID
        """
        result = await self.db.execute(select(Bid).where(Bid.bid_id == bid_id))
        bid = result.scalar_one_or_none()
        if bid is None:
            raise NotFoundError(f"Bid {bid_id} not found")
        return bid

    async def modify(self, bid_id: int, changes: BidModify) -> Bid:
        """Apply a partial update and run the side effects of its status.

        Omitted fields keep the stored value, except ``total_bid`` which is
        always overwritten. Approval decrements the seller's stock in the same
        transaction as the bid update.

        Raises:
            NotFoundError: Bid (or, on approval, the seller's item) is missing
            InvalidTransitionError: Status change not allowed from current status
            ValidationError: Bid names a category the item does not stock
            InsufficientStockError: Approval would oversell a category
            PersistenceError: The store failed
        """
        bid = await self.get_by_id(bid_id)
        target = changes.status
        if target is not None:
            validate_transition(BidStatus.parse(bid.status), target)

        try:
            if changes.seller_id is not None:
                bid.seller_id = changes.seller_id
            if changes.buyer_id is not None:
                bid.buyer_id = changes.buyer_id
            if changes.contact_name is not None:
                bid.contact_name = changes.contact_name
            if changes.scheduled_at is not None:
                bid.scheduled_at = changes.scheduled_at
            if changes.details is not None:
                bid.details = _dump_details(changes.details)
            bid.total_bid = changes.total_bid
            if target is not None:
                bid.status = target.value
            bid.updated_at = func.now()

            if target is BidStatus.APPROVED:
                await ItemService(self.db).apply_bid_quantities(bid.seller_id, bid.details)

            await self.db.commit()
        except MarketplaceError:
            await self.db.rollback()
            raise
        except IntegrityError as e:
            await self.db.rollback()
            raise ValidationError(f"Bid {bid_id} update rejected by the store") from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(f"Failed to update bid {bid_id}") from e

        await self.db.refresh(bid)

        event = modification_event(target)
        logger.info(f"Bid {bid_id} modified ({event.value}), status={bid.status}")
        record_bid_transition(event.value.removeprefix("order-"))
        self._notify(event, bid)
        return bid

    async def delete(self, bid_id: int) -> None:
        """Delete (cancel) a bid and notify both parties.

        Stock taken by an earlier approval is not restored.

        Raises:
            NotFoundError: No bid with this ID
        """
        bid = await self.get_by_id(bid_id)
        buyer_id, seller_id = bid.buyer_id, bid.seller_id

        await self.db.delete(bid)
        await self._commit()

        logger.info(f"Bid {bid_id} cancelled and deleted")
        record_bid_transition("cancelled")
        if self.notifications is not None:
            self.notifications.notify_pair(NotificationEvent.ORDER_CANCELLED, buyer_id, seller_id)

    def _notify(self, event: NotificationEvent, bid: Bid) -> None:
        if self.notifications is not None:
            self.notifications.notify_pair(event, bid.buyer_id, bid.seller_id)

    async def _commit(self) -> None:
        await commit_or_raise(self.db, "Bid")
