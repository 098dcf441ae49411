"""Buyer/seller notification dispatch.

Every lifecycle transition produces one buyer-facing and one seller-facing
message. Delivery runs on background tasks after the transition has been
committed; failures are logged and counted, never raised to the caller.
"""

import asyncio
import logging
from enum import Enum

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from marketplace.core.exceptions import NotificationDeliveryError, TemplateNotFoundError
from marketplace.middleware.metrics import record_notification
from marketplace.models.user_detail import UserDetail
from marketplace.services.contact_service import ContactService
from marketplace.services.notification_gateway import NotificationGateway
from marketplace.services.templates import TemplateStore

logger = logging.getLogger(__name__)


class NotificationEvent(str, Enum):
    ORDER_PLACED = "order-placed"
    ORDER_APPROVED = "order-approved"
    ORDER_DECLINED = "order-declined"
    ORDER_EDITED = "order-edited"
    ORDER_CANCELLED = "order-cancelled"

    def template_key(self, party: str) -> str:
        """``buyer-order-placed``, ``seller-order-placed``, ..."""
        return f"{party}-{self.value}"


class NotificationService:
    """Schedules and delivers notification pairs."""

    def __init__(
        self,
        gateway: NotificationGateway,
        templates: TemplateStore,
        session_maker: async_sessionmaker[AsyncSession],
    ):
        self.gateway = gateway
        self.templates = templates
        self.session_maker = session_maker
        # Strong references so pending tasks are not garbage-collected
        self._tasks: set[asyncio.Task] = set()

    def notify_pair(
        self, event: NotificationEvent, buyer_id: int, seller_id: int
    ) -> asyncio.Task:
        """Schedule buyer and seller notifications for ``event`` without waiting."""
        task = asyncio.create_task(self._deliver_pair(event, buyer_id, seller_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for all scheduled notifications to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _deliver_pair(
        self, event: NotificationEvent, buyer_id: int, seller_id: int
    ) -> None:
        try:
            async with self.session_maker() as db:
                buyer, seller = await ContactService(db).get_pair(buyer_id, seller_id)
        except Exception as e:
            logger.warning(f"Contact lookup failed for {event.value} notifications: {e}")
            record_notification(event.value, "contact", "failed")
            return

        if buyer is None or seller is None:
            missing = buyer_id if buyer is None else seller_id
            logger.warning(
                f"Skipping {event.value} notifications: no contact details for user {missing}"
            )
            record_notification(event.value, "contact", "skipped")
            return

        await self._deliver(event.template_key("buyer"), buyer, buyer, seller)
        await self._deliver(event.template_key("seller"), seller, buyer, seller)

    async def _deliver(
        self,
        template_key: str,
        recipient: UserDetail,
        buyer: UserDetail,
        seller: UserDetail,
    ) -> None:
        """Send SMS (and email when available) for one template to one party."""
        try:
            message = self.templates.render_sms(template_key, buyer.name, seller.name)
            email = self.templates.render_email(template_key, buyer.name, seller.name)
        except TemplateNotFoundError:
            logger.warning(f"No notification template for {template_key}")
            record_notification(template_key, "sms", "skipped")
            return

        await self._send(
            template_key,
            "sms",
            self.gateway.send_sms(message, [recipient.mob_no, recipient.alt_mob_no]),
        )

        if email is not None and recipient.email:
            subject, body = email
            await self._send(
                template_key,
                "email",
                self.gateway.send_email(body, subject, recipient.email),
            )

    async def _send(self, template_key: str, channel: str, send) -> None:
        try:
            result = await send
        except NotificationDeliveryError as e:
            logger.warning(f"{channel} delivery failed for {template_key}: {e}")
            record_notification(template_key, channel, "failed")
            return
        except Exception:
            logger.exception(f"Unexpected error sending {channel} for {template_key}")
            record_notification(template_key, channel, "failed")
            return

        if result is None:
            logger.info(f"No {channel} recipients for {template_key}")
            record_notification(template_key, channel, "skipped")
        else:
            record_notification(template_key, channel, "sent")
