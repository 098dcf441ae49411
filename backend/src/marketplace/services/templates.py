"""Notification template store.

Templates are loaded once and passed to the notification service; nothing
reads them as module state at send time.
"""

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from marketplace.core.exceptions import TemplateNotFoundError
from marketplace.schemas.template import NotificationTemplate

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATES: dict[str, dict[str, Any]] = {
    "buyer-order-placed": {
        "sms": {"message": "Hi {buyerName}, your bid to {sellerName} has been placed."},
        "email": {
            "subject": "Bid placed",
            "body": "Hi {buyerName},\n\nYour bid to {sellerName} has been placed and is awaiting approval.",
        },
    },
    "seller-order-placed": {
        "sms": {"message": "Hi {sellerName}, {buyerName} has placed a new bid on your items."},
        "email": {
            "subject": "New bid received",
            "body": "Hi {sellerName},\n\n{buyerName} has placed a new bid on your items.",
        },
    },
    "buyer-order-approved": {
        "sms": {"message": "Hi {buyerName}, {sellerName} has approved your bid."},
    },
    "seller-order-approved": {
        "sms": {"message": "Hi {sellerName}, you approved the bid from {buyerName}."},
    },
    "buyer-order-declined": {
        "sms": {"message": "Hi {buyerName}, {sellerName} has declined your bid."},
    },
    "seller-order-declined": {
        "sms": {"message": "Hi {sellerName}, you declined the bid from {buyerName}."},
    },
    "buyer-order-edited": {
        "sms": {"message": "Hi {buyerName}, your bid to {sellerName} has been updated."},
    },
    "seller-order-edited": {
        "sms": {"message": "Hi {sellerName}, the bid from {buyerName} has been updated."},
    },
    "buyer-order-cancelled": {
        "sms": {"message": "Hi {buyerName}, your bid to {sellerName} has been cancelled."},
    },
    "seller-order-cancelled": {
        "sms": {"message": "Hi {sellerName}, the bid from {buyerName} has been cancelled."},
    },
}


def fill_placeholders(text: str, buyer_name: str, seller_name: str) -> str:
    return text.replace("{sellerName}", seller_name).replace("{buyerName}", buyer_name)


class TemplateStore:
    """Immutable mapping of event key to NotificationTemplate."""

    def __init__(self, templates: Mapping[str, Any]):
        self._templates: dict[str, NotificationTemplate] = {
            key: NotificationTemplate.model_validate(value)
            for key, value in templates.items()
        }

    @classmethod
    def default(cls) -> "TemplateStore":
        return cls(DEFAULT_TEMPLATES)

    @classmethod
    def from_file(cls, path: str | Path) -> "TemplateStore":
        """Load templates from a JSON file shaped like DEFAULT_TEMPLATES."""
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        logger.info(f"Loaded {len(data)} notification templates from {path}")
        return cls(data)

    def __contains__(self, key: str) -> bool:
        return key in self._templates

    def keys(self) -> list[str]:
        return sorted(self._templates)

    def get(self, key: str) -> NotificationTemplate:
        try:
            return self._templates[key]
        except KeyError:
            raise TemplateNotFoundError(key) from None

    def render_sms(self, key: str, buyer_name: str, seller_name: str) -> str:
        return fill_placeholders(self.get(key).sms.message, buyer_name, seller_name)

    def render_email(
        self, key: str, buyer_name: str, seller_name: str
    ) -> tuple[str, str] | None:
        """Return ``(subject, body)`` or None when the event has no email template."""
        email = self.get(key).email
        if email is None:
            return None
        return (
            fill_placeholders(email.subject, buyer_name, seller_name),
            fill_placeholders(email.body, buyer_name, seller_name),
        )
