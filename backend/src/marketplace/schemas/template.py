"""Notification template schemas."""

from pydantic import BaseModel, ConfigDict


class SmsTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class EmailTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    subject: str
    body: str


class NotificationTemplate(BaseModel):
    """Message bodies for one event; ``{buyerName}``/``{sellerName}`` are filled at send time."""

    model_config = ConfigDict(frozen=True)

    sms: SmsTemplate
    email: EmailTemplate | None = None
