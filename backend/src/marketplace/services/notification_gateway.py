"""HTTP client for the SMS/email messaging provider (msg91)."""

import logging
from typing import Any, Iterable

import httpx

from marketplace.core.config import Settings
from marketplace.core.exceptions import NotificationDeliveryError

logger = logging.getLogger(__name__)


class NotificationGateway:
    """Sends SMS and email through the provider's HTTP API.

    Responses are logged, not interpreted. Transport failures, timeouts and
    non-2xx statuses raise NotificationDeliveryError.
    """

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None):
        """Initialize the gateway.

        Args:
            settings: Application settings (endpoints, auth key, defaults)
            client: Optional preconfigured client; one with a bounded
                timeout is created when omitted
        """
        self.settings = settings
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.NOTIFICATION_TIMEOUT_SECONDS)
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def send_sms(
        self,
        message: str,
        recipients: Iterable[str | None],
        sender: str | None = None,
        country_code: int | None = None,
    ) -> Any:
        """Send one message to every recipient in a single batched request.

        Args:
            message: Text to send
            recipients: Phone numbers; empty or None entries are skipped
            sender: Sender ID (defaults to SMS_SENDER_ID)
            country_code: Dialing code (defaults to SMS_COUNTRY_CODE)

        Returns:
            Parsed gateway response, or None when there was nobody to send to
        """
        numbers = [r for r in recipients if r]
        if not numbers:
            logger.warning("SMS skipped: no recipient numbers")
            return None

        country = country_code or self.settings.SMS_COUNTRY_CODE
        body = {
            "sender": sender or self.settings.SMS_SENDER_ID,
            "route": self.settings.SMS_ROUTE,
            "country": str(country),
            "sms": [{"message": message, "to": [number]} for number in numbers],
        }

        response = await self._request(
            "POST",
            self.settings.SMS_API_URL,
            params={"country": country},
            json=body,
            headers={
                "authkey": self.settings.NOTIFIER_AUTH_KEY,
                "content-type": "application/json",
            },
        )
        logger.info(f"SMS gateway response ({len(numbers)} recipients): {response}")
        return response

    async def send_email(
        self,
        message: str,
        subject: str,
        recipient: str,
        sender: str | None = None,
    ) -> Any:
        """Send an email; every field travels as an encoded query parameter."""
        params = {
            "authkey": self.settings.NOTIFIER_AUTH_KEY,
            "to": recipient,
            "from": sender or self.settings.EMAIL_SENDER,
            "body": message,
            "subject": subject,
        }
        response = await self._request("POST", self.settings.EMAIL_API_URL, params=params)
        logger.info(f"Email gateway response for {recipient}: {response}")
        return response

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise NotificationDeliveryError(f"Timed out calling {url}") from e
        except httpx.HTTPStatusError as e:
            raise NotificationDeliveryError(
                f"Gateway returned {e.response.status_code} for {url}"
            ) from e
        except httpx.HTTPError as e:
            raise NotificationDeliveryError(f"Request to {url} failed: {e}") from e

        try:
            return response.json()
        except ValueError:
            return response.text
