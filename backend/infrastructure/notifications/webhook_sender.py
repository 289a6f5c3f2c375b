"""Webhook notification sender (httpx)."""

import logging
from typing import Any, Optional

import httpx

from domain.subscription.core.ports.notification_sender import INotificationSender, Notification

logger = logging.getLogger(__name__)


class WebhookNotificationSender(INotificationSender):
    """
    POSTs each notification as JSON to a webhook (push/email/SMS gateway).

    Failures are raised to the caller; the notification handler decides
    to swallow them.
    """

    def __init__(
        self,
        url: str,
        timeout_s: float = 2.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = url
        self._client = httpx.AsyncClient(timeout=httpx.Timeout(timeout_s), transport=transport)

    async def send(self, notification: Notification) -> None:
        body: dict[str, Any] = {
            "kind": notification.kind,
            "subscriptionId": notification.subscription_id,
            "recipientId": notification.recipient_id,
            "payload": notification.payload,
        }
        response = await self._client.post(self._url, json=body)
        response.raise_for_status()
        logger.debug(
            "Webhook notification sent",
            extra={"kind": notification.kind, "status": response.status_code},
        )

    async def close(self) -> None:
        await self._client.aclose()
