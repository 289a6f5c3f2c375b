"""Notification sender that only logs (default backend)."""

import logging

from domain.subscription.core.ports.notification_sender import INotificationSender, Notification

logger = logging.getLogger(__name__)


class LoggingNotificationSender(INotificationSender):
    """Writes notifications to the application log and keeps the last ones
    in memory for inspection."""

    def __init__(self, keep_last: int = 100) -> None:
        self._keep_last = keep_last
        self.sent: list[Notification] = []

    async def send(self, notification: Notification) -> None:
        logger.info(
            "Notification",
            extra={
                "kind": notification.kind,
                "subscription_id": notification.subscription_id,
                "recipient_id": notification.recipient_id,
            },
        )
        self.sent.append(notification)
        del self.sent[: -self._keep_last]
