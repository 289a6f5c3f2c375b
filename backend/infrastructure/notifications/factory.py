"""Notification sender factory (NOTIFICATION_BACKEND=log|webhook)."""

from domain.subscription.core.ports.notification_sender import INotificationSender
from infrastructure.config import (
    get_notification_backend,
    get_notification_timeout,
    get_notification_webhook_url,
)

from .log_sender import LoggingNotificationSender
from .webhook_sender import WebhookNotificationSender


def create_notification_sender() -> INotificationSender:
    """Create notification sender based on NOTIFICATION_BACKEND.

    Raises:
        ValueError: If webhook is selected but NOTIFICATION_WEBHOOK_URL is not set
    """
    if get_notification_backend() == "webhook":
        url = get_notification_webhook_url()
        if not url:
            raise ValueError("NOTIFICATION_BACKEND=webhook but NOTIFICATION_WEBHOOK_URL not set")
        return WebhookNotificationSender(url=url, timeout_s=get_notification_timeout())
    return LoggingNotificationSender()
