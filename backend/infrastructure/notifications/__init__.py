"""Notification sender adapters."""

from .factory import create_notification_sender
from .log_sender import LoggingNotificationSender
from .webhook_sender import WebhookNotificationSender

__all__ = [
    "create_notification_sender",
    "LoggingNotificationSender",
    "WebhookNotificationSender",
]
