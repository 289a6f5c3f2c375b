"""Subscription event handlers."""

from .notification_handler import NOTIFIED_EVENTS, NotificationEventHandler

__all__ = ["NotificationEventHandler", "NOTIFIED_EVENTS"]
