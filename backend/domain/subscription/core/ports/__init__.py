"""Ports for the subscription domain."""

from .lock_provider import ISubscriptionLockProvider
from .notification_sender import INotificationSender, Notification
from .repository import IDelegationRepository, ISubscriptionRepository
from .retry_queue import ArtifactRetryTask, IArtifactRetryQueue

__all__ = [
    "ISubscriptionRepository",
    "IDelegationRepository",
    "IArtifactRetryQueue",
    "ArtifactRetryTask",
    "INotificationSender",
    "Notification",
    "ISubscriptionLockProvider",
]
