"""Port for sending customer/chef notifications."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Notification:
    """Notification payload handed to the sender.

    Attributes:
        kind: Notification type, e.g. "subscription_activated"
        subscription_id: Related subscription
        recipient_id: Customer (or chef) to notify
        payload: Extra JSON-serializable fields
    """

    kind: str
    subscription_id: str
    recipient_id: str
    payload: dict[str, Any] = field(default_factory=dict)


class INotificationSender(ABC):
    """Delivery mechanics live behind this port (push, email, webhooks)."""

    @abstractmethod
    async def send(self, notification: Notification) -> None:
        """Send a notification.

        Raises:
            Exception: Any delivery failure; callers treat sending as
                fire-and-forget and only log it
        """
        pass
