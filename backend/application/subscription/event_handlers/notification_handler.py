"""Handler turning subscription domain events into customer notifications.

Sending is fire-and-forget: a slow or failing sender is bounded by a
timeout and logged, and never fails the transition that raised the event.
"""

import asyncio
import logging
import re
from dataclasses import asdict
from datetime import date, datetime
from typing import Any

from domain.shared.ports.event_bus import IEventBus
from domain.subscription.core.events import (
    DomainEvent,
    MealAdvanced,
    MealSkipped,
    SubscriptionActivated,
    SubscriptionCancelled,
    SubscriptionCreated,
    SubscriptionExpired,
    SubscriptionPaused,
    SubscriptionResumed,
)
from domain.subscription.core.ports import INotificationSender, Notification

logger = logging.getLogger(__name__)

NOTIFIED_EVENTS: tuple[type[DomainEvent], ...] = (
    SubscriptionCreated,
    SubscriptionActivated,
    SubscriptionPaused,
    SubscriptionResumed,
    SubscriptionCancelled,
    SubscriptionExpired,
    MealAdvanced,
    MealSkipped,
)

_ENVELOPE_FIELDS = {"event_id", "occurred_at", "subscription_id", "customer_id"}


def notification_kind(event: DomainEvent) -> str:
    """Snake-case name of the event class, e.g. "subscription_activated"."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", type(event).__name__).lower()


def _jsonable(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


class NotificationEventHandler:
    """Sends one notification per subscription event.

    Side effects only - does NOT modify system state.
    """

    def __init__(self, sender: INotificationSender, timeout_s: float = 2.0):
        self._sender = sender
        self._timeout_s = timeout_s

    def register(self, event_bus: IEventBus) -> None:
        for event_type in NOTIFIED_EVENTS:
            event_bus.subscribe(event_type, self.handle)

    @staticmethod
    def build_notification(event: DomainEvent) -> Notification:
        fields = asdict(event)
        payload = {
            name: _jsonable(value)
            for name, value in fields.items()
            if name not in _ENVELOPE_FIELDS
        }
        payload["occurred_at"] = event.occurred_at.isoformat()
        return Notification(
            kind=notification_kind(event),
            subscription_id=fields["subscription_id"],
            recipient_id=fields["customer_id"],
            payload=payload,
        )

    async def handle(self, event: DomainEvent) -> None:
        """Send the notification for event, logging (never raising) on failure.

        Args:
            event: Any event listed in NOTIFIED_EVENTS
        """
        notification = self.build_notification(event)
        try:
            await asyncio.wait_for(self._sender.send(notification), timeout=self._timeout_s)
        except asyncio.TimeoutError:
            logger.warning(
                "notification.timeout",
                extra={
                    "kind": notification.kind,
                    "subscription_id": notification.subscription_id,
                    "timeout_s": self._timeout_s,
                },
            )
            return
        except Exception as e:
            logger.error(
                "notification.failed",
                extra={
                    "kind": notification.kind,
                    "subscription_id": notification.subscription_id,
                    "error": str(e),
                },
            )
            return

        logger.debug(
            "notification.sent",
            extra={"kind": notification.kind, "subscription_id": notification.subscription_id},
        )
