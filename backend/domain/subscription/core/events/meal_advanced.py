"""Progression domain events."""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from .base import DomainEvent


@dataclass(frozen=True)
class MealAdvanced(DomainEvent):
    """Emitted after a delivery completes and the cursor moves on.

    Attributes:
        subscription_id: Subscription whose cursor moved
        customer_id: Owning customer
        delivered_cursor: Cursor that was delivered, e.g. "W1D1:lunch"
        current_cursor: Cursor now due
        next_delivery_date: Next expected delivery date, if known
    """

    subscription_id: str
    customer_id: str
    delivered_cursor: str
    current_cursor: str
    next_delivery_date: Optional[date]

    @staticmethod
    def create(
        subscription_id: str,
        customer_id: str,
        delivered_cursor: str,
        current_cursor: str,
        next_delivery_date: Optional[date],
    ) -> "MealAdvanced":
        return MealAdvanced(
            event_id=DomainEvent._generate_event_id(),
            occurred_at=DomainEvent._now(),
            subscription_id=subscription_id,
            customer_id=customer_id,
            delivered_cursor=delivered_cursor,
            current_cursor=current_cursor,
            next_delivery_date=next_delivery_date,
        )


@dataclass(frozen=True)
class MealSkipped(DomainEvent):
    """Emitted when the customer skips a delivery date."""

    subscription_id: str
    customer_id: str
    skipped_date: date
    reason: str

    @staticmethod
    def create(
        subscription_id: str, customer_id: str, skipped_date: date, reason: str
    ) -> "MealSkipped":
        return MealSkipped(
            event_id=DomainEvent._generate_event_id(),
            occurred_at=DomainEvent._now(),
            subscription_id=subscription_id,
            customer_id=customer_id,
            skipped_date=skipped_date,
            reason=reason,
        )
