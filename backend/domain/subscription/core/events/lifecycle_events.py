"""Lifecycle domain events (activation, pause, resume, cancel, expiry)."""

from dataclasses import dataclass
from datetime import date, datetime

from .base import DomainEvent


@dataclass(frozen=True)
class SubscriptionActivated(DomainEvent):
    """Emitted when the first delivery completes.

    Attributes:
        subscription_id: Activated subscription
        customer_id: Owning customer
        activated_at: Activation timestamp
        end_date: End date recomputed from activation
    """

    subscription_id: str
    customer_id: str
    activated_at: datetime
    end_date: date

    @staticmethod
    def create(
        subscription_id: str, customer_id: str, activated_at: datetime, end_date: date
    ) -> "SubscriptionActivated":
        return SubscriptionActivated(
            event_id=DomainEvent._generate_event_id(),
            occurred_at=DomainEvent._now(),
            subscription_id=subscription_id,
            customer_id=customer_id,
            activated_at=activated_at,
            end_date=end_date,
        )


@dataclass(frozen=True)
class SubscriptionPaused(DomainEvent):
    """Emitted when a subscription is paused."""

    subscription_id: str
    customer_id: str
    reason: str

    @staticmethod
    def create(subscription_id: str, customer_id: str, reason: str) -> "SubscriptionPaused":
        return SubscriptionPaused(
            event_id=DomainEvent._generate_event_id(),
            occurred_at=DomainEvent._now(),
            subscription_id=subscription_id,
            customer_id=customer_id,
            reason=reason,
        )


@dataclass(frozen=True)
class SubscriptionResumed(DomainEvent):
    """Emitted when a paused subscription resumes.

    Attributes:
        days_extended: Days added to end_date for the pause
        end_date: New end date
    """

    subscription_id: str
    customer_id: str
    days_extended: int
    end_date: date

    @staticmethod
    def create(
        subscription_id: str, customer_id: str, days_extended: int, end_date: date
    ) -> "SubscriptionResumed":
        return SubscriptionResumed(
            event_id=DomainEvent._generate_event_id(),
            occurred_at=DomainEvent._now(),
            subscription_id=subscription_id,
            customer_id=customer_id,
            days_extended=days_extended,
            end_date=end_date,
        )


@dataclass(frozen=True)
class SubscriptionCancelled(DomainEvent):
    """Emitted when a subscription is cancelled."""

    subscription_id: str
    customer_id: str
    reason: str

    @staticmethod
    def create(subscription_id: str, customer_id: str, reason: str) -> "SubscriptionCancelled":
        return SubscriptionCancelled(
            event_id=DomainEvent._generate_event_id(),
            occurred_at=DomainEvent._now(),
            subscription_id=subscription_id,
            customer_id=customer_id,
            reason=reason,
        )


@dataclass(frozen=True)
class SubscriptionExpired(DomainEvent):
    """Emitted when an active subscription passes its end date."""

    subscription_id: str
    customer_id: str
    end_date: date

    @staticmethod
    def create(subscription_id: str, customer_id: str, end_date: date) -> "SubscriptionExpired":
        return SubscriptionExpired(
            event_id=DomainEvent._generate_event_id(),
            occurred_at=DomainEvent._now(),
            subscription_id=subscription_id,
            customer_id=customer_id,
            end_date=end_date,
        )
