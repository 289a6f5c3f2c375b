"""SubscriptionCreated domain event."""

from dataclasses import dataclass

from .base import DomainEvent


@dataclass(frozen=True)
class SubscriptionCreated(DomainEvent):
    """Event emitted when a subscription is created.

    Attributes:
        subscription_id: ID of created subscription
        customer_id: Owning customer
        plan_id: Source catalog plan
        artifacts_complete: False if snapshot or delegation was queued for retry
    """

    subscription_id: str
    customer_id: str
    plan_id: str
    artifacts_complete: bool

    @staticmethod
    def create(
        subscription_id: str, customer_id: str, plan_id: str, artifacts_complete: bool
    ) -> "SubscriptionCreated":
        return SubscriptionCreated(
            event_id=DomainEvent._generate_event_id(),
            occurred_at=DomainEvent._now(),
            subscription_id=subscription_id,
            customer_id=customer_id,
            plan_id=plan_id,
            artifacts_complete=artifacts_complete,
        )
