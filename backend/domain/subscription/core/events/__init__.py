"""Domain events for meal subscriptions."""

from .base import DomainEvent
from .lifecycle_events import (
    SubscriptionActivated,
    SubscriptionCancelled,
    SubscriptionExpired,
    SubscriptionPaused,
    SubscriptionResumed,
)
from .meal_advanced import MealAdvanced, MealSkipped
from .subscription_created import SubscriptionCreated

__all__ = [
    "DomainEvent",
    "SubscriptionCreated",
    "SubscriptionActivated",
    "SubscriptionPaused",
    "SubscriptionResumed",
    "SubscriptionCancelled",
    "SubscriptionExpired",
    "MealAdvanced",
    "MealSkipped",
]
