"""Entities for the subscription domain."""

from .delegation import Delegation, TimelineEntry
from .meal_plan_snapshot import (
    MealPlanSnapshot,
    SlotMeal,
    SnapshotPricing,
    SnapshotSlot,
    SnapshotStats,
)
from .subscription import Subscription, SubscriptionMetrics, utc_now

__all__ = [
    "Subscription",
    "SubscriptionMetrics",
    "MealPlanSnapshot",
    "SnapshotSlot",
    "SlotMeal",
    "SnapshotStats",
    "SnapshotPricing",
    "Delegation",
    "TimelineEntry",
    "utc_now",
]
