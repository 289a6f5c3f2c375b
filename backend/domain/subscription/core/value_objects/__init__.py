"""Value objects for the subscription domain."""

from .artifact_status import ArtifactKind, ArtifactState, ArtifactStatus
from .compile_request import CompileRequest
from .delivery_schedule import DEFAULT_DELIVERY_DAYS, DeliverySchedule, NextDelivery, TimeSlot
from .delivery_status import SlotDeliveryStatus, TimelineStatus
from .meal_category import MealCategory
from .meal_cursor import DeliveredMarker, MealCursor
from .nutrition import Nutrition, round_half_up
from .pricing import Discount, DiscountApplied, MealPricing, PricingInputs, to_money
from .skipped_day import SkippedDay
from .subscription_id import SubscriptionId
from .subscription_state import (
    Active,
    Cancelled,
    Expired,
    Paused,
    PendingFirstDelivery,
    SubscriptionState,
    SubscriptionStatus,
)

__all__ = [
    "SubscriptionId",
    "MealCategory",
    "MealCursor",
    "DeliveredMarker",
    "SubscriptionStatus",
    "SubscriptionState",
    "PendingFirstDelivery",
    "Active",
    "Paused",
    "Cancelled",
    "Expired",
    "DeliverySchedule",
    "NextDelivery",
    "TimeSlot",
    "DEFAULT_DELIVERY_DAYS",
    "SlotDeliveryStatus",
    "TimelineStatus",
    "Nutrition",
    "round_half_up",
    "MealPricing",
    "Discount",
    "DiscountApplied",
    "PricingInputs",
    "to_money",
    "ArtifactKind",
    "ArtifactState",
    "ArtifactStatus",
    "SkippedDay",
    "CompileRequest",
]
