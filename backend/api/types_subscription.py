"""GraphQL types for meal subscriptions.

Output types mirror the domain read models (subscription, snapshot,
current meal, day timeline, delegation). Mutations return union types
with a shared error type, so clients can branch on ``__typename``.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, List, Optional, Union

import strawberry

__all__ = [
    # Enums
    "MealCategoryEnum",
    "SubscriptionStatusEnum",
    "TimeSlotEnum",
    "SlotDeliveryStatusEnum",
    "TimelineStatusEnum",
    # Output types
    "NutritionType",
    "SlotMealType",
    "SlotViewType",
    "DayViewType",
    "NextDeliveryType",
    "DistributionEntryType",
    "AppliedDiscountType",
    "SnapshotStatsType",
    "SnapshotPricingType",
    "SnapshotType",
    "SubscriptionType",
    "TimelineEntryType",
    "DelegationType",
    # Input types
    "DeliveryScheduleInput",
    "DiscountInput",
    "CreateSubscriptionInput",
    # Mutation results
    "SubscriptionOperationError",
    "CreateSubscriptionSuccess",
    "TransitionSuccess",
    "SkipMealSuccess",
    "DeliveryCompletedSuccess",
    "TimelineEntrySuccess",
    "DelegationSuccess",
    "RetryArtifactsSummary",
    "CreateSubscriptionResult",
    "TransitionResult",
    "SkipMealResult",
    "DeliveryCompletedResult",
    "TimelineEntryResult",
    "DelegationResult",
]


# ============================================
# ENUMS
# ============================================


@strawberry.enum
class MealCategoryEnum(str, Enum):
    """Meal slot within a day, in serving order."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


@strawberry.enum
class SubscriptionStatusEnum(str, Enum):
    PENDING_FIRST_DELIVERY = "pending_first_delivery"
    ACTIVE = "active"
    PAUSED = "paused"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


@strawberry.enum
class TimeSlotEnum(str, Enum):
    """Delivery window preference."""

    MORNING = "morning"  # 08:00-10:00
    AFTERNOON = "afternoon"  # 12:00-14:00
    EVENING = "evening"  # 17:00-19:00
    CUSTOM = "custom"


@strawberry.enum
class SlotDeliveryStatusEnum(str, Enum):
    PENDING = "pending"
    SCHEDULED = "scheduled"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"


@strawberry.enum
class TimelineStatusEnum(str, Enum):
    """Chef/driver progress on a delivery day."""

    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"


# ============================================
# OUTPUT TYPES
# ============================================


@strawberry.type
class NutritionType:
    calories: float
    protein: float
    carbs: float
    fat: float
    fiber: float


@strawberry.type
class SlotMealType:
    """Meal copied into the snapshot at subscription time."""

    meal_id: str
    name: str
    category: MealCategoryEnum
    nutrition: NutritionType
    price: Decimal
    image_url: Optional[str] = None
    dietary_tags: List[str] = strawberry.field(default_factory=list)
    allergens: List[str] = strawberry.field(default_factory=list)
    preparation_time: Optional[int] = None
    complexity: Optional[str] = None


@strawberry.type
class SlotViewType:
    """One (week, day, meal slot) cell with its meals."""

    week_number: int
    day_of_week: int
    meal_slot: MealCategoryEnum
    meals: List[SlotMealType]
    scheduled_delivery_date: date
    delivery_status: SlotDeliveryStatusEnum
    timeline_entry_id: Optional[str] = None
    custom_title: Optional[str] = None
    custom_description: Optional[str] = None


@strawberry.type
class DayViewType:
    """A delivery day in the upcoming timeline."""

    date: date
    week_number: int
    day_of_week: int
    slots: List[SlotViewType]
    skipped: bool = False
    timeline_entry_id: Optional[str] = None


@strawberry.type
class NextDeliveryType:
    date: date
    time_window: str


@strawberry.type
class DistributionEntryType:
    key: str
    count: int


@strawberry.type
class SnapshotStatsType:
    total_meals: int
    total_meal_slots: int
    meals_per_week: float
    total_days: int
    days_with_meals: int
    total_nutrition: NutritionType
    avg_nutrition_per_meal: NutritionType
    avg_nutrition_per_day: NutritionType
    meal_type_distribution: List[DistributionEntryType]
    dietary_distribution: List[DistributionEntryType]
    complexity_distribution: List[DistributionEntryType]


@strawberry.type
class AppliedDiscountType:
    percent: Decimal
    amount: Decimal
    discount_type: str
    discount_id: Optional[str] = None
    reason: Optional[str] = None


@strawberry.type
class SnapshotPricingType:
    base_plan_price: Decimal
    total_meals_cost: Decimal
    subtotal: Decimal
    final_total: Decimal
    price_per_meal: Decimal
    price_per_week: Decimal
    total_chef_earnings: Decimal
    total_platform_fee: Decimal
    discount: Optional[AppliedDiscountType] = None


@strawberry.type
class SnapshotType:
    """Frozen copy of the plan compiled for one subscription."""

    plan_id: str
    plan_name: str
    snapshot_created_at: datetime
    stats: SnapshotStatsType
    pricing: SnapshotPricingType
    allergens_summary: List[str]
    total_slots: int
    last_synced_at: Optional[datetime] = None


@strawberry.type
class SubscriptionType:
    """Meal subscription with lifecycle, cursor and artifact state."""

    subscription_id: str
    customer_id: str
    plan_id: str
    status: SubscriptionStatusEnum
    is_activated: bool
    start_date: date
    end_date: date
    duration_weeks: int
    selected_meal_categories: List[MealCategoryEnum]
    delivery_days: List[int]
    time_slot: TimeSlotEnum
    current_week: int
    current_day: int
    current_meal_slot: MealCategoryEnum
    artifacts_complete: bool
    delivered_days: int
    delivered_meals: int
    skipped_days: int
    skipped_dates: List[date]
    created_at: datetime
    updated_at: datetime
    activated_at: Optional[datetime] = None
    next_delivery: Optional[NextDeliveryType] = None
    snapshot: Optional[SnapshotType] = None


@strawberry.type
class TimelineEntryType:
    timeline_entry_id: str
    date: date
    status: TimelineStatusEnum
    slot_count: int
    chef_completed_at: Optional[datetime] = None
    delivery_completed_at: Optional[datetime] = None


@strawberry.type
class DelegationType:
    """Chef/driver work timeline, one entry per delivery date."""

    delegation_id: str
    subscription_id: str
    timeline: List[TimelineEntryType]
    delivered_count: int
    created_at: datetime
    updated_at: datetime
    chef_id: Optional[str] = None
    driver_id: Optional[str] = None


# ============================================
# INPUT TYPES
# ============================================


@strawberry.input
class DeliveryScheduleInput:
    days_of_week: List[int]
    time_slot: TimeSlotEnum = TimeSlotEnum.AFTERNOON
    custom_window: Optional[str] = None


@strawberry.input
class DiscountInput:
    percent: Decimal
    discount_id: Optional[str] = None
    reason: Optional[str] = None
    discount_type: str = "promo"


@strawberry.input
class CreateSubscriptionInput:
    """Input for createSubscription.

    Example:
        {
          customerId: "customer-1"
          planId: "plan-42"
          startDate: "2025-01-06"
          durationWeeks: 2
          selectedMealCategories: [BREAKFAST, LUNCH]
          deliverySchedule: { daysOfWeek: [1, 3], timeSlot: MORNING }
        }
    """

    customer_id: str
    plan_id: str
    start_date: date
    duration_weeks: int
    selected_meal_categories: List[MealCategoryEnum]
    delivery_schedule: Optional[DeliveryScheduleInput] = None
    end_date: Optional[date] = None
    discount: Optional[DiscountInput] = None
    frequency_multiplier: Decimal = Decimal("1")
    duration_multiplier: Decimal = Decimal("1")


# ============================================
# MUTATION RESULT TYPES
# ============================================


@strawberry.type
class SubscriptionOperationError:
    """Mutation error result.

    Codes: VALIDATION_ERROR, NOT_FOUND, INVALID_TRANSITION,
    DEPENDENCY_UNAVAILABLE, CONFLICT, INCONSISTENT_STATE.
    """

    message: str
    code: str


@strawberry.type
class CreateSubscriptionSuccess:
    subscription: SubscriptionType
    artifacts_complete: bool


@strawberry.type
class TransitionSuccess:
    """Lifecycle transition outcome; applied=False means nothing changed."""

    applied: bool
    status: SubscriptionStatusEnum
    message: Optional[str] = None
    subscription: Optional[SubscriptionType] = None


@strawberry.type
class SkipMealSuccess:
    applied: bool
    cursor_moved: bool
    message: Optional[str] = None


@strawberry.type
class DeliveryCompletedSuccess:
    advanced: bool
    activated: bool
    subscription: SubscriptionType
    current_meal: Optional[SlotViewType] = None


@strawberry.type
class TimelineEntrySuccess:
    entry: TimelineEntryType


@strawberry.type
class DelegationSuccess:
    delegation: DelegationType


@strawberry.type
class RetryArtifactsSummary:
    processed: int
    completed: int
    abandoned: int


# ============================================
# UNION RESULT TYPES
# ============================================

CreateSubscriptionResult = Annotated[
    Union[CreateSubscriptionSuccess, SubscriptionOperationError],
    strawberry.union("CreateSubscriptionResult"),
]

TransitionResult = Annotated[
    Union[TransitionSuccess, SubscriptionOperationError],
    strawberry.union("TransitionResult"),
]

SkipMealResult = Annotated[
    Union[SkipMealSuccess, SubscriptionOperationError],
    strawberry.union("SkipMealResult"),
]

DeliveryCompletedResult = Annotated[
    Union[DeliveryCompletedSuccess, SubscriptionOperationError],
    strawberry.union("DeliveryCompletedResult"),
]

TimelineEntryResult = Annotated[
    Union[TimelineEntrySuccess, SubscriptionOperationError],
    strawberry.union("TimelineEntryResult"),
]

DelegationResult = Annotated[
    Union[DelegationSuccess, SubscriptionOperationError],
    strawberry.union("DelegationResult"),
]
