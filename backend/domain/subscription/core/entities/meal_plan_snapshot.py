"""MealPlanSnapshot entity - frozen copy of a meal plan for one subscription."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Iterator, Optional

from ..exceptions.domain_errors import InvalidStatusTransitionError
from ..value_objects import (
    DiscountApplied,
    MealCategory,
    MealCursor,
    MealPricing,
    Nutrition,
    SlotDeliveryStatus,
)


@dataclass(frozen=True)
class SlotMeal:
    """Denormalized meal copied out of the catalog at compile time."""

    meal_id: str
    name: str
    category: MealCategory
    nutrition: Nutrition
    pricing: MealPricing
    image_url: Optional[str] = None
    dietary_tags: tuple[str, ...] = ()
    allergens: tuple[str, ...] = ()
    preparation_time: Optional[int] = None
    complexity: Optional[str] = None


@dataclass
class SnapshotSlot:
    """One (week, day, meal_slot) cell of a snapshot.

    Meal content is frozen. Only delivery_status, delivered_at and
    timeline_entry_id change after compilation.
    """

    week_number: int
    day_of_week: int
    meal_slot: MealCategory
    meals: tuple[SlotMeal, ...]
    scheduled_delivery_date: date
    custom_title: Optional[str] = None
    custom_description: Optional[str] = None
    notes: Optional[str] = None
    delivery_status: SlotDeliveryStatus = SlotDeliveryStatus.PENDING
    delivered_at: Optional[datetime] = None
    timeline_entry_id: Optional[str] = None

    @property
    def cursor(self) -> MealCursor:
        return MealCursor(self.week_number, self.day_of_week, self.meal_slot)

    @property
    def key(self) -> tuple[int, int, MealCategory]:
        return (self.week_number, self.day_of_week, self.meal_slot)

    def update_status(self, status: SlotDeliveryStatus, now: datetime) -> None:
        """Move the slot forward in its delivery flow.

        Args:
            status: Target status
            now: Timestamp used for delivered_at

        Raises:
            InvalidStatusTransitionError: If the move goes backwards or
                leaves a terminal status
        """
        if not self.delivery_status.can_transition_to(status):
            raise InvalidStatusTransitionError(self.delivery_status.value, status.value)
        self.delivery_status = status
        if status == SlotDeliveryStatus.DELIVERED and self.delivered_at is None:
            self.delivered_at = now


@dataclass(frozen=True)
class SnapshotStats:
    """Aggregates computed once at compile time."""

    total_meals: int
    total_meal_slots: int
    meals_per_week: float
    total_days: int
    days_with_meals: int
    total_nutrition: Nutrition
    avg_nutrition_per_meal: Nutrition
    avg_nutrition_per_day: Nutrition
    meal_type_distribution: tuple[tuple[str, int], ...] = ()
    dietary_distribution: tuple[tuple[str, int], ...] = ()
    complexity_distribution: tuple[tuple[str, int], ...] = ()


@dataclass(frozen=True)
class SnapshotPricing:
    """Price block fixed at compile time."""

    base_plan_price: Decimal
    total_meals_cost: Decimal
    frequency_multiplier: Decimal
    duration_multiplier: Decimal
    subtotal: Decimal
    final_total: Decimal
    price_per_meal: Decimal
    price_per_week: Decimal
    total_chef_earnings: Decimal
    total_platform_fee: Decimal
    discount: Optional[DiscountApplied] = None


@dataclass
class MealPlanSnapshot:
    """Per-subscription, fully denormalized copy of a meal plan.

    Attributes:
        plan_id: Source catalog plan
        plan_name: Plan name at compile time
        slots: Schedule slots ordered by (week, day, category)
        stats: Pre-aggregated nutrition and meal statistics
        pricing: Pricing block
        snapshot_created_at: Compile timestamp
        last_synced_at: Set once, when delegation ids are written back
    """

    plan_id: str
    plan_name: str
    slots: list[SnapshotSlot]
    stats: SnapshotStats
    pricing: SnapshotPricing
    snapshot_created_at: datetime
    plan_description: Optional[str] = None
    cover_image: Optional[str] = None
    tier: Optional[str] = None
    target_audience: Optional[str] = None
    features: tuple[str, ...] = ()
    allergens_summary: tuple[str, ...] = ()
    last_synced_at: Optional[datetime] = None
    _index: dict[tuple[int, int, MealCategory], SnapshotSlot] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        self.slots.sort(key=lambda slot: slot.cursor.sort_key)
        self._index = {slot.key: slot for slot in self.slots}

    def __iter__(self) -> Iterator[SnapshotSlot]:
        return iter(self.slots)

    def __len__(self) -> int:
        return len(self.slots)

    def slot_at(self, cursor: MealCursor) -> Optional[SnapshotSlot]:
        return self._index.get(cursor.key)

    def slots_for_day(self, week_number: int, day_of_week: int) -> list[SnapshotSlot]:
        return [
            slot
            for slot in self.slots
            if slot.week_number == week_number and slot.day_of_week == day_of_week
        ]

    def slots_on(self, delivery_date: date) -> list[SnapshotSlot]:
        return [slot for slot in self.slots if slot.scheduled_delivery_date == delivery_date]

    def delivery_dates(self) -> list[date]:
        """Distinct delivery dates in ascending order."""
        return sorted({slot.scheduled_delivery_date for slot in self.slots})

    def first_slot(self) -> Optional[SnapshotSlot]:
        return self.slots[0] if self.slots else None

    def mark_synced(self, now: datetime) -> bool:
        """Stamp last_synced_at the first time only.

        Returns:
            bool: True if the stamp was written by this call
        """
        if self.last_synced_at is not None:
            return False
        self.last_synced_at = now
        return True
