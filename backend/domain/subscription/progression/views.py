"""Read models returned by the progression tracker."""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.entities import SlotMeal, SnapshotSlot
from ..core.value_objects import MealCategory, MealCursor, SlotDeliveryStatus


@dataclass(frozen=True)
class SlotView:
    """Immutable view of one snapshot slot.

    Attributes:
        cursor: Position of the slot in the plan
        meals: Meals served in the slot
        scheduled_delivery_date: Date computed at compile time
        delivery_status: Slot status when the view was taken
        timeline_entry_id: Delegation entry covering the slot's date
        recovered: True if the cursor was repaired to produce this view
    """

    cursor: MealCursor
    meals: tuple[SlotMeal, ...]
    scheduled_delivery_date: date
    delivery_status: SlotDeliveryStatus
    timeline_entry_id: Optional[str] = None
    custom_title: Optional[str] = None
    custom_description: Optional[str] = None
    recovered: bool = False

    @property
    def week_number(self) -> int:
        return self.cursor.week_number

    @property
    def day_of_week(self) -> int:
        return self.cursor.day_of_week

    @property
    def meal_slot(self) -> MealCategory:
        return self.cursor.meal_slot

    @classmethod
    def of(cls, slot: SnapshotSlot, recovered: bool = False) -> "SlotView":
        return cls(
            cursor=slot.cursor,
            meals=slot.meals,
            scheduled_delivery_date=slot.scheduled_delivery_date,
            delivery_status=slot.delivery_status,
            timeline_entry_id=slot.timeline_entry_id,
            custom_title=slot.custom_title,
            custom_description=slot.custom_description,
            recovered=recovered,
        )


@dataclass(frozen=True)
class DayView:
    """One row of a day timeline.

    Attributes:
        date: Calendar date the row is expected on
        week_number: Plan week of the row
        day_of_week: Plan day of the row
        slots: Matching slots of that plan day, in category order
        skipped: True if the customer skipped this date
    """

    date: date
    week_number: int
    day_of_week: int
    slots: tuple[SlotView, ...]
    skipped: bool = False

    @property
    def timeline_entry_id(self) -> Optional[str]:
        return self.slots[0].timeline_entry_id if self.slots else None
