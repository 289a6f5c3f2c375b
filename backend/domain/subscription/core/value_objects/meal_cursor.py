"""MealCursor value object - pointer to the next meal due."""

from dataclasses import dataclass
from datetime import datetime

from .meal_category import MealCategory


@dataclass(frozen=True)
class MealCursor:
    """Position of a meal inside the plan schedule.

    Ordering compares week first, then day, then the category's
    position in the day, which is the order the schedule is served in.

    Attributes:
        week_number: Plan week (1-based)
        day_of_week: Plan day inside the week (1-7)
        meal_slot: Meal category within the day
    """

    week_number: int
    day_of_week: int
    meal_slot: MealCategory

    def __post_init__(self) -> None:
        if self.week_number < 1:
            raise ValueError(f"week_number must be >= 1, got {self.week_number}")
        if not 1 <= self.day_of_week <= 7:
            raise ValueError(f"day_of_week must be in [1, 7], got {self.day_of_week}")
        if not isinstance(self.meal_slot, MealCategory):
            object.__setattr__(self, "meal_slot", MealCategory(self.meal_slot))

    @property
    def key(self) -> tuple[int, int, MealCategory]:
        """Schedule key (week, day, category)."""
        return (self.week_number, self.day_of_week, self.meal_slot)

    @property
    def day_key(self) -> tuple[int, int]:
        """Plan day key (week, day)."""
        return (self.week_number, self.day_of_week)

    @property
    def sort_key(self) -> tuple[int, int, int]:
        """Key that sorts cursors in serving order."""
        return (self.week_number, self.day_of_week, self.meal_slot.order)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, MealCursor):
            return NotImplemented
        return self.sort_key < other.sort_key

    def __str__(self) -> str:
        return f"W{self.week_number}D{self.day_of_week}:{self.meal_slot.value}"


@dataclass(frozen=True)
class DeliveredMarker:
    """Most recently completed delivery, kept for audit and recovery.

    Attributes:
        cursor: Cursor value that was delivered
        delivered_at: When the delivery completed
    """

    cursor: MealCursor
    delivered_at: datetime
