"""MealCategory value object - the meal slots available within a day."""

from enum import Enum
from typing import Iterable


class MealCategory(str, Enum):
    """Meal slot within a delivery day.

    Declaration order is the fixed category order used by progression:
    breakfast is served before lunch, lunch before dinner, and so on.
    """

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"

    @property
    def order(self) -> int:
        """Position of the category within a day (0-based)."""
        return list(MealCategory).index(self)

    @classmethod
    def normalize(cls, categories: Iterable["MealCategory | str"]) -> tuple["MealCategory", ...]:
        """Convert, de-duplicate and sort categories into the fixed order.

        Args:
            categories: Category values or enum members

        Returns:
            tuple[MealCategory, ...]: Unique categories in day order

        Raises:
            ValueError: If a value is not a known category

        Example:
            >>> MealCategory.normalize(["dinner", "breakfast", "dinner"])
            (<MealCategory.BREAKFAST: 'breakfast'>, <MealCategory.DINNER: 'dinner'>)
        """
        unique = {cls(category) for category in categories}
        return tuple(sorted(unique, key=lambda category: category.order))
