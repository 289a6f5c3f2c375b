"""Catalog reader port."""

from abc import ABC, abstractmethod
from typing import Optional

from ..entities import CatalogMeal, CatalogPlan, ScheduleEntry


class ICatalogReader(ABC):
    """Read-only access to the meal plan catalog.

    Implementations must raise CatalogUnavailableError when the catalog
    cannot be reached, and return None (or an empty list) for records that
    do not exist.
    """

    @abstractmethod
    async def get_plan(self, plan_id: str) -> Optional[CatalogPlan]:
        """Get plan descriptive fields and base price.

        Args:
            plan_id: Catalog plan identifier

        Returns:
            CatalogPlan if it exists, None otherwise

        Raises:
            CatalogUnavailableError: If the catalog cannot be read
        """
        pass

    @abstractmethod
    async def get_plan_schedule(self, plan_id: str) -> list[ScheduleEntry]:
        """Get the plan's schedule template.

        Raises:
            CatalogUnavailableError: If the catalog cannot be read
        """
        pass

    @abstractmethod
    async def get_meal(self, meal_id: str) -> Optional[CatalogMeal]:
        """Get a meal's current nutrition, pricing and tags.

        Raises:
            CatalogUnavailableError: If the catalog cannot be read
        """
        pass
