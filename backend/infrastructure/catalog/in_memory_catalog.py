"""In-memory catalog reader for tests and local development."""

from dataclasses import replace
from decimal import Decimal
from typing import Optional

from domain.catalog.entities import CatalogMeal, CatalogPlan, ScheduleEntry
from domain.catalog.ports import ICatalogReader
from domain.subscription.core.exceptions import CatalogUnavailableError


class InMemoryCatalogReader(ICatalogReader):
    """
    Dictionary-backed catalog.

    ``set_available(False)`` simulates an outage: every read then raises
    CatalogUnavailableError.
    """

    def __init__(self) -> None:
        self._plans: dict[str, CatalogPlan] = {}
        self._schedules: dict[str, list[ScheduleEntry]] = {}
        self._meals: dict[str, CatalogMeal] = {}
        self._available = True

    def add_plan(self, plan: CatalogPlan, schedule: list[ScheduleEntry]) -> None:
        self._plans[plan.plan_id] = plan
        self._schedules[plan.plan_id] = list(schedule)

    def add_meal(self, meal: CatalogMeal) -> None:
        self._meals[meal.meal_id] = meal

    def update_meal_price(self, meal_id: str, price: float) -> None:
        """Change a meal's price (catalog edits after compilation)."""
        meal = self._meals[meal_id]
        self._meals[meal_id] = replace(
            meal, pricing=replace(meal.pricing, price=Decimal(str(price)))
        )

    def remove_meal(self, meal_id: str) -> None:
        self._meals.pop(meal_id, None)

    def set_available(self, available: bool) -> None:
        self._available = available

    def _check(self, plan_id: str) -> None:
        if not self._available:
            raise CatalogUnavailableError(plan_id)

    async def get_plan(self, plan_id: str) -> Optional[CatalogPlan]:
        self._check(plan_id)
        return self._plans.get(plan_id)

    async def get_plan_schedule(self, plan_id: str) -> list[ScheduleEntry]:
        self._check(plan_id)
        return list(self._schedules.get(plan_id, []))

    async def get_meal(self, meal_id: str) -> Optional[CatalogMeal]:
        self._check(meal_id)
        return self._meals.get(meal_id)
