"""Catalog records.

The catalog is owned by another service and may change at any time. These
records are immutable copies of what was read, so nothing built from them
can be altered by a later catalog edit.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from domain.subscription.core.value_objects import MealCategory, MealPricing, Nutrition


@dataclass(frozen=True)
class CatalogPlan:
    """Meal plan descriptive fields and base price.

    Attributes:
        plan_id: Catalog identifier
        name: Display name
        description: Marketing description
        cover_image: Cover image URL
        base_price: Base price of the plan before multipliers
        available_categories: Meal categories the plan offers
        tier: Plan tier (e.g. "standard", "premium")
        target_audience: Who the plan is designed for
        features: Highlighted plan features
        chef_id: Chef that authored the plan
    """

    plan_id: str
    name: str
    base_price: Decimal
    available_categories: tuple[MealCategory, ...]
    description: Optional[str] = None
    cover_image: Optional[str] = None
    tier: Optional[str] = None
    target_audience: Optional[str] = None
    features: tuple[str, ...] = ()
    chef_id: Optional[str] = None


@dataclass(frozen=True)
class ScheduleEntry:
    """One cell of the plan template: (week, day, meal_slot) -> meals."""

    week_number: int
    day_of_week: int
    meal_slot: MealCategory
    meal_ids: tuple[str, ...]
    custom_title: Optional[str] = None
    custom_description: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class CatalogMeal:
    """Meal details at the time of the read."""

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
