"""Wire models for the catalog HTTP API.

Pydantic validates the JSON returned by the catalog service and maps it
onto the frozen domain records.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from domain.catalog.entities import CatalogMeal, CatalogPlan, ScheduleEntry
from domain.subscription.core.value_objects import MealCategory, MealPricing, Nutrition


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class PlanPayload(_Payload):
    """GET /plans/{plan_id}"""

    plan_id: str = Field(alias="planId")
    name: str
    base_price: Decimal = Field(alias="basePrice")
    available_categories: list[MealCategory] = Field(alias="availableCategories")
    description: Optional[str] = None
    cover_image: Optional[str] = Field(default=None, alias="coverImage")
    tier: Optional[str] = None
    target_audience: Optional[str] = Field(default=None, alias="targetAudience")
    features: list[str] = Field(default_factory=list)
    chef_id: Optional[str] = Field(default=None, alias="chefId")

    def to_domain(self) -> CatalogPlan:
        return CatalogPlan(
            plan_id=self.plan_id,
            name=self.name,
            base_price=self.base_price,
            available_categories=MealCategory.normalize(self.available_categories),
            description=self.description,
            cover_image=self.cover_image,
            tier=self.tier,
            target_audience=self.target_audience,
            features=tuple(self.features),
            chef_id=self.chef_id,
        )


class AssignmentPayload(_Payload):
    """One item of GET /plans/{plan_id}/schedule"""

    week_number: int = Field(alias="weekNumber", ge=1)
    day_of_week: int = Field(alias="dayOfWeek", ge=1, le=7)
    meal_slot: MealCategory = Field(alias="mealSlot")
    meal_ids: list[str] = Field(alias="mealIds", default_factory=list)
    custom_title: Optional[str] = Field(default=None, alias="customTitle")
    custom_description: Optional[str] = Field(default=None, alias="customDescription")
    notes: Optional[str] = None

    def to_domain(self) -> ScheduleEntry:
        return ScheduleEntry(
            week_number=self.week_number,
            day_of_week=self.day_of_week,
            meal_slot=self.meal_slot,
            meal_ids=tuple(self.meal_ids),
            custom_title=self.custom_title,
            custom_description=self.custom_description,
            notes=self.notes,
        )


class SchedulePayload(_Payload):
    assignments: list[AssignmentPayload] = Field(default_factory=list)


class NutritionPayload(_Payload):
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    fiber: float = 0.0


class MealPricingPayload(_Payload):
    price: Decimal = Decimal("0")
    chef_earnings: Decimal = Field(default=Decimal("0"), alias="chefEarnings")
    platform_fee: Decimal = Field(default=Decimal("0"), alias="platformFee")


class MealPayload(_Payload):
    """GET /meals/{meal_id}"""

    meal_id: str = Field(alias="mealId")
    name: str
    category: MealCategory
    nutrition: NutritionPayload = Field(default_factory=NutritionPayload)
    pricing: MealPricingPayload = Field(default_factory=MealPricingPayload)
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    dietary_tags: list[str] = Field(default_factory=list, alias="dietaryTags")
    allergens: list[str] = Field(default_factory=list)
    preparation_time: Optional[int] = Field(default=None, alias="preparationTime")
    complexity: Optional[str] = Field(default=None, alias="complexityLevel")

    def to_domain(self) -> CatalogMeal:
        return CatalogMeal(
            meal_id=self.meal_id,
            name=self.name,
            category=self.category,
            nutrition=Nutrition(**self.nutrition.model_dump()),
            pricing=MealPricing(
                price=self.pricing.price,
                chef_earnings=self.pricing.chef_earnings,
                platform_fee=self.pricing.platform_fee,
            ),
            image_url=self.image_url,
            dietary_tags=tuple(self.dietary_tags),
            allergens=tuple(self.allergens),
            preparation_time=self.preparation_time,
            complexity=self.complexity,
        )
