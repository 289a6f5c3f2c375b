"""Snapshot compiler.

Builds the immutable, fully denormalized copy of a meal plan that a
subscription owns: schedule slots with their meals, pre-aggregated
statistics and a fixed pricing block.
"""

import asyncio
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional

import structlog

from domain.catalog.entities import CatalogMeal, CatalogPlan, ScheduleEntry
from domain.catalog.ports import ICatalogReader

from ..core.entities import (
    MealPlanSnapshot,
    SlotMeal,
    SnapshotPricing,
    SnapshotSlot,
    SnapshotStats,
    utc_now,
)
from ..core.exceptions import PlanNotFoundError, ValidationError
from ..core.value_objects import (
    CompileRequest,
    Discount,
    DiscountApplied,
    MealCategory,
    Nutrition,
    PricingInputs,
    to_money,
)
from ..scheduling import DAYS_PER_WEEK, slot_date

logger = structlog.get_logger(__name__)

DIETARY_TAGS = ("vegan", "vegetarian", "pescatarian", "halal", "gluten-free", "dairy-free")
COMPLEXITY_LEVELS = ("low", "medium", "high")


@dataclass(frozen=True)
class _CompileInputs:
    plan_id: str
    owner_id: str
    start_date: date
    end_date: date
    categories: tuple[MealCategory, ...]
    duration_weeks: int
    pricing_inputs: PricingInputs
    discount: Optional[Discount]


class SnapshotCompiler:
    """Compiles a MealPlanSnapshot from catalog data.

    The compiler reads the plan, its schedule template and every referenced
    meal once, then copies everything it needs into frozen values. Given the
    same inputs (including ``compiled_at``) and an unchanged catalog, it
    returns equal snapshots.

    Example:
        >>> compiler = SnapshotCompiler(catalog)
        >>> snapshot = await compiler.compile(
        ...     plan_id="plan-1",
        ...     owner_id="customer-1",
        ...     start_date=date(2025, 1, 1),
        ...     end_date=date(2025, 1, 15),
        ...     selected_meal_categories=["breakfast", "lunch"],
        ...     duration_weeks=2,
        ... )
    """

    def __init__(self, catalog: ICatalogReader):
        self._catalog = catalog

    async def compile_request(
        self, request: CompileRequest, compiled_at: Optional[datetime] = None
    ) -> MealPlanSnapshot:
        """Compile from a stored CompileRequest."""
        return await self.compile(
            plan_id=request.plan_id,
            owner_id=request.owner_id,
            start_date=request.start_date,
            end_date=request.end_date,
            selected_meal_categories=request.selected_meal_categories,
            discount=request.discount,
            pricing_inputs=request.pricing_inputs,
            duration_weeks=request.duration_weeks,
            compiled_at=compiled_at,
        )

    async def compile(
        self,
        plan_id: str,
        owner_id: str,
        start_date: date,
        end_date: date,
        selected_meal_categories: Iterable[MealCategory | str],
        duration_weeks: int,
        discount: Optional[Discount] = None,
        pricing_inputs: Optional[PricingInputs] = None,
        compiled_at: Optional[datetime] = None,
    ) -> MealPlanSnapshot:
        """Compile a snapshot.

        Args:
            plan_id: Catalog plan to freeze
            owner_id: Customer the snapshot belongs to
            start_date: First plan day
            end_date: Subscription end date (must be after start_date)
            selected_meal_categories: Categories to keep
            duration_weeks: Weeks of the plan cycle to include
            discount: Optional percentage discount on the subtotal
            pricing_inputs: Multipliers and optional base price override
            compiled_at: Snapshot timestamp (defaults to now)

        Returns:
            MealPlanSnapshot: Newly compiled snapshot

        Raises:
            ValidationError: If inputs are invalid or no slot survives filtering
            PlanNotFoundError: If the plan does not exist
            CatalogUnavailableError: If the catalog cannot be read
        """
        inputs = self._validate(
            plan_id=plan_id,
            owner_id=owner_id,
            start_date=start_date,
            end_date=end_date,
            selected_meal_categories=selected_meal_categories,
            duration_weeks=duration_weeks,
            discount=discount,
            pricing_inputs=pricing_inputs or PricingInputs(),
        )

        plan = await self._catalog.get_plan(plan_id)
        if plan is None:
            raise PlanNotFoundError(plan_id)

        unavailable = [c.value for c in inputs.categories if c not in plan.available_categories]
        if unavailable:
            raise ValidationError(
                f"Plan {plan_id} does not offer categories: {', '.join(unavailable)}"
            )

        template = await self._catalog.get_plan_schedule(plan_id)
        entries = self._filter_entries(template, inputs)
        if not entries:
            raise ValidationError(
                f"No schedule slots left for plan {plan_id} after filtering categories"
            )

        meals = await self._load_meals(entries)
        slots = self._build_slots(entries, meals, inputs.start_date)
        if not slots:
            raise ValidationError(f"No meals could be resolved for plan {plan_id}")

        stats = self._compute_stats(slots, inputs.duration_weeks)
        pricing = self._compute_pricing(plan, slots, stats, inputs)
        allergens = sorted(
            {allergen for slot in slots for meal in slot.meals for allergen in meal.allergens}
        )

        snapshot = MealPlanSnapshot(
            plan_id=plan.plan_id,
            plan_name=plan.name,
            plan_description=plan.description,
            cover_image=plan.cover_image,
            tier=plan.tier,
            target_audience=plan.target_audience,
            features=tuple(plan.features),
            slots=slots,
            stats=stats,
            pricing=pricing,
            allergens_summary=tuple(allergens),
            snapshot_created_at=compiled_at or utc_now(),
        )

        logger.info(
            "snapshot.compiled",
            plan_id=plan_id,
            owner_id=owner_id,
            slots=stats.total_meal_slots,
            meals=stats.total_meals,
            days_with_meals=stats.days_with_meals,
            final_total=str(pricing.final_total),
        )
        return snapshot

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(
        plan_id: str,
        owner_id: str,
        start_date: date,
        end_date: date,
        selected_meal_categories: Iterable[MealCategory | str],
        duration_weeks: int,
        discount: Optional[Discount],
        pricing_inputs: PricingInputs,
    ) -> _CompileInputs:
        if not plan_id:
            raise ValidationError("plan_id is required")
        if not owner_id:
            raise ValidationError("owner_id is required")
        if end_date <= start_date:
            raise ValidationError(f"End date {end_date} must be after start date {start_date}")
        if duration_weeks < 1:
            raise ValidationError(f"duration_weeks must be >= 1, got {duration_weeks}")
        try:
            categories = MealCategory.normalize(selected_meal_categories)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if not categories:
            raise ValidationError("At least one meal category must be selected")
        return _CompileInputs(
            plan_id=plan_id,
            owner_id=owner_id,
            start_date=start_date,
            end_date=end_date,
            categories=categories,
            duration_weeks=duration_weeks,
            pricing_inputs=pricing_inputs,
            discount=discount,
        )

    @staticmethod
    def _filter_entries(
        template: list[ScheduleEntry], inputs: _CompileInputs
    ) -> list[ScheduleEntry]:
        """Keep selected categories inside the subscription's plan weeks.

        Duplicate (week, day, slot) cells keep their first occurrence.
        """
        seen: set[tuple[int, int, MealCategory]] = set()
        kept: list[ScheduleEntry] = []
        for entry in template:
            key = (entry.week_number, entry.day_of_week, entry.meal_slot)
            if entry.meal_slot not in inputs.categories:
                continue
            if not 1 <= entry.week_number <= inputs.duration_weeks:
                continue
            if not 1 <= entry.day_of_week <= DAYS_PER_WEEK:
                continue
            if key in seen:
                continue
            seen.add(key)
            kept.append(entry)
        return kept

    async def _load_meals(self, entries: list[ScheduleEntry]) -> dict[str, CatalogMeal]:
        meal_ids = sorted({meal_id for entry in entries for meal_id in entry.meal_ids})
        results = await asyncio.gather(*(self._catalog.get_meal(mid) for mid in meal_ids))
        return {meal.meal_id: meal for meal in results if meal is not None}

    @staticmethod
    def _build_slots(
        entries: list[ScheduleEntry], meals: dict[str, CatalogMeal], start_date: date
    ) -> list[SnapshotSlot]:
        slots: list[SnapshotSlot] = []
        for entry in entries:
            slot_meals: list[SlotMeal] = []
            for meal_id in entry.meal_ids:
                meal = meals.get(meal_id)
                if meal is None:
                    logger.warning(
                        "snapshot.meal_missing",
                        meal_id=meal_id,
                        week=entry.week_number,
                        day=entry.day_of_week,
                        meal_slot=entry.meal_slot.value,
                    )
                    continue
                slot_meals.append(
                    SlotMeal(
                        meal_id=meal.meal_id,
                        name=meal.name,
                        category=meal.category,
                        nutrition=meal.nutrition,
                        pricing=meal.pricing,
                        image_url=meal.image_url,
                        dietary_tags=tuple(meal.dietary_tags),
                        allergens=tuple(meal.allergens),
                        preparation_time=meal.preparation_time,
                        complexity=meal.complexity,
                    )
                )
            if not slot_meals:
                continue
            slots.append(
                SnapshotSlot(
                    week_number=entry.week_number,
                    day_of_week=entry.day_of_week,
                    meal_slot=entry.meal_slot,
                    meals=tuple(slot_meals),
                    scheduled_delivery_date=slot_date(
                        start_date, entry.week_number, entry.day_of_week
                    ),
                    custom_title=entry.custom_title,
                    custom_description=entry.custom_description,
                    notes=entry.notes,
                )
            )
        return slots

    @staticmethod
    def _compute_stats(slots: list[SnapshotSlot], duration_weeks: int) -> SnapshotStats:
        all_meals = [meal for slot in slots for meal in slot.meals]
        total = sum((meal.nutrition for meal in all_meals), Nutrition())
        # Days without any slot never count towards the per-day average.
        days_with_meals = len({slot.scheduled_delivery_date for slot in slots})

        meal_types = Counter(slot.meal_slot.value for slot in slots)
        dietary = Counter(
            tag for meal in all_meals for tag in meal.dietary_tags if tag in DIETARY_TAGS
        )
        complexity = Counter(
            meal.complexity for meal in all_meals if meal.complexity in COMPLEXITY_LEVELS
        )

        return SnapshotStats(
            total_meals=len(all_meals),
            total_meal_slots=len(slots),
            meals_per_week=round(len(slots) / duration_weeks, 2),
            total_days=duration_weeks * DAYS_PER_WEEK,
            days_with_meals=days_with_meals,
            total_nutrition=total.rounded(),
            avg_nutrition_per_meal=total.divided_by(len(all_meals)),
            avg_nutrition_per_day=total.divided_by(days_with_meals),
            meal_type_distribution=tuple(
                (category.value, meal_types.get(category.value, 0)) for category in MealCategory
            ),
            dietary_distribution=tuple((tag, dietary.get(tag, 0)) for tag in DIETARY_TAGS),
            complexity_distribution=tuple(
                (level, complexity.get(level, 0)) for level in COMPLEXITY_LEVELS
            ),
        )

    @staticmethod
    def _compute_pricing(
        plan: CatalogPlan,
        slots: list[SnapshotSlot],
        stats: SnapshotStats,
        inputs: _CompileInputs,
    ) -> SnapshotPricing:
        pricing_inputs = inputs.pricing_inputs
        base_price = to_money(
            pricing_inputs.base_plan_price
            if pricing_inputs.base_plan_price is not None
            else plan.base_price
        )
        all_meals = [meal for slot in slots for meal in slot.meals]
        meals_cost = to_money(sum((meal.pricing.price for meal in all_meals), Decimal("0")))
        chef_total = to_money(
            sum((meal.pricing.chef_earnings for meal in all_meals), Decimal("0"))
        )
        platform_total = to_money(
            sum((meal.pricing.platform_fee for meal in all_meals), Decimal("0"))
        )

        subtotal = to_money(
            base_price * pricing_inputs.frequency_multiplier * pricing_inputs.duration_multiplier
        )

        applied: Optional[DiscountApplied] = None
        final_total = subtotal
        discount = inputs.discount
        if discount is not None and discount.percent > 0:
            amount = to_money(subtotal * discount.percent / Decimal(100))
            final_total = subtotal - amount
            applied = DiscountApplied(
                percent=discount.percent,
                amount=amount,
                discount_id=discount.discount_id,
                reason=discount.reason,
                discount_type=discount.discount_type,
            )

        price_per_meal = (
            to_money(final_total / stats.total_meals) if stats.total_meals else Decimal("0.00")
        )
        return SnapshotPricing(
            base_plan_price=base_price,
            total_meals_cost=meals_cost,
            frequency_multiplier=pricing_inputs.frequency_multiplier,
            duration_multiplier=pricing_inputs.duration_multiplier,
            subtotal=subtotal,
            final_total=final_total,
            price_per_meal=price_per_meal,
            price_per_week=to_money(final_total / inputs.duration_weeks),
            total_chef_earnings=chef_total,
            total_platform_fee=platform_total,
            discount=applied,
        )
