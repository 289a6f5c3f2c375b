"""Unit tests for SnapshotCompiler.

Tests focus on:
- Slot expansion and delivery dates
- Statistics (per-meal and per-day averages, distributions)
- Pricing with multipliers and discounts
- Isolation from later catalog edits
- Validation and catalog failures
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from domain.catalog.entities import CatalogPlan, ScheduleEntry
from domain.subscription.core.exceptions import (
    CatalogUnavailableError,
    PlanNotFoundError,
    ValidationError,
)
from domain.subscription.core.value_objects import (
    Discount,
    MealCategory,
    MealCursor,
    PricingInputs,
)
from domain.subscription.snapshot import SnapshotCompiler
from infrastructure.catalog.in_memory_catalog import InMemoryCatalogReader

COMPILED_AT = datetime(2025, 1, 1, 7, 0, tzinfo=timezone.utc)


async def _compile(compiler: SnapshotCompiler, **overrides):  # type: ignore[no-untyped-def]
    kwargs = {
        "plan_id": "plan-balanced",
        "owner_id": "customer-1",
        "start_date": date(2025, 1, 1),
        "end_date": date(2025, 1, 15),
        "selected_meal_categories": ["breakfast", "lunch", "dinner"],
        "duration_weeks": 2,
        "compiled_at": COMPILED_AT,
    }
    kwargs.update(overrides)
    return await compiler.compile(**kwargs)


class TestSlots:
    """Test slot expansion."""

    @pytest.mark.asyncio
    async def test_one_slot_per_schedule_cell(self, compiler: SnapshotCompiler) -> None:
        snapshot = await _compile(compiler)

        assert len(snapshot) == 30
        assert snapshot.plan_name == "Balanced Week"
        assert snapshot.snapshot_created_at == COMPILED_AT
        assert snapshot.last_synced_at is None

    @pytest.mark.asyncio
    async def test_delivery_dates_follow_plan_days(self, compiler: SnapshotCompiler) -> None:
        snapshot = await _compile(compiler)

        first = snapshot.slot_at(MealCursor(1, 1, MealCategory.BREAKFAST))
        week_two = snapshot.slot_at(MealCursor(2, 3, MealCategory.DINNER))

        assert first is not None and first.scheduled_delivery_date == date(2025, 1, 1)
        assert week_two is not None and week_two.scheduled_delivery_date == date(2025, 1, 10)
        assert len(snapshot.delivery_dates()) == 10

    @pytest.mark.asyncio
    async def test_filters_unselected_categories(self, compiler: SnapshotCompiler) -> None:
        snapshot = await _compile(compiler, selected_meal_categories=["dinner", "breakfast"])

        assert len(snapshot) == 20
        assert {slot.meal_slot for slot in snapshot} == {
            MealCategory.BREAKFAST,
            MealCategory.DINNER,
        }

    @pytest.mark.asyncio
    async def test_drops_weeks_beyond_duration(self, compiler: SnapshotCompiler) -> None:
        snapshot = await _compile(compiler, duration_weeks=1, end_date=date(2025, 1, 8))

        assert len(snapshot) == 15
        assert all(slot.week_number == 1 for slot in snapshot)

    @pytest.mark.asyncio
    async def test_missing_meal_skips_slot(
        self, catalog: InMemoryCatalogReader, compiler: SnapshotCompiler
    ) -> None:
        catalog.remove_meal("meal-salmon")

        snapshot = await _compile(compiler)

        assert len(snapshot) == 20
        assert snapshot.stats.total_meals == 20


class TestStats:
    """Test pre-aggregated statistics."""

    @pytest.mark.asyncio
    async def test_totals_and_averages(self, compiler: SnapshotCompiler) -> None:
        stats = (await _compile(compiler)).stats

        assert stats.total_meals == 30
        assert stats.total_meal_slots == 30
        assert stats.meals_per_week == 15.0
        assert stats.total_days == 14
        assert stats.days_with_meals == 10
        assert stats.total_nutrition.calories == 14000
        assert stats.avg_nutrition_per_meal.calories == 467
        assert stats.avg_nutrition_per_day.calories == 1400

    @pytest.mark.asyncio
    async def test_per_day_average_ignores_days_without_meals(
        self, catalog: InMemoryCatalogReader, compiler: SnapshotCompiler
    ) -> None:
        catalog.add_plan(
            CatalogPlan(
                plan_id="plan-sparse",
                name="Sparse",
                base_price=Decimal("30"),
                available_categories=(MealCategory.BREAKFAST,),
            ),
            [
                ScheduleEntry(1, 1, MealCategory.BREAKFAST, ("meal-oats",)),
                ScheduleEntry(1, 3, MealCategory.BREAKFAST, ("meal-oats",)),
            ],
        )

        stats = (
            await _compile(
                compiler,
                plan_id="plan-sparse",
                selected_meal_categories=["breakfast"],
                duration_weeks=1,
                end_date=date(2025, 1, 8),
            )
        ).stats

        assert stats.total_days == 7
        assert stats.days_with_meals == 2
        assert stats.avg_nutrition_per_day.calories == 350

    @pytest.mark.asyncio
    async def test_distributions(self, compiler: SnapshotCompiler) -> None:
        stats = (await _compile(compiler)).stats

        assert dict(stats.meal_type_distribution) == {
            "breakfast": 10,
            "lunch": 10,
            "dinner": 10,
            "snack": 0,
        }
        dietary = dict(stats.dietary_distribution)
        assert dietary["vegan"] == 10
        assert dietary["gluten-free"] == 10
        assert dietary["halal"] == 0
        assert dict(stats.complexity_distribution) == {"low": 10, "medium": 10, "high": 10}

    @pytest.mark.asyncio
    async def test_allergen_summary(self, compiler: SnapshotCompiler) -> None:
        snapshot = await _compile(compiler)

        assert snapshot.allergens_summary == ("fish", "gluten")


class TestPricing:
    """Test the pricing block."""

    @pytest.mark.asyncio
    async def test_default_pricing(self, compiler: SnapshotCompiler) -> None:
        pricing = (await _compile(compiler)).pricing

        assert pricing.base_plan_price == Decimal("120.00")
        assert pricing.subtotal == Decimal("120.00")
        assert pricing.final_total == Decimal("120.00")
        assert pricing.price_per_meal == Decimal("4.00")
        assert pricing.price_per_week == Decimal("60.00")
        assert pricing.total_meals_cost == Decimal("345.00")
        assert pricing.total_chef_earnings == Decimal("250.00")
        assert pricing.total_platform_fee == Decimal("95.00")
        assert pricing.discount is None

    @pytest.mark.asyncio
    async def test_multipliers_and_discount(self, compiler: SnapshotCompiler) -> None:
        pricing = (
            await _compile(
                compiler,
                pricing_inputs=PricingInputs(frequency_multiplier=Decimal("1.5")),
                discount=Discount(percent=Decimal("15"), discount_id="WELCOME15"),
            )
        ).pricing

        assert pricing.subtotal == Decimal("180.00")
        assert pricing.discount is not None
        assert pricing.discount.amount == Decimal("27.00")
        assert pricing.discount.discount_id == "WELCOME15"
        assert pricing.final_total == Decimal("153.00")
        assert pricing.price_per_meal == Decimal("5.10")

    @pytest.mark.asyncio
    async def test_base_price_override(self, compiler: SnapshotCompiler) -> None:
        pricing = (
            await _compile(compiler, pricing_inputs=PricingInputs(base_plan_price=Decimal("99")))
        ).pricing

        assert pricing.base_plan_price == Decimal("99.00")
        assert pricing.final_total == Decimal("99.00")

    @pytest.mark.asyncio
    async def test_zero_discount_is_not_applied(self, compiler: SnapshotCompiler) -> None:
        pricing = (await _compile(compiler, discount=Discount(percent=0))).pricing

        assert pricing.discount is None
        assert pricing.final_total == pricing.subtotal


class TestIsolation:
    """Test that snapshots never follow catalog edits."""

    @pytest.mark.asyncio
    async def test_deterministic_for_same_inputs(self, compiler: SnapshotCompiler) -> None:
        first = await _compile(compiler)
        second = await _compile(compiler)

        assert first == second

    @pytest.mark.asyncio
    async def test_price_change_after_compile_does_not_leak(
        self, catalog: InMemoryCatalogReader, compiler: SnapshotCompiler
    ) -> None:
        snapshot = await _compile(compiler)

        catalog.update_meal_price("meal-oats", 99.0)
        recompiled = await _compile(compiler)

        slot = snapshot.slot_at(MealCursor(1, 1, MealCategory.BREAKFAST))
        assert slot is not None
        assert slot.meals[0].pricing.price == Decimal("8.50")
        assert snapshot.pricing.total_meals_cost == Decimal("345.00")
        assert recompiled.pricing.total_meals_cost != snapshot.pricing.total_meals_cost


class TestFailures:
    """Test validation and dependency failures."""

    @pytest.mark.asyncio
    async def test_plan_not_found(self, compiler: SnapshotCompiler) -> None:
        with pytest.raises(PlanNotFoundError):
            await _compile(compiler, plan_id="plan-unknown")

    @pytest.mark.asyncio
    async def test_category_not_offered(self, compiler: SnapshotCompiler) -> None:
        with pytest.raises(ValidationError, match="snack"):
            await _compile(compiler, selected_meal_categories=["lunch", "snack"])

    @pytest.mark.asyncio
    async def test_end_before_start(self, compiler: SnapshotCompiler) -> None:
        with pytest.raises(ValidationError):
            await _compile(compiler, end_date=date(2025, 1, 1))

    @pytest.mark.asyncio
    async def test_no_categories(self, compiler: SnapshotCompiler) -> None:
        with pytest.raises(ValidationError):
            await _compile(compiler, selected_meal_categories=[])

    @pytest.mark.asyncio
    async def test_catalog_unavailable(
        self, catalog: InMemoryCatalogReader, compiler: SnapshotCompiler
    ) -> None:
        catalog.set_available(False)

        with pytest.raises(CatalogUnavailableError):
            await _compile(compiler)

    @pytest.mark.asyncio
    async def test_no_slots_left(self, catalog: InMemoryCatalogReader) -> None:
        catalog.add_plan(
            CatalogPlan(
                plan_id="plan-empty",
                name="Empty",
                base_price=Decimal("10"),
                available_categories=(MealCategory.LUNCH,),
            ),
            [],
        )

        with pytest.raises(ValidationError):
            await _compile(
                SnapshotCompiler(catalog),
                plan_id="plan-empty",
                selected_meal_categories=["lunch"],
            )
