"""Domain -> GraphQL mapping helpers for subscription types."""

from typing import Optional

from domain.subscription.core.entities import (
    Delegation,
    MealPlanSnapshot,
    SlotMeal,
    Subscription,
    TimelineEntry,
)
from domain.subscription.core.exceptions import (
    ConcurrentModificationError,
    DependencyFailure,
    InconsistentStateError,
    InvalidStatusTransitionError,
    NotFoundError,
    SubscriptionClosedError,
    SubscriptionDomainError,
)
from domain.subscription.core.value_objects import Nutrition
from domain.subscription.progression import DayView, SlotView

from api.types_subscription import (
    AppliedDiscountType,
    DayViewType,
    DelegationType,
    DistributionEntryType,
    MealCategoryEnum,
    NextDeliveryType,
    NutritionType,
    SlotDeliveryStatusEnum,
    SlotMealType,
    SlotViewType,
    SnapshotPricingType,
    SnapshotStatsType,
    SnapshotType,
    SubscriptionOperationError,
    SubscriptionStatusEnum,
    SubscriptionType,
    TimelineEntryType,
    TimelineStatusEnum,
    TimeSlotEnum,
)


def map_error(error: Exception) -> SubscriptionOperationError:
    """Translate a domain error into the GraphQL error result."""
    if isinstance(error, NotFoundError):
        code = "NOT_FOUND"
    elif isinstance(error, (InvalidStatusTransitionError, SubscriptionClosedError)):
        code = "INVALID_TRANSITION"
    elif isinstance(error, DependencyFailure):
        code = "DEPENDENCY_UNAVAILABLE"
    elif isinstance(error, ConcurrentModificationError):
        code = "CONFLICT"
    elif isinstance(error, InconsistentStateError):
        code = "INCONSISTENT_STATE"
    elif isinstance(error, (SubscriptionDomainError, ValueError)):
        code = "VALIDATION_ERROR"
    else:
        code = "INTERNAL_ERROR"
    return SubscriptionOperationError(message=str(error), code=code)


def map_nutrition(nutrition: Nutrition) -> NutritionType:
    return NutritionType(
        calories=nutrition.calories,
        protein=nutrition.protein,
        carbs=nutrition.carbs,
        fat=nutrition.fat,
        fiber=nutrition.fiber,
    )


def map_slot_meal(meal: SlotMeal) -> SlotMealType:
    return SlotMealType(
        meal_id=meal.meal_id,
        name=meal.name,
        category=MealCategoryEnum(meal.category.value),
        nutrition=map_nutrition(meal.nutrition),
        price=meal.pricing.price,
        image_url=meal.image_url,
        dietary_tags=list(meal.dietary_tags),
        allergens=list(meal.allergens),
        preparation_time=meal.preparation_time,
        complexity=meal.complexity,
    )


def map_slot_view(view: SlotView) -> SlotViewType:
    return SlotViewType(
        week_number=view.week_number,
        day_of_week=view.day_of_week,
        meal_slot=MealCategoryEnum(view.meal_slot.value),
        meals=[map_slot_meal(meal) for meal in view.meals],
        scheduled_delivery_date=view.scheduled_delivery_date,
        delivery_status=SlotDeliveryStatusEnum(view.delivery_status.value),
        timeline_entry_id=view.timeline_entry_id,
        custom_title=view.custom_title,
        custom_description=view.custom_description,
    )


def map_day_view(day: DayView) -> DayViewType:
    return DayViewType(
        date=day.date,
        week_number=day.week_number,
        day_of_week=day.day_of_week,
        slots=[map_slot_view(slot) for slot in day.slots],
        skipped=day.skipped,
        timeline_entry_id=day.timeline_entry_id,
    )


def _distribution(pairs: tuple[tuple[str, int], ...]) -> list[DistributionEntryType]:
    return [DistributionEntryType(key=key, count=count) for key, count in pairs]


def map_snapshot(snapshot: MealPlanSnapshot) -> SnapshotType:
    stats = snapshot.stats
    pricing = snapshot.pricing
    discount = pricing.discount
    return SnapshotType(
        plan_id=snapshot.plan_id,
        plan_name=snapshot.plan_name,
        snapshot_created_at=snapshot.snapshot_created_at,
        stats=SnapshotStatsType(
            total_meals=stats.total_meals,
            total_meal_slots=stats.total_meal_slots,
            meals_per_week=stats.meals_per_week,
            total_days=stats.total_days,
            days_with_meals=stats.days_with_meals,
            total_nutrition=map_nutrition(stats.total_nutrition),
            avg_nutrition_per_meal=map_nutrition(stats.avg_nutrition_per_meal),
            avg_nutrition_per_day=map_nutrition(stats.avg_nutrition_per_day),
            meal_type_distribution=_distribution(stats.meal_type_distribution),
            dietary_distribution=_distribution(stats.dietary_distribution),
            complexity_distribution=_distribution(stats.complexity_distribution),
        ),
        pricing=SnapshotPricingType(
            base_plan_price=pricing.base_plan_price,
            total_meals_cost=pricing.total_meals_cost,
            subtotal=pricing.subtotal,
            final_total=pricing.final_total,
            price_per_meal=pricing.price_per_meal,
            price_per_week=pricing.price_per_week,
            total_chef_earnings=pricing.total_chef_earnings,
            total_platform_fee=pricing.total_platform_fee,
            discount=(
                AppliedDiscountType(
                    percent=discount.percent,
                    amount=discount.amount,
                    discount_type=discount.discount_type,
                    discount_id=discount.discount_id,
                    reason=discount.reason,
                )
                if discount
                else None
            ),
        ),
        allergens_summary=list(snapshot.allergens_summary),
        total_slots=len(snapshot),
        last_synced_at=snapshot.last_synced_at,
    )


def map_subscription(
    subscription: Subscription, include_snapshot: bool = True
) -> SubscriptionType:
    next_delivery: Optional[NextDeliveryType] = None
    if subscription.next_scheduled_delivery is not None:
        next_delivery = NextDeliveryType(
            date=subscription.next_scheduled_delivery.date,
            time_window=subscription.next_scheduled_delivery.time_window,
        )
    cursor = subscription.cursor
    schedule = subscription.delivery_schedule
    return SubscriptionType(
        subscription_id=subscription.id,
        customer_id=subscription.customer_id,
        plan_id=subscription.plan_id,
        status=SubscriptionStatusEnum(subscription.status.value),
        is_activated=subscription.is_activated,
        start_date=subscription.start_date,
        end_date=subscription.end_date,
        duration_weeks=subscription.duration_weeks,
        selected_meal_categories=[
            MealCategoryEnum(category.value) for category in subscription.selected_meal_categories
        ],
        delivery_days=list(schedule.days_of_week),
        time_slot=TimeSlotEnum(schedule.time_slot.value),
        current_week=cursor.week_number,
        current_day=cursor.day_of_week,
        current_meal_slot=MealCategoryEnum(cursor.meal_slot.value),
        artifacts_complete=subscription.artifacts.is_complete,
        delivered_days=subscription.metrics.delivered_days,
        delivered_meals=subscription.metrics.delivered_meals,
        skipped_days=subscription.metrics.skipped_days,
        skipped_dates=[skipped.date for skipped in subscription.skipped_days],
        created_at=subscription.created_at,
        updated_at=subscription.updated_at,
        activated_at=subscription.activated_at,
        next_delivery=next_delivery,
        snapshot=(
            map_snapshot(subscription.snapshot)
            if include_snapshot and subscription.snapshot is not None
            else None
        ),
    )


def map_timeline_entry(entry: TimelineEntry) -> TimelineEntryType:
    return TimelineEntryType(
        timeline_entry_id=entry.timeline_entry_id,
        date=entry.date,
        status=TimelineStatusEnum(entry.status.value),
        slot_count=entry.slot_count,
        chef_completed_at=entry.chef_completed_at,
        delivery_completed_at=entry.delivery_completed_at,
    )


def map_delegation(delegation: Delegation) -> DelegationType:
    return DelegationType(
        delegation_id=delegation.delegation_id,
        subscription_id=delegation.subscription_id,
        timeline=[map_timeline_entry(entry) for entry in delegation.timeline],
        delivered_count=delegation.delivered_count,
        created_at=delegation.created_at,
        updated_at=delegation.updated_at,
        chef_id=delegation.chef_id,
        driver_id=delegation.driver_id,
    )
