"""SubscriptionFactory - factory for creating subscriptions."""

from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from ..entities.subscription import Subscription, utc_now
from ..exceptions.domain_errors import ValidationError
from ..value_objects import (
    DeliverySchedule,
    MealCategory,
    MealCursor,
    PendingFirstDelivery,
    SubscriptionId,
)


class SubscriptionFactory:
    """Factory for creating Subscription entities.

    Encapsulates creation defaults: placeholder end date, initial cursor
    and pending state.
    """

    @staticmethod
    def create(
        customer_id: str,
        plan_id: str,
        start_date: date,
        duration_weeks: int,
        selected_meal_categories: Iterable[MealCategory | str],
        delivery_schedule: Optional[DeliverySchedule] = None,
        end_date: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> Subscription:
        """Create a subscription waiting for its first delivery.

        Args:
            customer_id: Owning customer
            plan_id: Source catalog plan
            start_date: Signup start date
            duration_weeks: Weeks paid for
            selected_meal_categories: Eligible categories (any order)
            delivery_schedule: Delivery preferences (defaults to Mon-Fri afternoon)
            end_date: Explicit end date; defaults to start_date + duration_weeks*7.
                Activation recomputes it from the first delivery.
            now: Creation timestamp

        Returns:
            Subscription: New subscription with cursor at (1, 1, first category)

        Raises:
            ValidationError: If the inputs violate subscription invariants
        """
        try:
            categories = MealCategory.normalize(selected_meal_categories)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if not categories:
            raise ValidationError("At least one meal category must be selected")
        if duration_weeks < 1:
            raise ValidationError(f"duration_weeks must be >= 1, got {duration_weeks}")

        created_at = now or utc_now()
        return Subscription(
            subscription_id=SubscriptionId.generate(),
            customer_id=customer_id,
            plan_id=plan_id,
            start_date=start_date,
            end_date=end_date or start_date + timedelta(days=duration_weeks * 7),
            duration_weeks=duration_weeks,
            selected_meal_categories=categories,
            delivery_schedule=delivery_schedule or DeliverySchedule(),
            cursor=MealCursor(week_number=1, day_of_week=1, meal_slot=categories[0]),
            state=PendingFirstDelivery(),
            created_at=created_at,
            updated_at=created_at,
        )
