"""Query resolvers for meal subscriptions.

- subscription: Get subscription by ID
- customerSubscriptions: List a customer's subscriptions
- currentMeal: Meal due next
- timeline: Upcoming delivery days
- delegation: Chef/driver timeline
"""

from typing import List, Optional

import strawberry

from api.mappers import map_day_view, map_delegation, map_slot_view, map_subscription
from api.types_subscription import (
    DayViewType,
    DelegationType,
    SlotViewType,
    SubscriptionType,
)
from application.subscription.queries import (
    GetCurrentMealQuery,
    GetCurrentMealQueryHandler,
    GetCustomerSubscriptionsQuery,
    GetCustomerSubscriptionsQueryHandler,
    GetDelegationQuery,
    GetDelegationQueryHandler,
    GetSubscriptionQuery,
    GetSubscriptionQueryHandler,
    GetTimelineQuery,
    GetTimelineQueryHandler,
)
from domain.subscription.core.exceptions import NotFoundError


@strawberry.type
class SubscriptionQueries:
    """Read operations for subscriptions."""

    @strawberry.field
    async def subscription(
        self, info: strawberry.types.Info, subscription_id: str
    ) -> Optional[SubscriptionType]:
        """Get subscription by ID (null if not found).

        Example:
            query {
              subscriptions {
                subscription(subscriptionId: "...") { status endDate nextDelivery { date } }
              }
            }
        """
        handler = GetSubscriptionQueryHandler(mutator=info.context.get("mutator"))
        try:
            subscription = await handler.handle(GetSubscriptionQuery(subscription_id))
        except NotFoundError:
            return None
        return map_subscription(subscription)

    @strawberry.field
    async def customer_subscriptions(
        self, info: strawberry.types.Info, customer_id: str
    ) -> List[SubscriptionType]:
        handler = GetCustomerSubscriptionsQueryHandler(
            repository=info.context.get("subscription_repository")
        )
        subscriptions = await handler.handle(GetCustomerSubscriptionsQuery(customer_id))
        return [map_subscription(item, include_snapshot=False) for item in subscriptions]

    @strawberry.field
    async def current_meal(
        self, info: strawberry.types.Info, subscription_id: str
    ) -> SlotViewType:
        """Meal due next. Before activation this is the first meal of the plan."""
        handler = GetCurrentMealQueryHandler(
            mutator=info.context.get("mutator"),
            tracker=info.context.get("progression_tracker"),
        )
        view = await handler.handle(GetCurrentMealQuery(subscription_id))
        return map_slot_view(view)

    @strawberry.field
    async def timeline(
        self, info: strawberry.types.Info, subscription_id: str, days_ahead: int = 7
    ) -> List[DayViewType]:
        """Delivery days within the next daysAhead days.

        Example:
            query {
              subscriptions {
                timeline(subscriptionId: "...", daysAhead: 14) {
                  date
                  slots { mealSlot meals { name } }
                }
              }
            }
        """
        handler = GetTimelineQueryHandler(
            mutator=info.context.get("mutator"),
            tracker=info.context.get("progression_tracker"),
        )
        days = await handler.handle(GetTimelineQuery(subscription_id, days_ahead=days_ahead))
        return [map_day_view(day) for day in days]

    @strawberry.field
    async def delegation(
        self, info: strawberry.types.Info, subscription_id: str
    ) -> Optional[DelegationType]:
        handler = GetDelegationQueryHandler(repository=info.context.get("delegation_repository"))
        try:
            delegation = await handler.handle(GetDelegationQuery(subscription_id))
        except NotFoundError:
            return None
        return map_delegation(delegation)
