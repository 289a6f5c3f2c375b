"""Unit tests for subscription query handlers."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

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
from domain.catalog.entities import CatalogPlan, ScheduleEntry
from domain.subscription.core.exceptions import (
    DelegationNotFoundError,
    SnapshotUnavailableError,
    SubscriptionNotFoundError,
)
from domain.subscription.core.value_objects import DeliverySchedule, MealCategory, MealCursor

NOW = datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc)


class TestGetCurrentMeal:
    @pytest.mark.asyncio
    async def test_returns_first_meal_before_activation(
        self, create_subscription, mutator, tracker, subscription_repository
    ) -> None:
        created = (await create_subscription()).subscription
        handler = GetCurrentMealQueryHandler(mutator=mutator, tracker=tracker)

        view = await handler.handle(GetCurrentMealQuery(created.id, now=NOW))

        assert view.cursor == MealCursor(1, 1, MealCategory.BREAKFAST)
        assert view.timeline_entry_id == f"{created.id}-D001"
        stored = await subscription_repository.find_by_id(created.subscription_id)
        assert stored.version == created.version

    @pytest.mark.asyncio
    async def test_persists_recovered_cursor(
        self, catalog, create_subscription, mutator, tracker, subscription_repository
    ) -> None:
        catalog.add_plan(
            CatalogPlan(
                plan_id="plan-midweek",
                name="Midweek",
                base_price=Decimal("40"),
                available_categories=(MealCategory.LUNCH,),
            ),
            [ScheduleEntry(1, 3, MealCategory.LUNCH, ("meal-salad",))],
        )
        created = (
            await create_subscription(
                plan_id="plan-midweek",
                duration_weeks=1,
                selected_meal_categories=["lunch"],
                delivery_schedule=DeliverySchedule(days_of_week=(1, 3)),
            )
        ).subscription
        handler = GetCurrentMealQueryHandler(mutator=mutator, tracker=tracker)

        view = await handler.handle(GetCurrentMealQuery(created.id, now=NOW))

        assert view.recovered
        stored = await subscription_repository.find_by_id(created.subscription_id)
        assert stored.cursor == MealCursor(1, 3, MealCategory.LUNCH)
        assert stored.version == created.version + 1

    @pytest.mark.asyncio
    async def test_snapshot_not_ready(self, catalog, create_subscription, mutator, tracker) -> None:
        catalog.set_available(False)
        created = (await create_subscription()).subscription
        handler = GetCurrentMealQueryHandler(mutator=mutator, tracker=tracker)

        with pytest.raises(SnapshotUnavailableError):
            await handler.handle(GetCurrentMealQuery(created.id, now=NOW))


class TestGetTimeline:
    @pytest.mark.asyncio
    async def test_days_ahead(self, create_subscription, mutator, tracker) -> None:
        created = (await create_subscription()).subscription
        handler = GetTimelineQueryHandler(mutator=mutator, tracker=tracker)

        days = await handler.handle(
            GetTimelineQuery(created.id, days_ahead=2, today=date(2025, 1, 1))
        )

        assert [day.date for day in days] == [
            date(2025, 1, 1),
            date(2025, 1, 2),
            date(2025, 1, 3),
        ]
        assert days[0].timeline_entry_id == f"{created.id}-D001"


class TestGetSubscription:
    @pytest.mark.asyncio
    async def test_by_id(self, create_subscription, mutator) -> None:
        created = (await create_subscription()).subscription

        found = await GetSubscriptionQueryHandler(mutator).handle(GetSubscriptionQuery(created.id))

        assert found.id == created.id

    @pytest.mark.asyncio
    async def test_not_found(self, mutator) -> None:
        with pytest.raises(SubscriptionNotFoundError):
            await GetSubscriptionQueryHandler(mutator).handle(
                GetSubscriptionQuery("3f2b8a4e-9d1c-4c7e-8a55-0c2f6a1b9e77")
            )

    @pytest.mark.asyncio
    async def test_by_customer(self, create_subscription, subscription_repository) -> None:
        await create_subscription()
        await create_subscription()
        await create_subscription(customer_id="customer-2")

        found = await GetCustomerSubscriptionsQueryHandler(subscription_repository).handle(
            GetCustomerSubscriptionsQuery("customer-1")
        )

        assert len(found) == 2
        assert all(s.customer_id == "customer-1" for s in found)


class TestGetDelegation:
    @pytest.mark.asyncio
    async def test_found(self, create_subscription, delegation_repository) -> None:
        created = (await create_subscription()).subscription

        delegation = await GetDelegationQueryHandler(delegation_repository).handle(
            GetDelegationQuery(created.id)
        )

        assert delegation.subscription_id == created.id

    @pytest.mark.asyncio
    async def test_not_found(self, delegation_repository) -> None:
        with pytest.raises(DelegationNotFoundError):
            await GetDelegationQueryHandler(delegation_repository).handle(
                GetDelegationQuery("unknown")
            )
