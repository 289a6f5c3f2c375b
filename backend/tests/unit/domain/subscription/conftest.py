"""Fixtures for subscription domain tests."""

from datetime import date, datetime, timezone
from typing import Any, Awaitable, Callable

import pytest

from domain.subscription.core.entities import Subscription
from domain.subscription.core.factories import SubscriptionFactory
from domain.subscription.core.value_objects import DeliverySchedule
from domain.subscription.snapshot import SnapshotCompiler

BuildSubscription = Callable[..., Awaitable[Subscription]]


@pytest.fixture
def build_subscription(compiler: SnapshotCompiler) -> BuildSubscription:
    """Async factory: subscription to the balanced plan with a compiled snapshot.

    Keyword arguments override the factory defaults; ``snapshot_categories``
    compiles the snapshot for different categories than the subscription's.
    """

    async def _build(**overrides: Any) -> Subscription:
        snapshot_categories = overrides.pop("snapshot_categories", None)
        plan_id = overrides.pop("plan_id", "plan-balanced")
        fields: dict[str, Any] = {
            "customer_id": "customer-1",
            "plan_id": plan_id,
            "start_date": date(2025, 1, 1),
            "duration_weeks": 2,
            "selected_meal_categories": ["breakfast", "lunch", "dinner"],
            "delivery_schedule": DeliverySchedule(),
            "now": datetime(2025, 1, 1, 7, 0, tzinfo=timezone.utc),
        }
        fields.update(overrides)
        subscription = SubscriptionFactory.create(**fields)
        subscription.snapshot = await compiler.compile(
            plan_id=plan_id,
            owner_id=subscription.customer_id,
            start_date=subscription.start_date,
            end_date=subscription.end_date,
            selected_meal_categories=snapshot_categories
            or subscription.selected_meal_categories,
            duration_weeks=subscription.duration_weeks,
            compiled_at=subscription.created_at,
        )
        return subscription

    return _build
