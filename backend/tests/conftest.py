"""Shared test fixtures.

Domain and application fixtures build everything in memory around a
seeded catalog. The ``client`` fixture loads the full app and is used by
the GraphQL integration tests.
"""

from __future__ import annotations

import os
from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, Callable, cast

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient

from application.subscription.commands import (
    CreateSubscriptionCommand,
    CreateSubscriptionHandler,
    CreateSubscriptionResult,
)
from application.subscription.concurrency import SubscriptionMutator
from application.subscription.orchestrators import ArtifactOrchestrator
from domain.catalog.entities import CatalogMeal, CatalogPlan, ScheduleEntry
from domain.subscription.core.value_objects import (
    DeliverySchedule,
    MealCategory,
    MealPricing,
    Nutrition,
)
from domain.subscription.delegation import DelegationGenerator
from domain.subscription.lifecycle import LifecycleStateMachine
from domain.subscription.progression import ProgressionTracker
from domain.subscription.snapshot import SnapshotCompiler
from infrastructure.catalog.in_memory_catalog import InMemoryCatalogReader
from infrastructure.events.in_memory_bus import InMemoryEventBus
from infrastructure.locking import SubscriptionLockRegistry
from infrastructure.persistence.in_memory import (
    InMemoryDelegationRepository,
    InMemorySubscriptionRepository,
)
from infrastructure.retry_queue import InMemoryArtifactRetryQueue

# Load .env.test for integration_real tests (overrides .env values)
env_test_path = Path(__file__).parent.parent / ".env.test"
if env_test_path.exists():
    load_dotenv(env_test_path, override=True)

PLAN_ID = "plan-balanced"
CUSTOMER_ID = "customer-1"
START_DATE = date(2025, 1, 1)
CREATED_AT = datetime(2025, 1, 1, 7, 0, tzinfo=timezone.utc)

_MEALS = {
    MealCategory.BREAKFAST: CatalogMeal(
        meal_id="meal-oats",
        name="Overnight oats",
        category=MealCategory.BREAKFAST,
        nutrition=Nutrition(calories=350, protein=12, carbs=60, fat=6, fiber=8),
        pricing=MealPricing(
            price=Decimal("8.50"), chef_earnings=Decimal("6.00"), platform_fee=Decimal("2.50")
        ),
        dietary_tags=("vegetarian",),
        allergens=("gluten",),
        complexity="low",
    ),
    MealCategory.LUNCH: CatalogMeal(
        meal_id="meal-salad",
        name="Quinoa salad",
        category=MealCategory.LUNCH,
        nutrition=Nutrition(calories=450, protein=20, carbs=30, fat=25, fiber=6),
        pricing=MealPricing(
            price=Decimal("11.00"), chef_earnings=Decimal("8.00"), platform_fee=Decimal("3.00")
        ),
        dietary_tags=("vegan", "gluten-free"),
        complexity="medium",
    ),
    MealCategory.DINNER: CatalogMeal(
        meal_id="meal-salmon",
        name="Baked salmon",
        category=MealCategory.DINNER,
        nutrition=Nutrition(calories=600, protein=40, carbs=20, fat=35, fiber=3),
        pricing=MealPricing(
            price=Decimal("15.00"), chef_earnings=Decimal("11.00"), platform_fee=Decimal("4.00")
        ),
        dietary_tags=("pescatarian",),
        allergens=("fish",),
        complexity="high",
    ),
}


def seed_catalog(catalog: InMemoryCatalogReader) -> InMemoryCatalogReader:
    """Two-week plan, weekdays 1-5, one meal per category and day."""
    plan = CatalogPlan(
        plan_id=PLAN_ID,
        name="Balanced Week",
        base_price=Decimal("120.00"),
        available_categories=(MealCategory.BREAKFAST, MealCategory.LUNCH, MealCategory.DINNER),
        description="Three balanced meals a day",
        tier="standard",
        features=("fresh", "local"),
    )
    schedule = [
        ScheduleEntry(
            week_number=week,
            day_of_week=day,
            meal_slot=category,
            meal_ids=(meal.meal_id,),
        )
        for week in (1, 2)
        for day in range(1, 6)
        for category, meal in _MEALS.items()
    ]
    catalog.add_plan(plan, schedule)
    for meal in _MEALS.values():
        catalog.add_meal(meal)
    return catalog


@pytest.fixture
def catalog() -> InMemoryCatalogReader:
    """Catalog seeded with the balanced two-week plan."""
    return seed_catalog(InMemoryCatalogReader())


@pytest.fixture
def compiler(catalog: InMemoryCatalogReader) -> SnapshotCompiler:
    return SnapshotCompiler(catalog)


@pytest.fixture
def tracker() -> ProgressionTracker:
    return ProgressionTracker()


@pytest.fixture
def state_machine() -> LifecycleStateMachine:
    return LifecycleStateMachine()


@pytest.fixture
def subscription_repository() -> InMemorySubscriptionRepository:
    return InMemorySubscriptionRepository()


@pytest.fixture
def delegation_repository() -> InMemoryDelegationRepository:
    return InMemoryDelegationRepository()


@pytest.fixture
def event_bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def retry_queue() -> InMemoryArtifactRetryQueue:
    return InMemoryArtifactRetryQueue()


@pytest.fixture
def lock_registry() -> SubscriptionLockRegistry:
    return SubscriptionLockRegistry()


@pytest.fixture
def mutator(
    subscription_repository: InMemorySubscriptionRepository,
    lock_registry: SubscriptionLockRegistry,
    event_bus: InMemoryEventBus,
) -> SubscriptionMutator:
    return SubscriptionMutator(
        subscriptions=subscription_repository, locks=lock_registry, event_bus=event_bus
    )


@pytest.fixture
def orchestrator(
    compiler: SnapshotCompiler,
    tracker: ProgressionTracker,
    delegation_repository: InMemoryDelegationRepository,
    retry_queue: InMemoryArtifactRetryQueue,
) -> ArtifactOrchestrator:
    return ArtifactOrchestrator(
        compiler=compiler,
        generator=DelegationGenerator(),
        tracker=tracker,
        delegations=delegation_repository,
        retry_queue=retry_queue,
    )


@pytest.fixture
def create_handler(
    subscription_repository: InMemorySubscriptionRepository,
    orchestrator: ArtifactOrchestrator,
    event_bus: InMemoryEventBus,
) -> CreateSubscriptionHandler:
    return CreateSubscriptionHandler(
        repository=subscription_repository,
        orchestrator=orchestrator,
        event_bus=event_bus,
    )


CreateSubscription = Callable[..., Awaitable[CreateSubscriptionResult]]


@pytest.fixture
def create_subscription(create_handler: CreateSubscriptionHandler) -> CreateSubscription:
    """Async factory creating a subscription to the balanced plan.

    Keyword arguments override the CreateSubscriptionCommand defaults.
    """

    async def _create(**overrides: Any) -> CreateSubscriptionResult:
        fields: dict[str, Any] = {
            "customer_id": CUSTOMER_ID,
            "plan_id": PLAN_ID,
            "start_date": START_DATE,
            "duration_weeks": 2,
            "selected_meal_categories": ["breakfast", "lunch", "dinner"],
            "delivery_schedule": DeliverySchedule(),
            "now": CREATED_AT,
        }
        fields.update(overrides)
        return await create_handler.handle(CreateSubscriptionCommand(**fields))

    return _create


@pytest_asyncio.fixture
async def client() -> AsyncIterator[AsyncClient]:
    """Async HTTP client for GraphQL/REST tests.

    Uses httpx.AsyncClient with an explicit ASGITransport. The in-memory
    catalog behind the app is seeded with the balanced plan and the
    repositories are emptied after each test.
    """
    os.environ.setdefault("REPOSITORY_BACKEND", "inmemory")
    os.environ.setdefault("CATALOG_BACKEND", "inmemory")
    import app as app_module

    catalog = app_module._catalog_reader
    if isinstance(catalog, InMemoryCatalogReader):
        seed_catalog(catalog)
        catalog.set_available(True)

    transport = ASGITransport(app=cast(Any, app_module.app))
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    for repository in (
        app_module._subscription_repository,
        app_module._delegation_repository,
    ):
        clear = getattr(repository, "clear", None)
        if clear is not None:
            clear()
    await app_module._retry_queue.dequeue_batch()
