"""CreateSubscriptionCommand - create a subscription and its artifacts."""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

import structlog

from domain.shared.ports.event_bus import IEventBus
from domain.subscription.core.entities import Delegation, Subscription, utc_now
from domain.subscription.core.events import SubscriptionCreated
from domain.subscription.core.factories import SubscriptionFactory
from domain.subscription.core.ports import ISubscriptionRepository
from domain.subscription.core.value_objects import (
    CompileRequest,
    DeliverySchedule,
    Discount,
    PricingInputs,
)

from ..orchestrators.artifact_orchestrator import ArtifactOrchestrator

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CreateSubscriptionCommand:
    """Command to subscribe a customer to a catalog plan.

    Attributes:
        customer_id: Subscribing customer
        plan_id: Catalog plan to subscribe to
        start_date: First possible delivery date
        duration_weeks: Subscription length in weeks
        selected_meal_categories: Categories the customer receives
        delivery_schedule: Delivery days and time window (defaults to weekdays)
        end_date: Requested end date (recomputed at activation)
        discount: Optional discount applied to the snapshot pricing
        pricing_inputs: Frequency/duration multipliers
        now: Creation time (defaults to current UTC time)
    """

    customer_id: str
    plan_id: str
    start_date: date
    duration_weeks: int
    selected_meal_categories: Sequence[str]
    delivery_schedule: Optional[DeliverySchedule] = None
    end_date: Optional[date] = None
    discount: Optional[Discount] = None
    pricing_inputs: PricingInputs = PricingInputs()
    now: Optional[datetime] = None


@dataclass(frozen=True)
class CreateSubscriptionResult:
    """Result of subscription creation.

    Attributes:
        subscription: Saved subscription
        delegation: Generated delegation, None if queued for retry
    """

    subscription: Subscription
    delegation: Optional[Delegation]

    @property
    def artifacts_complete(self) -> bool:
        return self.subscription.artifacts.is_complete


class CreateSubscriptionHandler:
    """Handler for CreateSubscriptionCommand.

    Flow:
    1. Build the subscription via factory (invalid input raises, nothing saved)
    2. Compile the meal plan snapshot
    3. Persist the subscription
    4. Generate the delegation timeline and persist the entry ids
    5. Publish SubscriptionCreated

    Catalog outages do not fail creation: the subscription is saved with
    incomplete artifacts and a retry is queued.
    """

    def __init__(
        self,
        repository: ISubscriptionRepository,
        orchestrator: ArtifactOrchestrator,
        event_bus: IEventBus,
        factory: Optional[SubscriptionFactory] = None,
    ):
        self._repository = repository
        self._orchestrator = orchestrator
        self._event_bus = event_bus
        self._factory = factory or SubscriptionFactory()

    async def handle(self, command: CreateSubscriptionCommand) -> CreateSubscriptionResult:
        """
        Handle subscription creation.

        Args:
            command: CreateSubscriptionCommand

        Returns:
            CreateSubscriptionResult with the saved subscription

        Raises:
            ValidationError: If the request or the plan's categories are invalid
            PlanNotFoundError: If the plan does not exist
        """
        now = command.now or utc_now()

        subscription = self._factory.create(
            customer_id=command.customer_id,
            plan_id=command.plan_id,
            start_date=command.start_date,
            duration_weeks=command.duration_weeks,
            selected_meal_categories=command.selected_meal_categories,
            delivery_schedule=command.delivery_schedule,
            end_date=command.end_date,
            now=now,
        )
        subscription.compile_request = CompileRequest(
            plan_id=subscription.plan_id,
            owner_id=subscription.customer_id,
            start_date=subscription.start_date,
            end_date=subscription.end_date,
            selected_meal_categories=subscription.selected_meal_categories,
            duration_weeks=subscription.duration_weeks,
            pricing_inputs=command.pricing_inputs,
            discount=command.discount,
        )

        await self._orchestrator.compile_snapshot(subscription, now)
        await self._repository.save(subscription)

        delegation = await self._orchestrator.ensure_delegation(subscription, now)
        await self._repository.save(subscription)

        logger.info(
            "subscription.created",
            subscription_id=subscription.id,
            customer_id=subscription.customer_id,
            plan_id=subscription.plan_id,
            artifacts_complete=subscription.artifacts.is_complete,
        )

        await self._event_bus.publish(
            SubscriptionCreated.create(
                subscription_id=subscription.id,
                customer_id=subscription.customer_id,
                plan_id=subscription.plan_id,
                artifacts_complete=subscription.artifacts.is_complete,
            )
        )
        return CreateSubscriptionResult(subscription=subscription, delegation=delegation)
