"""Mutation resolvers for meal subscriptions.

These resolvers execute CQRS commands using Command Handlers:
- createSubscription: Subscribe to a plan (snapshot + delegation)
- completeDelivery / updateTimelineStatus: Delivery progress
- pause/resume/cancelSubscription, skipMeal: Customer actions
- assignDelegation: Staff a subscription
- expireSubscriptions / retryIncompleteArtifacts: Scheduled jobs
"""

from datetime import date
from typing import Any, List, Optional

import strawberry

from api.mappers import (
    map_delegation,
    map_error,
    map_slot_view,
    map_subscription,
    map_timeline_entry,
)
from api.types_subscription import (
    CreateSubscriptionInput,
    CreateSubscriptionResult,
    CreateSubscriptionSuccess,
    DelegationResult,
    DelegationSuccess,
    DeliveryCompletedResult,
    DeliveryCompletedSuccess,
    RetryArtifactsSummary,
    SkipMealResult,
    SkipMealSuccess,
    SubscriptionStatusEnum,
    TimelineEntryResult,
    TimelineEntrySuccess,
    TimelineStatusEnum,
    TransitionResult,
    TransitionSuccess,
)
from application.subscription.commands import (
    AssignDelegationCommand,
    AssignDelegationHandler,
    CancelSubscriptionCommand,
    CancelSubscriptionHandler,
    CompleteDeliveryCommand,
    CompleteDeliveryHandler,
    CreateSubscriptionCommand,
    CreateSubscriptionHandler,
    ExpireSubscriptionsCommand,
    ExpireSubscriptionsHandler,
    PauseSubscriptionCommand,
    PauseSubscriptionHandler,
    ResumeSubscriptionCommand,
    ResumeSubscriptionHandler,
    RetryIncompleteArtifactsCommand,
    RetryIncompleteArtifactsHandler,
    SkipMealCommand,
    SkipMealHandler,
    UpdateTimelineStatusCommand,
    UpdateTimelineStatusHandler,
)
from application.subscription.concurrency import SubscriptionMutator, parse_subscription_id
from domain.subscription.core.exceptions import SubscriptionDomainError
from domain.subscription.core.value_objects import (
    DeliverySchedule,
    Discount,
    PricingInputs,
    TimelineStatus,
    TimeSlot,
)
from domain.subscription.lifecycle import TransitionResult as DomainTransitionResult

# ============================================
# HELPER FUNCTIONS
# ============================================


def _complete_delivery_handler(context: Any) -> CompleteDeliveryHandler:
    return CompleteDeliveryHandler(
        mutator=context.get("mutator"),
        delegations=context.get("delegation_repository"),
        state_machine=context.get("state_machine"),
        tracker=context.get("progression_tracker"),
    )


async def _transition_success(
    context: Any, subscription_id: str, result: DomainTransitionResult
) -> TransitionSuccess:
    mutator: SubscriptionMutator = context.get("mutator")
    subscription = await mutator.load(parse_subscription_id(subscription_id))
    return TransitionSuccess(
        applied=result.applied,
        status=SubscriptionStatusEnum(result.status.value),
        message=result.message,
        subscription=map_subscription(subscription, include_snapshot=False),
    )


def _to_command(input: CreateSubscriptionInput) -> CreateSubscriptionCommand:
    schedule: Optional[DeliverySchedule] = None
    if input.delivery_schedule is not None:
        schedule = DeliverySchedule(
            days_of_week=tuple(input.delivery_schedule.days_of_week),
            time_slot=TimeSlot(input.delivery_schedule.time_slot.value),
            custom_window=input.delivery_schedule.custom_window,
        )
    discount: Optional[Discount] = None
    if input.discount is not None:
        discount = Discount(
            percent=input.discount.percent,
            discount_id=input.discount.discount_id,
            reason=input.discount.reason,
            discount_type=input.discount.discount_type,
        )
    return CreateSubscriptionCommand(
        customer_id=input.customer_id,
        plan_id=input.plan_id,
        start_date=input.start_date,
        duration_weeks=input.duration_weeks,
        selected_meal_categories=[category.value for category in input.selected_meal_categories],
        delivery_schedule=schedule,
        end_date=input.end_date,
        discount=discount,
        pricing_inputs=PricingInputs(
            frequency_multiplier=input.frequency_multiplier,
            duration_multiplier=input.duration_multiplier,
        ),
    )


# ============================================
# MUTATION RESOLVERS
# ============================================


@strawberry.type
class SubscriptionMutations:
    """Write operations for subscriptions."""

    @strawberry.mutation
    async def create_subscription(
        self, info: strawberry.types.Info, input: CreateSubscriptionInput
    ) -> CreateSubscriptionResult:
        """Subscribe a customer to a catalog plan.

        Workflow:
        1. Validate the request and build the subscription
        2. Compile the plan snapshot from the catalog
        3. Persist the subscription
        4. Generate the delegation timeline
        5. Publish SubscriptionCreated

        If the catalog is down the subscription is still created, with
        artifactsComplete=false, and the snapshot is retried later.

        Example:
            mutation {
              subscriptions {
                createSubscription(input: {
                  customerId: "customer-1"
                  planId: "plan-42"
                  startDate: "2025-01-06"
                  durationWeeks: 2
                  selectedMealCategories: [BREAKFAST, LUNCH]
                }) {
                  ... on CreateSubscriptionSuccess { subscription { subscriptionId status } }
                  ... on SubscriptionOperationError { code message }
                }
              }
            }
        """
        context = info.context
        handler = CreateSubscriptionHandler(
            repository=context.get("subscription_repository"),
            orchestrator=context.get("artifact_orchestrator"),
            event_bus=context.get("event_bus"),
        )
        try:
            result = await handler.handle(_to_command(input))
        except (SubscriptionDomainError, ValueError) as e:
            return map_error(e)
        return CreateSubscriptionSuccess(
            subscription=map_subscription(result.subscription),
            artifacts_complete=result.artifacts_complete,
        )

    @strawberry.mutation
    async def complete_delivery(
        self,
        info: strawberry.types.Info,
        timeline_entry_id: str,
        subscription_id: Optional[str] = None,
    ) -> DeliveryCompletedResult:
        """Record a completed delivery; activates the subscription on the first one."""
        handler = _complete_delivery_handler(info.context)
        try:
            result = await handler.handle(
                CompleteDeliveryCommand(
                    timeline_entry_id=timeline_entry_id, subscription_id=subscription_id
                )
            )
        except (SubscriptionDomainError, ValueError) as e:
            return map_error(e)
        return DeliveryCompletedSuccess(
            advanced=result.advanced,
            activated=result.activated,
            subscription=map_subscription(result.subscription, include_snapshot=False),
            current_meal=map_slot_view(result.current_meal) if result.current_meal else None,
        )

    @strawberry.mutation
    async def update_timeline_status(
        self,
        info: strawberry.types.Info,
        timeline_entry_id: str,
        status: TimelineStatusEnum,
    ) -> TimelineEntryResult:
        """Move a delivery day forward (preparing, ready, out for delivery, delivered)."""
        handler = UpdateTimelineStatusHandler(
            mutator=info.context.get("mutator"),
            delegations=info.context.get("delegation_repository"),
            complete_delivery=_complete_delivery_handler(info.context),
        )
        try:
            entry = await handler.handle(
                UpdateTimelineStatusCommand(
                    timeline_entry_id=timeline_entry_id, status=TimelineStatus(status.value)
                )
            )
        except (SubscriptionDomainError, ValueError) as e:
            return map_error(e)
        return TimelineEntrySuccess(entry=map_timeline_entry(entry))

    @strawberry.mutation
    async def pause_subscription(
        self, info: strawberry.types.Info, subscription_id: str, reason: str
    ) -> TransitionResult:
        handler = PauseSubscriptionHandler(
            mutator=info.context.get("mutator"),
            state_machine=info.context.get("state_machine"),
        )
        try:
            result = await handler.handle(PauseSubscriptionCommand(subscription_id, reason))
            return await _transition_success(info.context, subscription_id, result)
        except (SubscriptionDomainError, ValueError) as e:
            return map_error(e)

    @strawberry.mutation
    async def resume_subscription(
        self, info: strawberry.types.Info, subscription_id: str
    ) -> TransitionResult:
        """Resume a paused subscription; the end date moves by the paused days."""
        handler = ResumeSubscriptionHandler(
            mutator=info.context.get("mutator"),
            state_machine=info.context.get("state_machine"),
            tracker=info.context.get("progression_tracker"),
        )
        try:
            result = await handler.handle(ResumeSubscriptionCommand(subscription_id))
            return await _transition_success(info.context, subscription_id, result)
        except (SubscriptionDomainError, ValueError) as e:
            return map_error(e)

    @strawberry.mutation
    async def cancel_subscription(
        self, info: strawberry.types.Info, subscription_id: str, reason: str = ""
    ) -> TransitionResult:
        handler = CancelSubscriptionHandler(
            mutator=info.context.get("mutator"),
            state_machine=info.context.get("state_machine"),
        )
        try:
            result = await handler.handle(CancelSubscriptionCommand(subscription_id, reason))
            return await _transition_success(info.context, subscription_id, result)
        except (SubscriptionDomainError, ValueError) as e:
            return map_error(e)

    @strawberry.mutation
    async def skip_meal(
        self,
        info: strawberry.types.Info,
        subscription_id: str,
        skip_date: date,
        reason: str = "",
    ) -> SkipMealResult:
        """Skip one delivery date. Skipping the next delivery moves the cursor past that day."""
        handler = SkipMealHandler(
            mutator=info.context.get("mutator"),
            tracker=info.context.get("progression_tracker"),
        )
        try:
            result = await handler.handle(
                SkipMealCommand(
                    subscription_id=subscription_id, skip_date=skip_date, reason=reason
                )
            )
        except (SubscriptionDomainError, ValueError) as e:
            return map_error(e)
        return SkipMealSuccess(
            applied=result.applied, cursor_moved=result.cursor_moved, message=result.message
        )

    @strawberry.mutation
    async def assign_delegation(
        self,
        info: strawberry.types.Info,
        subscription_id: str,
        chef_id: Optional[str] = None,
        driver_id: Optional[str] = None,
    ) -> DelegationResult:
        handler = AssignDelegationHandler(
            mutator=info.context.get("mutator"),
            delegations=info.context.get("delegation_repository"),
        )
        try:
            delegation = await handler.handle(
                AssignDelegationCommand(
                    subscription_id=subscription_id, chef_id=chef_id, driver_id=driver_id
                )
            )
        except (SubscriptionDomainError, ValueError) as e:
            return map_error(e)
        return DelegationSuccess(delegation=map_delegation(delegation))

    @strawberry.mutation
    async def expire_subscriptions(self, info: strawberry.types.Info) -> List[str]:
        """Expire active subscriptions whose end date has passed. Returns their IDs."""
        handler = ExpireSubscriptionsHandler(
            mutator=info.context.get("mutator"),
            state_machine=info.context.get("state_machine"),
        )
        return await handler.handle(ExpireSubscriptionsCommand())

    @strawberry.mutation
    async def retry_incomplete_artifacts(
        self, info: strawberry.types.Info, limit: Optional[int] = None
    ) -> RetryArtifactsSummary:
        handler = RetryIncompleteArtifactsHandler(
            mutator=info.context.get("mutator"),
            orchestrator=info.context.get("artifact_orchestrator"),
            retry_queue=info.context.get("retry_queue"),
        )
        result = await handler.handle(RetryIncompleteArtifactsCommand(limit=limit))
        return RetryArtifactsSummary(
            processed=result.processed, completed=result.completed, abandoned=result.abandoned
        )
