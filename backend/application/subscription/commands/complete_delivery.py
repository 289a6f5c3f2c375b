"""CompleteDeliveryCommand - react to a delivered timeline entry."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import structlog

from domain.subscription.core.entities import Delegation, Subscription, utc_now
from domain.subscription.core.events import DomainEvent, MealAdvanced
from domain.subscription.core.exceptions import (
    DelegationNotFoundError,
    TimelineEntryNotFoundError,
)
from domain.subscription.core.ports import IDelegationRepository
from domain.subscription.core.value_objects import SlotDeliveryStatus, TimelineStatus
from domain.subscription.lifecycle import LifecycleStateMachine
from domain.subscription.progression import ProgressionTracker, SlotView

from ..concurrency import Mutation, SubscriptionMutator, conflict_retrying

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CompleteDeliveryCommand:
    """Command fired when a delivery has been handed to the customer.

    Attributes:
        timeline_entry_id: Delegation timeline entry that was delivered
        subscription_id: Owning subscription (looked up from the entry if omitted)
        now: Completion time (defaults to current UTC time)
    """

    timeline_entry_id: str
    subscription_id: Optional[str] = None
    now: Optional[datetime] = None


@dataclass(frozen=True)
class CompleteDeliveryResult:
    """Outcome of a delivery completion.

    Attributes:
        subscription: Subscription after the update
        advanced: False when the delivery was already recorded or the
            subscription is terminal
        current_meal: Meal now due, None if not advanced
        activated: True if this delivery activated the subscription
    """

    subscription: Subscription
    advanced: bool
    current_meal: Optional[SlotView] = None
    activated: bool = False


class CompleteDeliveryHandler:
    """Handler for CompleteDeliveryCommand.

    Flow:
    1. Resolve the delegation owning the timeline entry
    2. Activate the subscription on its first delivery
    3. Mark that day's snapshot slots delivered and move the cursor past the day
    4. Record the entry on the subscription and save it, then mark the
       timeline entry delivered

    Repeated notifications for the same entry are no-ops. A repeat whose
    entry write failed the first time only marks the entry delivered.
    """

    def __init__(
        self,
        mutator: SubscriptionMutator,
        delegations: IDelegationRepository,
        state_machine: LifecycleStateMachine,
        tracker: ProgressionTracker,
    ):
        self._mutator = mutator
        self._delegations = delegations
        self._state_machine = state_machine
        self._tracker = tracker

    async def handle(self, command: CompleteDeliveryCommand) -> CompleteDeliveryResult:
        """
        Handle a delivery completion.

        Raises:
            DelegationNotFoundError: If no delegation holds the entry
            TimelineEntryNotFoundError: If the entry id is unknown
            SubscriptionNotFoundError: If the subscription does not exist
            SnapshotUnavailableError: If the snapshot has not been compiled yet
        """
        now = command.now or utc_now()
        delegation = await self._find_delegation(command)
        entry_id = command.timeline_entry_id
        delegation.entry_by_id(entry_id)

        async def change(subscription: Subscription) -> Mutation[CompleteDeliveryResult]:
            current = await self._delegations.find_by_subscription_id(subscription.id)
            if current is None:
                raise DelegationNotFoundError(subscription.id)
            entry = current.entry_by_id(entry_id)
            if subscription.is_terminal or subscription.has_delivered_entry(entry_id):
                logger.info(
                    "delivery.ignored",
                    subscription_id=subscription.id,
                    timeline_entry_id=entry_id,
                    status=subscription.status.value,
                )
                # A recorded delivery whose entry write failed is finished here.
                finish = (
                    None
                    if subscription.is_terminal or entry.status == TimelineStatus.DELIVERED
                    else lambda: self._mark_entry_delivered(subscription.id, entry_id, now)
                )
                return Mutation(
                    CompleteDeliveryResult(subscription=subscription, advanced=False),
                    dirty=False,
                    after_save=finish,
                )
            if entry.status == TimelineStatus.DELIVERED:
                return Mutation(
                    CompleteDeliveryResult(subscription=subscription, advanced=False),
                    dirty=False,
                )

            events: list[DomainEvent] = []
            activated = False
            if not subscription.is_activated:
                transition = self._state_machine.activate(subscription, now)
                activated = transition.applied
                events.extend(transition.events)

            if subscription.snapshot is not None:
                due = self._tracker.current_meal(subscription, now)
                if due.scheduled_delivery_date != entry.date:
                    logger.warning(
                        "delivery.out_of_order",
                        subscription_id=subscription.id,
                        timeline_entry_id=entry_id,
                        entry_date=entry.date.isoformat(),
                        cursor=str(subscription.cursor),
                        cursor_date=due.scheduled_delivery_date.isoformat(),
                    )
                for slot in subscription.snapshot.slots_on(entry.date):
                    if not slot.delivery_status.is_terminal:
                        slot.update_status(SlotDeliveryStatus.DELIVERED, now)

            subscription.record_delivered_entry(entry_id)
            delivered = subscription.cursor
            view = self._tracker.advance_day(subscription, now)
            next_delivery = subscription.next_scheduled_delivery
            events.append(
                MealAdvanced.create(
                    subscription_id=subscription.id,
                    customer_id=subscription.customer_id,
                    delivered_cursor=str(delivered),
                    current_cursor=str(subscription.cursor),
                    next_delivery_date=next_delivery.date if next_delivery else None,
                )
            )
            return Mutation(
                CompleteDeliveryResult(
                    subscription=subscription,
                    advanced=True,
                    current_meal=view,
                    activated=activated,
                ),
                events=tuple(events),
                after_save=lambda: self._mark_entry_delivered(subscription.id, entry_id, now),
            )

        _, result = await self._mutator.mutate(delegation.subscription_id, change)
        if result.advanced:
            logger.info(
                "delivery.completed",
                subscription_id=delegation.subscription_id,
                timeline_entry_id=entry_id,
                cursor=str(result.subscription.cursor),
                activated=result.activated,
            )
        return result

    async def _find_delegation(self, command: CompleteDeliveryCommand) -> Delegation:
        if command.subscription_id:
            delegation = await self._delegations.find_by_subscription_id(command.subscription_id)
            if delegation is None:
                raise DelegationNotFoundError(command.subscription_id)
            return delegation

        delegation = await self._delegations.find_by_timeline_entry_id(command.timeline_entry_id)
        if delegation is None:
            raise TimelineEntryNotFoundError(command.timeline_entry_id)
        return delegation

    async def _mark_entry_delivered(
        self, subscription_id: str, timeline_entry_id: str, now: datetime
    ) -> None:
        async for attempt in conflict_retrying():
            with attempt:
                delegation = await self._delegations.find_by_subscription_id(subscription_id)
                if delegation is None:
                    raise DelegationNotFoundError(subscription_id)
                delegation.update_entry_status(timeline_entry_id, TimelineStatus.DELIVERED, now)
                await self._delegations.save(delegation)
