"""SkipMealCommand - the customer skips one delivery date."""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

import structlog

from domain.subscription.core.entities import Subscription, utc_now
from domain.subscription.core.events import MealSkipped
from domain.subscription.core.exceptions import ValidationError
from domain.subscription.core.value_objects import SkippedDay, SlotDeliveryStatus
from domain.subscription.progression import ProgressionTracker

from ..concurrency import Mutation, SubscriptionMutator

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SkipMealCommand:
    """Command to skip the meals of one delivery date.

    Attributes:
        subscription_id: Subscription to update
        skip_date: Calendar date to skip
        reason: Customer supplied reason
        skipped_by: Actor requesting the skip
        now: Request time (defaults to current UTC time)
    """

    subscription_id: str
    skip_date: date
    reason: str = ""
    skipped_by: str = "customer"
    now: Optional[datetime] = None


@dataclass(frozen=True)
class SkipMealResult:
    """Outcome of a skip request.

    Attributes:
        applied: False if the date was already skipped or the subscription
            is terminal
        cursor_moved: True if the skipped date was the next delivery
        message: Explanation when not applied
    """

    applied: bool
    cursor_moved: bool = False
    message: Optional[str] = None


class SkipMealHandler:
    """Handler for SkipMealCommand.

    Records the skipped date and marks that date's snapshot slots skipped.
    When the date is the next scheduled delivery the cursor moves past the
    whole plan day, so the following delivery shows the next meals.
    """

    def __init__(self, mutator: SubscriptionMutator, tracker: ProgressionTracker):
        self._mutator = mutator
        self._tracker = tracker

    async def handle(self, command: SkipMealCommand) -> SkipMealResult:
        """
        Raises:
            ValidationError: If the date is in the past
            SubscriptionNotFoundError: If the subscription does not exist
        """
        now = command.now or utc_now()
        if command.skip_date < now.date():
            raise ValidationError(f"Cannot skip a past date: {command.skip_date.isoformat()}")

        async def change(subscription: Subscription) -> Mutation[SkipMealResult]:
            if subscription.is_terminal:
                return Mutation(
                    SkipMealResult(
                        applied=False,
                        message=f"Subscription {subscription.id} is {subscription.status.value}",
                    ),
                    dirty=False,
                )

            recorded = subscription.record_skip(
                SkippedDay(
                    date=command.skip_date,
                    reason=command.reason.strip(),
                    skipped_by=command.skipped_by,
                    skipped_at=now,
                )
            )
            if not recorded:
                return Mutation(
                    SkipMealResult(
                        applied=False,
                        message=f"{command.skip_date.isoformat()} is already skipped",
                    ),
                    dirty=False,
                )

            if subscription.snapshot is not None:
                for slot in subscription.snapshot.slots_on(command.skip_date):
                    if not slot.delivery_status.is_terminal:
                        slot.update_status(SlotDeliveryStatus.SKIPPED, now)

            cursor_moved = False
            upcoming = subscription.next_scheduled_delivery
            if (
                subscription.snapshot is not None
                and upcoming is not None
                and upcoming.date == command.skip_date
            ):
                self._tracker.skip_day(subscription, now)
                cursor_moved = True

            logger.info(
                "subscription.meal_skipped",
                subscription_id=subscription.id,
                skip_date=command.skip_date.isoformat(),
                cursor_moved=cursor_moved,
            )
            event = MealSkipped.create(
                subscription_id=subscription.id,
                customer_id=subscription.customer_id,
                skipped_date=command.skip_date,
                reason=command.reason.strip(),
            )
            return Mutation(
                SkipMealResult(applied=True, cursor_moved=cursor_moved), events=(event,)
            )

        _, result = await self._mutator.mutate(command.subscription_id, change)
        return result
