"""ResumeSubscriptionCommand - restart a paused subscription."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from domain.subscription.core.entities import Subscription, utc_now
from domain.subscription.lifecycle import LifecycleStateMachine, TransitionResult
from domain.subscription.progression import ProgressionTracker

from ..concurrency import Mutation, SubscriptionMutator


@dataclass(frozen=True)
class ResumeSubscriptionCommand:
    """Command to resume a paused subscription.

    Attributes:
        subscription_id: Subscription to resume
        now: Resume time (defaults to current UTC time)
    """

    subscription_id: str
    now: Optional[datetime] = None


class ResumeSubscriptionHandler:
    """Handler for ResumeSubscriptionCommand.

    The end date is pushed forward by the paused days, rounded up, and the
    next scheduled delivery is recomputed from today.
    """

    def __init__(
        self,
        mutator: SubscriptionMutator,
        state_machine: LifecycleStateMachine,
        tracker: ProgressionTracker,
    ):
        self._mutator = mutator
        self._state_machine = state_machine
        self._tracker = tracker

    async def handle(self, command: ResumeSubscriptionCommand) -> TransitionResult:
        now = command.now or utc_now()

        async def change(subscription: Subscription) -> Mutation[TransitionResult]:
            result = self._state_machine.resume(subscription, now)
            if result.applied and subscription.snapshot is not None:
                self._tracker.refresh_next_delivery(subscription, now.date())
            return Mutation(result, events=result.events, dirty=result.applied)

        _, result = await self._mutator.mutate(command.subscription_id, change)
        return result
