"""CancelSubscriptionCommand - terminate a subscription."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from domain.subscription.core.entities import Subscription, utc_now
from domain.subscription.lifecycle import LifecycleStateMachine, TransitionResult

from ..concurrency import Mutation, SubscriptionMutator


@dataclass(frozen=True)
class CancelSubscriptionCommand:
    """Command to cancel a subscription.

    Attributes:
        subscription_id: Subscription to cancel
        reason: Cancellation reason
        now: Cancellation time (defaults to current UTC time)
    """

    subscription_id: str
    reason: str = ""
    now: Optional[datetime] = None


class CancelSubscriptionHandler:
    """Handler for CancelSubscriptionCommand.

    Cancelled is terminal. Cancelling twice is a non-applied no-op.
    """

    def __init__(self, mutator: SubscriptionMutator, state_machine: LifecycleStateMachine):
        self._mutator = mutator
        self._state_machine = state_machine

    async def handle(self, command: CancelSubscriptionCommand) -> TransitionResult:
        now = command.now or utc_now()

        async def change(subscription: Subscription) -> Mutation[TransitionResult]:
            result = self._state_machine.cancel(subscription, command.reason, now)
            return Mutation(result, events=result.events, dirty=result.applied)

        _, result = await self._mutator.mutate(command.subscription_id, change)
        return result
