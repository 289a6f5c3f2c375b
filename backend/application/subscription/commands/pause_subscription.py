"""PauseSubscriptionCommand - suspend deliveries of an active subscription."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from domain.subscription.core.entities import Subscription, utc_now
from domain.subscription.lifecycle import LifecycleStateMachine, TransitionResult

from ..concurrency import Mutation, SubscriptionMutator


@dataclass(frozen=True)
class PauseSubscriptionCommand:
    """Command to pause a subscription.

    Attributes:
        subscription_id: Subscription to pause
        reason: Why the customer paused (required, non-blank)
        now: Pause time (defaults to current UTC time)
    """

    subscription_id: str
    reason: str
    now: Optional[datetime] = None


class PauseSubscriptionHandler:
    """Handler for PauseSubscriptionCommand.

    Only active subscriptions can be paused; any other status returns a
    non-applied TransitionResult and leaves the record untouched.
    """

    def __init__(self, mutator: SubscriptionMutator, state_machine: LifecycleStateMachine):
        self._mutator = mutator
        self._state_machine = state_machine

    async def handle(self, command: PauseSubscriptionCommand) -> TransitionResult:
        """
        Raises:
            ValidationError: If the reason is blank or the id malformed
            SubscriptionNotFoundError: If the subscription does not exist
        """
        now = command.now or utc_now()

        async def change(subscription: Subscription) -> Mutation[TransitionResult]:
            result = self._state_machine.pause(subscription, command.reason, now)
            return Mutation(result, events=result.events, dirty=result.applied)

        _, result = await self._mutator.mutate(command.subscription_id, change)
        return result
