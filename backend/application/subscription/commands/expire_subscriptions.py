"""ExpireSubscriptionsCommand - sweep active subscriptions past their end date."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import structlog

from domain.subscription.core.entities import Subscription, utc_now
from domain.subscription.core.exceptions import ConcurrentModificationError
from domain.subscription.lifecycle import LifecycleStateMachine, TransitionResult

from ..concurrency import Mutation, SubscriptionMutator

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ExpireSubscriptionsCommand:
    """Command to expire every active subscription whose end date has passed.

    Attributes:
        now: Reference time (defaults to current UTC time)
    """

    now: Optional[datetime] = None


class ExpireSubscriptionsHandler:
    """Handler for ExpireSubscriptionsCommand.

    Expiry is passive: it happens when this sweep runs, not at midnight.
    A subscription that keeps losing the version check is skipped and
    picked up by the next sweep.
    """

    def __init__(self, mutator: SubscriptionMutator, state_machine: LifecycleStateMachine):
        self._mutator = mutator
        self._state_machine = state_machine

    async def handle(self, command: ExpireSubscriptionsCommand) -> list[str]:
        """
        Returns:
            list[str]: IDs of the subscriptions that expired
        """
        now = command.now or utc_now()
        candidates = await self._mutator.subscriptions.find_active_ending_before(now.date())

        async def change(subscription: Subscription) -> Mutation[TransitionResult]:
            result = self._state_machine.expire_if_due(subscription, now)
            return Mutation(result, events=result.events, dirty=result.applied)

        expired: list[str] = []
        for candidate in candidates:
            try:
                _, result = await self._mutator.mutate(candidate.id, change)
            except ConcurrentModificationError:
                logger.warning("lifecycle.expire_conflict", subscription_id=candidate.id)
                continue
            if result.applied:
                expired.append(candidate.id)

        logger.info("lifecycle.expiry_sweep", candidates=len(candidates), expired=len(expired))
        return expired
