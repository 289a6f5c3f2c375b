"""Get current meal query - the meal a subscription delivers next."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
import logging

from domain.subscription.core.entities import Subscription, utc_now
from domain.subscription.progression import ProgressionTracker, SlotView

from ..concurrency import Mutation, SubscriptionMutator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GetCurrentMealQuery:
    """
    Query: Get the meal due next for a subscription.

    Attributes:
        subscription_id: Subscription to inspect
        now: Reference time (defaults to current UTC time)
    """

    subscription_id: str
    now: Optional[datetime] = None


class GetCurrentMealQueryHandler:
    """Handler for GetCurrentMealQuery.

    Reads normally leave the subscription untouched. A cursor that had to
    be repaired is saved so the repair survives the request.
    """

    def __init__(self, mutator: SubscriptionMutator, tracker: ProgressionTracker):
        self._mutator = mutator
        self._tracker = tracker

    async def handle(self, query: GetCurrentMealQuery) -> SlotView:
        """
        Execute query.

        Args:
            query: GetCurrentMealQuery

        Returns:
            SlotView of the current meal

        Raises:
            SubscriptionNotFoundError: If the subscription does not exist
            SnapshotUnavailableError: If the snapshot is still being compiled
        """
        now = query.now or utc_now()

        async def read(subscription: Subscription) -> Mutation[SlotView]:
            view = self._tracker.current_meal(subscription, now)
            return Mutation(view, dirty=view.recovered)

        _, view = await self._mutator.mutate(query.subscription_id, read)

        if view.recovered:
            logger.info(
                "Current meal cursor repaired",
                extra={"subscription_id": query.subscription_id, "cursor": str(view.cursor)},
            )
        return view
