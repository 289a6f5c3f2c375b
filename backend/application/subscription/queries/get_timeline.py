"""Get timeline query - upcoming delivery days for chefs and drivers."""

from dataclasses import dataclass
from datetime import date
from typing import Optional
import logging

from domain.subscription.core.entities import utc_now
from domain.subscription.progression import DayView, ProgressionTracker

from ..concurrency import SubscriptionMutator, parse_subscription_id

logger = logging.getLogger(__name__)

DEFAULT_DAYS_AHEAD = 7


@dataclass(frozen=True)
class GetTimelineQuery:
    """
    Query: Get the delivery days in the next days_ahead days.

    Attributes:
        subscription_id: Subscription to inspect
        days_ahead: Horizon in calendar days
        today: First day of the horizon (defaults to today, UTC)
    """

    subscription_id: str
    days_ahead: int = DEFAULT_DAYS_AHEAD
    today: Optional[date] = None


class GetTimelineQueryHandler:
    """Handler for GetTimelineQuery. Never persists anything."""

    def __init__(self, mutator: SubscriptionMutator, tracker: ProgressionTracker):
        self._mutator = mutator
        self._tracker = tracker

    async def handle(self, query: GetTimelineQuery) -> list[DayView]:
        """
        Raises:
            SubscriptionNotFoundError: If the subscription does not exist
            SnapshotUnavailableError: If the snapshot is still being compiled
            ValueError: If days_ahead is negative
        """
        subscription = await self._mutator.load(parse_subscription_id(query.subscription_id))
        today = query.today or utc_now().date()
        days = list(self._tracker.timeline(subscription, query.days_ahead, today))

        logger.debug(
            "Timeline computed",
            extra={
                "subscription_id": query.subscription_id,
                "days_ahead": query.days_ahead,
                "delivery_days": len(days),
            },
        )
        return days
