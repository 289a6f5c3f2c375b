"""UpdateTimelineStatusCommand - chef and driver progress on a delivery day."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import structlog

from domain.subscription.core.entities import TimelineEntry, utc_now
from domain.subscription.core.exceptions import (
    SubscriptionClosedError,
    TimelineEntryNotFoundError,
)
from domain.subscription.core.ports import IDelegationRepository
from domain.subscription.core.value_objects import TimelineStatus

from ..concurrency import SubscriptionMutator, conflict_retrying
from .complete_delivery import CompleteDeliveryCommand, CompleteDeliveryHandler

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class UpdateTimelineStatusCommand:
    """Command to move a timeline entry forward.

    Attributes:
        timeline_entry_id: Entry to update
        status: Target status (never backwards)
        now: Update time (defaults to current UTC time)
    """

    timeline_entry_id: str
    status: TimelineStatus
    now: Optional[datetime] = None


class UpdateTimelineStatusHandler:
    """Handler for UpdateTimelineStatusCommand.

    Reaching DELIVERED is a delivery completion and goes through
    CompleteDeliveryHandler so the subscription advances with it.
    Entries of cancelled or expired subscriptions are frozen.
    """

    def __init__(
        self,
        mutator: SubscriptionMutator,
        delegations: IDelegationRepository,
        complete_delivery: CompleteDeliveryHandler,
    ):
        self._mutator = mutator
        self._delegations = delegations
        self._complete_delivery = complete_delivery

    async def handle(self, command: UpdateTimelineStatusCommand) -> TimelineEntry:
        """
        Raises:
            TimelineEntryNotFoundError: If the entry id is unknown
            InvalidStatusTransitionError: If the status would move backwards
            SubscriptionClosedError: If the subscription is cancelled or expired
        """
        now = command.now or utc_now()

        if command.status == TimelineStatus.DELIVERED:
            result = await self._complete_delivery.handle(
                CompleteDeliveryCommand(timeline_entry_id=command.timeline_entry_id, now=now)
            )
            if result.subscription.is_terminal:
                raise SubscriptionClosedError(
                    result.subscription.id, result.subscription.status.value
                )
            return await self._reload_entry(command.timeline_entry_id)

        owner = await self._delegations.find_by_timeline_entry_id(command.timeline_entry_id)
        if owner is None:
            raise TimelineEntryNotFoundError(command.timeline_entry_id)

        async with self._mutator.open_subscription(owner.subscription_id):
            async for attempt in conflict_retrying():
                with attempt:
                    delegation = await self._delegations.find_by_timeline_entry_id(
                        command.timeline_entry_id
                    )
                    if delegation is None:
                        raise TimelineEntryNotFoundError(command.timeline_entry_id)
                    entry = delegation.update_entry_status(
                        command.timeline_entry_id, command.status, now
                    )
                    await self._delegations.save(delegation)

        logger.info(
            "delegation.entry_updated",
            timeline_entry_id=entry.timeline_entry_id,
            status=entry.status.value,
        )
        return entry

    async def _reload_entry(self, timeline_entry_id: str) -> TimelineEntry:
        delegation = await self._delegations.find_by_timeline_entry_id(timeline_entry_id)
        if delegation is None:
            raise TimelineEntryNotFoundError(timeline_entry_id)
        return delegation.entry_by_id(timeline_entry_id)
