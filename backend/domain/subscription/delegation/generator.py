"""Delegation / timeline generator."""

from collections import Counter
from datetime import datetime
from typing import Optional
from uuid import uuid4

import structlog

from ..core.entities import Delegation, MealPlanSnapshot, Subscription, TimelineEntry
from ..core.exceptions import DelegationGenerationError

logger = structlog.get_logger(__name__)


def timeline_entry_id(subscription_id: str, ordinal: int) -> str:
    """Stable entry id: subscription id plus 1-based ordinal."""
    return f"{subscription_id}-D{ordinal:03d}"


class DelegationGenerator:
    """Builds the chef/driver delegation for a subscription.

    One timeline entry is created per distinct delivery date in the
    snapshot, in ascending date order. Each entry id is written back onto
    every slot with that date, and the snapshot's ``last_synced_at`` is
    stamped the first time this happens.

    Idempotency (one delegation per subscription) is enforced by the
    caller, which looks up an existing delegation before generating.
    """

    def generate(
        self,
        subscription: Subscription,
        snapshot: MealPlanSnapshot,
        now: datetime,
        chef_id: Optional[str] = None,
    ) -> Delegation:
        """Generate a delegation from a compiled snapshot.

        Args:
            subscription: Owning subscription
            snapshot: Compiled snapshot (mutated: entry ids and last_synced_at)
            now: Creation timestamp
            chef_id: Optional initial chef assignment

        Returns:
            Delegation: New delegation

        Raises:
            DelegationGenerationError: If the snapshot has no slots
        """
        if len(snapshot) == 0:
            raise DelegationGenerationError(
                f"Snapshot of subscription {subscription.id} has no slots"
            )

        per_date = Counter(slot.scheduled_delivery_date for slot in snapshot)
        timeline: list[TimelineEntry] = []
        ids_by_date = {}
        for ordinal, delivery_date in enumerate(sorted(per_date), start=1):
            entry_id = timeline_entry_id(subscription.id, ordinal)
            ids_by_date[delivery_date] = entry_id
            timeline.append(
                TimelineEntry(
                    timeline_entry_id=entry_id,
                    date=delivery_date,
                    slot_count=per_date[delivery_date],
                )
            )

        for slot in snapshot:
            slot.timeline_entry_id = ids_by_date[slot.scheduled_delivery_date]
        snapshot.mark_synced(now)

        delegation = Delegation(
            delegation_id=str(uuid4()),
            subscription_id=subscription.id,
            timeline=timeline,
            chef_id=chef_id,
            created_at=now,
            updated_at=now,
        )
        logger.info(
            "delegation.generated",
            subscription_id=subscription.id,
            delegation_id=delegation.delegation_id,
            entries=len(timeline),
        )
        return delegation
