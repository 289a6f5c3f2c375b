"""Delegation entity - chef/driver facing timeline for a subscription."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..exceptions.domain_errors import (
    InvalidStatusTransitionError,
    TimelineEntryNotFoundError,
)
from ..value_objects import TimelineStatus


@dataclass
class TimelineEntry:
    """One delivery date of a delegation.

    Attributes:
        timeline_entry_id: Stable id, "{subscription_id}-D{ordinal:03d}"
        date: Delivery calendar date
        status: Chef/driver handling status
        slot_count: Number of snapshot slots delivered that day
        chef_completed_at: When the chef marked the food ready
        delivery_completed_at: When the driver delivered it
    """

    timeline_entry_id: str
    date: date
    status: TimelineStatus = TimelineStatus.PENDING
    slot_count: int = 0
    chef_completed_at: Optional[datetime] = None
    delivery_completed_at: Optional[datetime] = None

    def advance_to(self, status: TimelineStatus, now: datetime) -> None:
        """Move the entry forward, stamping completion times.

        Raises:
            InvalidStatusTransitionError: If status would move backwards
        """
        if not self.status.can_transition_to(status):
            raise InvalidStatusTransitionError(self.status.value, status.value)
        self.status = status
        if status.rank >= TimelineStatus.READY.rank and self.chef_completed_at is None:
            self.chef_completed_at = now
        if status == TimelineStatus.DELIVERED and self.delivery_completed_at is None:
            self.delivery_completed_at = now


@dataclass
class Delegation:
    """Delegation aggregate: one per subscription.

    Chef and driver assignment are optional; the timeline exists from
    creation so it can be tracked before anyone is assigned.
    """

    delegation_id: str
    subscription_id: str
    timeline: list[TimelineEntry]
    created_at: datetime
    updated_at: datetime
    chef_id: Optional[str] = None
    driver_id: Optional[str] = None
    version: int = 0
    _by_id: dict[str, TimelineEntry] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        self.timeline.sort(key=lambda entry: entry.date)
        self._by_id = {entry.timeline_entry_id: entry for entry in self.timeline}

    def assign_chef(self, chef_id: str, now: datetime) -> None:
        self.chef_id = chef_id
        self.updated_at = now

    def assign_driver(self, driver_id: str, now: datetime) -> None:
        self.driver_id = driver_id
        self.updated_at = now

    def entry_by_id(self, timeline_entry_id: str) -> TimelineEntry:
        """Look up an entry by id.

        Raises:
            TimelineEntryNotFoundError: If the id is not part of this timeline
        """
        entry = self._by_id.get(timeline_entry_id)
        if entry is None:
            raise TimelineEntryNotFoundError(timeline_entry_id)
        return entry

    def entry_for_date(self, delivery_date: date) -> Optional[TimelineEntry]:
        for entry in self.timeline:
            if entry.date == delivery_date:
                return entry
        return None

    def status_for_date(self, delivery_date: date) -> Optional[TimelineStatus]:
        entry = self.entry_for_date(delivery_date)
        return entry.status if entry else None

    def update_entry_status(
        self, timeline_entry_id: str, status: TimelineStatus, now: datetime
    ) -> TimelineEntry:
        """Advance one entry's status.

        Args:
            timeline_entry_id: Entry to update
            status: New status (forward only)
            now: Timestamp for completion stamps

        Returns:
            TimelineEntry: The updated entry

        Raises:
            TimelineEntryNotFoundError: If the entry does not exist
            InvalidStatusTransitionError: If the status would move backwards
        """
        entry = self.entry_by_id(timeline_entry_id)
        entry.advance_to(status, now)
        self.updated_at = now
        return entry

    @property
    def delivered_count(self) -> int:
        return sum(1 for entry in self.timeline if entry.status == TimelineStatus.DELIVERED)
