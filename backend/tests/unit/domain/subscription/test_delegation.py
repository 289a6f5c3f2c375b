"""Unit tests for DelegationGenerator and the Delegation aggregate."""

from datetime import date, datetime, timezone

import pytest

from domain.subscription.core.exceptions import (
    DelegationGenerationError,
    InvalidStatusTransitionError,
    TimelineEntryNotFoundError,
)
from domain.subscription.core.value_objects import TimelineStatus
from domain.subscription.delegation import DelegationGenerator, timeline_entry_id

NOW = datetime(2025, 1, 1, 7, 5, tzinfo=timezone.utc)


class TestGenerator:
    """Test timeline generation from a snapshot."""

    @pytest.mark.asyncio
    async def test_one_entry_per_delivery_date(self, build_subscription) -> None:
        subscription = await build_subscription()

        delegation = DelegationGenerator().generate(subscription, subscription.snapshot, NOW)

        assert delegation.subscription_id == subscription.id
        assert len(delegation.timeline) == 10
        assert delegation.timeline[0].timeline_entry_id == f"{subscription.id}-D001"
        assert delegation.timeline[0].date == date(2025, 1, 1)
        assert delegation.timeline[-1].timeline_entry_id == f"{subscription.id}-D010"
        assert delegation.timeline[-1].date == date(2025, 1, 12)
        assert all(entry.slot_count == 3 for entry in delegation.timeline)
        assert all(entry.status == TimelineStatus.PENDING for entry in delegation.timeline)
        assert delegation.chef_id is None and delegation.driver_id is None

    @pytest.mark.asyncio
    async def test_writes_entry_ids_back_to_snapshot(self, build_subscription) -> None:
        subscription = await build_subscription()
        snapshot = subscription.snapshot

        delegation = DelegationGenerator().generate(subscription, snapshot, NOW)

        by_date = {entry.date: entry.timeline_entry_id for entry in delegation.timeline}
        assert all(
            slot.timeline_entry_id == by_date[slot.scheduled_delivery_date] for slot in snapshot
        )
        assert snapshot.last_synced_at == NOW

    @pytest.mark.asyncio
    async def test_last_synced_at_is_set_once(self, build_subscription) -> None:
        subscription = await build_subscription()
        generator = DelegationGenerator()
        generator.generate(subscription, subscription.snapshot, NOW)

        later = datetime(2025, 1, 2, tzinfo=timezone.utc)
        generator.generate(subscription, subscription.snapshot, later)

        assert subscription.snapshot.last_synced_at == NOW

    @pytest.mark.asyncio
    async def test_empty_snapshot_fails(self, build_subscription) -> None:
        subscription = await build_subscription()
        subscription.snapshot.slots.clear()

        with pytest.raises(DelegationGenerationError):
            DelegationGenerator().generate(subscription, subscription.snapshot, NOW)

    def test_entry_id_format(self) -> None:
        assert timeline_entry_id("abc", 7) == "abc-D007"


class TestDelegationEntries:
    """Test timeline entry status updates."""

    @pytest.mark.asyncio
    async def test_forward_updates_stamp_completion(self, build_subscription) -> None:
        subscription = await build_subscription()
        delegation = DelegationGenerator().generate(subscription, subscription.snapshot, NOW)
        entry_id = delegation.timeline[0].timeline_entry_id
        ready_at = datetime(2025, 1, 1, 11, tzinfo=timezone.utc)
        delivered_at = datetime(2025, 1, 1, 13, tzinfo=timezone.utc)

        delegation.update_entry_status(entry_id, TimelineStatus.READY, ready_at)
        entry = delegation.update_entry_status(entry_id, TimelineStatus.DELIVERED, delivered_at)

        assert entry.chef_completed_at == ready_at
        assert entry.delivery_completed_at == delivered_at
        assert delegation.delivered_count == 1
        assert delegation.status_for_date(date(2025, 1, 1)) == TimelineStatus.DELIVERED

    @pytest.mark.asyncio
    async def test_backward_update_rejected(self, build_subscription) -> None:
        subscription = await build_subscription()
        delegation = DelegationGenerator().generate(subscription, subscription.snapshot, NOW)
        entry_id = delegation.timeline[0].timeline_entry_id
        delegation.update_entry_status(entry_id, TimelineStatus.OUT_FOR_DELIVERY, NOW)

        with pytest.raises(InvalidStatusTransitionError):
            delegation.update_entry_status(entry_id, TimelineStatus.PREPARING, NOW)

    @pytest.mark.asyncio
    async def test_unknown_entry(self, build_subscription) -> None:
        subscription = await build_subscription()
        delegation = DelegationGenerator().generate(subscription, subscription.snapshot, NOW)

        with pytest.raises(TimelineEntryNotFoundError):
            delegation.update_entry_status("missing-D999", TimelineStatus.READY, NOW)

    @pytest.mark.asyncio
    async def test_assignment(self, build_subscription) -> None:
        subscription = await build_subscription()
        delegation = DelegationGenerator().generate(subscription, subscription.snapshot, NOW)

        delegation.assign_chef("chef-7", NOW)
        delegation.assign_driver("driver-3", NOW)

        assert (delegation.chef_id, delegation.driver_id) == ("chef-7", "driver-3")
