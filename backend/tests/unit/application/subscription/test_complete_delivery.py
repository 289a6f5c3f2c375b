"""Unit tests for CompleteDeliveryHandler.

Tests focus on:
- Activation on the first delivery
- Cursor advance and slot/timeline status updates
- Idempotency, including concurrent completions of the same entry
- Lookup failures and terminal subscriptions
"""

import asyncio
from datetime import date, datetime, timezone

import pytest
from structlog.testing import capture_logs

from application.subscription.commands import CompleteDeliveryCommand
from domain.subscription.core.events import MealAdvanced, SubscriptionActivated
from domain.subscription.core.exceptions import (
    DelegationNotFoundError,
    TimelineEntryNotFoundError,
)
from domain.subscription.core.value_objects import (
    Cancelled,
    MealCategory,
    MealCursor,
    SlotDeliveryStatus,
    SubscriptionStatus,
    TimelineStatus,
)

DELIVERED_AT = datetime(2025, 1, 2, 13, 0, tzinfo=timezone.utc)


def entry_id(subscription_id: str, ordinal: int) -> str:
    return f"{subscription_id}-D{ordinal:03d}"


class TestFirstDelivery:
    """Test the first completed delivery."""

    @pytest.mark.asyncio
    async def test_activates_and_advances(
        self,
        create_subscription,
        complete_delivery_handler,
        subscription_repository,
        delegation_repository,
        published,
    ) -> None:
        created = (await create_subscription()).subscription
        published.clear()

        result = await complete_delivery_handler.handle(
            CompleteDeliveryCommand(timeline_entry_id=entry_id(created.id, 1), now=DELIVERED_AT)
        )

        assert result.advanced
        assert result.activated
        assert result.current_meal is not None
        assert result.current_meal.cursor == MealCursor(1, 2, MealCategory.BREAKFAST)

        stored = await subscription_repository.find_by_id(created.subscription_id)
        assert stored.status == SubscriptionStatus.ACTIVE
        assert stored.activated_at == DELIVERED_AT
        assert stored.end_date == date(2025, 1, 16)
        assert stored.cursor == MealCursor(1, 2, MealCategory.BREAKFAST)
        assert stored.metrics.delivered_days == 1
        assert stored.metrics.delivered_meals == 3
        assert {s.delivery_status for s in stored.snapshot.slots_on(date(2025, 1, 1))} == {
            SlotDeliveryStatus.DELIVERED
        }

        delegation = await delegation_repository.find_by_subscription_id(created.id)
        entry = delegation.entry_by_id(entry_id(created.id, 1))
        assert entry.status == TimelineStatus.DELIVERED
        assert entry.delivery_completed_at == DELIVERED_AT

        assert [type(e) for e in published] == [SubscriptionActivated, MealAdvanced]

    @pytest.mark.asyncio
    async def test_second_delivery_keeps_activation(
        self, create_subscription, complete_delivery_handler, subscription_repository
    ) -> None:
        created = (await create_subscription()).subscription
        await complete_delivery_handler.handle(
            CompleteDeliveryCommand(timeline_entry_id=entry_id(created.id, 1), now=DELIVERED_AT)
        )

        later = datetime(2025, 1, 3, 13, 0, tzinfo=timezone.utc)
        result = await complete_delivery_handler.handle(
            CompleteDeliveryCommand(
                timeline_entry_id=entry_id(created.id, 2),
                subscription_id=created.id,
                now=later,
            )
        )

        stored = await subscription_repository.find_by_id(created.subscription_id)
        assert result.advanced and not result.activated
        assert stored.activated_at == DELIVERED_AT
        assert stored.end_date == date(2025, 1, 16)
        assert stored.cursor == MealCursor(1, 3, MealCategory.BREAKFAST)


class TestIdempotency:
    """Test repeated delivery notifications."""

    @pytest.mark.asyncio
    async def test_repeat_is_noop(
        self, create_subscription, complete_delivery_handler, subscription_repository
    ) -> None:
        created = (await create_subscription()).subscription
        command = CompleteDeliveryCommand(
            timeline_entry_id=entry_id(created.id, 1), now=DELIVERED_AT
        )
        await complete_delivery_handler.handle(command)
        version = (await subscription_repository.find_by_id(created.subscription_id)).version

        again = await complete_delivery_handler.handle(command)

        stored = await subscription_repository.find_by_id(created.subscription_id)
        assert not again.advanced
        assert stored.version == version
        assert stored.cursor == MealCursor(1, 2, MealCategory.BREAKFAST)

    @pytest.mark.asyncio
    async def test_concurrent_completions_advance_once(
        self, create_subscription, complete_delivery_handler, subscription_repository
    ) -> None:
        created = (await create_subscription()).subscription
        command = CompleteDeliveryCommand(
            timeline_entry_id=entry_id(created.id, 1), now=DELIVERED_AT
        )

        results = await asyncio.gather(
            complete_delivery_handler.handle(command),
            complete_delivery_handler.handle(command),
        )

        assert sorted(r.advanced for r in results) == [False, True]
        stored = await subscription_repository.find_by_id(created.subscription_id)
        assert stored.metrics.delivered_days == 1
        assert stored.cursor == MealCursor(1, 2, MealCategory.BREAKFAST)


class TestFailures:
    """Test lookups and terminal subscriptions."""

    @pytest.mark.asyncio
    async def test_unknown_entry(self, create_subscription, complete_delivery_handler) -> None:
        await create_subscription()

        with pytest.raises(TimelineEntryNotFoundError):
            await complete_delivery_handler.handle(
                CompleteDeliveryCommand(timeline_entry_id="nope-D001", now=DELIVERED_AT)
            )

    @pytest.mark.asyncio
    async def test_unknown_subscription_delegation(self, complete_delivery_handler) -> None:
        with pytest.raises(DelegationNotFoundError):
            await complete_delivery_handler.handle(
                CompleteDeliveryCommand(
                    timeline_entry_id="x-D001",
                    subscription_id="3f2b8a4e-9d1c-4c7e-8a55-0c2f6a1b9e77",
                    now=DELIVERED_AT,
                )
            )

    @pytest.mark.asyncio
    async def test_cancelled_subscription_is_not_advanced(
        self, create_subscription, complete_delivery_handler, subscription_repository
    ) -> None:
        created = (await create_subscription()).subscription
        stored = await subscription_repository.find_by_id(created.subscription_id)
        stored.transition_to(Cancelled(cancelled_at=DELIVERED_AT, reason="bye"), DELIVERED_AT)
        await subscription_repository.save(stored)

        result = await complete_delivery_handler.handle(
            CompleteDeliveryCommand(timeline_entry_id=entry_id(created.id, 1), now=DELIVERED_AT)
        )

        assert not result.advanced
        reloaded = await subscription_repository.find_by_id(created.subscription_id)
        assert reloaded.status == SubscriptionStatus.CANCELLED
        assert reloaded.cursor == MealCursor(1, 1, MealCategory.BREAKFAST)

    @pytest.mark.asyncio
    async def test_failed_entry_write_then_repeat_advances_once(
        self,
        monkeypatch,
        create_subscription,
        complete_delivery_handler,
        subscription_repository,
        delegation_repository,
        published,
    ) -> None:
        created = (await create_subscription()).subscription
        published.clear()
        command = CompleteDeliveryCommand(
            timeline_entry_id=entry_id(created.id, 1), now=DELIVERED_AT
        )
        save = delegation_repository.save
        calls: list[str] = []

        async def save_failing_once(delegation) -> None:  # type: ignore[no-untyped-def]
            calls.append(delegation.subscription_id)
            if len(calls) == 1:
                raise RuntimeError("delegation store unavailable")
            await save(delegation)

        monkeypatch.setattr(delegation_repository, "save", save_failing_once)

        with pytest.raises(RuntimeError):
            await complete_delivery_handler.handle(command)

        assert [type(e) for e in published] == [SubscriptionActivated, MealAdvanced]
        stored = await subscription_repository.find_by_id(created.subscription_id)
        assert stored.cursor == MealCursor(1, 2, MealCategory.BREAKFAST)

        again = await complete_delivery_handler.handle(command)

        assert not again.advanced
        stored = await subscription_repository.find_by_id(created.subscription_id)
        assert stored.cursor == MealCursor(1, 2, MealCategory.BREAKFAST)
        assert stored.metrics.delivered_days == 1
        delegation = await delegation_repository.find_by_subscription_id(created.id)
        assert delegation.entry_by_id(entry_id(created.id, 1)).status == TimelineStatus.DELIVERED
        assert len(published) == 2


class TestDeliveryOrder:
    """Test completions that do not match the cursor's day."""

    @pytest.mark.asyncio
    async def test_out_of_order_completion_is_logged(
        self, create_subscription, complete_delivery_handler
    ) -> None:
        created = (await create_subscription()).subscription

        with capture_logs() as in_order:
            await complete_delivery_handler.handle(
                CompleteDeliveryCommand(
                    timeline_entry_id=entry_id(created.id, 1), now=DELIVERED_AT
                )
            )
        with capture_logs() as skipped_ahead:
            await complete_delivery_handler.handle(
                CompleteDeliveryCommand(
                    timeline_entry_id=entry_id(created.id, 3), now=DELIVERED_AT
                )
            )

        assert not any(log["event"] == "delivery.out_of_order" for log in in_order)
        [warning] = [log for log in skipped_ahead if log["event"] == "delivery.out_of_order"]
        assert warning["entry_date"] == "2025-01-03"
        assert warning["cursor_date"] == "2025-01-02"
