"""Unit tests for LifecycleStateMachine."""

from datetime import date, datetime, timezone

import pytest

from domain.subscription.core.entities import Subscription
from domain.subscription.core.events import (
    SubscriptionActivated,
    SubscriptionCancelled,
    SubscriptionExpired,
    SubscriptionPaused,
    SubscriptionResumed,
)
from domain.subscription.core.exceptions import ValidationError
from domain.subscription.core.factories import SubscriptionFactory
from domain.subscription.core.value_objects import (
    NextDelivery,
    Paused,
    SubscriptionStatus,
)
from domain.subscription.lifecycle import LifecycleStateMachine


def at(day: int, hour: int = 9) -> datetime:
    return datetime(2025, 1, day, hour, 0, tzinfo=timezone.utc)


@pytest.fixture
def subscription() -> Subscription:
    """Two-week subscription starting 2025-01-01, not yet activated."""
    return SubscriptionFactory.create(
        customer_id="customer-1",
        plan_id="plan-balanced",
        start_date=date(2025, 1, 1),
        duration_weeks=2,
        selected_meal_categories=["lunch", "breakfast"],
        now=at(1, 7),
    )


class TestActivate:
    """Test activation at first delivery."""

    def test_end_date_counts_from_first_delivery(
        self, state_machine: LifecycleStateMachine, subscription: Subscription
    ) -> None:
        assert subscription.end_date == date(2025, 1, 15)

        result = state_machine.activate(subscription, at(5))

        assert result.applied
        assert subscription.status == SubscriptionStatus.ACTIVE
        assert subscription.activated_at == at(5)
        assert subscription.end_date == date(2025, 1, 19)
        assert isinstance(result.events[0], SubscriptionActivated)

    def test_activation_is_idempotent(
        self, state_machine: LifecycleStateMachine, subscription: Subscription
    ) -> None:
        state_machine.activate(subscription, at(5))

        again = state_machine.activate(subscription, at(7))

        assert not again.applied
        assert again.events == ()
        assert subscription.activated_at == at(5)
        assert subscription.end_date == date(2025, 1, 19)

    def test_never_moves_end_date_backwards(
        self, state_machine: LifecycleStateMachine, subscription: Subscription
    ) -> None:
        subscription.extend_end_date(date(2025, 3, 1))

        state_machine.activate(subscription, at(2))

        assert subscription.end_date == date(2025, 3, 1)


class TestPauseResume:
    """Test pause and resume end-date extension."""

    def test_resume_extends_by_paused_days(
        self, state_machine: LifecycleStateMachine, subscription: Subscription
    ) -> None:
        state_machine.activate(subscription, at(5))

        paused = state_machine.pause(subscription, "travelling", at(10))
        resumed = state_machine.resume(subscription, at(13))

        assert paused.applied and resumed.applied
        assert isinstance(paused.events[0], SubscriptionPaused)
        assert isinstance(resumed.events[0], SubscriptionResumed)
        assert resumed.events[0].days_extended == 3
        assert subscription.end_date == date(2025, 1, 22)
        assert subscription.status == SubscriptionStatus.ACTIVE
        assert subscription.activated_at == at(5)

    def test_partial_day_rounds_up(
        self, state_machine: LifecycleStateMachine, subscription: Subscription
    ) -> None:
        state_machine.activate(subscription, at(5))
        state_machine.pause(subscription, "sick", at(10, 9))

        state_machine.resume(subscription, at(11, 10))

        assert subscription.end_date == date(2025, 1, 21)

    def test_zero_elapsed_pause_keeps_end_date(
        self, state_machine: LifecycleStateMachine, subscription: Subscription
    ) -> None:
        state_machine.activate(subscription, at(5))
        state_machine.pause(subscription, "oops", at(10))

        state_machine.resume(subscription, at(10))

        assert subscription.end_date == date(2025, 1, 19)

    def test_pause_keeps_end_date_and_records_reason(
        self, state_machine: LifecycleStateMachine, subscription: Subscription
    ) -> None:
        state_machine.activate(subscription, at(5))

        state_machine.pause(subscription, "  travelling  ", at(10))

        assert isinstance(subscription.state, Paused)
        assert subscription.state.reason == "travelling"
        assert subscription.state.since == at(10)
        assert subscription.end_date == date(2025, 1, 19)

    def test_pause_requires_reason(
        self, state_machine: LifecycleStateMachine, subscription: Subscription
    ) -> None:
        state_machine.activate(subscription, at(5))

        with pytest.raises(ValidationError):
            state_machine.pause(subscription, "   ", at(10))

    def test_pause_pending_subscription_is_not_applied(
        self, state_machine: LifecycleStateMachine, subscription: Subscription
    ) -> None:
        result = state_machine.pause(subscription, "travelling", at(2))

        assert not result.applied
        assert result.status == SubscriptionStatus.PENDING_FIRST_DELIVERY
        assert result.message is not None and "No active subscription" in result.message

    def test_resume_active_subscription_is_not_applied(
        self, state_machine: LifecycleStateMachine, subscription: Subscription
    ) -> None:
        state_machine.activate(subscription, at(5))

        result = state_machine.resume(subscription, at(6))

        assert not result.applied
        assert subscription.end_date == date(2025, 1, 19)


class TestCancel:
    """Test cancellation."""

    def test_cancel_from_pending(
        self, state_machine: LifecycleStateMachine, subscription: Subscription
    ) -> None:
        subscription.next_scheduled_delivery = NextDelivery(date(2025, 1, 1), "12:00-14:00")

        result = state_machine.cancel(subscription, "changed my mind", at(2))

        assert result.applied
        assert isinstance(result.events[0], SubscriptionCancelled)
        assert subscription.status == SubscriptionStatus.CANCELLED
        assert subscription.next_scheduled_delivery is None

    def test_cancel_from_paused(
        self, state_machine: LifecycleStateMachine, subscription: Subscription
    ) -> None:
        state_machine.activate(subscription, at(5))
        state_machine.pause(subscription, "travelling", at(6))

        result = state_machine.cancel(subscription, "", at(7))

        assert result.applied
        assert subscription.activated_at == at(5)

    def test_cancelled_is_terminal(
        self, state_machine: LifecycleStateMachine, subscription: Subscription
    ) -> None:
        state_machine.cancel(subscription, "bye", at(2))

        assert not state_machine.cancel(subscription, "again", at(3)).applied
        assert not state_machine.activate(subscription, at(3)).applied
        assert not state_machine.resume(subscription, at(3)).applied
        assert subscription.status == SubscriptionStatus.CANCELLED


class TestExpire:
    """Test passive expiry."""

    def test_expires_after_end_date(
        self, state_machine: LifecycleStateMachine, subscription: Subscription
    ) -> None:
        state_machine.activate(subscription, at(5))

        not_yet = state_machine.expire_if_due(subscription, at(19, 23))
        expired = state_machine.expire_if_due(subscription, at(20, 0))

        assert not not_yet.applied
        assert expired.applied
        assert isinstance(expired.events[0], SubscriptionExpired)
        assert subscription.status == SubscriptionStatus.EXPIRED
        assert subscription.is_terminal

    def test_pending_subscription_never_expires(
        self, state_machine: LifecycleStateMachine, subscription: Subscription
    ) -> None:
        result = state_machine.expire_if_due(
            subscription, datetime(2026, 1, 1, tzinfo=timezone.utc)
        )

        assert not result.applied
        assert subscription.status == SubscriptionStatus.PENDING_FIRST_DELIVERY
