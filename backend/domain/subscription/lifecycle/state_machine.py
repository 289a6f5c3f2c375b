"""Lifecycle state machine for subscriptions.

States::

    pending_first_delivery -> active -> paused <-> active
                  |              |         |
                  +--------------+---------+--> cancelled
                                 +--> expired (passive, end date passed)

Transitions requested from the wrong source state are not errors: they
return a non-applied TransitionResult so callers can treat them as no-ops.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

import structlog

from ..core.entities import Subscription
from ..core.events import (
    DomainEvent,
    SubscriptionActivated,
    SubscriptionCancelled,
    SubscriptionExpired,
    SubscriptionPaused,
    SubscriptionResumed,
)
from ..core.exceptions import ValidationError
from ..core.value_objects import (
    Active,
    Cancelled,
    Expired,
    Paused,
    PendingFirstDelivery,
    SubscriptionStatus,
)
from ..scheduling import DAYS_PER_WEEK, ceil_days

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a lifecycle transition.

    Attributes:
        applied: True if the subscription changed
        status: Status after the call
        message: Explanation when the transition was not applied
        events: Domain events produced by the transition
    """

    applied: bool
    status: SubscriptionStatus
    message: Optional[str] = None
    events: tuple[DomainEvent, ...] = field(default_factory=tuple)

    @staticmethod
    def not_applied(subscription: Subscription, expected: str) -> "TransitionResult":
        return TransitionResult(
            applied=False,
            status=subscription.status,
            message=(
                f"No {expected} subscription found with id {subscription.id} "
                f"(current status: {subscription.status.value})"
            ),
        )


class LifecycleStateMachine:
    """Applies lifecycle transitions to a Subscription.

    Invariant: no transition moves end_date backwards.
    """

    def activate(self, subscription: Subscription, now: datetime) -> TransitionResult:
        """Start the subscription clock at the first completed delivery.

        end_date becomes ``now.date() + duration_weeks * 7`` days, unless the
        current end date is already later. Activating an already activated
        subscription is a no-op that reports success without changes.

        Args:
            subscription: Subscription to activate
            now: Time the first delivery completed

        Returns:
            TransitionResult: applied=True on the first activation only
        """
        if subscription.is_activated:
            return TransitionResult(
                applied=False,
                status=subscription.status,
                message=f"Subscription {subscription.id} is already activated",
            )
        if not isinstance(subscription.state, PendingFirstDelivery):
            return TransitionResult.not_applied(subscription, "pending")

        subscription.transition_to(Active(activated_at=now), now)
        subscription.extend_end_date(
            now.date() + timedelta(days=subscription.duration_weeks * DAYS_PER_WEEK)
        )
        logger.info(
            "lifecycle.activated",
            subscription_id=subscription.id,
            activated_at=now.isoformat(),
            end_date=subscription.end_date.isoformat(),
        )
        return TransitionResult(
            applied=True,
            status=subscription.status,
            events=(
                SubscriptionActivated.create(
                    subscription_id=subscription.id,
                    customer_id=subscription.customer_id,
                    activated_at=now,
                    end_date=subscription.end_date,
                ),
            ),
        )

    def pause(self, subscription: Subscription, reason: str, now: datetime) -> TransitionResult:
        """Pause an active subscription. end_date is left untouched.

        Raises:
            ValidationError: If reason is blank
        """
        if not reason or not reason.strip():
            raise ValidationError("A pause reason is required")
        state = subscription.state
        if not isinstance(state, Active):
            return TransitionResult.not_applied(subscription, "active")

        subscription.transition_to(
            Paused(activated_at=state.activated_at, since=now, reason=reason.strip()), now
        )
        logger.info("lifecycle.paused", subscription_id=subscription.id, reason=reason)
        return TransitionResult(
            applied=True,
            status=subscription.status,
            events=(
                SubscriptionPaused.create(
                    subscription_id=subscription.id,
                    customer_id=subscription.customer_id,
                    reason=reason.strip(),
                ),
            ),
        )

    def resume(self, subscription: Subscription, now: datetime) -> TransitionResult:
        """Resume a paused subscription.

        end_date moves forward by the paused time in whole days, rounded
        up, so a pause never costs the customer delivery days.
        """
        state = subscription.state
        if not isinstance(state, Paused):
            return TransitionResult.not_applied(subscription, "paused")

        days = ceil_days(state.since, now)
        subscription.extend_end_date(subscription.end_date + timedelta(days=days))
        subscription.transition_to(Active(activated_at=state.activated_at, resumed_at=now), now)
        logger.info(
            "lifecycle.resumed",
            subscription_id=subscription.id,
            paused_days=days,
            end_date=subscription.end_date.isoformat(),
        )
        return TransitionResult(
            applied=True,
            status=subscription.status,
            events=(
                SubscriptionResumed.create(
                    subscription_id=subscription.id,
                    customer_id=subscription.customer_id,
                    days_extended=days,
                    end_date=subscription.end_date,
                ),
            ),
        )

    def cancel(self, subscription: Subscription, reason: str, now: datetime) -> TransitionResult:
        """Cancel from any non-terminal state. Cancellation is terminal."""
        if subscription.is_terminal:
            return TransitionResult.not_applied(subscription, "open")

        subscription.transition_to(
            Cancelled(
                cancelled_at=now,
                reason=(reason or "").strip(),
                activated_at=subscription.activated_at,
            ),
            now,
        )
        subscription.next_scheduled_delivery = None
        logger.info("lifecycle.cancelled", subscription_id=subscription.id, reason=reason)
        return TransitionResult(
            applied=True,
            status=subscription.status,
            events=(
                SubscriptionCancelled.create(
                    subscription_id=subscription.id,
                    customer_id=subscription.customer_id,
                    reason=(reason or "").strip(),
                ),
            ),
        )

    def expire_if_due(self, subscription: Subscription, now: datetime) -> TransitionResult:
        """Expire an active subscription whose end date has passed."""
        state = subscription.state
        if not isinstance(state, Active):
            return TransitionResult.not_applied(subscription, "active")
        if subscription.end_date >= now.date():
            return TransitionResult(
                applied=False,
                status=subscription.status,
                message=f"Subscription {subscription.id} ends on {subscription.end_date}",
            )

        subscription.transition_to(Expired(expired_at=now, activated_at=state.activated_at), now)
        subscription.next_scheduled_delivery = None
        logger.info(
            "lifecycle.expired",
            subscription_id=subscription.id,
            end_date=subscription.end_date.isoformat(),
        )
        return TransitionResult(
            applied=True,
            status=subscription.status,
            events=(
                SubscriptionExpired.create(
                    subscription_id=subscription.id,
                    customer_id=subscription.customer_id,
                    end_date=subscription.end_date,
                ),
            ),
        )
