"""Progression tracker.

Keeps the subscription cursor pointing at the next meal due and moves it
forward as deliveries complete.
"""

from datetime import date, datetime
from typing import Iterable, Optional

import structlog

from ..core.entities import MealPlanSnapshot, SnapshotSlot, Subscription
from ..core.exceptions import InconsistentStateError, SnapshotUnavailableError
from ..core.value_objects import MealCursor, NextDelivery
from ..scheduling import cycle_positions, next_cursor, next_occurrence
from .day_timeline import DayTimeline
from .views import SlotView

logger = structlog.get_logger(__name__)


class ProgressionTracker:
    """Computes the current meal and advances the cursor.

    All methods work on the subscription in memory. When a method changes
    the subscription (advance, or a cursor repair inside current_meal) the
    caller is responsible for saving it; repairs are reported through
    ``SlotView.recovered``.
    """

    def current_meal(self, subscription: Subscription, now: datetime) -> SlotView:
        """Return the meal due next.

        Un-activated subscriptions always show the first slot of plan day
        (1, 1) in category order. Activated subscriptions show the slot at
        the cursor. A cursor that points at a missing slot is repaired with
        a bounded forward scan.

        Args:
            subscription: Subscription to inspect
            now: Current time, stamped on repairs

        Returns:
            SlotView: The current slot

        Raises:
            SnapshotUnavailableError: If the subscription has no snapshot
        """
        snapshot = self._require_snapshot(subscription)

        if not subscription.is_activated:
            first = self._first_slot(subscription, snapshot)
            if first is not None:
                return SlotView.of(first)

        return self._view_at_cursor(subscription, snapshot, now)

    def advance(self, subscription: Subscription, now: datetime) -> SlotView:
        """Move the cursor to the next meal.

        Records the previous cursor as last delivered and recomputes the
        next scheduled delivery. Terminal subscriptions are left untouched.

        Args:
            subscription: Subscription to advance
            now: Delivery completion time

        Returns:
            SlotView: The new current slot

        Raises:
            SnapshotUnavailableError: If the subscription has no snapshot
        """
        snapshot = self._require_snapshot(subscription)
        if subscription.is_terminal:
            logger.info(
                "progression.advance_ignored",
                subscription_id=subscription.id,
                status=subscription.status.value,
            )
            return self.current_meal(subscription, now)

        following = next_cursor(
            subscription.cursor,
            subscription.selected_meal_categories,
            subscription.delivery_schedule,
            subscription.duration_weeks,
        )
        subscription.move_cursor(following, now)
        subscription.metrics.delivered_meals += 1
        view = self._view_at_cursor(subscription, snapshot, now)
        self.refresh_next_delivery(subscription, now.date())
        return view

    def advance_day(self, subscription: Subscription, now: datetime) -> SlotView:
        """Advance until the cursor leaves its current plan day.

        A completed delivery covers every remaining meal of that day.
        """
        self._require_snapshot(subscription)
        if subscription.is_terminal:
            return self.advance(subscription, now)

        start_day = subscription.cursor.day_key
        while True:
            previous = subscription.cursor
            view = self.advance(subscription, now)
            current = subscription.cursor
            if current.day_key != start_day or not previous < current:
                break
        subscription.metrics.delivered_days += 1
        return view

    def skip_day(self, subscription: Subscription, now: datetime) -> SlotView:
        """Move the cursor past its current plan day without delivering it.

        Used when the customer skips the next delivery date. Metrics and
        last_delivered are left alone.
        """
        snapshot = self._require_snapshot(subscription)
        if subscription.is_terminal:
            return self.current_meal(subscription, now)

        start_day = subscription.cursor.day_key
        while True:
            previous = subscription.cursor
            following = next_cursor(
                previous,
                subscription.selected_meal_categories,
                subscription.delivery_schedule,
                subscription.duration_weeks,
            )
            subscription.skip_cursor(following, now)
            if following.day_key != start_day or not previous < following:
                break
        view = self._view_at_cursor(subscription, snapshot, now)
        self.refresh_next_delivery(subscription, now.date())
        return view

    def timeline(
        self, subscription: Subscription, days_ahead: int, today: date
    ) -> DayTimeline:
        """Day timeline for the next days_ahead days.

        Raises:
            SnapshotUnavailableError: If the subscription has no snapshot
            ValueError: If days_ahead is negative
        """
        snapshot = self._require_snapshot(subscription)
        return DayTimeline(subscription, snapshot, days_ahead=days_ahead, today=today)

    def refresh_next_delivery(
        self, subscription: Subscription, today: date
    ) -> Optional[NextDelivery]:
        """Recompute next_scheduled_delivery from the cursor and preferences."""
        if subscription.is_terminal:
            subscription.next_scheduled_delivery = None
            return None
        delivery_date = next_occurrence(
            subscription.start_date,
            subscription.cursor,
            subscription.duration_weeks,
            today,
        )
        subscription.next_scheduled_delivery = NextDelivery(
            date=delivery_date,
            time_window=subscription.delivery_schedule.time_window,
        )
        return subscription.next_scheduled_delivery

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _require_snapshot(subscription: Subscription) -> MealPlanSnapshot:
        if subscription.snapshot is None:
            raise SnapshotUnavailableError(subscription.id)
        return subscription.snapshot

    def _view_at_cursor(
        self, subscription: Subscription, snapshot: MealPlanSnapshot, now: datetime
    ) -> SlotView:
        slot = snapshot.slot_at(subscription.cursor)
        if slot is not None:
            return SlotView.of(slot)
        recovered = self._recover(subscription, snapshot, now)
        return SlotView.of(recovered, recovered=True)

    @staticmethod
    def _first_slot(
        subscription: Subscription, snapshot: MealPlanSnapshot
    ) -> Optional[SnapshotSlot]:
        for category in subscription.selected_meal_categories:
            slot = snapshot.slot_at(MealCursor(1, 1, category))
            if slot is not None:
                return slot
        return None

    def _recover(
        self, subscription: Subscription, snapshot: MealPlanSnapshot, now: datetime
    ) -> SnapshotSlot:
        """Repair a cursor that points outside the snapshot.

        Scans forward from the cursor (week-major, day-minor, category
        order) over scheduled delivery days and wraps once; if no delivery
        day has a slot, scans every day. The scan visits each position at
        most once per pass.
        """
        broken = subscription.cursor
        try:
            slot = self._scan(subscription, snapshot, subscription.delivery_schedule.days_of_week)
        except InconsistentStateError:
            slot = self._scan(subscription, snapshot, range(1, 8))

        subscription.repair_cursor(slot.cursor, now)
        logger.warning(
            "progression.cursor_recovered",
            subscription_id=subscription.id,
            broken_cursor=str(broken),
            recovered_cursor=str(slot.cursor),
        )
        return slot

    @staticmethod
    def _scan(
        subscription: Subscription, snapshot: MealPlanSnapshot, days: Iterable[int]
    ) -> SnapshotSlot:
        for position in cycle_positions(
            subscription.cursor,
            subscription.selected_meal_categories,
            list(days),
            subscription.duration_weeks,
        ):
            slot = snapshot.slot_at(position)
            if slot is not None:
                return slot
        raise InconsistentStateError(
            f"No slot of subscription {subscription.id} matches its selected categories"
        )
