"""Lazy day timeline over a subscription's snapshot."""

from datetime import date, timedelta
from typing import Iterator

from ..core.entities import MealPlanSnapshot, Subscription
from ..core.value_objects import MealCursor
from ..scheduling import day_distance, next_cursor
from .views import DayView, SlotView


class DayTimeline:
    """Restartable, finite iterable of DayView rows.

    Each iteration starts again from the subscription's cursor as it was
    when the timeline was created, walks it forward exactly like
    ``advance`` without persisting anything, and yields one row per plan
    day that has at least one matching slot. The first visited day is dated
    ``today``; each following day is dated by its plan-day distance from the
    previous one. Iteration stops once a date would pass
    ``today + days_ahead``.
    """

    def __init__(
        self,
        subscription: Subscription,
        snapshot: MealPlanSnapshot,
        days_ahead: int,
        today: date,
    ):
        if days_ahead < 0:
            raise ValueError(f"days_ahead must be >= 0, got {days_ahead}")
        self._start = subscription.cursor
        self._categories = subscription.selected_meal_categories
        self._schedule = subscription.delivery_schedule
        self._duration_weeks = subscription.duration_weeks
        self._skipped = {skipped.date for skipped in subscription.skipped_days}
        self._snapshot = snapshot
        self._today = today
        self._horizon = today + timedelta(days=days_ahead)

    @property
    def horizon(self) -> date:
        return self._horizon

    def __iter__(self) -> Iterator[DayView]:
        cursor = self._start
        current_date = self._today
        while current_date <= self._horizon:
            day_cursors = self._walk_day(cursor)
            slots = [
                SlotView.of(slot)
                for slot in (self._snapshot.slot_at(c) for c in day_cursors)
                if slot is not None
            ]
            if slots:
                yield DayView(
                    date=current_date,
                    week_number=cursor.week_number,
                    day_of_week=cursor.day_of_week,
                    slots=tuple(slots),
                    skipped=current_date in self._skipped,
                )
            following = next_cursor(
                day_cursors[-1], self._categories, self._schedule, self._duration_weeks
            )
            current_date += timedelta(
                days=day_distance(cursor, following, self._duration_weeks)
            )
            cursor = following

    def _walk_day(self, cursor: MealCursor) -> list[MealCursor]:
        """Cursors visited on cursor's plan day, starting at cursor."""
        visited = [cursor]
        while True:
            following = next_cursor(
                visited[-1], self._categories, self._schedule, self._duration_weeks
            )
            if following.day_key != cursor.day_key or not visited[-1] < following:
                return visited
            visited.append(following)
