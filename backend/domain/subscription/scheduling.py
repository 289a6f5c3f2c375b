"""Shared scheduling helpers.

Calendar and cursor arithmetic used by the snapshot compiler, the
progression tracker, the lifecycle state machine and the delegation
generator. Everything here is pure.

Plan days are indexed relative to the subscription start date: plan day
(week=1, day=1) is the start date itself, (week=1, day=2) the day after,
and so on. ``day_of_week`` is therefore a position in the plan week, not
an ISO weekday.
"""

import math
from datetime import date, datetime, timedelta
from typing import Iterator, Sequence

from .core.value_objects import DeliverySchedule, MealCategory, MealCursor

DAYS_PER_WEEK = 7


def plan_day_index(week_number: int, day_of_week: int) -> int:
    """0-based position of a plan day inside the plan cycle."""
    return (week_number - 1) * DAYS_PER_WEEK + (day_of_week - 1)


def slot_date(start_date: date, week_number: int, day_of_week: int) -> date:
    """Calendar date of a plan day: start + (week-1)*7 + (day-1) days."""
    return start_date + timedelta(days=plan_day_index(week_number, day_of_week))


def cycle_length_days(duration_weeks: int) -> int:
    return duration_weeks * DAYS_PER_WEEK


def day_distance(from_cursor: MealCursor, to_cursor: MealCursor, duration_weeks: int) -> int:
    """Forward distance in days between two plan days within the repeating cycle.

    Moving to the same plan day counts as a full cycle, since the walk
    only returns to a day after wrapping around.
    """
    cycle = cycle_length_days(duration_weeks)
    delta = (
        plan_day_index(to_cursor.week_number, to_cursor.day_of_week)
        - plan_day_index(from_cursor.week_number, from_cursor.day_of_week)
    ) % cycle
    return delta or cycle


def next_occurrence(
    start_date: date, cursor: MealCursor, duration_weeks: int, today: date
) -> date:
    """First calendar date on or after today on which the cursor's plan day falls.

    The plan cycle repeats every ``duration_weeks * 7`` days for as long as
    the subscription runs.
    """
    first = slot_date(start_date, cursor.week_number, cursor.day_of_week)
    if first >= today:
        return first
    cycle = cycle_length_days(duration_weeks)
    cycles = math.ceil((today - first).days / cycle)
    return first + timedelta(days=cycles * cycle)


def next_cursor(
    cursor: MealCursor,
    categories: Sequence[MealCategory],
    schedule: DeliverySchedule,
    duration_weeks: int,
) -> MealCursor:
    """Compute the cursor that follows ``cursor``.

    Order of moves:
        1. next selected category on the same day
        2. first category on the next scheduled delivery day of the same week
        3. first category on the first delivery day of the next week
        4. past the last week, wrap back to week 1

    Args:
        cursor: Current cursor
        categories: Selected categories in day order
        schedule: Delivery days configuration
        duration_weeks: Plan cycle length in weeks

    Returns:
        MealCursor: The following cursor
    """
    later = [category for category in categories if category.order > cursor.meal_slot.order]
    if later:
        return MealCursor(cursor.week_number, cursor.day_of_week, later[0])

    next_day = schedule.next_day_after(cursor.day_of_week)
    if next_day is not None:
        return MealCursor(cursor.week_number, next_day, categories[0])

    next_week = cursor.week_number + 1
    if next_week > duration_weeks:
        next_week = 1
    return MealCursor(next_week, schedule.first_day(), categories[0])


def first_cursor(categories: Sequence[MealCategory], schedule: DeliverySchedule) -> MealCursor:
    """First cursor of the cycle on a scheduled delivery day."""
    return MealCursor(1, schedule.first_day(), categories[0])


def cycle_positions(
    start: MealCursor,
    categories: Sequence[MealCategory],
    days: Sequence[int],
    duration_weeks: int,
) -> Iterator[MealCursor]:
    """Yield every (week, day, category) position once, beginning at start.

    Positions are produced week-major, day-minor, in category order,
    restricted to ``days``, wrapping around the end of the cycle.
    """
    positions = [
        MealCursor(week, day, category)
        for week in range(1, duration_weeks + 1)
        for day in sorted(days)
        for category in categories
    ]
    begin = next(
        (i for i, position in enumerate(positions) if not position < start),
        0,
    )
    for offset in range(len(positions)):
        yield positions[(begin + offset) % len(positions)]


def ceil_days(start: datetime, end: datetime) -> int:
    """Whole days between two instants, rounded up. Never negative."""
    seconds = (end - start).total_seconds()
    if seconds <= 0:
        return 0
    return math.ceil(seconds / 86400)
