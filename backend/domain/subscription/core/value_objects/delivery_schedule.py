"""Delivery schedule preferences and the next-delivery value object."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable, Optional

DEFAULT_DELIVERY_DAYS: tuple[int, ...] = (1, 2, 3, 4, 5)


class TimeSlot(str, Enum):
    """Preferred time-of-day band for deliveries."""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    CUSTOM = "custom"


_WINDOWS = {
    TimeSlot.MORNING: "08:00-10:00",
    TimeSlot.AFTERNOON: "12:00-14:00",
    TimeSlot.EVENING: "17:00-19:00",
}


@dataclass(frozen=True)
class DeliverySchedule:
    """Customer delivery preferences.

    Attributes:
        days_of_week: Plan days (1-7) on which meals are delivered
        time_slot: Preferred time band
        custom_window: Window string used when time_slot is CUSTOM,
            e.g. "15:00-16:30"
    """

    days_of_week: tuple[int, ...] = DEFAULT_DELIVERY_DAYS
    time_slot: TimeSlot = TimeSlot.AFTERNOON
    custom_window: Optional[str] = None

    def __post_init__(self) -> None:
        days = tuple(sorted(set(self.days_of_week)))
        if not days:
            raise ValueError("Delivery schedule needs at least one day")
        for day in days:
            if not 1 <= day <= 7:
                raise ValueError(f"Delivery day must be in [1, 7], got {day}")
        object.__setattr__(self, "days_of_week", days)
        object.__setattr__(self, "time_slot", TimeSlot(self.time_slot))
        if self.time_slot == TimeSlot.CUSTOM and not self.custom_window:
            raise ValueError("Custom time slot requires a custom_window")

    @classmethod
    def create(
        cls,
        days_of_week: Optional[Iterable[int]] = None,
        time_slot: Optional[str] = None,
        custom_window: Optional[str] = None,
    ) -> "DeliverySchedule":
        """Build a schedule, falling back to Mon-Fri afternoons."""
        return cls(
            days_of_week=tuple(days_of_week) if days_of_week else DEFAULT_DELIVERY_DAYS,
            time_slot=TimeSlot(time_slot) if time_slot else TimeSlot.AFTERNOON,
            custom_window=custom_window,
        )

    @property
    def time_window(self) -> str:
        """Human readable window for the preferred band."""
        if self.time_slot == TimeSlot.CUSTOM:
            return self.custom_window or ""
        return _WINDOWS[self.time_slot]

    def first_day(self) -> int:
        return self.days_of_week[0]

    def next_day_after(self, day_of_week: int) -> Optional[int]:
        """Next scheduled delivery day after the given day in the same week."""
        for day in self.days_of_week:
            if day > day_of_week:
                return day
        return None


@dataclass(frozen=True)
class NextDelivery:
    """Calendar date and time window of the next expected delivery."""

    date: date
    time_window: str

    def __str__(self) -> str:
        return f"{self.date.isoformat()} {self.time_window}"
