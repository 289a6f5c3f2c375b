"""Subscription entity - aggregate root for meal subscriptions."""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Optional

from ..exceptions.domain_errors import ValidationError
from ..value_objects import (
    ArtifactStatus,
    CompileRequest,
    DeliveredMarker,
    DeliverySchedule,
    MealCategory,
    MealCursor,
    NextDelivery,
    PendingFirstDelivery,
    SkippedDay,
    SubscriptionId,
    SubscriptionState,
    SubscriptionStatus,
)
from .meal_plan_snapshot import MealPlanSnapshot


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SubscriptionMetrics:
    """Running delivery counters."""

    delivered_days: int = 0
    delivered_meals: int = 0
    skipped_days: int = 0


@dataclass
class Subscription:
    """Meal subscription aggregate root.

    Owns its meal plan snapshot exclusively and enforces the invariants
    that tie the progression cursor to the subscription's configuration:

    - cursor week is within [1, duration_weeks]
    - cursor meal slot is one of the selected categories
    - end_date is only ever moved forward

    Lifecycle transitions are applied by the lifecycle state machine and
    cursor moves by the progression tracker; this class holds the state
    and the primitive mutations they use.

    Attributes:
        subscription_id: Unique subscription identifier
        customer_id: Owning customer
        plan_id: Source catalog plan
        start_date: Signup start date
        end_date: Current end date (advanced by activation and resume)
        duration_weeks: Weeks paid for, fixed at creation
        selected_meal_categories: Eligible categories in day order
        delivery_schedule: Delivery days and preferred time band
        state: Lifecycle state (tagged union)
        cursor: Next meal due
        last_delivered: Last delivered cursor and timestamp
        next_scheduled_delivery: Next expected delivery date and window
        skipped_days: Days the customer skipped
        delivered_entry_ids: Timeline entries whose delivery already advanced the cursor
        metrics: Delivery counters
        snapshot: Compiled meal plan snapshot (None while incomplete)
        compile_request: Inputs used to compile the snapshot
        artifacts: Completion status of snapshot and delegation
        version: Optimistic concurrency counter
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    subscription_id: SubscriptionId
    customer_id: str
    plan_id: str
    start_date: date
    end_date: date
    duration_weeks: int
    selected_meal_categories: tuple[MealCategory, ...]
    delivery_schedule: DeliverySchedule
    cursor: MealCursor
    state: SubscriptionState = field(default_factory=PendingFirstDelivery)
    last_delivered: Optional[DeliveredMarker] = None
    next_scheduled_delivery: Optional[NextDelivery] = None
    skipped_days: list[SkippedDay] = field(default_factory=list)
    delivered_entry_ids: list[str] = field(default_factory=list)
    metrics: SubscriptionMetrics = field(default_factory=SubscriptionMetrics)
    snapshot: Optional[MealPlanSnapshot] = None
    compile_request: Optional[CompileRequest] = None
    artifacts: ArtifactStatus = field(default_factory=ArtifactStatus)
    version: int = 0
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        self.validate_invariants()

    def validate_invariants(self) -> None:
        """Validate domain invariants.

        Raises:
            ValidationError: If any invariant is violated
        """
        if not self.customer_id or not self.customer_id.strip():
            raise ValidationError("Customer ID cannot be empty")
        if not self.plan_id or not self.plan_id.strip():
            raise ValidationError("Plan ID cannot be empty")
        if self.duration_weeks < 1:
            raise ValidationError(f"duration_weeks must be >= 1, got {self.duration_weeks}")
        if not self.selected_meal_categories:
            raise ValidationError("At least one meal category must be selected")
        if self.end_date <= self.start_date:
            raise ValidationError(
                f"End date {self.end_date} must be after start date {self.start_date}"
            )
        self._check_cursor(self.cursor)

    def _check_cursor(self, cursor: MealCursor) -> None:
        if cursor.week_number > self.duration_weeks:
            raise ValidationError(
                f"Cursor week {cursor.week_number} exceeds duration {self.duration_weeks}"
            )
        if cursor.meal_slot not in self.selected_meal_categories:
            raise ValidationError(f"Cursor meal slot {cursor.meal_slot.value} is not selected")

    @property
    def id(self) -> str:
        return str(self.subscription_id)

    @property
    def status(self) -> SubscriptionStatus:
        return self.state.status

    @property
    def is_activated(self) -> bool:
        return self.state.activated_at is not None

    @property
    def activated_at(self) -> Optional[datetime]:
        return self.state.activated_at

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def cycle_days(self) -> int:
        """Length of one plan cycle in calendar days."""
        return self.duration_weeks * 7

    def move_cursor(self, new_cursor: MealCursor, delivered_at: datetime) -> None:
        """Record the current cursor as delivered and point at new_cursor."""
        self._check_cursor(new_cursor)
        self.last_delivered = DeliveredMarker(cursor=self.cursor, delivered_at=delivered_at)
        self.cursor = new_cursor
        self.updated_at = delivered_at

    def repair_cursor(self, new_cursor: MealCursor, now: datetime) -> None:
        """Replace a cursor that points outside the snapshot."""
        self.skip_cursor(new_cursor, now)

    def skip_cursor(self, new_cursor: MealCursor, now: datetime) -> None:
        """Point at new_cursor without recording a delivery."""
        self._check_cursor(new_cursor)
        self.cursor = new_cursor
        self.updated_at = now

    def extend_end_date(self, new_end_date: date) -> None:
        """Move end_date forward. Earlier dates are ignored."""
        if new_end_date > self.end_date:
            self.end_date = new_end_date

    def transition_to(self, state: SubscriptionState, now: datetime) -> None:
        self.state = state
        self.updated_at = now

    def record_skip(self, skipped: SkippedDay) -> bool:
        """Record a skipped day once.

        Returns:
            bool: False if that date was already skipped
        """
        if any(existing.date == skipped.date for existing in self.skipped_days):
            return False
        self.skipped_days.append(skipped)
        self.metrics.skipped_days += 1
        self.updated_at = skipped.skipped_at
        return True

    def is_day_skipped(self, delivery_date: date) -> bool:
        return any(skipped.date == delivery_date for skipped in self.skipped_days)

    def record_delivered_entry(self, timeline_entry_id: str) -> bool:
        """Remember a delivered timeline entry.

        Returns:
            bool: False if the entry was already recorded
        """
        if timeline_entry_id in self.delivered_entry_ids:
            return False
        self.delivered_entry_ids.append(timeline_entry_id)
        return True

    def has_delivered_entry(self, timeline_entry_id: str) -> bool:
        return timeline_entry_id in self.delivered_entry_ids
