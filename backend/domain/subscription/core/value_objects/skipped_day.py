"""SkippedDay value object."""

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class SkippedDay:
    """A delivery date the customer chose to skip.

    Attributes:
        date: Calendar date that was skipped
        reason: Customer supplied reason
        skipped_by: Actor that requested the skip (customer or admin id)
        skipped_at: When the skip was recorded
    """

    date: date
    reason: str
    skipped_by: str
    skipped_at: datetime
