"""Base domain event for meal subscriptions."""

from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID, uuid4


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all subscription domain events.

    Domain events represent facts about changes that happened
    in the domain. They are immutable and include timestamp.

    Attributes:
        event_id: Unique event identifier
        occurred_at: When the event occurred
    """

    event_id: UUID
    occurred_at: datetime

    @staticmethod
    def _generate_event_id() -> UUID:
        return uuid4()

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)
