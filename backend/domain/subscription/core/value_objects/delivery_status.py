"""Forward-only status sequences for snapshot slots and timeline entries."""

from enum import Enum


class SlotDeliveryStatus(str, Enum):
    """Customer-facing status of a single snapshot slot.

    Flow: pending -> scheduled -> preparing -> out_for_delivery -> delivered.
    skipped and cancelled can be reached from any non-terminal status.
    """

    PENDING = "pending"
    SCHEDULED = "scheduled"
    PREPARING = "preparing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in _SLOT_TERMINAL

    def can_transition_to(self, target: "SlotDeliveryStatus") -> bool:
        """Check whether moving to target keeps the flow forward-only.

        Args:
            target: Requested status

        Returns:
            bool: True if the move is allowed (same status is a no-op move)
        """
        if self == target:
            return True
        if self.is_terminal:
            return False
        if target in (SlotDeliveryStatus.SKIPPED, SlotDeliveryStatus.CANCELLED):
            return True
        return _SLOT_SEQUENCE.index(target) > _SLOT_SEQUENCE.index(self)


_SLOT_SEQUENCE = [
    SlotDeliveryStatus.PENDING,
    SlotDeliveryStatus.SCHEDULED,
    SlotDeliveryStatus.PREPARING,
    SlotDeliveryStatus.OUT_FOR_DELIVERY,
    SlotDeliveryStatus.DELIVERED,
]
_SLOT_TERMINAL = frozenset(
    {SlotDeliveryStatus.DELIVERED, SlotDeliveryStatus.SKIPPED, SlotDeliveryStatus.CANCELLED}
)


class TimelineStatus(str, Enum):
    """Chef/driver handling status of one delegation timeline entry."""

    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"

    @property
    def rank(self) -> int:
        return list(TimelineStatus).index(self)

    def can_transition_to(self, target: "TimelineStatus") -> bool:
        return target.rank >= self.rank
