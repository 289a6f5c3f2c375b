"""SubscriptionId value object - unique identifier for meal subscriptions."""

from dataclasses import dataclass
from uuid import UUID, uuid4


@dataclass(frozen=True)
class SubscriptionId:
    """Unique identifier for a meal subscription.

    Immutable value object representing a subscription's UUID.
    """

    value: UUID

    @staticmethod
    def generate() -> "SubscriptionId":
        """Generate a new unique subscription ID.

        Returns:
            SubscriptionId: New subscription ID with generated UUID
        """
        return SubscriptionId(value=uuid4())

    @staticmethod
    def from_string(id_str: str) -> "SubscriptionId":
        """Create SubscriptionId from string representation.

        Args:
            id_str: String representation of UUID

        Returns:
            SubscriptionId: Subscription ID from parsed UUID

        Raises:
            ValueError: If string is not a valid UUID
        """
        try:
            return SubscriptionId(value=UUID(id_str))
        except ValueError as e:
            raise ValueError(f"Invalid subscription ID format: {id_str}") from e

    def __str__(self) -> str:
        return str(self.value)

    def __repr__(self) -> str:
        return f"SubscriptionId(value={self.value})"
