"""In-memory implementation of ISubscriptionRepository for testing."""

from copy import deepcopy
from datetime import date
from typing import Optional

from domain.subscription.core.entities.subscription import Subscription
from domain.subscription.core.exceptions import ConcurrentModificationError
from domain.subscription.core.ports.repository import ISubscriptionRepository
from domain.subscription.core.value_objects import SubscriptionId, SubscriptionStatus


class InMemorySubscriptionRepository(ISubscriptionRepository):
    """
    In-memory implementation of subscription repository.

    Stores deep copies so callers never share state with the store, and
    applies the same optimistic version check as the MongoDB adapter.
    """

    def __init__(self) -> None:
        self._subscriptions: dict[str, Subscription] = {}

    async def save(self, subscription: Subscription) -> None:
        """
        Save or update subscription in memory.

        On success ``subscription.version`` is incremented to match the
        stored copy.

        Raises:
            ConcurrentModificationError: If the stored version differs
        """
        key = str(subscription.subscription_id)
        stored = self._subscriptions.get(key)
        stored_version = stored.version if stored is not None else 0
        if stored_version != subscription.version:
            raise ConcurrentModificationError(key, subscription.version)

        subscription.version += 1
        self._subscriptions[key] = deepcopy(subscription)

    async def find_by_id(self, subscription_id: SubscriptionId) -> Optional[Subscription]:
        subscription = self._subscriptions.get(str(subscription_id))
        return deepcopy(subscription) if subscription else None

    async def find_by_customer(self, customer_id: str) -> list[Subscription]:
        matches = [s for s in self._subscriptions.values() if s.customer_id == customer_id]
        matches.sort(key=lambda s: s.created_at, reverse=True)
        return [deepcopy(s) for s in matches]

    async def find_active_ending_before(self, cutoff: date) -> list[Subscription]:
        return [
            deepcopy(s)
            for s in self._subscriptions.values()
            if s.status == SubscriptionStatus.ACTIVE and s.end_date < cutoff
        ]

    async def delete(self, subscription_id: SubscriptionId) -> bool:
        return self._subscriptions.pop(str(subscription_id), None) is not None

    def clear(self) -> None:
        """Clear all subscriptions (for testing)."""
        self._subscriptions.clear()

    def count(self) -> int:
        return len(self._subscriptions)
