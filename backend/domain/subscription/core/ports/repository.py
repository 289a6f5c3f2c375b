"""Repository ports for subscriptions and delegations."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from ..entities.delegation import Delegation
from ..entities.subscription import Subscription
from ..value_objects.subscription_id import SubscriptionId


class ISubscriptionRepository(ABC):
    """Port for subscription persistence.

    Saves are version-checked: ``save`` writes only if the stored version
    equals ``subscription.version`` and then increments it. A stale write
    raises ConcurrentModificationError.
    """

    @abstractmethod
    async def save(self, subscription: Subscription) -> None:
        """Save subscription (create or update).

        Args:
            subscription: Subscription to save

        Raises:
            ConcurrentModificationError: If the stored version moved on
        """
        pass

    @abstractmethod
    async def find_by_id(self, subscription_id: SubscriptionId) -> Optional[Subscription]:
        """Find subscription by ID.

        Returns:
            Optional[Subscription]: Subscription if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_customer(self, customer_id: str) -> list[Subscription]:
        """List a customer's subscriptions, newest first."""
        pass

    @abstractmethod
    async def find_active_ending_before(self, cutoff: date) -> list[Subscription]:
        """List active subscriptions whose end_date is before cutoff."""
        pass

    @abstractmethod
    async def delete(self, subscription_id: SubscriptionId) -> bool:
        """Delete subscription together with its snapshot.

        Returns:
            bool: True if a subscription was deleted
        """
        pass


class IDelegationRepository(ABC):
    """Port for delegation persistence (one delegation per subscription)."""

    @abstractmethod
    async def save(self, delegation: Delegation) -> None:
        """Save delegation (create or update), version-checked.

        Raises:
            ConcurrentModificationError: If the stored version moved on
        """
        pass

    @abstractmethod
    async def find_by_subscription_id(self, subscription_id: str) -> Optional[Delegation]:
        pass

    @abstractmethod
    async def find_by_timeline_entry_id(self, timeline_entry_id: str) -> Optional[Delegation]:
        pass

    @abstractmethod
    async def delete_by_subscription_id(self, subscription_id: str) -> bool:
        pass
