"""Port for per-subscription mutual exclusion."""

from typing import AsyncContextManager, Protocol


class ISubscriptionLockProvider(Protocol):
    """Serializes read-modify-write operations on one subscription.

    Example:
        >>> async with locks.lock(subscription_id):
        ...     subscription = await repository.find_by_id(...)
        ...     ...
        ...     await repository.save(subscription)
    """

    def lock(self, subscription_id: str) -> AsyncContextManager[None]:
        ...
