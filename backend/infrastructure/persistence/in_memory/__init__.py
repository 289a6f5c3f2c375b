"""In-memory persistence implementations."""

from infrastructure.persistence.in_memory.delegation_repository import (
    InMemoryDelegationRepository,
)
from infrastructure.persistence.in_memory.subscription_repository import (
    InMemorySubscriptionRepository,
)

__all__ = [
    "InMemorySubscriptionRepository",
    "InMemoryDelegationRepository",
]
