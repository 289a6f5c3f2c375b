"""MongoDB persistence adapters."""

from .base import MongoBaseRepository
from .delegation_repository import MongoDelegationRepository
from .subscription_repository import MongoSubscriptionRepository

__all__ = [
    "MongoBaseRepository",
    "MongoSubscriptionRepository",
    "MongoDelegationRepository",
]
