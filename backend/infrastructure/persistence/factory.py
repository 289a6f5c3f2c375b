"""Repository factory for the persistence layer.

Environment-based repository selection:
- REPOSITORY_BACKEND=mongodb: MongoDB repositories (production persistence)
- REPOSITORY_BACKEND=inmemory: in-memory repositories (default, tests)

Both repositories share one Motor client when MongoDB is selected.

Usage:
    from infrastructure.persistence.factory import (
        get_subscription_repository,
        get_delegation_repository,
    )

    subscriptions = get_subscription_repository()  # singleton
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from motor.motor_asyncio import AsyncIOMotorClient

from domain.subscription.core.ports.repository import (
    IDelegationRepository,
    ISubscriptionRepository,
)
from infrastructure.config import get_mongodb_uri, get_repository_backend
from infrastructure.persistence.in_memory import (
    InMemoryDelegationRepository,
    InMemorySubscriptionRepository,
)

_mongo_client: Optional[AsyncIOMotorClient[Dict[str, Any]]] = None


def _get_mongo_client() -> AsyncIOMotorClient[Dict[str, Any]]:
    global _mongo_client
    if _mongo_client is None:
        uri = get_mongodb_uri()
        if not uri:
            raise ValueError(
                "REPOSITORY_BACKEND=mongodb but MONGODB_URI not set. "
                "Set MONGODB_URI in .env or use REPOSITORY_BACKEND=inmemory"
            )
        _mongo_client = AsyncIOMotorClient(uri)
    return _mongo_client


def create_subscription_repository() -> ISubscriptionRepository:
    """Create subscription repository based on REPOSITORY_BACKEND.

    Returns:
        ISubscriptionRepository: Repository instance

    Raises:
        ValueError: If mongodb selected but MONGODB_URI not set
    """
    if get_repository_backend() == "mongodb":
        from infrastructure.persistence.mongodb import MongoSubscriptionRepository

        return MongoSubscriptionRepository(client=_get_mongo_client())
    return InMemorySubscriptionRepository()


def create_delegation_repository() -> IDelegationRepository:
    """Create delegation repository based on REPOSITORY_BACKEND."""
    if get_repository_backend() == "mongodb":
        from infrastructure.persistence.mongodb import MongoDelegationRepository

        return MongoDelegationRepository(client=_get_mongo_client())
    return InMemoryDelegationRepository()


_subscription_repository: Optional[ISubscriptionRepository] = None
_delegation_repository: Optional[IDelegationRepository] = None


def get_subscription_repository() -> ISubscriptionRepository:
    """Get singleton subscription repository instance."""
    global _subscription_repository
    if _subscription_repository is None:
        _subscription_repository = create_subscription_repository()
    return _subscription_repository


def get_delegation_repository() -> IDelegationRepository:
    """Get singleton delegation repository instance."""
    global _delegation_repository
    if _delegation_repository is None:
        _delegation_repository = create_delegation_repository()
    return _delegation_repository


def reset_repositories() -> None:
    """Reset singleton instances (tests switch backends through env vars)."""
    global _subscription_repository, _delegation_repository, _mongo_client
    _subscription_repository = None
    _delegation_repository = None
    if _mongo_client is not None:
        _mongo_client.close()
    _mongo_client = None
