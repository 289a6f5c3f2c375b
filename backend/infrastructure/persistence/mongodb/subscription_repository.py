"""MongoDB implementation of ISubscriptionRepository."""

from datetime import date
from typing import Any, Dict, Optional

from domain.subscription.core.entities.subscription import Subscription
from domain.subscription.core.exceptions import ConcurrentModificationError
from domain.subscription.core.ports.repository import ISubscriptionRepository
from domain.subscription.core.value_objects import SubscriptionId

from .base import MongoBaseRepository
from .documents import subscription_from_doc, subscription_to_doc


class MongoSubscriptionRepository(
    MongoBaseRepository[Subscription],
    ISubscriptionRepository,
):
    """MongoDB implementation of subscription repository.

    The snapshot is embedded in the subscription document, so it is
    created and destroyed together with the subscription.
    """

    @property
    def collection_name(self) -> str:
        return "subscriptions"

    def to_document(self, entity: Subscription) -> Dict[str, Any]:
        return subscription_to_doc(entity)

    def from_document(self, doc: Dict[str, Any]) -> Subscription:
        return subscription_from_doc(doc)

    async def save(self, subscription: Subscription) -> None:
        expected = subscription.version
        document = self.to_document(subscription)
        document["version"] = expected + 1
        if not await self._save_versioned(document, expected):
            raise ConcurrentModificationError(subscription.id, expected)
        subscription.version = expected + 1

    async def find_by_id(self, subscription_id: SubscriptionId) -> Optional[Subscription]:
        doc = await self._find_one({"_id": str(subscription_id)})
        return self.from_document(doc) if doc else None

    async def find_by_customer(self, customer_id: str) -> list[Subscription]:
        docs = await self._find_many({"customer_id": customer_id}, sort=[("created_at", -1)])
        return [self.from_document(doc) for doc in docs]

    async def find_active_ending_before(self, cutoff: date) -> list[Subscription]:
        # ISO dates compare lexicographically in calendar order
        docs = await self._find_many(
            {"status": "active", "end_date": {"$lt": cutoff.isoformat()}}
        )
        return [self.from_document(doc) for doc in docs]

    async def delete(self, subscription_id: SubscriptionId) -> bool:
        return await self._delete_one({"_id": str(subscription_id)}) == 1
