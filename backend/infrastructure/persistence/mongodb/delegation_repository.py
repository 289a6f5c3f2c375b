"""MongoDB implementation of IDelegationRepository."""

from typing import Any, Dict, Optional

from domain.subscription.core.entities.delegation import Delegation
from domain.subscription.core.exceptions import ConcurrentModificationError
from domain.subscription.core.ports.repository import IDelegationRepository

from .base import MongoBaseRepository
from .documents import delegation_from_doc, delegation_to_doc


class MongoDelegationRepository(
    MongoBaseRepository[Delegation],
    IDelegationRepository,
):
    """MongoDB implementation of delegation repository.

    Documents are keyed by subscription id, which makes a second delegation
    for the same subscription fail on insert.
    """

    @property
    def collection_name(self) -> str:
        return "delegations"

    def to_document(self, entity: Delegation) -> Dict[str, Any]:
        return delegation_to_doc(entity)

    def from_document(self, doc: Dict[str, Any]) -> Delegation:
        return delegation_from_doc(doc)

    async def save(self, delegation: Delegation) -> None:
        expected = delegation.version
        document = self.to_document(delegation)
        document["version"] = expected + 1
        if not await self._save_versioned(document, expected):
            raise ConcurrentModificationError(delegation.subscription_id, expected)
        delegation.version = expected + 1

    async def find_by_subscription_id(self, subscription_id: str) -> Optional[Delegation]:
        doc = await self._find_one({"_id": subscription_id})
        return self.from_document(doc) if doc else None

    async def find_by_timeline_entry_id(self, timeline_entry_id: str) -> Optional[Delegation]:
        doc = await self._find_one({"timeline_entry_ids": timeline_entry_id})
        return self.from_document(doc) if doc else None

    async def delete_by_subscription_id(self, subscription_id: str) -> bool:
        return await self._delete_one({"_id": subscription_id}) == 1
