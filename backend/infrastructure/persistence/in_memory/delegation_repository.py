"""In-memory implementation of IDelegationRepository for testing."""

from copy import deepcopy
from typing import Optional

from domain.subscription.core.entities.delegation import Delegation
from domain.subscription.core.exceptions import ConcurrentModificationError
from domain.subscription.core.ports.repository import IDelegationRepository


class InMemoryDelegationRepository(IDelegationRepository):
    """
    In-memory implementation of delegation repository.

    Delegations are keyed by subscription id; a second delegation for the
    same subscription replaces nothing and is rejected by the version check.
    """

    def __init__(self) -> None:
        self._delegations: dict[str, Delegation] = {}

    async def save(self, delegation: Delegation) -> None:
        """
        Save or update delegation.

        Raises:
            ConcurrentModificationError: If the stored version differs
        """
        stored = self._delegations.get(delegation.subscription_id)
        stored_version = stored.version if stored is not None else 0
        if stored is not None and stored.delegation_id != delegation.delegation_id:
            raise ConcurrentModificationError(delegation.subscription_id, delegation.version)
        if stored_version != delegation.version:
            raise ConcurrentModificationError(delegation.subscription_id, delegation.version)

        delegation.version += 1
        self._delegations[delegation.subscription_id] = deepcopy(delegation)

    async def find_by_subscription_id(self, subscription_id: str) -> Optional[Delegation]:
        delegation = self._delegations.get(subscription_id)
        return deepcopy(delegation) if delegation else None

    async def find_by_timeline_entry_id(self, timeline_entry_id: str) -> Optional[Delegation]:
        for delegation in self._delegations.values():
            if any(e.timeline_entry_id == timeline_entry_id for e in delegation.timeline):
                return deepcopy(delegation)
        return None

    async def delete_by_subscription_id(self, subscription_id: str) -> bool:
        return self._delegations.pop(subscription_id, None) is not None

    def clear(self) -> None:
        """Clear all delegations (for testing)."""
        self._delegations.clear()
