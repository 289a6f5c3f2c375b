"""Get delegation query - the chef/driver timeline of a subscription."""

from dataclasses import dataclass

from domain.subscription.core.entities import Delegation
from domain.subscription.core.exceptions import DelegationNotFoundError
from domain.subscription.core.ports import IDelegationRepository


@dataclass(frozen=True)
class GetDelegationQuery:
    """
    Query: Get the delegation of a subscription.

    Attributes:
        subscription_id: Owning subscription
    """

    subscription_id: str


class GetDelegationQueryHandler:
    """Handler for GetDelegationQuery."""

    def __init__(self, repository: IDelegationRepository):
        self._repository = repository

    async def handle(self, query: GetDelegationQuery) -> Delegation:
        delegation = await self._repository.find_by_subscription_id(query.subscription_id)
        if delegation is None:
            raise DelegationNotFoundError(query.subscription_id)
        return delegation
