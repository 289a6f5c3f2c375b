"""Get subscription queries - single subscription and per-customer listing."""

from dataclasses import dataclass

from domain.subscription.core.entities import Subscription
from domain.subscription.core.ports import ISubscriptionRepository

from ..concurrency import SubscriptionMutator, parse_subscription_id


@dataclass(frozen=True)
class GetSubscriptionQuery:
    """
    Query: Get a subscription by ID.

    Attributes:
        subscription_id: Subscription to load
    """

    subscription_id: str


class GetSubscriptionQueryHandler:
    """Handler for GetSubscriptionQuery."""

    def __init__(self, mutator: SubscriptionMutator):
        self._mutator = mutator

    async def handle(self, query: GetSubscriptionQuery) -> Subscription:
        """
        Raises:
            ValidationError: If the id is malformed
            SubscriptionNotFoundError: If the subscription does not exist
        """
        return await self._mutator.load(parse_subscription_id(query.subscription_id))


@dataclass(frozen=True)
class GetCustomerSubscriptionsQuery:
    """
    Query: List a customer's subscriptions.

    Attributes:
        customer_id: Customer to list
    """

    customer_id: str


class GetCustomerSubscriptionsQueryHandler:
    """Handler for GetCustomerSubscriptionsQuery."""

    def __init__(self, repository: ISubscriptionRepository):
        self._repository = repository

    async def handle(self, query: GetCustomerSubscriptionsQuery) -> list[Subscription]:
        return await self._repository.find_by_customer(query.customer_id)
