"""Subscription GraphQL resolvers."""

from .mutations import SubscriptionMutations
from .queries import SubscriptionQueries

__all__ = ["SubscriptionQueries", "SubscriptionMutations"]
