"""CQRS Queries for subscriptions."""

from .get_current_meal import GetCurrentMealQuery, GetCurrentMealQueryHandler
from .get_delegation import GetDelegationQuery, GetDelegationQueryHandler
from .get_subscription import (
    GetCustomerSubscriptionsQuery,
    GetCustomerSubscriptionsQueryHandler,
    GetSubscriptionQuery,
    GetSubscriptionQueryHandler,
)
from .get_timeline import GetTimelineQuery, GetTimelineQueryHandler

__all__ = [
    "GetCurrentMealQuery",
    "GetCurrentMealQueryHandler",
    "GetTimelineQuery",
    "GetTimelineQueryHandler",
    "GetDelegationQuery",
    "GetDelegationQueryHandler",
    "GetSubscriptionQuery",
    "GetSubscriptionQueryHandler",
    "GetCustomerSubscriptionsQuery",
    "GetCustomerSubscriptionsQueryHandler",
]
