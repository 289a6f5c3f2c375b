"""Main GraphQL schema for the meal subscription service.

Usage:
    from api.schema import create_schema
    schema = create_schema()
"""

from datetime import datetime, timezone

import strawberry

from api.resolvers.subscription import SubscriptionMutations, SubscriptionQueries


@strawberry.type
class Query:
    @strawberry.field
    def server_time(self) -> str:
        return datetime.now(timezone.utc).isoformat()

    @strawberry.field
    def health(self) -> str:
        return "ok"

    @strawberry.field(description="Subscription queries")  # type: ignore[misc]
    def subscriptions(self) -> SubscriptionQueries:
        """Subscription read operations (CQRS).

        Example:
            query {
              subscriptions {
                currentMeal(subscriptionId: "...") { mealSlot meals { name } }
              }
            }
        """
        return SubscriptionQueries()


@strawberry.type
class Mutation:
    @strawberry.field(description="Subscription mutations")  # type: ignore[misc]
    def subscriptions(self) -> SubscriptionMutations:
        """Subscription write operations (CQRS).

        Example:
            mutation {
              subscriptions {
                pauseSubscription(subscriptionId: "...", reason: "holiday") {
                  ... on TransitionSuccess { applied status }
                }
              }
            }
        """
        return SubscriptionMutations()


def create_schema() -> strawberry.Schema:
    """Create Strawberry schema with all subscription resolvers."""
    return strawberry.Schema(query=Query, mutation=Mutation)
