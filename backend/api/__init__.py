"""GraphQL surface (Strawberry) for meal subscriptions."""
