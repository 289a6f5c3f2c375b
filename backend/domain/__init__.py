"""Domain layer for meal subscriptions.

Business rules for catalog snapshots, cursor progression, lifecycle and
delegation, decoupled from the GraphQL surface and from infrastructure.
"""
