"""Application layer for meal subscriptions (commands, queries, orchestration)."""
