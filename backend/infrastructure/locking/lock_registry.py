"""Per-subscription asyncio locks."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class SubscriptionLockRegistry:
    """
    Hands out one asyncio.Lock per subscription id.

    Locks are created on first use and dropped when no task holds or
    waits for them, so the registry does not grow with the number of
    subscriptions ever touched. Single event loop only; multi-process
    deployments rely on the repositories' version check instead.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def lock(self, subscription_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(subscription_id, asyncio.Lock())
        self._users[subscription_id] = self._users.get(subscription_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[subscription_id] -= 1
            if self._users[subscription_id] == 0:
                del self._users[subscription_id]
                del self._locks[subscription_id]

    def active_count(self) -> int:
        """Number of subscriptions with a held or awaited lock."""
        return len(self._locks)
