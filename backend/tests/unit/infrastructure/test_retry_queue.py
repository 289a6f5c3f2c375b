"""Unit tests for InMemoryArtifactRetryQueue."""

from datetime import datetime, timezone

import pytest

from domain.subscription.core.ports import ArtifactRetryTask
from domain.subscription.core.value_objects import ArtifactKind
from infrastructure.retry_queue import InMemoryArtifactRetryQueue

NOW = datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc)


def task(subscription_id: str, kind: ArtifactKind, attempts: int = 0) -> ArtifactRetryTask:
    return ArtifactRetryTask(
        subscription_id=subscription_id,
        kind=kind,
        error="catalog down",
        enqueued_at=NOW,
        attempts=attempts,
    )


class TestRetryQueue:
    @pytest.mark.asyncio
    async def test_fifo(self) -> None:
        queue = InMemoryArtifactRetryQueue()
        await queue.enqueue(task("sub-1", ArtifactKind.SNAPSHOT))
        await queue.enqueue(task("sub-2", ArtifactKind.SNAPSHOT))

        batch = await queue.dequeue_batch()

        assert [t.subscription_id for t in batch] == ["sub-1", "sub-2"]
        assert await queue.size() == 0

    @pytest.mark.asyncio
    async def test_requeue_replaces_and_moves_to_back(self) -> None:
        queue = InMemoryArtifactRetryQueue()
        await queue.enqueue(task("sub-1", ArtifactKind.SNAPSHOT))
        await queue.enqueue(task("sub-2", ArtifactKind.SNAPSHOT))
        await queue.enqueue(task("sub-1", ArtifactKind.SNAPSHOT, attempts=2))

        pending = queue.pending()

        assert [(t.subscription_id, t.attempts) for t in pending] == [("sub-2", 0), ("sub-1", 2)]

    @pytest.mark.asyncio
    async def test_kinds_are_separate_tasks(self) -> None:
        queue = InMemoryArtifactRetryQueue()
        await queue.enqueue(task("sub-1", ArtifactKind.SNAPSHOT))
        await queue.enqueue(task("sub-1", ArtifactKind.DELEGATION))

        assert await queue.size() == 2

    @pytest.mark.asyncio
    async def test_batch_limit(self) -> None:
        queue = InMemoryArtifactRetryQueue()
        for n in range(3):
            await queue.enqueue(task(f"sub-{n}", ArtifactKind.DELEGATION))

        batch = await queue.dequeue_batch(limit=2)

        assert len(batch) == 2
        assert await queue.size() == 1
