"""In-memory artifact retry queue."""

import logging
from collections import OrderedDict
from typing import Optional

from domain.subscription.core.ports.retry_queue import ArtifactRetryTask, IArtifactRetryQueue
from domain.subscription.core.value_objects import ArtifactKind

logger = logging.getLogger(__name__)


class InMemoryArtifactRetryQueue(IArtifactRetryQueue):
    """
    FIFO queue keyed by (subscription_id, kind).

    Re-enqueueing the same artifact moves it to the back and keeps the
    latest error and attempt count.
    """

    def __init__(self) -> None:
        self._tasks: "OrderedDict[tuple[str, ArtifactKind], ArtifactRetryTask]" = OrderedDict()

    async def enqueue(self, task: ArtifactRetryTask) -> None:
        key = (task.subscription_id, task.kind)
        self._tasks.pop(key, None)
        self._tasks[key] = task
        logger.info(
            "Artifact queued for retry",
            extra={
                "subscription_id": task.subscription_id,
                "kind": task.kind.value,
                "attempts": task.attempts,
            },
        )

    async def dequeue_batch(self, limit: Optional[int] = None) -> list[ArtifactRetryTask]:
        batch: list[ArtifactRetryTask] = []
        while self._tasks and (limit is None or len(batch) < limit):
            _, task = self._tasks.popitem(last=False)
            batch.append(task)
        return batch

    async def size(self) -> int:
        return len(self._tasks)

    def pending(self) -> list[ArtifactRetryTask]:
        """Snapshot of queued tasks (testing utility)."""
        return list(self._tasks.values())
