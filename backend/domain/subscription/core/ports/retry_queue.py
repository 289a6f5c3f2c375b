"""Port for queueing incomplete artifacts."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..value_objects.artifact_status import ArtifactKind


@dataclass(frozen=True)
class ArtifactRetryTask:
    """A snapshot or delegation that must be built again.

    Attributes:
        subscription_id: Subscription owning the artifact
        kind: Which artifact failed
        error: Message of the failure that caused the enqueue
        enqueued_at: When the task was queued
        attempts: Retry attempts already made
    """

    subscription_id: str
    kind: ArtifactKind
    error: str
    enqueued_at: datetime
    attempts: int = 0


class IArtifactRetryQueue(ABC):
    """Out-of-band retry queue for snapshots and delegations."""

    @abstractmethod
    async def enqueue(self, task: ArtifactRetryTask) -> None:
        """Queue a task. A task for the same (subscription, kind) replaces the old one."""
        pass

    @abstractmethod
    async def dequeue_batch(self, limit: Optional[int] = None) -> list[ArtifactRetryTask]:
        """Remove and return up to limit tasks in enqueue order."""
        pass

    @abstractmethod
    async def size(self) -> int:
        pass
