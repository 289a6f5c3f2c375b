"""Completion status of the artifacts built alongside a subscription."""

from dataclasses import dataclass
from enum import Enum


class ArtifactState(str, Enum):
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"


class ArtifactKind(str, Enum):
    SNAPSHOT = "snapshot"
    DELEGATION = "delegation"


@dataclass(frozen=True)
class ArtifactStatus:
    """Whether the snapshot and delegation were built successfully.

    An incomplete artifact has been queued for out-of-band retry.
    """

    snapshot: ArtifactState = ArtifactState.COMPLETE
    delegation: ArtifactState = ArtifactState.COMPLETE

    @property
    def is_complete(self) -> bool:
        return (
            self.snapshot == ArtifactState.COMPLETE
            and self.delegation == ArtifactState.COMPLETE
        )

    def with_state(self, kind: ArtifactKind, state: ArtifactState) -> "ArtifactStatus":
        if kind == ArtifactKind.SNAPSHOT:
            return ArtifactStatus(snapshot=state, delegation=self.delegation)
        return ArtifactStatus(snapshot=self.snapshot, delegation=state)
