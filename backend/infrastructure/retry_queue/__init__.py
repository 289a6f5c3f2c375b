"""Artifact retry queue adapters."""

from .in_memory_queue import InMemoryArtifactRetryQueue

__all__ = ["InMemoryArtifactRetryQueue"]
