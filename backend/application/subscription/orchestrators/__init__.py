"""Subscription orchestrators."""

from .artifact_orchestrator import ArtifactOrchestrator

__all__ = ["ArtifactOrchestrator"]
