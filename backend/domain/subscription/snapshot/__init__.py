"""Snapshot compiler."""

from .compiler import SnapshotCompiler

__all__ = ["SnapshotCompiler"]
