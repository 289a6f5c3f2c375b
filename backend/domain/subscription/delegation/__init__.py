"""Delegation / timeline generator."""

from .generator import DelegationGenerator, timeline_entry_id

__all__ = ["DelegationGenerator", "timeline_entry_id"]
