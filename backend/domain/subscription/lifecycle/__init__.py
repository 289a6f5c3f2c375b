"""Subscription lifecycle state machine."""

from .state_machine import LifecycleStateMachine, TransitionResult

__all__ = ["LifecycleStateMachine", "TransitionResult"]
