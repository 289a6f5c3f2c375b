"""Meal subscription domain.

Sub-packages:
    core: entities, value objects, events, exceptions, ports, factories
    snapshot: snapshot compiler
    progression: progression tracker and day timeline
    lifecycle: lifecycle state machine
    delegation: delegation timeline generator
"""
