"""Progression tracker and day timeline."""

from .day_timeline import DayTimeline
from .tracker import ProgressionTracker
from .views import DayView, SlotView

__all__ = ["ProgressionTracker", "DayTimeline", "DayView", "SlotView"]
