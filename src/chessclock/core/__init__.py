"""Core functionality for time tracking."""

from chessclock.core.clock import ChessClock
from chessclock.core.models import StartEvent, StopEvent, StopReason
from chessclock.core.storage import EventLog

__all__ = ["StartEvent", "StopEvent", "StopReason", "EventLog", "ChessClock"]
