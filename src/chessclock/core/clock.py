"""Service-level time tracking operations."""

import logging
from typing import Optional, Union

from chessclock.core import aggregator
from chessclock.core.models import (
    ScheduleEntry,
    StartEvent,
    StopEvent,
    StopReason,
    TallyEntry,
)
from chessclock.core.storage import EventLog

logger = logging.getLogger(__name__)


class ChessClock:
    """Records start/stop events and answers per-day queries."""

    def __init__(self, log: Optional[EventLog] = None):
        """Initialize the clock.

        Args:
            log: Event log instance. Creates default if None.
        """
        self.log = log or EventLog()

    def record_start(self, timestamp: int, tag: str, description: str = "") -> StartEvent:
        """Record that a task was started.

        Args:
            timestamp: Unix timestamp (seconds), also selects the day file
            tag: Task tag, stored upper-cased
            description: Optional description

        Returns:
            The stored event
        """
        event = StartEvent(start_time=timestamp, tag=tag.upper(), description=description)
        self.log.append(timestamp, event)
        logger.info(f"Started {event.tag} at {timestamp}")
        return event

    def record_stop(self, timestamp: int, reason: Union[StopReason, str, int]) -> StopEvent:
        """Record that the current task was stopped.

        Args:
            timestamp: Unix timestamp (seconds), also selects the day file
            reason: Stop reason, as member, name or integer value

        Returns:
            The stored event

        Raises:
            ValueError: If the reason is unknown
        """
        event = StopEvent(stop_time=timestamp, reason=StopReason.parse(reason))
        self.log.append(timestamp, event)
        logger.info(f"Stopped ({event.reason.label}) at {timestamp}")
        return event

    def get_schedule(self, day: int) -> list[ScheduleEntry]:
        """Schedule of the day containing ``day``.

        Raises:
            NotFoundError: If no time sheet exists for that day
        """
        return aggregator.schedule(self.log.read(day))

    def get_tally(self, day: int, now: Optional[int] = None) -> dict[str, TallyEntry]:
        """Per-label totals of the day containing ``day``.

        Raises:
            NotFoundError: If no time sheet exists for that day
        """
        return aggregator.tally(self.log.read(day), now=now)

    def get_tags(self, day: int) -> set[str]:
        """Tags used on the day containing ``day``.

        Raises:
            NotFoundError: If no time sheet exists for that day
        """
        return aggregator.tags(self.log.read(day))

    def list_known_days(self) -> list[int]:
        """Day keys of every stored time sheet, oldest first."""
        return self.log.list_day_keys()
