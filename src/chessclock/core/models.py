"""Core data models for time tracking events."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class StopReason(Enum):
    """Why a task was stopped.

    The member name is the label used in records and tallies.
    """

    ENDOFDAY = 0
    LUNCH = 1
    BREAK = 2
    MEETING = 3
    OTHER = 4

    @property
    def label(self) -> str:
        """Label used for this reason in records, schedules and tallies."""
        return self.name

    @classmethod
    def parse(cls, value: Union[str, int, "StopReason"]) -> "StopReason":
        """Resolve a reason from its name (any casing) or integer value.

        Args:
            value: Reason name such as ``EndOfDay``, integer value, or member

        Returns:
            Matching StopReason

        Raises:
            ValueError: If the value does not name a known reason
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Unknown stop reason: {value!r}")
        if isinstance(value, int):
            return cls(value)
        try:
            return cls[str(value).upper()]
        except KeyError:
            raise ValueError(f"Unknown stop reason: {value!r}")


@dataclass(frozen=True)
class StartEvent:
    """A task was started.

    Attributes:
        start_time: Unix timestamp (seconds) the task started
        tag: Task tag, upper-cased when written
        description: Free-form description (may be empty)
    """

    start_time: int
    tag: str
    description: str = ""

    @property
    def timestamp(self) -> int:
        return self.start_time


@dataclass(frozen=True)
class StopEvent:
    """The current task was stopped.

    Attributes:
        stop_time: Unix timestamp (seconds) the task stopped
        reason: Why it stopped
    """

    stop_time: int
    reason: StopReason

    @property
    def timestamp(self) -> int:
        return self.stop_time


Event = Union[StartEvent, StopEvent]


@dataclass
class ScheduleEntry:
    """One line of a day's schedule."""

    timestamp: int
    tag: str
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "timestamp": self.timestamp,
            "tag": self.tag,
            "description": self.description,
        }


@dataclass
class TallyEntry:
    """Total time spent under one label during a day.

    Attributes:
        tag: Task tag or stop reason label
        timespan: Total seconds charged to the label
        description: Last non-empty description recorded for the tag
    """

    tag: str
    timespan: int
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "tag": self.tag,
            "timespan": self.timespan,
            "description": self.description,
        }
