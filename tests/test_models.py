"""Tests for data models."""

import pytest  # type: ignore[import-not-found]

from chessclock.core.models import (
    ScheduleEntry,
    StartEvent,
    StopEvent,
    StopReason,
    TallyEntry,
)


class TestStopReason:
    """Test StopReason enumeration."""

    def test_label_is_member_name(self) -> None:
        """Test labels are the upper-case member names."""
        assert StopReason.ENDOFDAY.label == "ENDOFDAY"
        assert StopReason.LUNCH.label == "LUNCH"

    @pytest.mark.parametrize("value", ["EndOfDay", "ENDOFDAY", "endofday", 0, StopReason.ENDOFDAY])
    def test_parse_end_of_day(self, value: object) -> None:
        """Test every accepted spelling of end of day."""
        assert StopReason.parse(value) is StopReason.ENDOFDAY  # type: ignore[arg-type]

    @pytest.mark.parametrize("value", ["nap", "", 99, True])
    def test_parse_unknown(self, value: object) -> None:
        """Test unknown reasons raise ValueError."""
        with pytest.raises(ValueError):
            StopReason.parse(value)  # type: ignore[arg-type]


class TestEvents:
    """Test event types."""

    def test_start_event_defaults(self) -> None:
        """Test description defaults to empty."""
        event = StartEvent(start_time=10, tag="WORK")
        assert event.description == ""
        assert event.timestamp == 10

    def test_stop_event_timestamp(self) -> None:
        """Test stop events expose their timestamp."""
        assert StopEvent(stop_time=20, reason=StopReason.BREAK).timestamp == 20

    def test_events_are_immutable(self) -> None:
        """Test events cannot be changed after creation."""
        event = StartEvent(start_time=10, tag="WORK")
        with pytest.raises(AttributeError):
            event.tag = "PLAY"  # type: ignore[misc]


class TestResultModels:
    """Test schedule and tally serialization."""

    def test_schedule_entry_to_dict(self) -> None:
        """Test converting a schedule entry to a dictionary."""
        entry = ScheduleEntry(1000, "WORK", "coding")
        assert entry.to_dict() == {"timestamp": 1000, "tag": "WORK", "description": "coding"}

    def test_tally_entry_to_dict(self) -> None:
        """Test converting a tally entry to a dictionary."""
        entry = TallyEntry("WORK", 500)
        assert entry.to_dict() == {"tag": "WORK", "timespan": 500, "description": ""}
