"""Tests for the event record codec."""

import pytest  # type: ignore[import-not-found]

from chessclock.core.codec import decode_record, encode_event
from chessclock.core.errors import (
    MalformedRecordError,
    UnknownReasonError,
    UnknownRecordTypeError,
)
from chessclock.core.models import StartEvent, StopEvent, StopReason


class TestEncode:
    """Test encoding events to record fields."""

    def test_encode_start_uppercases_tag(self) -> None:
        """Test start records carry the upper-cased tag."""
        event = StartEvent(start_time=1000, tag="work", description="coding")
        assert encode_event(event) == ["START", "1000", "WORK", "coding"]

    def test_encode_start_keeps_empty_description(self) -> None:
        """Test an empty description is still emitted as a field."""
        event = StartEvent(start_time=1000, tag="WORK")
        assert encode_event(event) == ["START", "1000", "WORK", ""]

    def test_encode_stop(self) -> None:
        """Test stop records carry the reason label."""
        event = StopEvent(stop_time=1500, reason=StopReason.ENDOFDAY)
        assert encode_event(event) == ["STOP", "1500", "ENDOFDAY"]


class TestDecode:
    """Test decoding record fields to events."""

    def test_round_trip(self) -> None:
        """Test decoding an encoded event yields the same event."""
        events = [
            StartEvent(start_time=1000, tag="WORK", description="coding"),
            StartEvent(start_time=1, tag="X"),
            StopEvent(stop_time=1500, reason=StopReason.LUNCH),
        ]
        for event in events:
            assert decode_record(encode_event(event)) == event

    def test_decode_start_without_description(self) -> None:
        """Test three-field start records decode with an empty description."""
        event = decode_record(["START", "1000", "WORK"])
        assert event == StartEvent(start_time=1000, tag="WORK", description="")

    def test_decode_is_case_insensitive_on_kind(self) -> None:
        """Test the record kind is matched case-insensitively."""
        assert isinstance(decode_record(["start", "1", "A"]), StartEvent)
        assert isinstance(decode_record(["Stop", "1", "BREAK"]), StopEvent)

    def test_decode_stop_accepts_mixed_case_reason(self) -> None:
        """Test reason names resolve regardless of casing."""
        event = decode_record(["STOP", "1500", "EndOfDay"])
        assert event == StopEvent(stop_time=1500, reason=StopReason.ENDOFDAY)

    def test_decode_non_numeric_timestamp(self) -> None:
        """Test an unparseable timestamp is a malformed record."""
        with pytest.raises(MalformedRecordError):
            decode_record(["START", "abc", "TAG"])

    @pytest.mark.parametrize("value", ["", "1.5", "1e3", "99999999999999999999"])
    def test_decode_invalid_timestamps(self, value: str) -> None:
        """Test non-int64 timestamps are rejected."""
        with pytest.raises(MalformedRecordError):
            decode_record(["STOP", value, "LUNCH"])

    def test_decode_start_too_few_fields(self) -> None:
        """Test start records need at least three fields."""
        with pytest.raises(MalformedRecordError):
            decode_record(["START", "1000"])

    def test_decode_stop_too_few_fields(self) -> None:
        """Test stop records need at least three fields."""
        with pytest.raises(MalformedRecordError):
            decode_record(["STOP", "1000"])

    def test_decode_empty_record(self) -> None:
        """Test an empty record is malformed."""
        with pytest.raises(MalformedRecordError):
            decode_record([])

    def test_decode_unknown_reason(self) -> None:
        """Test stop records with an unknown reason are rejected."""
        with pytest.raises(UnknownReasonError):
            decode_record(["STOP", "1000", "NAP"])

    def test_decode_unknown_record_type(self) -> None:
        """Test records of an unknown kind are rejected."""
        with pytest.raises(UnknownRecordTypeError):
            decode_record(["PAUSE", "1000", "WORK"])
