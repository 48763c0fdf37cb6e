"""Tab-delimited record codec for time tracking events."""

from collections.abc import Sequence

from chessclock.core.errors import (
    MalformedRecordError,
    UnknownReasonError,
    UnknownRecordTypeError,
)
from chessclock.core.models import Event, StartEvent, StopEvent, StopReason

START = "START"
STOP = "STOP"

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def encode_event(event: Event) -> list[str]:
    """Encode an event as a list of record fields.

    Args:
        event: Start or stop event

    Returns:
        ``[START, ts, TAG, description]`` or ``[STOP, ts, REASON]``
    """
    if isinstance(event, StartEvent):
        return [START, str(event.start_time), event.tag.upper(), event.description]
    return [STOP, str(event.stop_time), event.reason.label]


def decode_record(fields: Sequence[str]) -> Event:
    """Decode record fields back into an event.

    Args:
        fields: Fields of a single record

    Returns:
        Decoded event

    Raises:
        MalformedRecordError: Wrong arity or unparseable timestamp
        UnknownReasonError: Stop record with an unknown reason
        UnknownRecordTypeError: First field is neither START nor STOP
    """
    if not fields:
        raise MalformedRecordError("Empty record")

    kind = fields[0].lower()
    if kind == "start":
        if len(fields) < 3:
            raise MalformedRecordError("Start event must have at least 3 fields")
        description = fields[3] if len(fields) > 3 else ""
        return StartEvent(
            start_time=_parse_timestamp(fields[1]),
            tag=fields[2],
            description=description,
        )
    if kind == "stop":
        if len(fields) < 3:
            raise MalformedRecordError("Stop event must have at least 3 fields")
        timestamp = _parse_timestamp(fields[1])
        try:
            reason = StopReason.parse(fields[2])
        except ValueError:
            raise UnknownReasonError(f"Unknown stop reason: {fields[2]!r}")
        return StopEvent(stop_time=timestamp, reason=reason)

    raise UnknownRecordTypeError(f"Unknown record type: {fields[0]!r}")


def _parse_timestamp(value: str) -> int:
    """Parse a base-10 int64 timestamp field."""
    text = value.strip()
    digits = text[1:] if text[:1] in ("+", "-") else text
    if not digits.isascii() or not digits.isdigit():
        raise MalformedRecordError(f"Invalid timestamp: {value!r}")
    timestamp = int(text)
    if not _INT64_MIN <= timestamp <= _INT64_MAX:
        raise MalformedRecordError(f"Timestamp out of range: {value!r}")
    return timestamp
