"""Derived views over one day's ordered events."""

import time
from collections.abc import Iterable
from typing import Optional

from chessclock.core.models import (
    Event,
    ScheduleEntry,
    StartEvent,
    StopReason,
    TallyEntry,
)

END_OF_DAY = StopReason.ENDOFDAY.label


def schedule(events: Iterable[Event]) -> list[ScheduleEntry]:
    """Project events onto schedule lines, keeping their order."""
    entries = []
    for event in events:
        if isinstance(event, StartEvent):
            entries.append(ScheduleEntry(event.start_time, event.tag, event.description))
        else:
            entries.append(ScheduleEntry(event.stop_time, event.reason.label))
    return entries


def tally(events: Iterable[Event], now: Optional[int] = None) -> dict[str, TallyEntry]:
    """Total the time spent under each label.

    Every event closes the span of the previously open label and opens a
    span for its own label (the tag of a start, the reason of a stop).
    Spans still open at the end are charged up to ``now``. The end-of-day
    label is a sentinel and always totals zero.

    Args:
        events: One day's events in file order
        now: Closing timestamp for open spans. Sampled once if omitted

    Returns:
        Mapping of label to its tally, in order of first appearance
    """
    boundaries: dict[str, list[int]] = {}
    descriptions: dict[str, str] = {}
    open_label: Optional[str] = None

    for event in events:
        if isinstance(event, StartEvent):
            label, at = event.tag, event.start_time
            if event.description:
                descriptions[label] = event.description
        else:
            label, at = event.reason.label, event.stop_time

        if open_label is not None:
            boundaries[open_label].append(at)
        boundaries.setdefault(label, []).append(at)
        open_label = label

    if now is None:
        now = int(time.time())

    result: dict[str, TallyEntry] = {}
    for label, times in boundaries.items():
        if label == END_OF_DAY:
            result[label] = TallyEntry(tag=label, timespan=0)
            continue
        if len(times) % 2 == 1:
            times.append(now)
        total = sum(times[i + 1] - times[i] for i in range(0, len(times), 2))
        result[label] = TallyEntry(tag=label, timespan=total, description=descriptions.get(label, ""))
    return result


def tags(events: Iterable[Event]) -> set[str]:
    """Distinct tags of the start events; stop reasons are not tags."""
    return {event.tag for event in events if isinstance(event, StartEvent)}
