# calendar_chunks/chunker.py
"""
Chunk building: turn one day of calendar events into a contiguous list of chunks.

This module is pure and deterministic:
- parse_rfc3339 / round_to_nearest_quarter: timestamp helpers
- day_window: the [start_of_day, end_of_day) window for a date
- normalize_events: keep only events you should be credited with, rounded to the quarter hour
- build_chunks: sweep the relevant events once and emit gap + event chunks

The output always covers the whole window with no holes and no overlaps:
chunks[0].start == window start, chunks[-1].end == window end and
chunks[i].end == chunks[i + 1].start.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from calendar_chunks.errors import MalformedTimestamp, UnorderedInput
from calendar_chunks.models import DECLINED, Chunk, Event, RelevantEvent

logger = logging.getLogger(__name__)

START_OF_DAY = 9   # 9 AM
END_OF_DAY = 17    # 5 PM

QUARTER_HOUR = timedelta(minutes=15)
HALF_QUARTER_HOUR = timedelta(minutes=7, seconds=30)

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def parse_rfc3339(value: Optional[str]) -> datetime:
    """
    Parse an RFC3339 datetime string into a timezone-aware datetime.

    Raises MalformedTimestamp for anything that is not a full timestamp with an
    offset. Google usually sends offsets (e.g. -05:00) but may send a trailing 'Z'.
    """
    if not isinstance(value, str) or not value.strip():
        raise MalformedTimestamp(value, "missing timestamp")

    text = value.strip()
    if text[-1] in "Zz":
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise MalformedTimestamp(value) from e

    if parsed.tzinfo is None or parsed.utcoffset() is None:
        raise MalformedTimestamp(value, "missing UTC offset")
    return parsed


def round_to_nearest_quarter(dt: datetime) -> datetime:
    """
    Round to the nearest 15 minute mark.

    7m30s past a quarter rounds up, 7m29s rounds down.
    """
    remainder = timedelta(minutes=dt.minute % 15, seconds=dt.second, microseconds=dt.microsecond)
    floored = dt - remainder
    if remainder >= HALF_QUARTER_HOUR:
        return floored + QUARTER_HOUR
    return floored


def _local_tz() -> tzinfo:
    return datetime.now().astimezone().tzinfo


def day_window(
    day: Union[date, datetime],
    start_hour: int = START_OF_DAY,
    end_hour: int = END_OF_DAY,
    tz: Optional[tzinfo] = None,
) -> Tuple[datetime, datetime]:
    """
    Return the (start, end) of the working window on the given day.

    The timezone is, in order: tz, the tzinfo of `day` if it is an aware
    datetime, then the local timezone.
    """
    if not 0 <= start_hour < end_hour <= 24:
        raise ValueError(f"invalid window: start_hour={start_hour}, end_hour={end_hour}")

    if isinstance(day, datetime):
        tz = tz or day.tzinfo
        day = day.date()
    if tz is None:
        tz = _local_tz()

    midnight = datetime(day.year, day.month, day.day, tzinfo=tz)
    return midnight + timedelta(hours=start_hour), midnight + timedelta(hours=end_hour)


def is_relevant(event: Event) -> bool:
    """
    True if you attend the event and did not decline it.

    An event counts once even if several attendees are marked as you.
    """
    return any(
        a.is_self and a.response_status != DECLINED
        for a in event.effective_attendees()
    )


def normalize_events(
    events: Iterable[Event],
    window_start: datetime,
    window_end: datetime,
) -> List[RelevantEvent]:
    """
    Filter events down to the ones you should be credited with.

    Rules:
    - all-day events are dropped (no time-of-day signal)
    - events you declined, or are not attending, are dropped
    - events with bad timestamps are logged and dropped
    - boundaries are rounded to the quarter hour and clipped to the window;
      events entirely outside the window are dropped

    Raises:
        UnorderedInput: if relevant events are not in ascending start order.
    """
    relevant: List[RelevantEvent] = []
    last_start: Optional[datetime] = None

    for event in events:
        if event.is_all_day:
            logger.debug("Skipping all-day event %r", event.summary)
            continue

        if not is_relevant(event):
            logger.debug("Skipping event %r: not attending", event.summary)
            continue

        try:
            start = parse_rfc3339(event.start)
            end = parse_rfc3339(event.end)
            if end < start:
                raise MalformedTimestamp(event.end, "event ends before it starts")
        except MalformedTimestamp as e:
            logger.warning("Skipping event %r: %s", event.summary, e)
            continue

        if last_start is not None and start < last_start:
            raise UnorderedInput(
                f"event {event.summary!r} starts at {start.isoformat()}, "
                f"before the previous event at {last_start.isoformat()}"
            )
        last_start = start

        if end <= window_start or start >= window_end:
            logger.debug("Skipping event %r: outside the window", event.summary)
            continue

        relevant.append(
            RelevantEvent(
                start=max(round_to_nearest_quarter(start), window_start),
                end=min(round_to_nearest_quarter(end), window_end),
                notes=event.summary,
                event=event,
            )
        )

    return relevant


@dataclass(frozen=True)
class _Overlap:
    """
    A chunk that was cut short by a later event.

    Gaps before `until` (the chunk's original end) still belong to it.
    """
    source: Chunk
    until: datetime


def _fill_gap(chunks: List[Chunk], overlaps: List[_Overlap], lo: datetime, hi: datetime) -> None:
    """
    Emit chunks covering [lo, hi).

    Time inside an active overlap inherits the notes of the innermost one;
    anything past every overlap is blank.
    """
    while lo < hi:
        while overlaps and overlaps[-1].until <= lo:
            overlaps.pop()

        if not overlaps:
            chunks.append(Chunk(start=lo, end=hi))
            return

        active = overlaps[-1]
        segment_end = min(hi, active.until)
        chunks.append(Chunk(start=lo, end=segment_end, notes=active.source.notes))
        lo = segment_end


def _sweep(window_start: datetime, window_end: datetime, relevant: Sequence[RelevantEvent]) -> List[Chunk]:
    lo = window_start
    chunks: List[Chunk] = []
    overlaps: List[_Overlap] = []

    for r in relevant:
        # Free time (or the tail of an earlier, longer event) before this one
        if r.start > lo:
            _fill_gap(chunks, overlaps, lo, r.start)

        chunks.append(Chunk(start=r.start, end=r.end, notes=r.notes, event=r.event))

        # This event starts before the previous chunk finished: cut the previous one short
        if len(chunks) > 1 and r.start < chunks[-2].end:
            previous = chunks[-2]
            overlaps.append(_Overlap(source=previous, until=previous.end))
            chunks[-2] = replace(previous, end=r.start)

        lo = r.end

    if lo < window_end:
        _fill_gap(chunks, overlaps, lo, window_end)

    return chunks


def _start_sort_key(event: Event) -> datetime:
    try:
        return parse_rfc3339(event.start)
    except MalformedTimestamp:
        # Dropped by the normalizer anyway; keep them out of the way.
        return _EARLIEST


def build_chunks(
    day: Union[date, datetime],
    events: Iterable[Event],
    *,
    start_hour: int = START_OF_DAY,
    end_hour: int = END_OF_DAY,
    tz: Optional[tzinfo] = None,
    sort: bool = False,
) -> List[Chunk]:
    """
    Build the chunk partition of the working window for `day`.

    Args:
        day: the calendar day (date, or datetime whose tzinfo sets the timezone)
        events: the day's events, ascending by start time
        start_hour/end_hour: the working window, in hours from midnight
        tz: timezone of the window (overrides the tzinfo of `day`)
        sort: sort events by start first instead of requiring ordered input

    Returns:
        Chunks covering [start_of_day, end_of_day) exactly once, in time order.
    """
    window_start, window_end = day_window(day, start_hour, end_hour, tz)

    events = list(events)
    if sort:
        events.sort(key=_start_sort_key)

    relevant = normalize_events(events, window_start, window_end)
    chunks = _sweep(window_start, window_end, relevant)

    logger.debug(
        "Built %d chunks from %d relevant events (%d total) for %s",
        len(chunks),
        len(relevant),
        len(events),
        window_start.date().isoformat(),
    )
    return chunks
