# calendar_chunks/models.py
"""
Value records shared by the chunk builder, the event source and the renderers.

- Attendee / Event: what the calendar gives us (raw timestamps kept as strings,
  parsing happens in the chunker so bad data can be rejected there)
- RelevantEvent: an event the user is credited with, rounded onto the quarter-hour grid
- Chunk: one block of the day in the final partition
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

DECLINED = "declined"
ACCEPTED = "accepted"


@dataclass(frozen=True)
class Attendee:
    is_self: bool = False
    response_status: str = "needsAction"


@dataclass(frozen=True)
class Event:
    """
    A single calendar event for the day.

    start/end are RFC3339 strings, or None for all-day events
    (Google sends {"date": ...} instead of {"dateTime": ...} for those).
    """
    summary: str = ""
    start: Optional[str] = None
    end: Optional[str] = None
    attendees: Tuple[Attendee, ...] = ()
    created_by_self: bool = False
    id: Optional[str] = None

    @property
    def is_all_day(self) -> bool:
        return not self.start or not self.end

    def effective_attendees(self) -> Tuple[Attendee, ...]:
        """
        Attendees used for relevance checks.

        A personal event (created by you, nobody invited) has no attendee list,
        so it counts as if you were the single accepted attendee.
        """
        if not self.attendees and self.created_by_self:
            return (Attendee(is_self=True, response_status=ACCEPTED),)
        return self.attendees

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "Event":
        """
        Build an Event from a raw Google Calendar event resource.
        """
        start_obj = item.get("start") or {}
        end_obj = item.get("end") or {}

        attendees = tuple(
            Attendee(
                is_self=bool(a.get("self", False)),
                response_status=a.get("responseStatus", "needsAction"),
            )
            for a in item.get("attendees", [])
        )

        creator = item.get("creator") or {}
        organizer = item.get("organizer") or {}

        return cls(
            summary=item.get("summary", ""),
            start=start_obj.get("dateTime"),
            end=end_obj.get("dateTime"),
            attendees=attendees,
            created_by_self=bool(creator.get("self") or organizer.get("self")),
            id=item.get("id"),
        )


@dataclass(frozen=True)
class RelevantEvent:
    """
    An event the user is credited with, boundaries rounded to the quarter hour
    and clipped to the day window.
    """
    start: datetime
    end: datetime
    notes: str
    event: Event


@dataclass(frozen=True)
class Chunk:
    """
    Contiguous block of time in the day. Empty notes means unlabeled free time.
    """
    start: datetime
    end: datetime
    notes: str = ""
    event: Optional[Event] = field(default=None, compare=False)

    @property
    def is_gap(self) -> bool:
        return self.event is None

    def minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    def hours(self) -> float:
        return (self.end - self.start).total_seconds() / 3600
