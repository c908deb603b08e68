# calendar_chunks/gcal_tools.py
"""
Read-only Google Calendar tools.

The chunk builder never talks to Google; these functions fetch what it needs:
- list calendars the user can read
- list one day's events (paginated, recurring events expanded, ordered by start)
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Any, Dict, List, Optional

from calendar_chunks.models import Event

logger = logging.getLogger(__name__)


def list_calendars(service) -> List[Dict[str, Any]]:
    """
    List calendars available on the user's calendar list.
    Includes primary + subscribed + shared calendars.

    Returns:
        Simplified list: [{id, summary, accessRole, primary}, ...]
    """
    resp = service.calendarList().list().execute()
    items = resp.get("items", [])
    out: List[Dict[str, Any]] = []

    for cal in items:
        out.append(
            {
                "id": cal.get("id"),
                "summary": cal.get("summary"),
                "accessRole": cal.get("accessRole"),
                "primary": cal.get("primary", False),
            }
        )

    return out


def list_events_for_day(
    service,
    time_min: str,
    time_max: str,
    calendar_id: str = "primary",
) -> List[Dict[str, Any]]:
    """
    List events on one calendar within a time window.

    Args:
        time_min/time_max: RFC3339 timestamps (inclusive-ish start, exclusive-ish end)
        calendar_id: calendar to read, "primary" by default

    Returns:
        A list of raw Google Calendar event objects, ordered by start time.
    """
    events: List[Dict[str, Any]] = []
    page_token: str | None = None

    # Google Calendar API paginates results; we loop until done.
    while True:
        resp = (
            service.events()
            .list(
                calendarId=calendar_id,
                timeMin=time_min,
                timeMax=time_max,
                showDeleted=False,
                singleEvents=True,       # Expand recurring events into individual instances
                orderBy="startTime",     # The chunk builder relies on this order
                pageToken=page_token,
            )
            .execute()
        )

        events.extend(resp.get("items", []))
        page_token = resp.get("nextPageToken")

        if not page_token:
            break

    logger.debug("Fetched %d events from %s between %s and %s", len(events), calendar_id, time_min, time_max)
    return events


def fetch_day_events(
    service,
    day: date,
    tz: Optional[tzinfo] = None,
    calendar_id: str = "primary",
) -> List[Event]:
    """
    Fetch every event on `day` (midnight to midnight in tz) as Event models.
    """
    if tz is None:
        tz = datetime.now().astimezone().tzinfo

    midnight = datetime(day.year, day.month, day.day, tzinfo=tz)
    items = list_events_for_day(
        service,
        time_min=midnight.isoformat(),
        time_max=(midnight + timedelta(days=1)).isoformat(),
        calendar_id=calendar_id,
    )
    return [Event.from_api(item) for item in items]
