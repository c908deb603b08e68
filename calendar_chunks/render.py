# calendar_chunks/render.py
"""
Output formats for a list of chunks (CSV report and JSON).
"""

from __future__ import annotations

import csv
import io
from datetime import date, datetime
from typing import Any, Dict, List, Sequence

from calendar_chunks.models import Chunk

DATE_FORMAT = "%Y-%m-%d"


def format_hours(t: datetime) -> str:
    """
    Format a time as decimal hours, e.g. 09:15 -> "09.25", 13:45 -> "13.75".

    Minutes are shown as hundredths of an hour so the values can be summed in a
    spreadsheet.
    """
    return f"{t.hour:02d}.{round(t.minute / 60 * 100):02d}"


def total_hours(chunks: Sequence[Chunk]) -> float:
    return sum(c.hours() for c in chunks)


def chunks_to_csv(chunks: Sequence[Chunk]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(["start", "end", "notes"])
    for c in chunks:
        writer.writerow([format_hours(c.start), format_hours(c.end), c.notes])
    return buf.getvalue()


def csv_report(day: date, chunks: Sequence[Chunk]) -> str:
    """
    Full text report: a summary line followed by the CSV.
    """
    return (
        "\n"
        f"CSV report for the date: {day.strftime(DATE_FORMAT)} "
        f"with a total of {total_hours(chunks):.2f} hours.\n"
        "\n"
        f"{chunks_to_csv(chunks)}"
    )


def chunks_to_json(chunks: Sequence[Chunk]) -> List[Dict[str, Any]]:
    """
    JSON-friendly rows (ISO timestamps) for the API and `--format json`.
    """
    return [
        {
            "start": c.start.isoformat(),
            "end": c.end.isoformat(),
            "notes": c.notes,
            "minutes": c.minutes(),
            "event_id": c.event.id if c.event is not None else None,
        }
        for c in chunks
    ]
