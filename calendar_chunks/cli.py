# calendar_chunks/cli.py
"""
Command line entry point.

    calendar-chunks auth
    calendar-chunks report --date 2025-12-15
    calendar-chunks report --format json --tz America/Toronto

`report` prints one row per chunk of the working day, so the day can be
pasted into a timesheet.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date, datetime
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from calendar_chunks.chunker import build_chunks, day_window
from calendar_chunks.config import SCOPES, Settings
from calendar_chunks.errors import ChunkError
from calendar_chunks.gcal_tools import fetch_day_events
from calendar_chunks.google_auth import get_calendar_service, run_local_oauth
from calendar_chunks.render import DATE_FORMAT, chunks_to_json, csv_report, total_hours

logger = logging.getLogger("calendar_chunks")


def _parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD")


def _parse_tz(value: str) -> ZoneInfo:
    try:
        return ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        raise argparse.ArgumentTypeError(f"unknown timezone {value!r}")


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="calendar-chunks",
        description="Turn a day of Google Calendar events into contiguous time chunks.",
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr.")
    sub = ap.add_subparsers(dest="command", required=True)

    auth = sub.add_parser("auth", help="Authorize with Google and store the token.")
    auth.add_argument(
        "--credentials",
        default=settings.credentials_file,
        help="OAuth client secrets file (default: %(default)s).",
    )

    report = sub.add_parser("report", help="Print the chunks for one day.")
    report.add_argument(
        "--date",
        type=_parse_date,
        default=date.today(),
        help="The date in the format 'YYYY-MM-DD' (default: today).",
    )
    report.add_argument("--format", choices=("csv", "json"), default="csv")
    report.add_argument("--calendar", default=settings.calendar_id, help="Calendar ID (default: %(default)s).")
    report.add_argument("--start-hour", type=int, default=settings.start_hour)
    report.add_argument("--end-hour", type=int, default=settings.end_hour)
    report.add_argument("--tz", type=_parse_tz, default=settings.tz, help="IANA timezone (default: local).")
    return ap


def cmd_auth(args: argparse.Namespace) -> int:
    run_local_oauth(SCOPES, credentials_file=args.credentials)
    print("Token saved.")
    return 0


def cmd_report(args: argparse.Namespace) -> int:
    # Reject a bad window before talking to Google
    day_window(args.date, args.start_hour, args.end_hour, args.tz)

    service = get_calendar_service(SCOPES)
    events = fetch_day_events(service, args.date, tz=args.tz, calendar_id=args.calendar)
    chunks = build_chunks(
        args.date,
        events,
        start_hour=args.start_hour,
        end_hour=args.end_hour,
        tz=args.tz,
    )

    if args.format == "json":
        print(
            json.dumps(
                {
                    "date": args.date.strftime(DATE_FORMAT),
                    "total_hours": round(total_hours(chunks), 2),
                    "chunks": chunks_to_json(chunks),
                },
                indent=2,
            )
        )
    else:
        print(csv_report(args.date, chunks), end="")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    try:
        settings = Settings.from_env()
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    args = build_parser(settings).parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    handlers = {"auth": cmd_auth, "report": cmd_report}
    try:
        return handlers[args.command](args)
    except (RuntimeError, ValueError, ChunkError) as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
