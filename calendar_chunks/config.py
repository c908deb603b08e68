# calendar_chunks/config.py
"""
Runtime settings, read from environment variables.

CHUNKS_START_HOUR / CHUNKS_END_HOUR   working window (default 9 -> 17)
CHUNKS_TIMEZONE                       IANA name; empty means the machine's local timezone
CHUNKS_CALENDAR_ID                    calendar to read (default "primary")
GOOGLE_CREDENTIALS_FILE               client secrets for `calendar-chunks auth`
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import tzinfo
from typing import Mapping, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from calendar_chunks.chunker import END_OF_DAY, START_OF_DAY

SCOPES = ["https://www.googleapis.com/auth/calendar.readonly"]


def _read_hour(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer hour, got {raw!r}") from e
    if not 0 <= value <= 24:
        raise ValueError(f"{name} must be between 0 and 24, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    start_hour: int = START_OF_DAY
    end_hour: int = END_OF_DAY
    timezone: Optional[str] = None
    calendar_id: str = "primary"
    credentials_file: str = "credentials.json"

    @property
    def tz(self) -> Optional[tzinfo]:
        return ZoneInfo(self.timezone) if self.timezone else None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env

        start_hour = _read_hour(env, "CHUNKS_START_HOUR", START_OF_DAY)
        end_hour = _read_hour(env, "CHUNKS_END_HOUR", END_OF_DAY)
        if start_hour >= end_hour:
            raise ValueError(
                f"CHUNKS_START_HOUR ({start_hour}) must be before CHUNKS_END_HOUR ({end_hour})"
            )

        timezone = env.get("CHUNKS_TIMEZONE", "").strip() or None
        if timezone:
            try:
                ZoneInfo(timezone)
            except (ZoneInfoNotFoundError, ValueError) as e:
                raise ValueError(f"CHUNKS_TIMEZONE is not a known IANA timezone: {timezone!r}") from e

        return cls(
            start_hour=start_hour,
            end_hour=end_hour,
            timezone=timezone,
            calendar_id=env.get("CHUNKS_CALENDAR_ID", "").strip() or "primary",
            credentials_file=env.get("GOOGLE_CREDENTIALS_FILE", "").strip() or "credentials.json",
        )
