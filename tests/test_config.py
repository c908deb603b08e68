"""
Tests for Settings.from_env.
"""

from zoneinfo import ZoneInfo

import pytest

from calendar_chunks.config import Settings


def test_defaults_when_env_is_empty():
    settings = Settings.from_env({})

    assert settings == Settings(start_hour=9, end_hour=17, timezone=None, calendar_id="primary")
    assert settings.tz is None


def test_reads_window_timezone_and_calendar():
    settings = Settings.from_env(
        {
            "CHUNKS_START_HOUR": "8",
            "CHUNKS_END_HOUR": "18",
            "CHUNKS_TIMEZONE": "America/Toronto",
            "CHUNKS_CALENDAR_ID": "work@example.com",
            "GOOGLE_CREDENTIALS_FILE": "/secrets/client.json",
        }
    )

    assert (settings.start_hour, settings.end_hour) == (8, 18)
    assert settings.tz == ZoneInfo("America/Toronto")
    assert settings.calendar_id == "work@example.com"
    assert settings.credentials_file == "/secrets/client.json"


@pytest.mark.parametrize(
    "env, message",
    [
        ({"CHUNKS_START_HOUR": "nine"}, "CHUNKS_START_HOUR"),
        ({"CHUNKS_END_HOUR": "25"}, "CHUNKS_END_HOUR"),
        ({"CHUNKS_START_HOUR": "17", "CHUNKS_END_HOUR": "9"}, "must be before"),
    ],
)
def test_invalid_hours_raise(env, message):
    with pytest.raises(ValueError, match=message):
        Settings.from_env(env)


def test_unknown_timezone_raises_value_error():
    with pytest.raises(ValueError, match="CHUNKS_TIMEZONE"):
        Settings.from_env({"CHUNKS_TIMEZONE": "Mars/Olympus_Mons"})
