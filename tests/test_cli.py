"""
Tests for the command line entry point.
"""

import json

import pytest
from fakes import FakeCalendarService

from calendar_chunks import cli


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("CHUNKS_START_HOUR", "CHUNKS_END_HOUR", "CHUNKS_TIMEZONE", "CHUNKS_CALENDAR_ID"):
        monkeypatch.delenv(name, raising=False)


def _service():
    return FakeCalendarService(
        pages=[
            {
                "items": [
                    {
                        "id": "ev1",
                        "summary": "Planning",
                        "start": {"dateTime": "2025-12-15T13:08:00-05:00"},
                        "end": {"dateTime": "2025-12-15T14:00:00-05:00"},
                        "creator": {"self": True},
                    }
                ]
            }
        ]
    )


def test_report_prints_csv(monkeypatch, capsys):
    monkeypatch.setattr(cli, "get_calendar_service", lambda scopes: _service())

    code = cli.main(["report", "--date", "2025-12-15", "--tz", "America/Toronto"])

    assert code == 0
    assert capsys.readouterr().out == (
        "\nCSV report for the date: 2025-12-15 with a total of 8.00 hours.\n\n"
        "start,end,notes\n"
        "09.00,13.25,\n"
        "13.25,14.00,Planning\n"
        "14.00,17.00,\n"
    )


def test_report_json_uses_calendar_and_window_flags(monkeypatch, capsys):
    service = _service()
    monkeypatch.setattr(cli, "get_calendar_service", lambda scopes: service)

    code = cli.main(
        [
            "report",
            "--date", "2025-12-15",
            "--tz", "America/Toronto",
            "--format", "json",
            "--calendar", "work@example.com",
            "--start-hour", "13",
            "--end-hour", "15",
        ]
    )

    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert out["date"] == "2025-12-15"
    assert out["total_hours"] == 2.0
    assert [c["notes"] for c in out["chunks"]] == ["", "Planning", ""]
    assert service.calls[0]["calendarId"] == "work@example.com"


def test_report_without_token_exits_1(monkeypatch, capsys):
    def _no_token(scopes):
        raise RuntimeError("No stored OAuth token.")

    monkeypatch.setattr(cli, "get_calendar_service", _no_token)

    code = cli.main(["report", "--date", "2025-12-15"])

    assert code == 1
    assert "No stored OAuth token." in capsys.readouterr().err


def test_bad_date_is_an_argument_error():
    with pytest.raises(SystemExit) as exc:
        cli.main(["report", "--date", "yesterday"])

    assert exc.value.code == 2


def test_auth_runs_local_flow(monkeypatch, capsys):
    seen = {}

    def _run(scopes, credentials_file):
        seen["file"] = credentials_file

    monkeypatch.setattr(cli, "run_local_oauth", _run)

    assert cli.main(["auth", "--credentials", "client.json"]) == 0
    assert seen == {"file": "client.json"}
    assert "Token saved." in capsys.readouterr().out


def test_unknown_timezone_setting_exits_1(monkeypatch, capsys):
    monkeypatch.setenv("CHUNKS_TIMEZONE", "Mars/Olympus_Mons")

    code = cli.main(["report", "--date", "2025-12-15"])

    assert code == 1
    assert "CHUNKS_TIMEZONE" in capsys.readouterr().err


def test_bad_window_fails_before_calling_google(monkeypatch, capsys):
    monkeypatch.setattr(cli, "get_calendar_service", lambda scopes: pytest.fail("Google must not be called"))

    code = cli.main(["report", "--date", "2025-12-15", "--start-hour", "17", "--end-hour", "9"])

    assert code == 1
    assert "invalid window" in capsys.readouterr().err
