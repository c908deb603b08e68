"""
FastAPI wrapper around the chunk builder.

This exposes a minimal read-only HTTP API so a frontend can:
- authorize the server against Google (web OAuth flow)
- list calendars
- fetch the chunks for a day as JSON or as the CSV report
"""

from datetime import datetime
from typing import Any, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, RedirectResponse
from pydantic import BaseModel, Field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from calendar_chunks.chunker import END_OF_DAY, START_OF_DAY, build_chunks, day_window
from calendar_chunks.config import SCOPES, Settings
from calendar_chunks.errors import UnorderedInput
from calendar_chunks.gcal_tools import fetch_day_events, list_calendars
from calendar_chunks.google_auth import build_google_flow, get_calendar_service, save_credentials
from calendar_chunks.render import DATE_FORMAT, chunks_to_json, csv_report, total_hours

app = FastAPI(title="Calendar Chunks API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],          # Dev-only. In production, restrict to your UI domain.
    allow_credentials=False,      # Must be False when allow_origins is "*"
    allow_methods=["GET"],
    allow_headers=["*"],
)


# ----------------------------
# Helpers (internal plumbing)
# ----------------------------

def _get_service():
    """
    Create an authenticated Google Calendar service client.

    If the server has not been authorized yet, this raises a 401 telling you
    to visit /auth/start.
    """
    try:
        return get_calendar_service(SCOPES)
    except RuntimeError as e:
        raise HTTPException(status_code=401, detail=str(e))


class ChunksQuery(BaseModel):
    """
    Inputs controlled by the UI.
    """
    date: str = Field(..., description="Target date in YYYY-MM-DD")
    tz: Optional[str] = Field(None, description="IANA timezone string; defaults to CHUNKS_TIMEZONE, then local time")
    start_hour: int = Field(START_OF_DAY, ge=0, le=24, description="Window start hour (0-24)")
    end_hour: int = Field(END_OF_DAY, ge=0, le=24, description="Window end hour (0-24)")
    calendar_id: str = Field("primary", description="Calendar to read")


def _chunks_query(
    date: str = Query(..., description="Target date in YYYY-MM-DD"),
    tz: Optional[str] = Query(None),
    start_hour: int = Query(START_OF_DAY, ge=0, le=24),
    end_hour: int = Query(END_OF_DAY, ge=0, le=24),
    calendar_id: str = Query("primary"),
) -> ChunksQuery:
    return ChunksQuery(date=date, tz=tz, start_hour=start_hour, end_hour=end_hour, calendar_id=calendar_id)


def _compute(q: ChunksQuery) -> dict[str, Any]:
    """
    Fetch the day's events and build chunks for the requested window.
    """
    tz_name = q.tz or Settings.from_env().timezone
    tz = None
    if tz_name:
        try:
            tz = ZoneInfo(tz_name)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise HTTPException(status_code=400, detail=f"Unknown timezone: {tz_name}") from e

    try:
        day = datetime.strptime(q.date, DATE_FORMAT).date()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid date format: {q.date}") from e

    if q.end_hour <= q.start_hour:
        raise HTTPException(status_code=400, detail="end_hour must be after start_hour")

    service = _get_service()
    events = fetch_day_events(service, day, tz=tz, calendar_id=q.calendar_id)

    try:
        chunks = build_chunks(day, events, start_hour=q.start_hour, end_hour=q.end_hour, tz=tz)
    except UnorderedInput as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    window_start, window_end = day_window(day, q.start_hour, q.end_hour, tz)
    return {"day": day, "tz": tz_name or "local", "window": (window_start, window_end), "chunks": chunks}


# ----------------------------
# OAuth endpoints (Web Flow)
# ----------------------------

@app.get("/auth/start")
def auth_start():
    """
    Starts Google OAuth by redirecting the user to Google's consent screen.
    """
    flow = build_google_flow(SCOPES)

    auth_url, _state = flow.authorization_url(
        access_type="offline",      # Requests refresh token
        prompt="consent",           # Helps ensure refresh token is issued
        include_granted_scopes="true",
    )

    # Single-user tool: state is not persisted.
    return RedirectResponse(url=auth_url)


@app.get("/auth/callback")
def auth_callback(request: Request):
    """
    Handles Google's redirect back to us with a 'code' query param.
    Exchanges the code for tokens and stores them.
    """
    code = request.query_params.get("code")
    if not code:
        raise HTTPException(status_code=400, detail="Missing ?code= in callback URL")

    flow = build_google_flow(SCOPES)
    flow.fetch_token(code=code)
    save_credentials(flow.credentials)

    return PlainTextResponse("OAuth complete. You can close this tab.")


# ----------------------------
# Endpoints
# ----------------------------

@app.get("/health")
def health():
    return {"ok": True}


@app.get("/calendars")
def calendars():
    """
    Read-only: list calendars available to the OAuth user (id + summary).
    """
    service = _get_service()
    cals = list_calendars(service)
    return [{"id": c.get("id"), "summary": c.get("summary")} for c in cals]


@app.get("/chunks")
def chunks(q: ChunksQuery = Depends(_chunks_query)):
    """
    Read-only: the day's chunks as JSON.
    """
    result = _compute(q)
    window_start, window_end = result["window"]
    return {
        "date": q.date,
        "tz": result["tz"],
        "window": {"start": window_start.isoformat(), "end": window_end.isoformat()},
        "total_hours": round(total_hours(result["chunks"]), 2),
        "chunks": chunks_to_json(result["chunks"]),
    }


@app.get("/chunks.csv", response_class=PlainTextResponse)
def chunks_csv(q: ChunksQuery = Depends(_chunks_query)):
    """
    Read-only: the day's CSV report as plain text.
    """
    result = _compute(q)
    return PlainTextResponse(csv_report(result["day"], result["chunks"]))
