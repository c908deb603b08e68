# calendar_chunks/google_auth.py
"""
Google Calendar OAuth helpers.

Two ways to get a token:
1) Web flow for the HTTP API: /auth/start and /auth/callback
   (client_id / client_secret / redirect_uri come from environment variables)
2) Installed-app flow for the CLI: opens a browser and listens on a local port,
   using a downloaded credentials.json

Either way the token is persisted through token_store, and get_calendar_service
rebuilds credentials from it (refreshing when expired).
"""

from __future__ import annotations

import json
import logging
import os
from typing import List, Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow, InstalledAppFlow
from googleapiclient.discovery import build

from calendar_chunks.token_store import load_token, save_token

logger = logging.getLogger(__name__)


def build_google_flow(scopes: List[str]) -> Flow:
    """
    Build a Google OAuth Flow for a web server using env vars.

    Required env vars:
      - GOOGLE_CLIENT_ID
      - GOOGLE_CLIENT_SECRET
      - OAUTH_REDIRECT_URI  (e.g. http://localhost:8000/auth/callback)
    """
    client_config = {
        "web": {
            "client_id": os.environ["GOOGLE_CLIENT_ID"],
            "client_secret": os.environ["GOOGLE_CLIENT_SECRET"],
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": [os.environ["OAUTH_REDIRECT_URI"]],
        }
    }

    flow = Flow.from_client_config(
        client_config=client_config,
        scopes=scopes,
        redirect_uri=os.environ["OAUTH_REDIRECT_URI"],
    )
    return flow


def save_credentials(creds: Credentials) -> None:
    """
    Persist OAuth credentials so future runs can use them without re-auth.
    """
    save_token(creds.to_json())


def run_local_oauth(scopes: List[str], credentials_file: str = "credentials.json") -> Credentials:
    """
    Run the installed-app flow: print/open the consent URL, wait for the redirect
    on a local port, then store the resulting token.
    """
    if not os.path.exists(credentials_file):
        raise RuntimeError(
            f"OAuth client file {credentials_file!r} not found. "
            "Download it from the Google Cloud console (Desktop app credentials)."
        )

    flow = InstalledAppFlow.from_client_secrets_file(credentials_file, scopes)
    creds = flow.run_local_server(
        port=0,
        access_type="offline",
        authorization_prompt_message="Authenticate at this URL:\n\n{url}\n",
        success_message="You can now close this window.",
    )
    save_credentials(creds)
    return creds


def load_credentials(scopes: List[str]) -> Credentials:
    """
    Load stored credentials, refreshing them if they have expired.

    Raises:
        RuntimeError: nothing stored, or the stored token cannot be refreshed.
    """
    creds: Optional[Credentials] = None

    token_json = load_token()
    if token_json:
        creds = Credentials.from_authorized_user_info(json.loads(token_json), scopes)

    if not creds:
        raise RuntimeError("No stored OAuth token. Run `calendar-chunks auth` or visit /auth/start first.")

    # If creds are expired, refresh them and persist the refreshed version.
    if not creds.valid:
        if creds.expired and creds.refresh_token:
            logger.info("Refreshing expired OAuth token")
            creds.refresh(Request())
            save_credentials(creds)
        else:
            raise RuntimeError("Stored OAuth token is invalid and cannot refresh. Authenticate again.")

    return creds


def get_calendar_service(scopes: List[str]):
    """
    Return an authenticated Google Calendar API client.
    """
    creds = load_credentials(scopes)
    return build("calendar", "v3", credentials=creds, cache_discovery=False)
