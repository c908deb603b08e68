# calendar_chunks/token_store.py
"""
Token storage abstraction.

- Hosted API (no reliable disk): store token JSON in Upstash (Redis REST)
- CLI / local dev: store token JSON on disk (token.json by default)

Upstash is ONLY used when UPSTASH_ENABLED=1, so a local run never writes a
token to Redis by accident.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import requests

logger = logging.getLogger(__name__)

_TOKEN_KEY = "calendar_chunks_token"
_DEFAULT_TOKEN_PATH = "token.json"


def local_token_path() -> Path:
    return Path(os.getenv("CHUNKS_TOKEN_PATH", "").strip() or _DEFAULT_TOKEN_PATH)


def _upstash_config() -> tuple[Optional[str], Optional[str]]:
    """
    Read Upstash env vars, or (None, None) when Upstash is not enabled.
    """
    if os.getenv("UPSTASH_ENABLED") != "1":
        return None, None

    url = os.getenv("UPSTASH_REDIS_REST_URL")
    token = os.getenv("UPSTASH_REDIS_REST_TOKEN")
    if not url or not token:
        return None, None
    return url.rstrip("/"), token


def save_token(token_json: str) -> None:
    """
    Persist token JSON.

    - If Upstash is configured: write to Redis
    - Else: write to the local token file
    """
    url, token = _upstash_config()

    if not url or not token:
        path = local_token_path()
        logger.debug("Saving token to %s", path.resolve())
        path.write_text(token_json, encoding="utf-8")
        return

    # Upstash REST -> SET key value
    logger.debug("Saving token to Upstash")
    resp = requests.post(
        f"{url}/set/{_TOKEN_KEY}",
        headers={"Authorization": f"Bearer {token}"},
        data=token_json.encode("utf-8"),
        timeout=10,
    )
    resp.raise_for_status()


def load_token() -> Optional[str]:
    """
    Load token JSON, or None if nothing has been stored yet.
    """
    url, token = _upstash_config()

    if not url or not token:
        path = local_token_path()
        if path.exists():
            return path.read_text(encoding="utf-8")
        return None

    # Upstash REST -> GET key
    resp = requests.get(
        f"{url}/get/{_TOKEN_KEY}",
        headers={"Authorization": f"Bearer {token}"},
        timeout=10,
    )
    resp.raise_for_status()

    data = resp.json()
    # Upstash returns {"result": "<value>"} when present, {"result": None} when missing.
    return data.get("result")
