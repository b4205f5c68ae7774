"""
utils.py
--------
Small helpers shared by the pipeline stages: slugs, UTC timestamps,
JSON over HTTP with a bounded timeout, JSON files, hashing and log setup.
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd
import requests

from launch_archive.config import REQUEST_TIMEOUT_SECONDS, USER_AGENT
from launch_archive.errors import FetchError, SnapshotError

LOG_DIR = Path("logs")


def make_session() -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT})
    return session


_session = make_session()


# --- text / time -------------------------------------------------------------

def slugify(value: str) -> str:
    value = re.sub(r"[^a-z0-9\s-]", "", (value or "").lower()).strip()
    value = re.sub(r"\s+", "-", value)
    return re.sub(r"-+", "-", value)


def parse_utc(value: Any) -> Optional[pd.Timestamp]:
    """Parse an ISO-8601 string to a UTC Timestamp, or None when it does not parse."""
    if not isinstance(value, str) or not value.strip():
        return None
    ts = pd.to_datetime(value, utc=True, errors="coerce")
    if pd.isna(ts):
        return None
    return ts


def format_utc(ts: pd.Timestamp) -> str:
    """ISO form with a Z suffix, e.g. 2023-01-01T00:00:00.000Z.

    Milliseconds by default; six digits when the value has sub-millisecond
    precision. Nanoseconds are dropped.
    """
    base = ts.strftime("%Y-%m-%dT%H:%M:%S")
    if ts.microsecond % 1000:
        return f"{base}.{ts.microsecond:06d}Z"
    return f"{base}.{ts.microsecond // 1000:03d}Z"


def sha256_text(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def safe_get(obj: Any, *keys: str, default: Any = None) -> Any:
    """Walk nested dicts; any missing or non-dict hop yields the default."""
    cur = obj
    for key in keys:
        if not isinstance(cur, dict):
            return default
        cur = cur.get(key)
        if cur is None:
            return default
    return cur


# --- http --------------------------------------------------------------------

def fetch_json(
    url: str,
    *,
    params: Optional[Dict[str, Any]] = None,
    session=None,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
) -> Any:
    """GET a JSON document; every failure mode surfaces as FetchError."""
    sess = session or _session
    try:
        resp = sess.get(url, params=params, timeout=timeout, headers={"User-Agent": USER_AGENT})
        resp.raise_for_status()
    except requests.HTTPError as e:
        status = getattr(e.response, "status_code", "?")
        raise FetchError(url, f"Request failed ({status})", e) from e
    except requests.Timeout as e:
        raise FetchError(url, f"Request timed out after {timeout}s", e) from e
    except requests.RequestException as e:
        raise FetchError(url, f"Request failed ({e.__class__.__name__})", e) from e

    try:
        return resp.json()
    except ValueError as e:
        raise FetchError(url, "Response was not valid JSON", e) from e


# --- files / logs ------------------------------------------------------------

def read_json(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        raise SnapshotError(path, f"Unreadable JSON ({e})") from e


def dump_json(value: Any) -> str:
    """Pretty-printed, newline-terminated serialization used for every artifact."""
    return json.dumps(value, indent=2, ensure_ascii=False) + "\n"


def setup_logging(stage: str, level: int = logging.INFO) -> Path:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = LOG_DIR / f"{stage}.log"
    logging.basicConfig(
        filename=str(log_file),
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    return log_file
