"""
normalize_spacex.py
-------------------
Primary-source adapter. SpaceX API v4 records are already close to the
canonical shape; this keeps the canonical fields, fills missing link slots
and infers ``upcoming`` from the date when the feed omits it.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import pandas as pd

from launch_archive.models import Launch, Rocket
from launch_archive.utils import parse_utc, safe_get


def _string_list(value: Any) -> list:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str)]


def normalize_spacex_launch(raw: Dict[str, Any], now: Optional[pd.Timestamp] = None) -> Launch:
    upcoming = raw.get("upcoming")
    if not isinstance(upcoming, bool):
        ts = parse_utc(raw.get("date_utc"))
        now = now or pd.Timestamp.now(tz="UTC")
        upcoming = ts is not None and ts > now

    links = raw.get("links") if isinstance(raw.get("links"), dict) else {}
    return Launch(
        id=str(raw["id"]),
        name=raw.get("name") or f"Launch {raw['id']}",
        date_utc=raw.get("date_utc") or "",
        success=raw.get("success") if isinstance(raw.get("success"), bool) else None,
        upcoming=upcoming,
        rocket=str(raw.get("rocket") or ""),
        details=raw.get("details"),
        links={
            "patch": {
                "small": safe_get(links, "patch", "small"),
                "large": safe_get(links, "patch", "large"),
            },
            "flickr": {
                "small": _string_list(safe_get(links, "flickr", "small")),
                "original": _string_list(safe_get(links, "flickr", "original")),
            },
            "webcast": links.get("webcast"),
            "wikipedia": links.get("wikipedia"),
            "article": links.get("article"),
        },
    )


def normalize_spacex_rocket(raw: Dict[str, Any]) -> Rocket:
    return Rocket(
        id=str(raw["id"]),
        name=raw.get("name") or "Unknown Rocket",
        type=raw.get("type") or "Unknown",
        active=bool(raw.get("active")),
        first_flight=raw.get("first_flight") or "Unknown",
    )


def build_rocket_name_index(rockets: Iterable[Dict[str, Any]]) -> Dict[str, str]:
    """Lower-cased rocket name -> primary rocket id. Records missing either are skipped."""
    index = {}
    for rocket in rockets:
        if not isinstance(rocket, dict):
            continue
        if not rocket.get("name") or not rocket.get("id"):
            continue
        index[str(rocket["name"]).lower()] = str(rocket["id"])
    return index
