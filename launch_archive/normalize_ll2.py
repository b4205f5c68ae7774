"""
normalize_ll2.py
----------------
Launch Library 2 ("detailed" mode) -> canonical records.

A catalog launch is rejected (None) when it has no parseable date, is dated
at or before the cutoff, or was not flown by the configured brand. Rockets the
primary catalog does not know by name are synthesized with a deterministic id.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, NamedTuple, Optional, Sequence

import pandas as pd

from launch_archive.config import ArchiveConfig
from launch_archive.models import Launch, Rocket
from launch_archive.utils import format_utc, parse_utc, safe_get, slugify

logger = logging.getLogger(__name__)

LAUNCH_ID_PREFIX = "supplemental-ll2-"
ROCKET_ID_PREFIX = "supplemental-rocket-"
UNKNOWN_ROCKET = "Unknown Rocket"

DATE_FIELDS = ("net", "window_start", "window_end")

# Loose on purpose: "go" also matches e.g. "cargo". Kept as observed against LL2 data.
UPCOMING_STATUS_MARKERS = ("go", "hold", "tbd", "to be determined")


class NormalizedLaunch(NamedTuple):
    launch: Launch
    rocket: Optional[Rocket]   # only set when the rocket had to be synthesized


# --- classification ----------------------------------------------------------

def _status_text(status: Any) -> str:
    if not isinstance(status, dict):
        return ""
    return f"{status.get('name') or ''} {status.get('abbrev') or ''}".lower()


def success_from_status(status: Any) -> Optional[bool]:
    text = _status_text(status)
    if "success" in text:
        return True
    if "partial failure" in text or "failure" in text:
        return False
    return None


def is_upcoming(status: Any, launch_time: pd.Timestamp, now: pd.Timestamp) -> bool:
    if launch_time > now:
        return True
    text = _status_text(status)
    return any(marker in text for marker in UPCOMING_STATUS_MARKERS)


def resolve_date(raw: Dict[str, Any]) -> Optional[pd.Timestamp]:
    """net, then window_start, then window_end; the first one that parses wins."""
    for key in DATE_FIELDS:
        ts = parse_utc(raw.get(key))
        if ts is not None:
            return ts
    return None


# --- links -------------------------------------------------------------------

LinkExtractor = Callable[[Dict[str, Any], ArchiveConfig], Optional[str]]


def is_catalog_api_url(url: str, config: ArchiveConfig) -> bool:
    root = config.ll2_api_root.split("://", 1)[-1].lower()
    return url.split("://", 1)[-1].lower().startswith(root)


def _url_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _image(raw, config):
    return _url_or_none(raw.get("image"))


def _infographic(raw, config):
    return _url_or_none(raw.get("infographic"))


def _first_video_url(raw, config):
    for item in raw.get("vidURLs") or []:
        url = _url_or_none(safe_get(item, "url"))
        if url:
            return url
    return None


def _first_info_url(raw, config):
    for item in raw.get("infoURLs") or []:
        url = _url_or_none(safe_get(item, "url"))
        if url and not is_catalog_api_url(url, config):
            return url
    return None


def _launch_page_url(raw, config):
    url = _url_or_none(raw.get("url"))
    if url and not is_catalog_api_url(url, config):
        return url
    return None


# Ordered candidates per link slot; the first non-empty result wins.
LINK_EXTRACTORS: Dict[str, Sequence[LinkExtractor]] = {
    "patch_small": (_image,),
    "patch_large": (_image, _infographic),
    "webcast": (_first_video_url,),
    "article": (_first_info_url, _launch_page_url),
}


def pick_link(raw: Dict[str, Any], slot: str, config: ArchiveConfig) -> Optional[str]:
    for extractor in LINK_EXTRACTORS[slot]:
        value = extractor(raw, config)
        if value:
            return value
    return None


# --- rockets -----------------------------------------------------------------

def rocket_display_name(raw: Dict[str, Any]) -> str:
    configuration = safe_get(raw, "rocket", "configuration", default={})
    return (
        safe_get(configuration, "full_name")
        or safe_get(configuration, "name")
        or safe_get(raw, "rocket", "launcher_stage", "launcher", "name")
        or UNKNOWN_ROCKET
    )


def resolve_rocket(raw: Dict[str, Any], rocket_index: Dict[str, str]):
    """Return (rocket_id, synthesized Rocket or None)."""
    name = str(rocket_display_name(raw))
    known_id = rocket_index.get(name.lower())
    if known_id:
        return known_id, None

    configuration = safe_get(raw, "rocket", "configuration", default={})
    rocket = Rocket(
        id=f"{ROCKET_ID_PREFIX}{slugify(name)}",
        name=name,
        type=safe_get(configuration, "family") or "Unknown",
        active=True,
        first_flight=safe_get(configuration, "maiden_flight") or "Unknown",
    )
    return rocket.id, rocket


# --- launches ----------------------------------------------------------------

def normalize_ll2_launch(
    raw: Dict[str, Any],
    rocket_index: Dict[str, str],
    config: ArchiveConfig,
    now: Optional[pd.Timestamp] = None,
) -> Optional[NormalizedLaunch]:
    launch_time = resolve_date(raw)
    if launch_time is None:
        logger.debug("LL2 %s rejected: no parseable date", raw.get("id"))
        return None
    date_utc = format_utc(launch_time)
    # compare what gets written, not the parsed value
    if parse_utc(date_utc) <= config.cutoff:
        logger.debug("LL2 %s rejected: at or before cutoff", raw.get("id"))
        return None

    provider = str(safe_get(raw, "launch_service_provider", "name", default=""))
    if config.brand.lower() not in provider.lower():
        logger.debug("LL2 %s rejected: provider %r", raw.get("id"), provider)
        return None

    now = now or pd.Timestamp.now(tz="UTC")
    rocket_id, rocket = resolve_rocket(raw, rocket_index)

    launch = Launch(
        id=f"{LAUNCH_ID_PREFIX}{raw['id']}",
        name=raw.get("name") or f"{config.brand} Launch {raw['id']}",
        date_utc=date_utc,
        success=success_from_status(raw.get("status")),
        upcoming=is_upcoming(raw.get("status"), launch_time, now),
        rocket=rocket_id,
        details=safe_get(raw, "mission", "description"),
        links={
            "patch": {
                "small": pick_link(raw, "patch_small", config),
                "large": pick_link(raw, "patch_large", config),
            },
            "webcast": pick_link(raw, "webcast", config),
            "wikipedia": None,
            "article": pick_link(raw, "article", config),
        },
    )
    return NormalizedLaunch(launch, rocket)
