"""
identity.py
-----------
Cross-source identity for launches.

Two launches are the same physical launch when they share an ``id`` or a
fingerprint (normalized name + timestamp truncated to whole seconds).
Merges are first-seen-wins over the concatenated input, so callers put the
authoritative source first.
"""

from __future__ import annotations

from typing import Iterable, List

from launch_archive.models import Launch, Rocket
from launch_archive.utils import parse_utc, slugify

FINGERPRINT_SEPARATOR = "|"

# sorts unparseable dates before everything else
_UNPARSEABLE_DATE_KEY = -(2 ** 63)


def normalize_name(name: str) -> str:
    return slugify(name)


def normalize_timestamp(value: str) -> str:
    """Second-precision UTC form; the raw string verbatim if it does not parse."""
    ts = parse_utc(value)
    if ts is None:
        return value or ""
    return ts.strftime("%Y-%m-%dT%H:%M:%SZ")


def launch_fingerprint(launch: Launch) -> str:
    return f"{normalize_name(launch.name)}{FINGERPRINT_SEPARATOR}{normalize_timestamp(launch.date_utc)}"


def dedupe_launches(launches: Iterable[Launch]) -> List[Launch]:
    """Drop every launch whose id or fingerprint was already seen. Keeps input order."""
    seen_ids = set()
    seen_fingerprints = set()
    kept = []

    for launch in launches:
        if launch.id in seen_ids:
            continue
        fingerprint = launch_fingerprint(launch)
        if fingerprint in seen_fingerprints:
            continue

        seen_ids.add(launch.id)
        seen_fingerprints.add(fingerprint)
        kept.append(launch)

    return kept


def merge_launches(primary: Iterable[Launch], secondary: Iterable[Launch]) -> List[Launch]:
    """Primary records win any id or fingerprint collision."""
    return dedupe_launches([*primary, *secondary])


def merge_rockets(primary: Iterable[Rocket], secondary: Iterable[Rocket]) -> List[Rocket]:
    """Rockets are merged by id only, first seen wins."""
    by_id = {}
    for rocket in [*primary, *secondary]:
        by_id.setdefault(rocket.id, rocket)
    return list(by_id.values())


def _date_key(launch: Launch) -> int:
    ts = parse_utc(launch.date_utc)
    return ts.value if ts is not None else _UNPARSEABLE_DATE_KEY


def sort_launches(launches: Iterable[Launch], descending: bool = False) -> List[Launch]:
    return sorted(launches, key=_date_key, reverse=descending)
