# Data sources + reconciliation contract
# PRIMARY (live):      https://api.spacexdata.com/v4/{launches,rockets,launches/<id>}
# SECONDARY (offline): https://ll.thespacedevs.com/2.2.0/launch/  (next-cursor pagination)
# ENRICHMENT:          https://en.wikipedia.org/w/api.php  (opensearch, name -> article URL)
#
# CUTOFF: launches at or before the cutoff belong to the primary feed only;
#         the offline sync never emits a catalog launch at or before it.
#
# Snapshot Store (written by sync_launches, read by archive):
#   - data/supplemental-launches.json
#   - data/supplemental-rockets.json
#   - data/supplemental-meta.json
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import FrozenSet

import pandas as pd

DEFAULT_CUTOFF_UTC = "2022-12-04T23:59:59Z"
REQUEST_TIMEOUT_SECONDS = 15.0
ENRICHMENT_WORKERS = 5
USER_AGENT = "SpaceX-Launch-Archive-Sync/1.0"

SPACEX_API_BASE = "https://api.spacexdata.com/v4"
LL2_API_ROOT = "https://ll.thespacedevs.com/2.2.0/"
WIKIPEDIA_API = "https://en.wikipedia.org/w/api.php"

SOURCE_CATALOG = [
    {"name": "SpaceX API v4", "url": "https://api.spacexdata.com/v4/"},
    {"name": "The Space Devs Launch Library 2", "url": "https://ll.thespacedevs.com/2.2.0/"},
    {"name": "Wikipedia API", "url": "https://www.mediawiki.org/wiki/API:Main_page"},
]


def parse_cutoff(value: str) -> pd.Timestamp:
    ts = pd.to_datetime(value, utc=True, errors="coerce")
    if pd.isna(ts):
        raise ValueError(f"Invalid BASE_CUTOFF_UTC: {value}")
    return ts


@dataclass(frozen=True)
class ArchiveConfig:
    """Immutable settings threaded through the sync pipeline and the online merge."""

    cutoff: pd.Timestamp = field(default_factory=lambda: parse_cutoff(DEFAULT_CUTOFF_UTC))
    excluded_ids: FrozenSet[str] = frozenset()
    request_timeout: float = REQUEST_TIMEOUT_SECONDS
    enrichment_workers: int = ENRICHMENT_WORKERS
    brand: str = "SpaceX"
    page_size: int = 100
    spacex_api_base: str = SPACEX_API_BASE
    ll2_api_root: str = LL2_API_ROOT
    wikipedia_api: str = WIKIPEDIA_API
    data_dir: Path = Path("data")

    @property
    def launches_path(self) -> Path:
        return self.data_dir / "supplemental-launches.json"

    @property
    def rockets_path(self) -> Path:
        return self.data_dir / "supplemental-rockets.json"

    @property
    def meta_path(self) -> Path:
        return self.data_dir / "supplemental-meta.json"

    @property
    def ll2_launch_endpoint(self) -> str:
        return self.ll2_api_root.rstrip("/") + "/launch/"

    def with_cutoff(self, cutoff: str) -> "ArchiveConfig":
        return replace(self, cutoff=parse_cutoff(cutoff))


def _split_ids(raw: str) -> FrozenSet[str]:
    return frozenset(part.strip() for part in raw.split(",") if part.strip())


def load_config(**overrides) -> ArchiveConfig:
    """Build a config from defaults, then environment, then explicit keyword overrides."""
    values = {}

    cutoff = os.getenv("BASE_CUTOFF_UTC", "").strip()
    if cutoff:
        values["cutoff"] = parse_cutoff(cutoff)

    excluded = os.getenv("LAUNCH_ARCHIVE_EXCLUDED_IDS", "").strip()
    if excluded:
        values["excluded_ids"] = _split_ids(excluded)

    data_dir = os.getenv("LAUNCH_ARCHIVE_DATA_DIR", "").strip()
    if data_dir:
        values["data_dir"] = Path(data_dir)

    timeout = os.getenv("LAUNCH_ARCHIVE_REQUEST_TIMEOUT", "").strip()
    if timeout:
        values["request_timeout"] = float(timeout)

    values.update(overrides)
    if isinstance(values.get("cutoff"), str):
        values["cutoff"] = parse_cutoff(values["cutoff"])
    if "excluded_ids" in values:
        values["excluded_ids"] = frozenset(values["excluded_ids"])
    if "data_dir" in values:
        values["data_dir"] = Path(values["data_dir"])
    return ArchiveConfig(**values)
