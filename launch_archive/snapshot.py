"""
snapshot.py
-----------
The Snapshot Store: three JSON artifacts written by one sync run and read
by the online merge.

  supplemental-launches.json   canonical launches, ascending by date
  supplemental-rockets.json    synthesized rockets, by name
  supplemental-meta.json       generated_at, cutoff, sources, stats, checksums

Every document is serialized and staged next to its target before any target
is replaced, so a run that fails while fetching, serializing or staging leaves
the previous snapshot in place. The replace step itself is one os.replace per
file: if it fails partway, the files already replaced are new and the rest are
old (validate_snapshot reports the checksum mismatch), and leftover staged
files are removed.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from launch_archive.config import SOURCE_CATALOG, ArchiveConfig
from launch_archive.errors import SnapshotError
from launch_archive.models import Launch, Rocket
from launch_archive.utils import dump_json, format_utc, read_json, sha256_text

logger = logging.getLogger(__name__)


@dataclass
class Snapshot:
    launches: List[Launch] = field(default_factory=list)
    rockets: List[Rocket] = field(default_factory=list)
    meta: Optional[Dict[str, Any]] = None


def build_meta(
    config: ArchiveConfig,
    launches: List[Launch],
    rockets: List[Rocket],
    checksums: Optional[Dict[str, str]] = None,
    generated_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    generated_at = generated_at or datetime.now(timezone.utc)
    return {
        "generated_at": generated_at.strftime("%Y-%m-%dT%H:%M:%SZ"),
        "cutoff": format_utc(config.cutoff),
        "sources": [dict(s) for s in SOURCE_CATALOG],
        "stats": {
            "launch_count": len(launches),
            "rocket_count": len(rockets),
        },
        "checksums": checksums or {},
    }


def _stage(path: Path, text: str) -> Path:
    tmp = path.with_name(path.name + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        f.write(text)
        f.flush()
        os.fsync(f.fileno())
    return tmp


def write_snapshot(
    config: ArchiveConfig,
    launches: List[Launch],
    rockets: List[Rocket],
    generated_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Replace all three artifacts; returns the metadata document written."""
    launches_text = dump_json([launch.model_dump(mode="json") for launch in launches])
    rockets_text = dump_json([rocket.model_dump(mode="json") for rocket in rockets])
    meta = build_meta(
        config,
        launches,
        rockets,
        checksums={
            "launches": sha256_text(launches_text),
            "rockets": sha256_text(rockets_text),
        },
        generated_at=generated_at,
    )
    documents = [
        (config.launches_path, launches_text),
        (config.rockets_path, rockets_text),
        (config.meta_path, dump_json(meta)),
    ]

    staged = []
    try:
        config.data_dir.mkdir(parents=True, exist_ok=True)
        for target, text in documents:
            staged.append((_stage(target, text), target))
    except OSError as e:
        for tmp, _ in staged:
            tmp.unlink(missing_ok=True)
        raise SnapshotError(config.data_dir, f"Snapshot write failed ({e})") from e

    try:
        for tmp, target in staged:
            os.replace(tmp, target)
    except OSError as e:
        for tmp, _ in staged:
            tmp.unlink(missing_ok=True)
        raise SnapshotError(config.data_dir, f"Snapshot replace failed ({e})") from e

    logger.info("Snapshot written: %d launches, %d rockets", len(launches), len(rockets))
    return meta


def load_snapshot(config: ArchiveConfig) -> Snapshot:
    """Read the store. A store that was never written reads as empty."""
    if not config.launches_path.exists() and not config.rockets_path.exists():
        logger.warning("No snapshot under %s; serving live data only", config.data_dir)
        return Snapshot()

    launches = read_json(config.launches_path)
    rockets = read_json(config.rockets_path) if config.rockets_path.exists() else []
    meta = read_json(config.meta_path) if config.meta_path.exists() else None

    if not isinstance(launches, list) or not isinstance(rockets, list):
        raise SnapshotError(config.data_dir, "Snapshot artifacts must be JSON arrays")
    try:
        return Snapshot(
            launches=[Launch.model_validate(item) for item in launches],
            rockets=[Rocket.model_validate(item) for item in rockets],
            meta=meta,
        )
    except ValidationError as e:
        raise SnapshotError(config.data_dir, f"Snapshot record does not match the canonical shape ({e.error_count()} errors)") from e
