"""
validate_snapshot.py
--------------------
Validates the snapshot store written by sync_launches for shape, identity
and integrity using pandas + pandera. Writes a log to
logs/validate_snapshot.log and exits nonzero on failure.
"""
from __future__ import annotations

import logging
from typing import List, Optional

import pandas as pd
import pandera as pa
from pandera import Check, Column
from rich.console import Console

from launch_archive.config import ArchiveConfig, load_config
from launch_archive.normalize_ll2 import LAUNCH_ID_PREFIX, ROCKET_ID_PREFIX
from launch_archive.utils import read_json, setup_logging, sha256_text

import warnings
warnings.filterwarnings("ignore", category=FutureWarning, module="pandera")


console = Console()
logger = logging.getLogger(__name__)


def _parse_dates(s: pd.Series) -> pd.Series:
    return pd.to_datetime(s, errors="coerce", utc=True, format="ISO8601")


def build_launch_schema(cutoff: pd.Timestamp) -> pa.DataFrameSchema:
    return pa.DataFrameSchema(
        columns={
            "id": Column(str, nullable=False, unique=True,
                         checks=Check.str_startswith(LAUNCH_ID_PREFIX)),
            "name": Column(str, nullable=False),
            "date_utc": Column(str, nullable=False, checks=[
                Check(lambda s: _parse_dates(s).notna(), error="date_utc unparseable"),
                Check(lambda s: _parse_dates(s) > cutoff, error="date_utc at or before cutoff"),
            ]),
            "rocket": Column(str, nullable=False),
            "upcoming": Column(bool, nullable=False),
        },
        strict=False,
    )


def build_rocket_schema() -> pa.DataFrameSchema:
    return pa.DataFrameSchema(
        columns={
            "id": Column(str, nullable=False, unique=True),
            "name": Column(str, nullable=False),
            "active": Column(bool, nullable=False),
        },
        strict=False,
    )


def _fail(problems: List[str], msg: str) -> None:
    logger.error(msg)
    problems.append(msg)


def validate_snapshot(config: ArchiveConfig) -> List[str]:
    """Return every problem found; an empty list means the snapshot is valid."""
    problems: List[str] = []

    for path in (config.launches_path, config.rockets_path, config.meta_path):
        if not path.exists():
            _fail(problems, f"Snapshot file missing: {path}")
    if problems:
        return problems

    launches = read_json(config.launches_path)
    rockets = read_json(config.rockets_path)
    meta = read_json(config.meta_path)
    logger.info("Loaded %d launches, %d rockets from %s", len(launches), len(rockets), config.data_dir)

    cutoff = pd.to_datetime(meta.get("cutoff"), utc=True, errors="coerce")
    if pd.isna(cutoff):
        _fail(problems, f"Metadata cutoff unparseable: {meta.get('cutoff')!r}")
        return problems

    # --- Pandera column-level checks ---
    if launches:
        try:
            build_launch_schema(cutoff).validate(pd.DataFrame(launches), lazy=True)
        except pa.errors.SchemaErrors as err:
            logger.error("Launch schema failed:\n%s", err.failure_cases)
            _fail(problems, f"Launch schema failed ({len(err.failure_cases)} failure cases)")
    if rockets:
        try:
            build_rocket_schema().validate(pd.DataFrame(rockets), lazy=True)
        except pa.errors.SchemaErrors as err:
            logger.error("Rocket schema failed:\n%s", err.failure_cases)
            _fail(problems, f"Rocket schema failed ({len(err.failure_cases)} failure cases)")

    # --- Synthesized rockets must be present ---
    rocket_ids = {r.get("id") for r in rockets}
    dangling = sorted({
        launch.get("rocket") for launch in launches
        if str(launch.get("rocket", "")).startswith(ROCKET_ID_PREFIX) and launch.get("rocket") not in rocket_ids
    })
    if dangling:
        _fail(problems, f"Launches reference unknown rockets: {dangling[:10]}")

    # --- Metadata agrees with the artifacts ---
    stats = meta.get("stats") or {}
    if stats.get("launch_count") != len(launches) or stats.get("rocket_count") != len(rockets):
        _fail(problems, f"Metadata counts {stats} do not match {len(launches)} launches / {len(rockets)} rockets")

    checksums = meta.get("checksums") or {}
    for key, path in (("launches", config.launches_path), ("rockets", config.rockets_path)):
        expected = checksums.get(key)
        if not expected:
            continue
        got = sha256_text(path.read_text(encoding="utf-8"))
        if got != expected:
            _fail(problems, f"HASH MISMATCH for {path.name}: got {got}, expected {expected}")

    if not problems:
        logger.info("SNAPSHOT_VALIDATION_OK")
    return problems


def run_validation(config: Optional[ArchiveConfig] = None) -> None:
    setup_logging("validate_snapshot")
    config = config or load_config()
    console.print(f"Validating snapshot: [cyan]{config.data_dir}[/cyan]")

    problems = validate_snapshot(config)
    if problems:
        for msg in problems:
            console.print(f"[red]{msg}[/red]")
        raise SystemExit(1)
    console.print("[green]SNAPSHOT_VALIDATION_OK[/green]")


def cli() -> None:
    try:
        run_validation()
    except SystemExit:
        raise
    except Exception as e:
        logging.exception("Unexpected failure: %s", e)
        console.print(f"[red]Unexpected error[/red]: {e}")
        raise SystemExit(1)


if __name__ == "__main__":
    cli()
