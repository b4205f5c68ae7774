"""
sync_launches.py
----------------
Offline reconciliation run. Pulls SpaceX launches dated after the cutoff from
Launch Library 2, normalizes and dedupes them, adds best-effort Wikipedia
links and replaces the snapshot under data/.

Steps 1-4 and the final write are fatal on failure (the old snapshot stays);
enrichment failures only leave a launch without a wikipedia link.
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
from rich.console import Console

from launch_archive.config import ArchiveConfig, load_config
from launch_archive.enrich import (
    EnrichmentResult,
    Lookup,
    apply_enrichment,
    run_enrichment,
    wikipedia_lookup,
)
from launch_archive.errors import FetchError
from launch_archive.identity import dedupe_launches, sort_launches
from launch_archive.models import Launch, Rocket
from launch_archive.normalize_ll2 import normalize_ll2_launch
from launch_archive.normalize_spacex import build_rocket_name_index
from launch_archive.snapshot import write_snapshot
from launch_archive.utils import fetch_json, format_utc, setup_logging

console = Console()
logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    launches: List[Launch]
    rockets: List[Rocket]
    meta: Optional[Dict[str, Any]] = None
    enrichment: List[EnrichmentResult] = field(default_factory=list)
    fetched: int = 0


# --- step 1 ------------------------------------------------------------------

def fetch_rocket_index(config: ArchiveConfig, session=None) -> Dict[str, str]:
    url = f"{config.spacex_api_base}/rockets"
    rockets = fetch_json(url, session=session, timeout=config.request_timeout)
    if not isinstance(rockets, list):
        raise FetchError(url, "Expected a JSON array of rockets")
    return build_rocket_name_index(rockets)


# --- step 2 ------------------------------------------------------------------

def fetch_catalog_launches(config: ArchiveConfig, session=None) -> List[Dict[str, Any]]:
    """Follow the ``next`` cursor from the first page after the cutoff until it runs out."""
    start_after = config.cutoff + pd.Timedelta(seconds=1)
    params: Optional[Dict[str, Any]] = {
        "limit": str(config.page_size),
        "mode": "detailed",
        "search": config.brand,
        "window_start__gte": format_utc(start_after),
    }

    launches: List[Dict[str, Any]] = []
    page_url: Optional[str] = config.ll2_launch_endpoint
    seen = set()

    while page_url:
        if page_url in seen:
            raise FetchError(page_url, "Pagination cursor repeated")
        seen.add(page_url)

        page = fetch_json(page_url, params=params, session=session, timeout=config.request_timeout)
        params = None  # next URLs already carry the query
        results = page.get("results") if isinstance(page, dict) else None
        if not isinstance(results, list):
            break

        launches.extend(results)
        logger.info("Fetched %d catalog launches (%d total) from %s", len(results), len(launches), page_url)
        page_url = page.get("next")

    return launches


# --- step 3 ------------------------------------------------------------------

def normalize_catalog(
    raw_launches: List[Dict[str, Any]],
    rocket_index: Dict[str, str],
    config: ArchiveConfig,
    now: Optional[pd.Timestamp] = None,
):
    launches: List[Launch] = []
    rockets_by_id: Dict[str, Rocket] = {}

    for raw in raw_launches:
        normalized = normalize_ll2_launch(raw, rocket_index, config, now=now)
        if normalized is None:
            continue
        launches.append(normalized.launch)
        if normalized.rocket is not None:
            rockets_by_id.setdefault(normalized.rocket.id, normalized.rocket)

    rockets = sorted(rockets_by_id.values(), key=lambda r: r.name)
    return launches, rockets


# --- orchestration -----------------------------------------------------------

def run_sync(
    config: ArchiveConfig,
    session=None,
    lookup: Optional[Lookup] = None,
    now: Optional[pd.Timestamp] = None,
    write: bool = True,
) -> SyncResult:
    rocket_index = fetch_rocket_index(config, session=session)
    console.print(f"Known rockets: {len(rocket_index)} from [cyan]{config.spacex_api_base}/rockets[/cyan]")

    raw_launches = fetch_catalog_launches(config, session=session)
    console.print(f"Fetched {len(raw_launches)} catalog launches from [cyan]{config.ll2_launch_endpoint}[/cyan]")

    normalized, rockets = normalize_catalog(raw_launches, rocket_index, config, now=now)
    launches = sort_launches(dedupe_launches(normalized))
    referenced = {launch.rocket for launch in launches}
    rockets = [rocket for rocket in rockets if rocket.id in referenced]
    logger.info(
        "Normalized %d of %d catalog launches, %d after dedupe",
        len(normalized), len(raw_launches), len(launches),
    )

    lookup = lookup or wikipedia_lookup(config, session=session)
    enrichment = run_enrichment(launches, lookup, workers=config.enrichment_workers)
    launches = apply_enrichment(launches, enrichment)
    found = sum(1 for r in enrichment if r.url)
    failed = sum(1 for r in enrichment if not r.ok)
    console.print(f"Wikipedia links: {found} found, {failed} lookups failed, {len(enrichment)} attempted")

    result = SyncResult(launches, rockets, enrichment=enrichment, fetched=len(raw_launches))
    if write:
        result.meta = write_snapshot(config, launches, rockets)
    return result


def _relative(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


def main(argv: Optional[List[str]] = None) -> SyncResult:
    parser = argparse.ArgumentParser(description="Sync supplemental launches into the snapshot store.")
    parser.add_argument("--cutoff", help="ISO-8601 cutoff instant (default: BASE_CUTOFF_UTC or built-in)")
    parser.add_argument("--data-dir", help="snapshot directory (default: data/)")
    parser.add_argument("--dry-run", action="store_true", help="run every step but do not write the snapshot")
    args = parser.parse_args(argv)

    overrides = {}
    if args.cutoff:
        overrides["cutoff"] = args.cutoff
    if args.data_dir:
        overrides["data_dir"] = args.data_dir
    config = load_config(**overrides)

    setup_logging("sync_launches")
    result = run_sync(config, write=not args.dry_run)

    if args.dry_run:
        console.print(f"[yellow]Dry run:[/yellow] {len(result.launches)} launches, {len(result.rockets)} rockets (nothing written)")
        return result

    console.print(f"[green]Wrote {len(result.launches)} launches[/green] -> {_relative(config.launches_path)}")
    console.print(f"[green]Wrote {len(result.rockets)} rockets[/green] -> {_relative(config.rockets_path)}")
    console.print(f"[green]Wrote metadata[/green] -> {_relative(config.meta_path)}")
    return result


def cli() -> None:
    try:
        main()
    except SystemExit:
        raise
    except Exception as e:
        logger.exception("Sync failed: %s", e)
        console.print(f"[red]Sync failed:[/red] {e}")
        raise SystemExit(1)


if __name__ == "__main__":
    cli()
