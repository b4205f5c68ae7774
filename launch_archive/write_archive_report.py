import argparse
import datetime
import logging
import pathlib

from rich.console import Console

from launch_archive.archive import SpaceXClient, get_launches, get_rockets
from launch_archive.config import load_config
from launch_archive.normalize_ll2 import LAUNCH_ID_PREFIX
from launch_archive.snapshot import load_snapshot
from launch_archive.stats import OUTCOMES, summarize_launches
from launch_archive.utils import setup_logging

console = Console()

REPORTS_DIR = pathlib.Path('reports')


def write_report(config, client=None, snapshot=None, reports_dir=REPORTS_DIR, now=None):
    client = client or SpaceXClient(config)
    snapshot = snapshot if snapshot is not None else load_snapshot(config)
    now = now or datetime.datetime.now(datetime.timezone.utc)

    launches = get_launches(config, client=client, snapshot=snapshot)
    rockets = get_rockets(config, client=client, snapshot=snapshot)
    summary = summarize_launches(launches, config)
    supplemental = sum(1 for launch in launches if launch.id.startswith(LAUNCH_ID_PREFIX))
    meta = snapshot.meta or {}

    reports_dir.mkdir(parents=True, exist_ok=True)
    report_path = reports_dir / f"archive_report_{now:%Y%m%d_%H%M%S}.txt"
    with report_path.open('w', encoding='utf-8') as f:
        f.write("SpaceX Launch Archive - Merged Dataset Report\n")
        f.write("=" * 60 + "\n\n")

        f.write("Launches\n")
        f.write(f"  total: {summary['total']}  live={summary['total'] - supplemental}  supplemental={supplemental}\n")
        for outcome in OUTCOMES:
            f.write(f"  {outcome:<10}: {summary[outcome]}\n")
        f.write(f"  official (<= cutoff): {summary['official']}\n\n")

        f.write("Rockets\n")
        f.write(f"  total: {len(rockets)}  supplemental={len(snapshot.rockets)}\n\n")

        f.write("Snapshot\n")
        f.write(f"  generated_at: {meta.get('generated_at', 'n/a')}\n")
        f.write(f"  cutoff: {meta.get('cutoff', 'n/a')}\n")
        for source in meta.get('sources', []):
            f.write(f"  source: {source.get('name')} <{source.get('url')}>\n")
        f.write(f"\n  run_at_utc: {now.strftime('%Y-%m-%dT%H:%M:%SZ')}\n")

    console.print(f"Wrote {report_path}")
    return report_path


def cli(argv=None):
    parser = argparse.ArgumentParser(description="Write a text report of the merged launch archive.")
    parser.add_argument("--data-dir", help="snapshot directory (default: data/)")
    args = parser.parse_args(argv)

    setup_logging("write_archive_report")
    config = load_config(**({"data_dir": args.data_dir} if args.data_dir else {}))
    try:
        write_report(config)
    except Exception as e:
        logging.exception("Report failed: %s", e)
        console.print(f"[red]Report failed:[/red] {e}")
        raise SystemExit(1)


if __name__ == '__main__':
    cli()
