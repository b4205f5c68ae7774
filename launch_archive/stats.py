"""Outcome classification and the official launch tally."""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable

from launch_archive.config import ArchiveConfig
from launch_archive.models import Launch
from launch_archive.utils import parse_utc

OUTCOMES = ("success", "failure", "pending", "upcoming")


def launch_outcome(launch: Launch) -> str:
    if launch.upcoming:
        return "upcoming"
    if launch.success is None:
        return "pending"
    return "success" if launch.success else "failure"


def is_official_launch(launch: Launch, config: ArchiveConfig) -> bool:
    """Counts toward the official tally: flown, dated, and at or before the cutoff."""
    if launch.id in config.excluded_ids or launch.upcoming:
        return False
    ts = parse_utc(launch.date_utc)
    return ts is not None and ts <= config.cutoff


def count_official_launches(launches: Iterable[Launch], config: ArchiveConfig) -> int:
    return sum(1 for launch in launches if is_official_launch(launch, config))


def summarize_launches(launches: Iterable[Launch], config: ArchiveConfig) -> Dict[str, int]:
    launches = list(launches)
    counts = Counter(launch_outcome(launch) for launch in launches)
    summary = {"total": len(launches), "official": count_official_launches(launches, config)}
    summary.update({outcome: counts.get(outcome, 0) for outcome in OUTCOMES})
    return summary
