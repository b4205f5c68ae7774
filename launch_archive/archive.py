"""
archive.py
----------
Read-time merge of the live SpaceX API with the offline snapshot.

Nothing here is cached or persisted: every call fetches the live feed, reads
the snapshot and recomputes the merged collections. Live records win every
identity collision; excluded ids are dropped from both sources.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from launch_archive.config import ArchiveConfig, load_config
from launch_archive.errors import FetchError, LaunchNotFoundError
from launch_archive.identity import merge_launches, merge_rockets, sort_launches
from launch_archive.models import Launch, Rocket
from launch_archive.normalize_spacex import normalize_spacex_launch, normalize_spacex_rocket
from launch_archive.slugs import extract_launch_id
from launch_archive.snapshot import Snapshot, load_snapshot
from launch_archive.utils import fetch_json

logger = logging.getLogger(__name__)


class SpaceXClient:
    """Live primary feed (SpaceX API v4)."""

    def __init__(self, config: ArchiveConfig, session=None):
        self.base = config.spacex_api_base.rstrip("/")
        self.timeout = config.request_timeout
        self.session = session

    def _get(self, path: str):
        return fetch_json(f"{self.base}/{path}", session=self.session, timeout=self.timeout)

    def launches(self) -> List[Launch]:
        data = self._get("launches")
        if not isinstance(data, list):
            raise FetchError(f"{self.base}/launches", "Expected a JSON array of launches")
        return [normalize_spacex_launch(item) for item in data]

    def rockets(self) -> List[Rocket]:
        data = self._get("rockets")
        if not isinstance(data, list):
            raise FetchError(f"{self.base}/rockets", "Expected a JSON array of rockets")
        return [normalize_spacex_rocket(item) for item in data]

    def launch(self, launch_id: str) -> Launch:
        data = self._get(f"launches/{launch_id}")
        if not isinstance(data, dict) or not data.get("id"):
            raise FetchError(f"{self.base}/launches/{launch_id}", "Expected a launch object")
        return normalize_spacex_launch(data)


def _deps(config, client, snapshot):
    config = config or load_config()
    client = client or SpaceXClient(config)
    snapshot = snapshot if snapshot is not None else load_snapshot(config)
    return config, client, snapshot


def get_launches(
    config: Optional[ArchiveConfig] = None,
    *,
    client: Optional[SpaceXClient] = None,
    snapshot: Optional[Snapshot] = None,
) -> List[Launch]:
    """Live + supplemental launches, newest first. Live fetch failures raise FetchError."""
    config, client, snapshot = _deps(config, client, snapshot)

    live = [launch for launch in client.launches() if launch.id not in config.excluded_ids]
    supplemental = [launch for launch in snapshot.launches if launch.id not in config.excluded_ids]
    return sort_launches(merge_launches(live, supplemental), descending=True)


def get_rockets(
    config: Optional[ArchiveConfig] = None,
    *,
    client: Optional[SpaceXClient] = None,
    snapshot: Optional[Snapshot] = None,
) -> List[Rocket]:
    config, client, snapshot = _deps(config, client, snapshot)
    return merge_rockets(client.rockets(), snapshot.rockets)


def get_launch_by_id(
    launch_id: str,
    config: Optional[ArchiveConfig] = None,
    *,
    client: Optional[SpaceXClient] = None,
    snapshot: Optional[Snapshot] = None,
) -> Launch:
    """Resolve one launch: snapshot, then live by id, then a scan of the merged list.

    Raises LaunchNotFoundError when the id is excluded or no tier has it, and
    FetchError when the merged list itself cannot be fetched.
    """
    config, client, snapshot = _deps(config, client, snapshot)
    if launch_id in config.excluded_ids:
        raise LaunchNotFoundError(launch_id)

    for launch in snapshot.launches:
        if launch.id == launch_id:
            return launch

    try:
        return client.launch(launch_id)
    except FetchError as e:
        logger.info("Live lookup for %s failed, scanning merged launches: %s", launch_id, e)

    for launch in get_launches(config, client=client, snapshot=snapshot):
        if launch.id == launch_id:
            return launch
    raise LaunchNotFoundError(launch_id)


def resolve_launch(slug_or_id: str, config: Optional[ArchiveConfig] = None, **deps) -> Launch:
    return get_launch_by_id(extract_launch_id(slug_or_id), config, **deps)


def find_rocket(rockets: List[Rocket], rocket_id: str) -> Optional[Rocket]:
    for rocket in rockets:
        if rocket.id == rocket_id:
            return rocket
    return None
