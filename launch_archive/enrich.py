"""
enrich.py
---------
Best-effort Wikipedia links for launches that have none.

A fixed number of worker threads drain one task queue; each task is a single
lookup whose outcome is captured in an EnrichmentResult. A failed lookup only
affects its own launch and is never retried.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from launch_archive.config import ArchiveConfig
from launch_archive.models import Launch
from launch_archive.utils import fetch_json, make_session

logger = logging.getLogger(__name__)

Lookup = Callable[[str], Optional[str]]


@dataclass(frozen=True)
class EnrichmentResult:
    index: int
    launch_id: str
    url: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def find_wikipedia_url(title: str, config: ArchiveConfig, session=None) -> Optional[str]:
    """MediaWiki opensearch for "<title> <brand>"; the first hit's URL or None."""
    result = fetch_json(
        config.wikipedia_api,
        params={
            "action": "opensearch",
            "search": f"{title} {config.brand}",
            "limit": "1",
            "namespace": "0",
            "format": "json",
        },
        session=session,
        timeout=config.request_timeout,
    )
    if not isinstance(result, list) or len(result) < 4 or not isinstance(result[3], list):
        return None
    urls = result[3]
    return urls[0] if urls and isinstance(urls[0], str) else None


def wikipedia_lookup(config: ArchiveConfig, session=None) -> Lookup:
    """Lookup callable for run_enrichment.

    Without an explicit session every worker thread gets its own
    requests.Session, since sessions are not shared across threads.
    """
    local = threading.local()

    def lookup(title: str) -> Optional[str]:
        sess = session
        if sess is None:
            sess = getattr(local, "session", None)
            if sess is None:
                sess = local.session = make_session()
        return find_wikipedia_url(title, config, session=sess)
    return lookup


def _attempt(index: int, launch: Launch, lookup: Lookup) -> EnrichmentResult:
    try:
        url = lookup(launch.name)
    except Exception as e:
        logger.warning("Wikipedia lookup failed for %s (%s): %s", launch.id, launch.name, e)
        return EnrichmentResult(index, launch.id, error=str(e) or e.__class__.__name__)
    return EnrichmentResult(index, launch.id, url=url)


def run_enrichment(
    launches: Sequence[Launch],
    lookup: Lookup,
    workers: int = 5,
) -> List[EnrichmentResult]:
    """Look up every launch missing a wikipedia link; results are ordered by index."""
    tasks: "queue.Queue" = queue.Queue()
    for index, launch in enumerate(launches):
        if not launch.links.wikipedia:
            tasks.put((index, launch))

    results: List[EnrichmentResult] = []
    results_lock = threading.Lock()

    def worker():
        while True:
            try:
                index, launch = tasks.get_nowait()
            except queue.Empty:
                return
            result = _attempt(index, launch, lookup)
            with results_lock:
                results.append(result)

    threads = [
        threading.Thread(target=worker, name=f"enrich-{n}", daemon=True)
        for n in range(max(1, workers))
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    return sorted(results, key=lambda r: r.index)


def apply_enrichment(launches: Sequence[Launch], results: Sequence[EnrichmentResult]) -> List[Launch]:
    """New launch list with found URLs written into links.wikipedia."""
    found = {r.index: r.url for r in results if r.url}
    return [
        launch.with_wikipedia(found[i]) if i in found else launch
        for i, launch in enumerate(launches)
    ]
