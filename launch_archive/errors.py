"""Error taxonomy shared by the sync pipeline and the online merge layer."""

from __future__ import annotations

from typing import Optional


class ArchiveError(Exception):
    """Base class for launch archive failures."""


class FetchError(ArchiveError):
    """A required upstream answered non-2xx, timed out, or returned unreadable JSON."""

    def __init__(self, url: str, message: str, original_error: Optional[Exception] = None):
        self.url = url
        self.message = message
        self.original_error = original_error
        super().__init__(f"{message}: {url}")


class LaunchNotFoundError(ArchiveError, LookupError):
    """No resolution tier produced a launch for the requested id."""

    def __init__(self, launch_id: str):
        self.launch_id = launch_id
        super().__init__(f"Launch not found: {launch_id}")


class SnapshotError(ArchiveError):
    """A snapshot artifact could not be read or written."""

    def __init__(self, path, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")
