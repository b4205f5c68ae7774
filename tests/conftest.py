"""Shared fixtures: fixed-cutoff config, canonical record factories and a fake HTTP session."""
import json

import pytest
import requests

from launch_archive.config import load_config
from launch_archive.models import Launch, Rocket


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=None):
        self._payload = payload
        self.status_code = status_code
        self._text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if self._text is not None:
            return json.loads(self._text)
        return self._payload


class FakeSession:
    """Serves canned responses keyed by URL; records every call."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def get(self, url, params=None, timeout=None, headers=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        route = self.routes.get(url)
        if route is None:
            return FakeResponse({"detail": "Not found"}, status_code=404)
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(url, params)
        if isinstance(route, FakeResponse):
            return route
        return FakeResponse(route)

    def urls(self):
        return [c["url"] for c in self.calls]


@pytest.fixture
def config(tmp_path):
    return load_config(
        cutoff="2022-12-04T23:59:59Z",
        excluded_ids=[],
        data_dir=tmp_path / "data",
        request_timeout=5,
    )


@pytest.fixture
def fake_session():
    return FakeSession()


def make_launch(id="5eb87cd9ffd86e000604b32a", name="Starlink 1", date_utc="2023-01-01T00:00:00.000Z", **kw):
    fields = {
        "id": id,
        "name": name,
        "date_utc": date_utc,
        "success": True,
        "upcoming": False,
        "rocket": "5e9d0d95eda69973a809d1ec",
    }
    fields.update(kw)
    return Launch(**fields)


def make_rocket(id="5e9d0d95eda69973a809d1ec", name="Falcon 9", **kw):
    fields = {"id": id, "name": name, "type": "rocket", "active": True, "first_flight": "2010-06-04"}
    fields.update(kw)
    return Rocket(**fields)


def ll2_launch(id="abc123", net="2023-03-01T12:00:00Z", **kw):
    """A Launch Library 2 detailed-mode launch record."""
    raw = {
        "id": id,
        "url": f"https://ll.thespacedevs.com/2.2.0/launch/{id}/",
        "name": "Falcon 9 Block 5 | Starlink Group 5-4",
        "net": net,
        "window_start": net,
        "window_end": net,
        "status": {"name": "Launch Successful", "abbrev": "Success"},
        "launch_service_provider": {"name": "SpaceX"},
        "rocket": {
            "configuration": {
                "name": "Falcon 9",
                "full_name": "Falcon 9 Block 5",
                "family": "Falcon",
                "maiden_flight": "2018-05-11",
            }
        },
        "mission": {"description": "A batch of Starlink satellites."},
        "image": "https://images.example.com/f9.png",
        "infographic": None,
        "vidURLs": [{"url": "https://www.youtube.com/watch?v=abc"}],
        "infoURLs": [],
    }
    raw.update(kw)
    return raw
