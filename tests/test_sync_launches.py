"""End-to-end tests for the offline sync pipeline against a fake upstream."""
import json

import pandas as pd
import pytest
import requests

from launch_archive.errors import FetchError
from launch_archive.sync_launches import fetch_catalog_launches, main, run_sync

from conftest import FakeResponse, FakeSession, ll2_launch

NOW = pd.Timestamp("2024-06-01T00:00:00Z")
ROCKETS_URL = "https://api.spacexdata.com/v4/rockets"
LL2_URL = "https://ll.thespacedevs.com/2.2.0/launch/"
LL2_PAGE_2 = "https://ll.thespacedevs.com/2.2.0/launch/?limit=100&offset=100"

SPACEX_ROCKETS = [
    {"id": "5e9d0d95eda69973a809d1ec", "name": "Falcon 9"},
    {"id": "5e9d0d95eda69974db09d1ed", "name": "Falcon Heavy"},
]


def upstream(page_two=None):
    page_one = [
        ll2_launch(id="b", name="Starlink Group 6-1", net="2023-05-01T00:00:00Z",
                   rocket={"configuration": {"full_name": "Falcon 9"}}),
        ll2_launch(id="before", net="2022-11-01T00:00:00Z"),
        ll2_launch(id="rl", launch_service_provider={"name": "Rocket Lab"}),
    ]
    if page_two is None:
        page_two = [
            ll2_launch(id="a", name="Starship IFT-1", net="2023-04-20T13:33:09Z",
                       rocket={"configuration": {"full_name": "Starship", "family": "Starship"}},
                       status={"name": "Launch Failure", "abbrev": "Failure"}),
            # same launch listed twice with a different id, fingerprint collides
            ll2_launch(id="a-dup", name="Starship IFT-1", net="2023-04-20T13:33:09.5Z",
                       rocket={"configuration": {"full_name": "Starship"}}),
            ll2_launch(id="c", name="Starship IFT-2", net="2023-11-18T13:03:00Z",
                       rocket={"configuration": {"full_name": "Starship"}}),
        ]
    return FakeSession({
        ROCKETS_URL: SPACEX_ROCKETS,
        LL2_URL: {"count": 6, "next": LL2_PAGE_2, "results": page_one},
        LL2_PAGE_2: {"count": 6, "next": None, "results": page_two},
    })


def wiki(title):
    if "IFT-2" in title:
        raise requests.Timeout("slow")
    return f"https://en.wikipedia.org/wiki/{title.replace(' ', '_')}"


class TestFetchCatalog:

    def test_first_page_query(self, config):
        session = upstream()
        fetch_catalog_launches(config, session=session)
        first = session.calls[0]
        assert first["url"] == LL2_URL
        assert first["params"]["window_start__gte"] == "2022-12-05T00:00:00.000Z"
        assert first["params"]["search"] == "SpaceX"
        assert first["params"]["mode"] == "detailed"
        assert session.calls[1]["params"] is None

    def test_follows_cursor(self, config):
        launches = fetch_catalog_launches(config, session=upstream())
        assert [raw["id"] for raw in launches] == ["b", "before", "rl", "a", "a-dup", "c"]

    def test_repeated_cursor_is_fatal(self, config):
        session = FakeSession({LL2_URL: {"next": LL2_URL, "results": []}})
        with pytest.raises(FetchError):
            fetch_catalog_launches(config, session=session)


class TestRunSync:

    def test_pipeline_output(self, config):
        result = run_sync(config, session=upstream(), lookup=wiki, now=NOW)

        assert [launch.id for launch in result.launches] == [
            "supplemental-ll2-a", "supplemental-ll2-b", "supplemental-ll2-c",
        ]
        a, b, c = result.launches
        assert a.success is False
        assert b.rocket == "5e9d0d95eda69973a809d1ec"
        assert a.rocket == "supplemental-rocket-starship"
        assert a.links.wikipedia == "https://en.wikipedia.org/wiki/Starship_IFT-1"
        assert c.links.wikipedia is None
        assert [r.id for r in result.rockets] == ["supplemental-rocket-starship"]
        assert result.rockets[0].type == "Starship"
        assert result.fetched == 6

    def test_snapshot_written(self, config):
        run_sync(config, session=upstream(), lookup=wiki, now=NOW)
        launches = json.loads(config.launches_path.read_text(encoding="utf-8"))
        meta = json.loads(config.meta_path.read_text(encoding="utf-8"))
        assert len(launches) == 3
        assert meta["stats"] == {"launch_count": 3, "rocket_count": 1}

    def test_rockets_sorted_by_name(self, config):
        session = upstream(page_two=[
            ll2_launch(id="z", name="Z", rocket={"configuration": {"full_name": "Zeta"}}),
            ll2_launch(id="y", name="Y", rocket={"configuration": {"full_name": "Alpha"}}),
        ])
        result = run_sync(config, session=session, lookup=lambda t: None, now=NOW, write=False)
        assert [r.name for r in result.rockets] == ["Alpha", "Zeta"]

    def test_rocket_only_on_dropped_duplicate_not_written(self, config):
        session = upstream(page_two=[
            ll2_launch(id="a", name="Starship IFT-1", net="2023-04-20T13:33:09Z",
                       rocket={"configuration": {"full_name": "Starship"}}),
            ll2_launch(id="a-dup", name="Starship IFT-1", net="2023-04-20T13:33:09Z",
                       rocket={"configuration": {"full_name": "Starship Prototype"}}),
        ])
        result = run_sync(config, session=session, lookup=lambda t: None, now=NOW, write=False)
        assert [launch.id for launch in result.launches] == ["supplemental-ll2-a", "supplemental-ll2-b"]
        assert [r.id for r in result.rockets] == ["supplemental-rocket-starship"]

    def test_rocket_fetch_failure_is_fatal(self, config):
        session = upstream()
        session.routes[ROCKETS_URL] = FakeResponse({}, status_code=503)
        with pytest.raises(FetchError):
            run_sync(config, session=session, lookup=wiki, now=NOW)
        assert not config.launches_path.exists()

    def test_page_timeout_keeps_previous_snapshot(self, config):
        run_sync(config, session=upstream(), lookup=wiki, now=NOW)
        before = config.launches_path.read_text(encoding="utf-8")

        session = upstream()
        session.routes[LL2_PAGE_2] = requests.Timeout("read timed out")
        with pytest.raises(FetchError):
            run_sync(config, session=session, lookup=wiki, now=NOW)
        assert config.launches_path.read_text(encoding="utf-8") == before


class TestMain:

    def test_invalid_cutoff(self, tmp_path):
        with pytest.raises(ValueError):
            main(["--cutoff", "not-a-date", "--data-dir", str(tmp_path), "--dry-run"])
