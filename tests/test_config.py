"""Tests for configuration loading and overrides."""
from pathlib import Path

import pandas as pd
import pytest

from launch_archive.config import ENRICHMENT_WORKERS, ArchiveConfig, load_config


class TestLoadConfig:

    def test_defaults(self, monkeypatch):
        for name in ("BASE_CUTOFF_UTC", "LAUNCH_ARCHIVE_EXCLUDED_IDS",
                     "LAUNCH_ARCHIVE_DATA_DIR", "LAUNCH_ARCHIVE_REQUEST_TIMEOUT"):
            monkeypatch.delenv(name, raising=False)
        config = load_config()
        assert config.cutoff == pd.Timestamp("2022-12-04T23:59:59Z")
        assert config.excluded_ids == frozenset()
        assert config.enrichment_workers == ENRICHMENT_WORKERS == 5
        assert config.launches_path == Path("data/supplemental-launches.json")

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("BASE_CUTOFF_UTC", "2023-01-01T00:00:00Z")
        monkeypatch.setenv("LAUNCH_ARCHIVE_EXCLUDED_IDS", "a, b,,c")
        monkeypatch.setenv("LAUNCH_ARCHIVE_DATA_DIR", "/tmp/archive")
        monkeypatch.setenv("LAUNCH_ARCHIVE_REQUEST_TIMEOUT", "3.5")
        config = load_config()
        assert config.cutoff == pd.Timestamp("2023-01-01T00:00:00Z")
        assert config.excluded_ids == frozenset({"a", "b", "c"})
        assert config.data_dir == Path("/tmp/archive")
        assert config.request_timeout == 3.5

    def test_keyword_overrides_environment(self, monkeypatch):
        monkeypatch.setenv("BASE_CUTOFF_UTC", "2023-01-01T00:00:00Z")
        config = load_config(cutoff="2024-01-01T00:00:00Z")
        assert config.cutoff == pd.Timestamp("2024-01-01T00:00:00Z")

    def test_invalid_cutoff(self, monkeypatch):
        monkeypatch.setenv("BASE_CUTOFF_UTC", "yesterday-ish")
        with pytest.raises(ValueError):
            load_config()

    def test_config_is_immutable(self):
        config = ArchiveConfig()
        with pytest.raises(AttributeError):
            config.brand = "Other"
        later = config.with_cutoff("2024-01-01T00:00:00Z")
        assert later.cutoff != config.cutoff
