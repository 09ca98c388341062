from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from core.config import AppConfig, StoreConfig, load_config
from core.data.store import SnapshotFile
from core.models.events import Snapshot


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    monkeypatch.setenv("EVENTINDEX_HOME", str(tmp_path / "home"))
    return tmp_path / "home"


def test_defaults_without_files(isolated_home):
    config = load_config()
    assert config.store.snapshot_limit == 500
    assert config.store.max_events is None
    assert config.home_path == isolated_home
    assert isolated_home.is_dir()


def test_yaml_and_env_resolution(tmp_path, monkeypatch):
    env_path = tmp_path / ".env"
    env_path.write_text("EVENTS_LOOKBACK=12h\n")
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "store:\n"
        "  snapshot_limit: 50\n"
        "  max_events: 1000\n"
        "  default_lookback: ${EVENTS_LOOKBACK}\n"
        "logging:\n"
        "  level: DEBUG\n"
    )
    monkeypatch.delenv("EVENTS_LOOKBACK", raising=False)

    config = load_config(config_path=config_path, env_path=env_path)

    assert config.store.snapshot_limit == 50
    assert config.store.max_events == 1000
    assert config.store.default_filter().lookback == timedelta(hours=12)
    assert config.logging.level == "DEBUG"


def test_invalid_lookback_rejected():
    with pytest.raises(ValidationError):
        StoreConfig(default_lookback="whenever")
    assert StoreConfig(default_lookback="all").default_filter().lookback is None


def test_snapshot_file_round_trip(tmp_path):
    snapshot_file = SnapshotFile(tmp_path / "state")
    assert snapshot_file.load() is None

    snapshot_file.save(Snapshot())
    assert snapshot_file.exists()
    data = snapshot_file.load()
    assert data["events"] == []
    assert snapshot_file.delete() is True
    assert snapshot_file.delete() is False


def test_snapshot_file_corrupt(tmp_path):
    snapshot_file = SnapshotFile(tmp_path)
    snapshot_file.path.write_text("{not json")
    assert snapshot_file.load() is None
    snapshot_file.path.write_text("[1, 2]")
    assert snapshot_file.load() is None


def test_app_config_home_expands():
    assert AppConfig(home_dir="~/x").home_path.name == "x"
