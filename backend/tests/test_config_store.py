"""Tests for the layered config store."""
from app.config_store import ConfigStore, read_config_file
from app.settings import Settings


def test_config_file_overrides_env(tmp_path, monkeypatch):
    monkeypatch.setenv("TASKS_PAGE_SIZE", "7")
    config = tmp_path / "config.yaml"
    config.write_text("report_points: 15\n")

    store = ConfigStore(Settings, str(config))
    store.load_initial()

    assert store.get_settings().tasks_page_size == 7
    assert store.get_settings().report_points == 15


def test_runtime_overrides_and_rollback(tmp_path):
    store = ConfigStore(Settings, str(tmp_path / "missing.yaml"))
    store.load_initial()

    store.update({"tasks_page_size": 9})
    assert store.get_settings().tasks_page_size == 9

    store.update({"tasks_page_size": "not a number"})
    assert store.get_settings().tasks_page_size == 9

    store.clear_overrides()
    assert store.get_settings().tasks_page_size == 5


def test_invalid_config_files_are_ignored(tmp_path):
    listing = tmp_path / "config.yaml"
    listing.write_text("- just\n- a list\n")
    unsupported = tmp_path / "config.toml"
    unsupported.write_text("x = 1")

    assert read_config_file(listing) == {}
    assert read_config_file(unsupported) == {}
    assert read_config_file(tmp_path / "absent.json") == {}
