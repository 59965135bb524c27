from __future__ import annotations

import json

import pytest

from questcompanion.core.errors import SettingsCorruptError
from questcompanion.core.settings import (
    LEGACY_OVERRIDES_FILE,
    LEGACY_PROGRESS_PATH_FILE,
    SETTINGS_FILE,
    PersistedSettings,
    Preferences,
    Settings,
    user_data_dir,
)


def test_defaults_when_nothing_on_disk(tmp_path):
    s = Settings(tmp_path).read()
    assert s == PersistedSettings()
    assert not (tmp_path / SETTINGS_FILE).exists()


def test_user_data_dir_honours_env(tmp_path, monkeypatch):
    monkeypatch.setenv("QUEST_COMPANION_HOME", str(tmp_path))
    assert user_data_dir() == tmp_path.resolve()


def test_legacy_migration(tmp_path, write_json):
    write_json(LEGACY_OVERRIDES_FILE, {"MQ101": {"completed": True, "updatedAt": "2023-01-01T00:00:00Z"},
                                       "MQ102": {"completed": False}})
    write_json(LEGACY_PROGRESS_PATH_FILE, {"path": "  C:/Games/progress.json "})

    store = Settings(tmp_path)
    migrated = store.read()
    assert migrated.overrides == {"MQ101": {"completed": True, "updatedAt": "2023-01-01T00:00:00Z"}}
    assert migrated.progress_path == "C:/Games/progress.json"
    assert migrated.preferences == Preferences()

    store.write(migrated)
    on_disk = json.loads((tmp_path / SETTINGS_FILE).read_text(encoding="utf-8"))
    assert on_disk["progressPath"] == "C:/Games/progress.json"
    assert on_disk["preferences"] == {"darkMode": False, "hideCompleted": False, "hideDescriptions": False}


def test_primary_document_wins_over_legacy(tmp_path, write_json):
    write_json(LEGACY_OVERRIDES_FILE, {"OLD": {"completed": True}})
    write_json(SETTINGS_FILE, {"progressPath": None, "overrides": {}, "preferences": {}})
    assert Settings(tmp_path).read().overrides == {}


def test_corrupt_primary_raises(tmp_path):
    (tmp_path / SETTINGS_FILE).write_text("{oops", encoding="utf-8")
    with pytest.raises(SettingsCorruptError):
        Settings(tmp_path).read()


def test_non_object_primary_raises(tmp_path, write_json):
    write_json(SETTINGS_FILE, ["not", "an", "object"])
    with pytest.raises(SettingsCorruptError):
        Settings(tmp_path).read()


def test_corrupt_legacy_raises(tmp_path):
    (tmp_path / LEGACY_OVERRIDES_FILE).write_text("nope", encoding="utf-8")
    with pytest.raises(SettingsCorruptError):
        Settings(tmp_path).read()


def test_partial_document_is_normalized(tmp_path, write_json):
    write_json(SETTINGS_FILE, {"progressPath": "   ", "preferences": {"darkMode": "yes", "hideCompleted": True}})
    s = Settings(tmp_path).read()
    assert s.progress_path is None
    assert s.overrides == {}
    assert s.preferences == Preferences(dark_mode=False, hide_completed=True)


def test_set_preferences_merges(tmp_path):
    store = Settings(tmp_path)
    store.set_preferences({"darkMode": True})
    prefs = store.set_preferences({"hideDescriptions": True})
    assert prefs == Preferences(dark_mode=True, hide_descriptions=True)
    assert store.preferences() == prefs


def test_set_progress_path_round_trip(tmp_path):
    store = Settings(tmp_path)
    assert store.set_progress_path(" /tmp/progress.json ") == "/tmp/progress.json"
    assert store.progress_path() == "/tmp/progress.json"
    assert store.set_progress_path(None) is None
    assert store.progress_path() is None


def test_write_leaves_no_part_file(tmp_path):
    Settings(tmp_path).write(PersistedSettings(progress_path="x"))
    assert not (tmp_path / (SETTINGS_FILE + ".part")).exists()


def test_legacy_override_without_timestamp_is_stamped(tmp_path, write_json):
    write_json(LEGACY_OVERRIDES_FILE, {"MQ102": {"completed": True}})
    store = Settings(tmp_path)

    stamped = store.read().overrides["MQ102"]
    assert stamped["completed"] is True
    assert stamped["updatedAt"].endswith("Z")

    written = store.write(store.read())
    assert store.read().overrides == written.overrides
    on_disk = json.loads((tmp_path / SETTINGS_FILE).read_text(encoding="utf-8"))
    assert on_disk["overrides"]["MQ102"]["updatedAt"] == written.overrides["MQ102"]["updatedAt"]
