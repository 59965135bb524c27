from __future__ import annotations

from questcompanion.utils.resources import find_app_icon, find_catalog_dir


def test_catalog_dir_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("QUEST_COMPANION_DATA_DIR", str(tmp_path / "data"))
    assert find_catalog_dir() == tmp_path / "data"


def test_catalog_dir_found_in_cwd(tmp_path, monkeypatch):
    monkeypatch.delenv("QUEST_COMPANION_DATA_DIR", raising=False)
    (tmp_path / "quest_data").mkdir()
    monkeypatch.chdir(tmp_path)
    found = find_catalog_dir()
    assert found.name == "quest_data"
    assert found.is_dir()


def test_icon_hint(tmp_path, monkeypatch):
    icon = tmp_path / "custom.png"
    icon.write_bytes(b"\x89PNG")
    monkeypatch.setenv("APP_ICON_HINT", str(icon))
    assert find_app_icon() == str(icon)
