from __future__ import annotations

import json
from pathlib import Path

import pytest
from PyQt6.QtCore import QCoreApplication


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def write_json(tmp_path):
    def _write(name: str, data) -> Path:
        p = tmp_path / name
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(data), encoding="utf-8")
        return p
    return _write


@pytest.fixture
def progress_doc():
    def _doc(*quests, generated_at="2024-05-01T12:00:00Z"):
        return {
            "generated_at_utc": generated_at,
            "quest_count": len(quests),
            "quests": list(quests),
        }
    return _doc
