from __future__ import annotations

import json
import time

import pytest
from PyQt6.QtCore import QCoreApplication, QFileSystemWatcher

from questcompanion.core.progress import SnapshotEvent
from questcompanion.ui import watcher as watcher_module
from questcompanion.ui.watcher import PROGRESS_POLL_INTERVAL_MS, ProgressWatcher


@pytest.fixture
def watcher(qapp):
    w = ProgressWatcher()
    w.updates, w.errors = [], []
    w.updated.connect(w.updates.append)
    w.error.connect(w.errors.append)
    yield w
    w.close()


def test_set_path_reads_and_emits(watcher, write_json, progress_doc):
    p = write_json("progress.json", progress_doc({"name": "MQ101", "stage": 10}))
    assert watcher.set_path(str(p)) == str(p.resolve())
    event = watcher.updates[-1]
    assert event.path == str(p.resolve())
    assert event.snapshot.quests[0].stage == 10
    assert event.snapshot.generated_at_utc == "2024-05-01T12:00:00Z"


def test_missing_path_is_rejected_and_previous_path_kept(watcher, tmp_path, write_json, progress_doc):
    good = write_json("progress.json", progress_doc({"name": "MQ101", "stage": 10}))
    watcher.set_path(str(good))

    assert watcher.set_path(str(tmp_path / "missing.json")) is None
    assert watcher.path == str(good.resolve())
    assert watcher.session.is_open
    assert len(watcher.updates) == 1
    assert watcher.errors[-1].message.startswith("Progress file not found")


def test_set_path_twice_leaves_one_live_session(watcher, write_json, progress_doc):
    a = write_json("a.json", progress_doc({"name": "A", "stage": 1}))
    b = write_json("b.json", progress_doc({"name": "B", "stage": 2}))

    watcher.set_path(str(a))
    first = watcher.session
    watcher.set_path(str(b))
    second = watcher.session

    assert len(watcher.updates) == 2
    assert second is not first
    assert not first.is_open
    assert first.timer is None and first.fs_watcher is None
    assert second.is_open
    assert second.timer.isActive()
    assert second.timer.interval() == PROGRESS_POLL_INTERVAL_MS


def test_set_same_path_twice_emits_twice(watcher, write_json, progress_doc):
    p = write_json("progress.json", progress_doc({"name": "A", "stage": 1}))
    watcher.set_path(str(p))
    watcher.set_path(str(p))
    assert len(watcher.updates) == 2
    assert watcher.session.is_open


def test_clearing_path_emits_null_event(watcher, write_json, progress_doc):
    p = write_json("progress.json", progress_doc({"name": "A", "stage": 1}))
    watcher.set_path(str(p))
    assert watcher.set_path("   ") is None
    assert watcher.updates[-1] == SnapshotEvent(None, None)
    assert watcher.path is None
    assert watcher.session is None


def test_reload_reports_bad_json_and_recovers(watcher, write_json, progress_doc):
    p = write_json("progress.json", progress_doc({"name": "A", "stage": 1}))
    watcher.set_path(str(p))

    p.write_text("{truncated", encoding="utf-8")
    watcher.reload()
    assert watcher.errors[-1].path == str(p.resolve())
    assert watcher.errors[-1].message.startswith("Progress file is not valid JSON")
    assert len(watcher.updates) == 1

    p.write_text(json.dumps(progress_doc({"name": "A", "stage": 5})), encoding="utf-8")
    watcher.session.changed.emit()
    assert len(watcher.updates) == 2
    assert watcher.updates[-1].snapshot.quests[0].stage == 5


def test_malformed_record_is_rejected(watcher, write_json):
    p = write_json("progress.json", {"quests": [{"name": "A", "stage": "10"}]})
    assert watcher.set_path(str(p)) is None
    assert "stage must be an integer" in watcher.errors[-1].message
    assert watcher.session is None


def test_reload_without_session_is_noop(watcher):
    watcher.reload()
    assert watcher.updates == [] and watcher.errors == []


def _wait_for(predicate, timeout=3.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        QCoreApplication.processEvents()
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def test_recreated_file_is_watched_again(watcher, write_json, progress_doc):
    p = write_json("progress.json", progress_doc({"name": "A", "stage": 1}))
    watcher.set_path(str(p))
    session = watcher.session
    path = str(p.resolve())

    p.unlink()
    session.fs_watcher.removePath(path)
    assert session.fs_watcher.files() == []
    assert session.ensure_watched() is False

    write_json("progress.json", progress_doc({"name": "A", "stage": 7}))
    watcher.reload()
    assert watcher.updates[-1].snapshot.quests[0].stage == 7
    assert session.fs_watcher.files() == [path]
    assert session.ensure_watched() is True


def test_poll_timer_triggers_reload(qapp, write_json, progress_doc):
    w = ProgressWatcher(poll_interval_ms=50)
    updates = []
    w.updated.connect(updates.append)
    try:
        p = write_json("progress.json", progress_doc({"name": "A", "stage": 1}))
        w.set_path(str(p))
        assert w.session.timer.interval() == 50
        assert _wait_for(lambda: len(updates) >= 2)
        assert updates[-1].path == str(p.resolve())
    finally:
        w.close()


def test_native_change_notification_triggers_reload(watcher, write_json, progress_doc):
    p = write_json("progress.json", progress_doc({"name": "A", "stage": 1}))
    watcher.set_path(str(p))
    assert watcher.session.fs_watcher.files() == [str(p.resolve())]
    write_json("progress.json", progress_doc({"name": "A", "stage": 3}))

    assert _wait_for(lambda: watcher.updates[-1].snapshot.quests[0].stage == 3)


class _UnwatchableFileSystemWatcher(QFileSystemWatcher):
    def addPath(self, path):
        return False


def test_native_watch_failure_falls_back_to_polling(watcher, write_json, progress_doc, monkeypatch):
    monkeypatch.setattr(watcher_module, "QFileSystemWatcher", _UnwatchableFileSystemWatcher)
    p = write_json("progress.json", progress_doc({"name": "A", "stage": 1}))

    assert watcher.set_path(str(p)) == str(p.resolve())
    assert watcher.errors[-1].path == str(p.resolve())
    assert watcher.errors[-1].message.startswith("Unable to watch")
    session = watcher.session
    assert session.is_open
    assert session.timer.isActive()

    write_json("progress.json", progress_doc({"name": "A", "stage": 4}))
    watcher.reload()
    assert len(watcher.updates) == 2
    assert watcher.updates[-1].snapshot.quests[0].stage == 4


def test_replaced_session_no_longer_reaches_listeners(watcher, write_json, progress_doc):
    a = write_json("a.json", progress_doc({"name": "A", "stage": 1}))
    b = write_json("b.json", progress_doc({"name": "B", "stage": 2}))
    watcher.set_path(str(a))
    first = watcher.session
    watcher.set_path(str(b))

    seen = len(watcher.updates)
    first.changed.emit()
    assert len(watcher.updates) == seen
    assert watcher.errors == []
    assert first.timer is None
