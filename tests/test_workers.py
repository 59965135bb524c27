from __future__ import annotations

from questcompanion.ui import workers
from questcompanion.ui.workers import LoadCatalogWorker


def test_load_catalog_worker_emits_catalog(qapp, write_json, tmp_path):
    write_json("main.json", {"id": "Main", "name": "Main Quests", "quests": [{"id": "MQ101"}]})
    done, errors = [], []
    w = LoadCatalogWorker(tmp_path)
    w.finished.connect(lambda catalog, directory: done.append((catalog, directory)))
    w.error.connect(errors.append)

    w.run()

    assert errors == []
    catalog, directory = done[0]
    assert directory == str(tmp_path)
    assert [g.id for g in catalog.groups] == ["Main"]


def test_load_catalog_worker_reports_failure(qapp, tmp_path, monkeypatch):
    def boom(_directory):
        raise PermissionError("denied")

    monkeypatch.setattr(workers, "load_catalog", boom)
    done, errors = [], []
    w = LoadCatalogWorker(tmp_path)
    w.finished.connect(lambda *a: done.append(a))
    w.error.connect(errors.append)

    w.run()

    assert done == []
    assert errors[0].startswith("Failed to load quest data")
    assert "PermissionError" in errors[0]
