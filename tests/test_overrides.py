from __future__ import annotations

import threading

from questcompanion.core.overrides import OverrideStore, iso_now
from questcompanion.core.settings import Settings


def test_set_and_clear_override(tmp_path):
    store = OverrideStore(Settings(tmp_path))

    overrides = store.set_override("MQ101", True)
    assert overrides["MQ101"]["completed"] is True
    assert overrides["MQ101"]["updatedAt"].endswith("Z")
    assert store.is_completed("MQ101")

    overrides = store.set_override("MQ101", False)
    assert "MQ101" not in overrides
    assert not store.is_completed("MQ101")


def test_clearing_missing_key_is_noop(tmp_path):
    store = OverrideStore(Settings(tmp_path))
    store.set_override("A", True)
    assert set(store.set_override("B", False)) == {"A"}


def test_override_survives_reopen(tmp_path):
    OverrideStore(Settings(tmp_path)).set_override("DA01", True)
    assert OverrideStore(Settings(tmp_path)).is_completed("DA01")


def test_concurrent_toggles_do_not_lose_updates(tmp_path):
    store = OverrideStore(Settings(tmp_path))
    keys = [f"Q{i}" for i in range(20)]
    threads = [threading.Thread(target=store.set_override, args=(k, True)) for k in keys]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert set(store.all()) == set(keys)


def test_iso_now_is_utc():
    assert iso_now().endswith("Z")
