from __future__ import annotations

import logging

from questcompanion.core.catalog import (
    Quest,
    QuestGroup,
    load_catalog,
    sort_groups,
)


def test_sort_orders_by_display_order_then_name():
    groups = [
        QuestGroup(id="c", name="Charlie", display_order=None),
        QuestGroup(id="b", name="bravo", display_order=2),
        QuestGroup(id="a", name="Alpha", display_order=2),
        QuestGroup(id="z", name="Zulu", display_order=1),
    ]
    assert [g.id for g in sort_groups(groups)] == ["z", "a", "b", "c"]


def test_sort_is_idempotent():
    groups = [
        QuestGroup(id="x", name="X"),
        QuestGroup(id="y", name="Y", display_order=5),
        QuestGroup(id="w", name="W"),
    ]
    once = sort_groups(groups)
    assert sort_groups(once) == once


def test_quest_from_raw_reads_camel_case_fields():
    q = Quest.from_raw({
        "id": "MQ101",
        "name": "Unbound",
        "editorId": "MQ101",
        "formId": "0x0003372B",
        "completionStages": [1000, 200, "x", True],
        "link": "https://en.uesp.net/wiki/Skyrim:Unbound",
    })
    assert q.editor_id == "MQ101"
    assert q.form_id == "0x0003372B"
    assert q.completion_stages == frozenset({1000, 200})
    assert q.key == "MQ101"
    assert q.title == "Unbound"


def test_quest_key_and_title_fallbacks():
    assert Quest(name="Only Name").key == "Only Name"
    assert Quest().key == "unknown"
    assert Quest(editor_id="DA01").title == "DA01"
    assert Quest().title == "Unknown Quest"


def test_load_catalog_sorts_and_skips_bad_files(tmp_path, write_json, caplog):
    write_json("main.json", {"id": "Main", "name": "Main Quests", "displayOrder": 1,
                             "quests": [{"id": "MQ101", "completionStages": [1000]}]})
    write_json("cities.json", {"id": "Cities", "name": "Cities", "displayOrder": 3, "quests": []})
    write_json("misc.JSON", {"id": "Misc", "name": "Miscellaneous"})
    (tmp_path / "broken.json").write_text("{not json", encoding="utf-8")
    write_json("list.json", [1, 2, 3])
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        catalog = load_catalog(tmp_path)

    assert [g.id for g in catalog.groups] == ["Main", "Cities", "Misc"]
    assert catalog.find_group("Main").quests[0].completion_stages == frozenset({1000})
    assert catalog.find_group("Misc").quests == ()
    warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert any("broken.json" in m for m in warnings)
    assert any("list.json" in m for m in warnings)


def test_load_catalog_missing_directory_is_empty(tmp_path):
    catalog = load_catalog(tmp_path / "nope")
    assert catalog.groups == ()
