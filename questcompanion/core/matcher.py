from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Optional

from questcompanion.core.catalog import Quest
from questcompanion.core.progress import ProgressRecord, ProgressSnapshot

_HEX_PREFIX = re.compile(r"^0x", re.I)


def normalize_form_id(value: Optional[str]) -> str:
    """'0xAB12', 'ab12' and '0XAB12' all become 'AB12'."""
    return _HEX_PREFIX.sub("", value or "", count=1).upper()


@dataclass
class ProgressIndex:
    by_id: Dict[str, ProgressRecord] = field(default_factory=dict)
    by_name: Dict[str, ProgressRecord] = field(default_factory=dict)
    by_form_id: Dict[str, ProgressRecord] = field(default_factory=dict)


def build_index(snapshot: Optional[ProgressSnapshot]) -> ProgressIndex:
    """Index the snapshot's records. On duplicate keys the earlier record wins."""
    index = ProgressIndex()
    if snapshot is None:
        return index

    for record in snapshot.quests:
        id_key = (record.id or "").upper()
        if id_key:
            index.by_id.setdefault(id_key, record)

        name_key = (record.name or "").upper()
        if name_key:
            index.by_name.setdefault(name_key, record)

        form_key = normalize_form_id(record.form_id)
        if form_key:
            index.by_form_id.setdefault(form_key, record)

    return index


def match(quest: Quest, index: ProgressIndex) -> Optional[ProgressRecord]:
    # The catalog's ids usually carry the plugin's quest *name*, so the quest id
    # is looked up in the by-name index before the by-id index.
    key = (quest.id or "").upper()
    if not key:
        return None
    if key in index.by_name:
        return index.by_name[key]
    if key in index.by_id:
        return index.by_id[key]
    return None


def match_by_form_id(quest: Quest, index: ProgressIndex) -> Optional[ProgressRecord]:
    key = normalize_form_id(quest.form_id)
    if not key:
        return None
    return index.by_form_id.get(key)
