from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from questcompanion.core.catalog import Quest, QuestCatalog, QuestGroup
from questcompanion.core.matcher import build_index, match
from questcompanion.core.progress import ProgressRecord, ProgressSnapshot
from questcompanion.core.settings import Preferences
from questcompanion.core.status import QuestStatus, resolve


@dataclass(frozen=True)
class QuestView:
    quest: Quest
    key: str
    record: Optional[ProgressRecord]
    status: QuestStatus


@dataclass(frozen=True)
class GroupView:
    group: QuestGroup
    quests: Tuple[QuestView, ...]

    @property
    def completed(self) -> int:
        return sum(1 for q in self.quests if q.status.completed)

    @property
    def total(self) -> int:
        return len(self.quests)


@dataclass(frozen=True)
class ReconciledView:
    groups: Tuple[GroupView, ...] = ()

    @property
    def completed(self) -> int:
        return sum(g.completed for g in self.groups)

    @property
    def total(self) -> int:
        return sum(g.total for g in self.groups)

    def find_group(self, group_id: Optional[str]) -> Optional[GroupView]:
        for gv in self.groups:
            if gv.group.id == group_id:
                return gv
        return None


def reconcile(
    catalog: QuestCatalog,
    snapshot: Optional[ProgressSnapshot],
    overrides: Mapping[str, Dict[str, Any]],
) -> ReconciledView:
    """Match and resolve every catalog quest against one snapshot, from scratch."""
    index = build_index(snapshot)
    groups: List[GroupView] = []
    for group in catalog.groups:
        rows = []
        for quest in group.quests:
            record = match(quest, index)
            rows.append(QuestView(quest, quest.key, record, resolve(quest, record, overrides)))
        groups.append(GroupView(group, tuple(rows)))
    return ReconciledView(groups=tuple(groups))


def visible_quests(group_view: GroupView, preferences: Preferences) -> List[QuestView]:
    if not preferences.hide_completed:
        return list(group_view.quests)
    return [q for q in group_view.quests if not q.status.completed]
