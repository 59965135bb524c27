from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from questcompanion.core.catalog import Quest
from questcompanion.core.progress import ProgressRecord

# Public for UI / filters
NOT_STARTED = "Not Started"
IN_PROGRESS = "In Progress"
COMPLETED = "Completed"
QUEST_STATES = [NOT_STARTED, IN_PROGRESS, COMPLETED]

STATE_KEYS = {
    NOT_STARTED: "not-started",
    IN_PROGRESS: "in-progress",
    COMPLETED: "completed",
}


@dataclass(frozen=True)
class QuestStatus:
    label: str
    overridden: bool = False

    @property
    def key(self) -> str:
        return STATE_KEYS[self.label]

    @property
    def completed(self) -> bool:
        return self.label == COMPLETED


def is_overridden(quest: Quest, overrides: Mapping[str, Dict[str, Any]]) -> bool:
    entry = overrides.get(quest.key)
    return bool(isinstance(entry, dict) and entry.get("completed"))


def resolve(
    quest: Quest,
    record: Optional[ProgressRecord],
    overrides: Mapping[str, Dict[str, Any]],
) -> QuestStatus:
    """
    Derive one quest's status. A manual override always wins; otherwise the
    matched record's stage decides.
    """
    if is_overridden(quest, overrides):
        return QuestStatus(COMPLETED, overridden=True)
    if record is None:
        return QuestStatus(NOT_STARTED)
    if record.stage in quest.completion_stages:
        return QuestStatus(COMPLETED)
    if record.stage > 0:
        return QuestStatus(IN_PROGRESS)
    return QuestStatus(NOT_STARTED)
