from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from questcompanion.core.errors import CatalogFileError
from questcompanion.core.file_manager import FileManager

logger = logging.getLogger(__name__)

UNKNOWN_QUEST_KEY = "unknown"


# ---------------- tiny utils ----------------
def _opt_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value != "" else None


def _opt_int(value: Any) -> Optional[int]:
    # bool is an int subclass; a stray `true` is not an order
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _stages(value: Any) -> frozenset:
    if not isinstance(value, list):
        return frozenset()
    return frozenset(_opt_int(v) for v in value if _opt_int(v) is not None)


# ---------------- model ----------------
@dataclass(frozen=True)
class Quest:
    id: Optional[str] = None
    name: Optional[str] = None
    editor_id: Optional[str] = None
    form_id: Optional[str] = None
    description: Optional[str] = None
    link: Optional[str] = None
    city: Optional[str] = None
    completion_stages: frozenset = field(default_factory=frozenset)

    @property
    def key(self) -> str:
        """Identity key used for overrides: id, then name, then 'unknown'."""
        return self.id or self.name or UNKNOWN_QUEST_KEY

    @property
    def title(self) -> str:
        return self.name or self.editor_id or "Unknown Quest"

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "Quest":
        return cls(
            id=_opt_str(raw.get("id")),
            name=_opt_str(raw.get("name")),
            editor_id=_opt_str(raw.get("editorId")),
            form_id=_opt_str(raw.get("formId")),
            description=_opt_str(raw.get("description")),
            link=_opt_str(raw.get("link")),
            city=_opt_str(raw.get("city")),
            completion_stages=_stages(raw.get("completionStages")),
        )


@dataclass(frozen=True)
class QuestGroup:
    id: str
    name: str
    icon: Optional[str] = None
    display_order: Optional[int] = None
    quests: Tuple[Quest, ...] = ()

    @property
    def title(self) -> str:
        return self.name or self.id or "Quest Group"

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "QuestGroup":
        quests_raw = raw.get("quests")
        if not isinstance(quests_raw, list):
            quests_raw = []
        return cls(
            id=str(raw.get("id") or ""),
            name=str(raw.get("name") or ""),
            icon=_opt_str(raw.get("icon")),
            display_order=_opt_int(raw.get("displayOrder")),
            quests=tuple(Quest.from_raw(q) for q in quests_raw if isinstance(q, dict)),
        )


@dataclass(frozen=True)
class QuestCatalog:
    groups: Tuple[QuestGroup, ...] = ()

    def find_group(self, group_id: Optional[str]) -> Optional[QuestGroup]:
        for group in self.groups:
            if group.id == group_id:
                return group
        return None


# ---------------- loading ----------------
def group_sort_key(group: QuestGroup) -> Tuple[float, str]:
    order = group.display_order if group.display_order is not None else math.inf
    return (order, (group.name or "").casefold())


def sort_groups(groups) -> List[QuestGroup]:
    return sorted(groups, key=group_sort_key)


def _read_group(path: Path) -> QuestGroup:
    try:
        raw = FileManager.read_json(path)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CatalogFileError(str(path), str(e)) from e
    if not isinstance(raw, dict):
        raise CatalogFileError(str(path), "top level is not a quest group object")
    return QuestGroup.from_raw(raw)


def load_catalog(directory: Union[str, Path]) -> QuestCatalog:
    """
    Load every `*.json` group file directly inside `directory`.

    A missing directory is an empty catalog. Files that fail to parse are
    skipped with a warning so one bad file never hides the rest.
    """
    root = Path(directory)
    try:
        entries = sorted(root.iterdir(), key=lambda p: p.name)
    except FileNotFoundError:
        logger.info("Quest data directory %s does not exist", root)
        return QuestCatalog(groups=())

    groups: List[QuestGroup] = []
    for entry in entries:
        if entry.suffix.lower() != ".json" or not entry.is_file():
            continue
        try:
            groups.append(_read_group(entry))
        except CatalogFileError as e:
            logger.warning("Failed to read quest data from %s: %s", e.path, e.message)

    logger.info("Loaded %d quest groups from %s", len(groups), root)
    return QuestCatalog(groups=tuple(sort_groups(groups)))
