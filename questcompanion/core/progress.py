from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Tuple, Union

from questcompanion.core.errors import ProgressReadError
from questcompanion.core.file_manager import FileManager


@dataclass(frozen=True)
class ProgressRecord:
    stage: int
    id: Optional[str] = None
    name: Optional[str] = None
    form_id: Optional[str] = None


@dataclass(frozen=True)
class ProgressSnapshot:
    quests: Tuple[ProgressRecord, ...] = ()
    generated_at_utc: Optional[str] = None


@dataclass(frozen=True)
class SnapshotEvent:
    """Successful read. `snapshot` is None when no progress file is configured."""
    path: Optional[str]
    snapshot: Optional[ProgressSnapshot]


@dataclass(frozen=True)
class SnapshotError:
    path: Optional[str]
    message: str


def _opt_str(raw: dict, key: str, where: str) -> Optional[str]:
    value = raw.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ProgressReadError(f"{where}.{key} must be a string")
    return value


def _parse_record(raw: Any, index: int) -> ProgressRecord:
    where = f"quests[{index}]"
    if not isinstance(raw, dict):
        raise ProgressReadError(f"{where} must be an object")
    stage = raw.get("stage")
    if isinstance(stage, bool) or not isinstance(stage, int):
        raise ProgressReadError(f"{where}.stage must be an integer")
    return ProgressRecord(
        stage=stage,
        id=_opt_str(raw, "id", where),
        name=_opt_str(raw, "name", where),
        form_id=_opt_str(raw, "form_id", where),
    )


def parse_progress(raw: Any) -> ProgressSnapshot:
    """Validate a decoded progress document and turn it into a snapshot."""
    if not isinstance(raw, dict):
        raise ProgressReadError("Progress file must contain a JSON object")
    quests = raw.get("quests")
    if not isinstance(quests, list):
        raise ProgressReadError("Progress file has no 'quests' list")
    return ProgressSnapshot(
        quests=tuple(_parse_record(q, i) for i, q in enumerate(quests)),
        generated_at_utc=_opt_str(raw, "generated_at_utc", "progress"),
    )


def read_progress_file(path: Union[str, Path]) -> ProgressSnapshot:
    try:
        raw = FileManager.read_json(path)
    except FileNotFoundError as e:
        raise ProgressReadError(f"Progress file not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ProgressReadError(f"Unable to read progress file: {e}") from e
    except json.JSONDecodeError as e:
        raise ProgressReadError(f"Progress file is not valid JSON: {e}") from e
    return parse_progress(raw)
