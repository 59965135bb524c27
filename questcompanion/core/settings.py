from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Union

from PyQt6.QtCore import QStandardPaths

from questcompanion.core.errors import SettingsCorruptError
from questcompanion.core.file_manager import FileManager

logger = logging.getLogger(__name__)

ORG = "QuestCompanion"
APP = "QuestCompanion"
APP_VERSION = "1.2.0"

SETTINGS_FILE = "user_settings.json"
LEGACY_OVERRIDES_FILE = "quest_overrides.json"
LEGACY_PROGRESS_PATH_FILE = "quest_progress_path.json"


def user_data_dir() -> Path:
    configured = os.environ.get("QUEST_COMPANION_HOME")
    if configured:
        return Path(configured).expanduser().resolve()
    base = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.GenericDataLocation)
    return Path(base or Path.home()) / APP


def iso_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _coerce_bool(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def normalize_path(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def normalize_overrides(raw: Any) -> Dict[str, Dict[str, Any]]:
    """
    Keep only entries that force completion; a cleared override is an absent key.
    Entries without a timestamp (older files) are stamped with the current time.
    """
    if not isinstance(raw, dict):
        return {}
    out: Dict[str, Dict[str, Any]] = {}
    for key, entry in raw.items():
        if not isinstance(entry, dict) or not entry.get("completed"):
            continue
        updated_at = entry.get("updatedAt")
        if not isinstance(updated_at, str) or not updated_at:
            updated_at = iso_now()
        out[str(key)] = {"completed": True, "updatedAt": updated_at}
    return out


@dataclass(frozen=True)
class Preferences:
    dark_mode: bool = False
    hide_completed: bool = False
    hide_descriptions: bool = False

    @classmethod
    def from_raw(cls, raw: Any) -> "Preferences":
        if not isinstance(raw, dict):
            return cls()
        return cls(
            dark_mode=_coerce_bool(raw.get("darkMode"), False),
            hide_completed=_coerce_bool(raw.get("hideCompleted"), False),
            hide_descriptions=_coerce_bool(raw.get("hideDescriptions"), False),
        )

    def to_dict(self) -> Dict[str, bool]:
        return {
            "darkMode": self.dark_mode,
            "hideCompleted": self.hide_completed,
            "hideDescriptions": self.hide_descriptions,
        }

    def merged(self, updates: Optional[Mapping[str, Any]]) -> "Preferences":
        return Preferences.from_raw({**self.to_dict(), **dict(updates or {})})


@dataclass(frozen=True)
class PersistedSettings:
    progress_path: Optional[str] = None
    overrides: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    preferences: Preferences = field(default_factory=Preferences)

    @classmethod
    def from_raw(cls, raw: Any) -> "PersistedSettings":
        raw = raw if isinstance(raw, dict) else {}
        return cls(
            progress_path=normalize_path(raw.get("progressPath")),
            overrides=normalize_overrides(raw.get("overrides")),
            preferences=Preferences.from_raw(raw.get("preferences")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "progressPath": self.progress_path,
            "overrides": {k: dict(v) for k, v in self.overrides.items()},
            "preferences": self.preferences.to_dict(),
        }


class Settings:
    """
    JSON-backed settings store living in the user data directory.

    Files handled:

      - "user_settings.json"        -> progressPath / overrides / preferences
      - "quest_overrides.json"      -> legacy bare override mapping (read only)
      - "quest_progress_path.json"  -> legacy {"path": ...} (read only)

    The legacy files are only consulted while the primary document is absent;
    the first write() after that makes the primary authoritative.
    """

    def __init__(self, base_dir: Union[str, Path, None] = None) -> None:
        self._base = Path(base_dir) if base_dir is not None else user_data_dir()
        self._lock = threading.RLock()

    @property
    def base_dir(self) -> Path:
        return self._base

    @property
    def path(self) -> Path:
        return self._base / SETTINGS_FILE

    # ---------- raw file access ----------
    def _load(self, path: Path) -> Any:
        try:
            return FileManager.read_json(path)
        except FileNotFoundError:
            raise
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SettingsCorruptError(str(path), str(e)) from e

    def _read_legacy_overrides(self) -> Any:
        try:
            return self._load(self._base / LEGACY_OVERRIDES_FILE)
        except FileNotFoundError:
            return {}

    def _read_legacy_progress_path(self) -> Optional[str]:
        try:
            data = self._load(self._base / LEGACY_PROGRESS_PATH_FILE)
        except FileNotFoundError:
            return None
        return normalize_path(data.get("path")) if isinstance(data, dict) else None

    # ---------- public API ----------
    def read(self) -> PersistedSettings:
        with self._lock:
            try:
                raw = self._load(self.path)
            except FileNotFoundError:
                overrides = self._read_legacy_overrides()
                progress_path = self._read_legacy_progress_path()
                if overrides or progress_path:
                    logger.info("Migrating legacy settings from %s", self._base)
                return PersistedSettings.from_raw(
                    {"overrides": overrides, "progressPath": progress_path}
                )
            if not isinstance(raw, dict):
                raise SettingsCorruptError(str(self.path), "top level is not an object")
            return PersistedSettings.from_raw(raw)

    def write(self, settings: PersistedSettings) -> PersistedSettings:
        normalized = PersistedSettings.from_raw(settings.to_dict())
        with self._lock:
            FileManager.write_json(self.path, normalized.to_dict())
        return normalized

    def update(self, mutate: Callable[[PersistedSettings], PersistedSettings]) -> PersistedSettings:
        """Read, apply `mutate`, write; one step as far as other updates are concerned."""
        with self._lock:
            return self.write(mutate(self.read()))

    # ---------- convenience helpers ----------
    def progress_path(self) -> Optional[str]:
        return self.read().progress_path

    def set_progress_path(self, path: Optional[str]) -> Optional[str]:
        updated = self.update(lambda s: replace(s, progress_path=normalize_path(path)))
        return updated.progress_path

    def preferences(self) -> Preferences:
        return self.read().preferences

    def set_preferences(self, updates: Optional[Mapping[str, Any]]) -> Preferences:
        updated = self.update(lambda s: replace(s, preferences=s.preferences.merged(updates)))
        return updated.preferences
