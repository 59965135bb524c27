from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict

from questcompanion.core.settings import PersistedSettings, Settings, iso_now


class OverrideStore:
    """Manual completion flags, stored inside the settings document."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def all(self) -> Dict[str, Dict[str, Any]]:
        return self._settings.read().overrides

    def is_completed(self, key: str) -> bool:
        return bool(self.all().get(key, {}).get("completed"))

    def set_override(self, key: str, completed: bool) -> Dict[str, Dict[str, Any]]:
        def mutate(current: PersistedSettings) -> PersistedSettings:
            overrides = dict(current.overrides)
            if completed:
                overrides[key] = {"completed": True, "updatedAt": iso_now()}
            else:
                overrides.pop(key, None)
            return replace(current, overrides=overrides)

        return self._settings.update(mutate).overrides
