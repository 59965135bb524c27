from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, Dict, Mapping, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from questcompanion.core.catalog import QuestCatalog
from questcompanion.core.overrides import OverrideStore
from questcompanion.core.progress import ProgressSnapshot, SnapshotError, SnapshotEvent
from questcompanion.core.reconcile import ReconciledView, reconcile
from questcompanion.core.settings import PersistedSettings, Preferences, Settings, normalize_path
from questcompanion.ui.watcher import ProgressWatcher

logger = logging.getLogger(__name__)

NO_PROGRESS_MESSAGE = "No quest progress loaded."


class QuestController(QObject):
    """
    Everything the window talks to: catalog, progress watcher, overrides and
    preferences. Views are recomputed from scratch on every change.
    """

    snapshot_updated = pyqtSignal(object)  # SnapshotEvent
    snapshot_error = pyqtSignal(object)    # SnapshotError
    view_changed = pyqtSignal(object)      # ReconciledView

    def __init__(self, settings: Optional[Settings] = None,
                 catalog: Optional[QuestCatalog] = None,
                 watcher: Optional[ProgressWatcher] = None,
                 parent: Optional[QObject] = None):
        super().__init__(parent)
        self._settings = settings if settings is not None else Settings()
        self._overrides = OverrideStore(self._settings)
        self._catalog = catalog if catalog is not None else QuestCatalog()
        self._watcher = watcher if watcher is not None else ProgressWatcher(self)
        self._snapshot: Optional[ProgressSnapshot] = None
        self._last_error: Optional[str] = None
        # last document read or written; the UI thread never re-reads the file
        self._persisted: Optional[PersistedSettings] = None

        self._watcher.updated.connect(self._on_watcher_updated)
        self._watcher.error.connect(self._on_watcher_error)

    @property
    def snapshot(self) -> Optional[ProgressSnapshot]:
        return self._snapshot

    # ---------- lifecycle ----------
    def start(self) -> Optional[str]:
        """
        Normalize the settings document (finishing any legacy migration) and
        open the persisted progress path. Raises SettingsCorruptError.
        """
        persisted = self._persisted = self._settings.write(self._settings.read())
        if persisted.progress_path:
            return self._watcher.set_path(persisted.progress_path)
        return None

    def close(self) -> None:
        self._watcher.close()

    # ---------- catalog ----------
    def get_catalog(self) -> QuestCatalog:
        return self._catalog

    def set_catalog(self, catalog: QuestCatalog) -> None:
        self._catalog = catalog
        logger.info("Catalog loaded with %d groups", len(catalog.groups))
        self.view_changed.emit(self.current_view())

    # ---------- progress path ----------
    def get_current_progress_path(self) -> Optional[str]:
        return self._state().progress_path

    def set_progress_path(self, path: Optional[str]) -> Optional[str]:
        """Returns the effective path; a path that could not be read is not persisted."""
        active = self._watcher.set_path(path)
        if active is None and normalize_path(path) is not None:
            return None
        stored = self._settings.set_progress_path(active)
        self._persisted = replace(self._state(), progress_path=stored)
        return active

    def reload(self) -> None:
        self._watcher.reload()

    # ---------- listeners ----------
    def on_snapshot_updated(self, listener: Callable[[SnapshotEvent], Any]) -> Callable[[], None]:
        self.snapshot_updated.connect(listener)
        return lambda: self.snapshot_updated.disconnect(listener)

    def on_snapshot_error(self, listener: Callable[[SnapshotError], Any]) -> Callable[[], None]:
        self.snapshot_error.connect(listener)
        return lambda: self.snapshot_error.disconnect(listener)

    def on_view_changed(self, listener: Callable[[ReconciledView], Any]) -> Callable[[], None]:
        self.view_changed.connect(listener)
        return lambda: self.view_changed.disconnect(listener)

    # ---------- overrides / preferences ----------
    def get_overrides(self) -> Dict[str, Dict[str, Any]]:
        return dict(self._state().overrides)

    def set_override(self, key: str, completed: bool) -> Dict[str, Dict[str, Any]]:
        overrides = self._overrides.set_override(key, completed)
        self._persisted = replace(self._state(), overrides=overrides)
        self.view_changed.emit(self.current_view())
        return overrides

    def get_preferences(self) -> Preferences:
        return self._state().preferences

    def set_preferences(self, updates: Optional[Mapping[str, Any]]) -> Preferences:
        prefs = self._settings.set_preferences(updates)
        self._persisted = replace(self._state(), preferences=prefs)
        self.view_changed.emit(self.current_view())
        return prefs

    # ---------- derived state ----------
    def current_view(self) -> ReconciledView:
        return reconcile(self._catalog, self._snapshot, self._state().overrides)

    def status_message(self) -> str:
        if self._last_error:
            return self._last_error
        timestamp = self._snapshot.generated_at_utc if self._snapshot is not None else None
        return f"Progress updated at {timestamp}" if timestamp else NO_PROGRESS_MESSAGE

    def _state(self) -> PersistedSettings:
        if self._persisted is None:
            self._persisted = self._settings.read()
        return self._persisted

    # ---------- watcher slots ----------
    def _on_watcher_updated(self, event: SnapshotEvent) -> None:
        self._snapshot = event.snapshot
        self._last_error = None
        self.snapshot_updated.emit(event)
        self.view_changed.emit(self.current_view())

    def _on_watcher_error(self, err: SnapshotError) -> None:
        # Keep the last good snapshot on screen; only the status line changes.
        self._last_error = err.message
        self.snapshot_error.emit(err)
