from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PyQt6.QtCore import QFileSystemWatcher, QObject, QTimer, pyqtSignal

from questcompanion.core.errors import PathRejected, ProgressReadError
from questcompanion.core.progress import (
    ProgressSnapshot,
    SnapshotError,
    SnapshotEvent,
    read_progress_file,
)
from questcompanion.core.settings import normalize_path

logger = logging.getLogger(__name__)

PROGRESS_POLL_INTERVAL_MS = 60 * 1000


class WatchSession(QObject):
    """
    One open progress path.

    Two independent producers feed `changed`: the native file watcher and a
    poll timer that fires whether or not notifications work (editors that
    replace via rename, network shares). close() stops both before returning.
    """

    changed = pyqtSignal()

    def __init__(self, path: str, *, poll_interval_ms: int = PROGRESS_POLL_INTERVAL_MS,
                 parent: Optional[QObject] = None):
        super().__init__(parent)
        self.path = path
        self._poll_interval_ms = int(poll_interval_ms)
        self._fs_watcher: Optional[QFileSystemWatcher] = None
        self._timer: Optional[QTimer] = None
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def timer(self) -> Optional[QTimer]:
        return self._timer

    @property
    def fs_watcher(self) -> Optional[QFileSystemWatcher]:
        return self._fs_watcher

    def open(self) -> Optional[str]:
        """Start both producers. Returns a message if the native watch could not be installed."""
        if self._open:
            return None
        self._open = True

        failure: Optional[str] = None
        self._fs_watcher = QFileSystemWatcher(self)
        self._fs_watcher.fileChanged.connect(self._on_file_changed)
        if not self._fs_watcher.addPath(self.path):
            failure = f"Unable to watch {self.path} for changes; polling every {self._poll_interval_ms // 1000}s"

        self._timer = QTimer(self)
        self._timer.setInterval(self._poll_interval_ms)
        self._timer.timeout.connect(self.changed)
        self._timer.start()
        return failure

    def close(self) -> None:
        if not self._open:
            return
        self._open = False

        if self._timer is not None:
            self._timer.stop()
            self._timer.timeout.disconnect()
            self._timer.deleteLater()
            self._timer = None

        if self._fs_watcher is not None:
            files = self._fs_watcher.files()
            if files:
                self._fs_watcher.removePaths(files)
            self._fs_watcher.fileChanged.disconnect()
            self._fs_watcher.deleteLater()
            self._fs_watcher = None

    def ensure_watched(self) -> bool:
        """
        Re-add the path if the native watcher dropped it (delete, rename-replace).
        Returns whether the path is watched afterwards.
        """
        if not self._open or self._fs_watcher is None:
            return False
        if self.path in self._fs_watcher.files():
            return True
        if not Path(self.path).exists():
            return False
        if self._fs_watcher.addPath(self.path):
            logger.info("Re-subscribed to %s", self.path)
            return True
        return False

    def _on_file_changed(self, _path: str) -> None:
        self.ensure_watched()
        self.changed.emit()


class ProgressWatcher(QObject):
    """
    Owns zero or one WatchSession and turns every read into an event.

    `updated` carries a SnapshotEvent, `error` a SnapshotError. Read failures
    never raise out of this class.
    """

    updated = pyqtSignal(object)
    error = pyqtSignal(object)

    def __init__(self, parent: Optional[QObject] = None, *,
                 poll_interval_ms: int = PROGRESS_POLL_INTERVAL_MS):
        super().__init__(parent)
        self._poll_interval_ms = poll_interval_ms
        self._session: Optional[WatchSession] = None

    @property
    def path(self) -> Optional[str]:
        return self._session.path if self._session is not None else None

    @property
    def session(self) -> Optional[WatchSession]:
        return self._session

    def set_path(self, path: Optional[str]) -> Optional[str]:
        """
        Switch to `path` (or to nothing). Returns the active absolute path, or
        None when cleared or when the new path could not be read.
        """
        normalized = normalize_path(path)
        if normalized is None:
            self.close()
            logger.info("Progress path cleared")
            self.updated.emit(SnapshotEvent(None, None))
            return None

        resolved = str(Path(normalized).expanduser().resolve())
        try:
            snapshot = self._initial_read(resolved)
        except PathRejected as e:
            logger.warning("Rejected progress path %s: %s", e.path, e.message)
            self.error.emit(SnapshotError(e.path, e.message))
            return None

        # Old session is fully stopped before anything about the new path is emitted.
        self.close()
        self.updated.emit(SnapshotEvent(resolved, snapshot))

        session = WatchSession(resolved, poll_interval_ms=self._poll_interval_ms, parent=self)
        session.changed.connect(lambda s=session: self._reload(s))
        self._session = session
        failure = session.open()
        if failure:
            logger.warning(failure)
            self.error.emit(SnapshotError(resolved, failure))

        logger.info("Watching progress file %s", resolved)
        return resolved

    def reload(self) -> None:
        if self._session is not None:
            self._reload(self._session)

    def close(self) -> None:
        session, self._session = self._session, None
        if session is not None:
            session.close()
            session.deleteLater()

    def _initial_read(self, path: str) -> ProgressSnapshot:
        try:
            return read_progress_file(path)
        except ProgressReadError as e:
            raise PathRejected(path, str(e)) from e

    def _reload(self, session: WatchSession) -> None:
        if session is not self._session or not session.is_open:
            return
        try:
            snapshot = read_progress_file(session.path)
        except ProgressReadError as e:
            logger.warning("Progress reload failed for %s: %s", session.path, e)
            self.error.emit(SnapshotError(session.path, str(e)))
            return
        # A delete-then-recreate drops the native watch; the poll picks it back up.
        session.ensure_watched()
        self.updated.emit(SnapshotEvent(session.path, snapshot))
