from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from PyQt6.QtCore import QThread, Qt
from PyQt6.QtGui import QAction
from PyQt6.QtWidgets import QApplication, QWidget


def init_basic_logger(log_dir: Union[str, Path, None] = None) -> logging.Logger:
    """Rotating file log under `log_dir` (default ./logs); left alone if the root logger is configured."""
    logs_dir = Path(log_dir) if log_dir is not None else Path("logs")
    root = logging.getLogger()
    if root.handlers:
        return root
    logs_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        logs_dir / "app.log", maxBytes=262_144, backupCount=3, encoding="utf-8"
    )
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    root.setLevel(logging.INFO)
    root.addHandler(handler)
    return root


# ----------------- Mixins -----------------

class BusyMixin:
    """Disable a set of widgets/actions while work is running; show wait cursor."""
    def _init_busy(self, controls: Iterable[Union[QAction, QWidget]] = ()):
        self._busy = False
        self._busy_controls = list(controls)

    def _set_busy(self, busy: bool):
        if getattr(self, "_busy", False) == busy:
            return
        self._busy = busy
        for ctl in getattr(self, "_busy_controls", []):
            ctl.setEnabled(not busy)
        if busy:
            QApplication.setOverrideCursor(Qt.CursorShape.WaitCursor)
        else:
            QApplication.restoreOverrideCursor()


class WorkerRunnerMixin:
    """Start a worker in a thread with safe cleanup; returns (thread, worker)."""
    def _run_worker(self, worker_obj, finished_cb: Callable, error_cb: Callable,
                    progress_cb: Optional[Callable] = None):
        t = QThread(self)
        w = worker_obj
        w.moveToThread(t)
        t.started.connect(w.run)
        w.finished.connect(finished_cb)
        w.error.connect(error_cb)
        if progress_cb is not None and hasattr(w, "progress"):
            w.progress.connect(progress_cb)
        w.finished.connect(t.quit); w.error.connect(t.quit)
        t.finished.connect(w.deleteLater); t.finished.connect(t.deleteLater)
        t.start()
        return t, w
