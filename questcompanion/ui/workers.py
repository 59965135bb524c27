from __future__ import annotations

import traceback
from pathlib import Path
from typing import Union

from PyQt6.QtCore import QObject, pyqtSignal

from questcompanion.core.catalog import load_catalog


class LoadCatalogWorker(QObject):
    finished = pyqtSignal(object, str)  # (QuestCatalog, directory)
    error    = pyqtSignal(str)
    progress = pyqtSignal(int, str)

    def __init__(self, directory: Union[str, Path]):
        super().__init__(None)
        self._directory = str(directory)

    def run(self):
        try:
            self.progress.emit(20, "Reading quest data")
            catalog = load_catalog(self._directory)
            self.progress.emit(100, "Loaded")
            self.finished.emit(catalog, self._directory)
        except Exception:
            self.error.emit(f"Failed to load quest data: {traceback.format_exc()}")
