from __future__ import annotations
from typing import List, Optional

from PyQt6.QtCore import Qt, QTimer, QUrl, pyqtSignal
from PyQt6.QtGui import QColor, QDesktopServices
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLineEdit, QPushButton,
    QTableWidget, QTableWidgetItem, QLabel, QHeaderView
)

from questcompanion.core.reconcile import GroupView, QuestView, visible_quests
from questcompanion.core.settings import Preferences

CITIES_GROUP_ID = "Cities"
NO_DESCRIPTION = "No description available."

# status key -> row text colour
STATUS_COLORS = {
    "completed":   QColor(76, 175, 80),
    "in-progress": QColor(230, 162, 60),
    "not-started": QColor(140, 146, 160),
}


def _ro_item(text: str) -> QTableWidgetItem:
    item = QTableWidgetItem(text)
    item.setFlags(item.flags() & ~Qt.ItemFlag.ItemIsEditable)
    return item


def _matches(view: QuestView, needle: str) -> bool:
    if not needle:
        return True
    q = view.quest
    hay = " ".join(s for s in (q.title, q.description, q.city, q.editor_id) if s)
    return needle in hay.lower()


class QuestTab(QWidget):
    COL_TITLE = 0
    COL_STATUS = 1
    COL_STAGE = 2
    COL_DESC = 3
    COL_CITY = 4
    COL_ACTION = 5

    override_toggled = pyqtSignal(str, bool)  # (quest key, completed)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._group: Optional[GroupView] = None
        self._prefs = Preferences()
        self._rows: List[QuestView] = []

        outer = QVBoxLayout(self)
        outer.setContentsMargins(8, 8, 8, 8)

        # Header
        header = QHBoxLayout()
        self.title_lbl = QLabel("Quest Group", self)
        self.title_lbl.setStyleSheet("font-size: 16px; font-weight: 600;")
        self.progress_lbl = QLabel("0 / 0 completed", self)
        header.addWidget(self.title_lbl, 1)
        header.addWidget(self.progress_lbl)
        outer.addLayout(header)

        # Controls
        controls = QHBoxLayout()
        self.filter_edit = QLineEdit(self)
        self.filter_edit.setPlaceholderText("Filter…")
        self.filter_edit.setClearButtonEnabled(True)
        self.count_lbl = QLabel("0 quests", self)
        self.count_lbl.setMinimumWidth(120)
        controls.addWidget(self.filter_edit)
        controls.addWidget(self.count_lbl)
        outer.addLayout(controls)

        # Table
        self.table = QTableWidget(self)
        self.table.setAlternatingRowColors(True)
        self.table.setColumnCount(6)
        self.table.setHorizontalHeaderLabels(["Quest", "Status", "Stage", "Description", "City", ""])
        hh = self.table.horizontalHeader()
        hh.setSectionResizeMode(self.COL_TITLE, QHeaderView.ResizeMode.ResizeToContents)
        hh.setSectionResizeMode(self.COL_STATUS, QHeaderView.ResizeMode.ResizeToContents)
        hh.setSectionResizeMode(self.COL_STAGE, QHeaderView.ResizeMode.ResizeToContents)
        hh.setSectionResizeMode(self.COL_DESC, QHeaderView.ResizeMode.Stretch)
        hh.setSectionResizeMode(self.COL_CITY, QHeaderView.ResizeMode.ResizeToContents)
        hh.setSectionResizeMode(self.COL_ACTION, QHeaderView.ResizeMode.ResizeToContents)
        self.table.verticalHeader().setVisible(False)
        self.table.setWordWrap(True)
        self.table.setSelectionBehavior(QTableWidget.SelectionBehavior.SelectRows)
        self.table.setSelectionMode(QTableWidget.SelectionMode.SingleSelection)
        outer.addWidget(self.table)

        self.empty_lbl = QLabel("", self)
        self.empty_lbl.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.empty_lbl.hide()
        outer.addWidget(self.empty_lbl)

        # Signals
        self.filter_edit.textChanged.connect(self._refilter)
        self.table.cellDoubleClicked.connect(self._on_cell_double_clicked)

    # ---------------- Public API ----------------
    def set_group(self, group_view: Optional[GroupView], preferences: Preferences):
        """Rebuild the table for one group; called on every view change."""
        self._group = group_view
        self._prefs = preferences

        if group_view is None:
            self.title_lbl.setText("Quest Group")
            self.progress_lbl.setText("0 / 0 completed")
            self._rows = []
        else:
            self.title_lbl.setText(group_view.group.title)
            self.progress_lbl.setText(f"{group_view.completed} / {group_view.total} completed")
            self._rows = visible_quests(group_view, preferences)

        self.table.setColumnHidden(self.COL_DESC, preferences.hide_descriptions)
        self.table.setColumnHidden(self.COL_CITY, not self._is_cities_group())
        self._rebuild()

    # ---------------- Internal helpers ----------------
    def _is_cities_group(self) -> bool:
        return self._group is not None and self._group.group.id == CITIES_GROUP_ID

    def _rebuild(self):
        top_row = self.table.rowAt(0)
        self.table.setUpdatesEnabled(False)
        try:
            self.table.clearContents()
            self.table.setRowCount(len(self._rows))
            for r, view in enumerate(self._rows):
                self._fill_row(r, view)
            self._refilter()
            if top_row >= 0 and self.table.rowCount() > 0:
                self.table.scrollToItem(
                    self.table.item(min(top_row, self.table.rowCount() - 1), self.COL_TITLE)
                )
        finally:
            self.table.setUpdatesEnabled(True)

    def _fill_row(self, r: int, view: QuestView):
        quest, status = view.quest, view.status

        title = _ro_item(f"{quest.title} ↗" if quest.link else quest.title)
        if quest.link:
            title.setToolTip("Open UESP quest article (double-click)")
            font = title.font(); font.setUnderline(True); title.setFont(font)
        self.table.setItem(r, self.COL_TITLE, title)

        label = f"{status.label} (manual)" if status.overridden else status.label
        status_item = _ro_item(label)
        status_item.setForeground(STATUS_COLORS[status.key])
        self.table.setItem(r, self.COL_STATUS, status_item)

        stage = str(view.record.stage) if view.record is not None else "-"
        self.table.setItem(r, self.COL_STAGE, _ro_item(f"Stage: {stage}"))
        self.table.setItem(r, self.COL_DESC, _ro_item(quest.description or NO_DESCRIPTION))
        self.table.setItem(r, self.COL_CITY, _ro_item(quest.city or ""))

        if status.overridden or not status.completed:
            btn = QPushButton("Clear Override" if status.overridden else "Mark Complete", self.table)
            btn.setToolTip(f"Mark {quest.title} as completed" if not status.overridden
                           else "Go back to the status reported by the game")
            btn.clicked.connect(
                lambda _=False, key=view.key, on=not status.overridden: self._request_toggle(key, on)
            )
            self.table.setCellWidget(r, self.COL_ACTION, btn)

    def _refilter(self):
        needle = self.filter_edit.text().strip().lower()
        shown = 0
        for r, view in enumerate(self._rows):
            hidden = not _matches(view, needle)
            self.table.setRowHidden(r, hidden)
            shown += 0 if hidden else 1

        self.count_lbl.setText(f"{shown} quests")
        if self._group is None or shown:
            self.empty_lbl.hide()
            return
        if self._group.quests:
            self.empty_lbl.setText("No quests to display with current filters.")
        else:
            self.empty_lbl.setText("This group has no quests.")
        self.empty_lbl.show()

    def _on_cell_double_clicked(self, row: int, col: int):
        if col != self.COL_TITLE or not (0 <= row < len(self._rows)):
            return
        link = self._rows[row].quest.link
        if not link:
            return
        url = QUrl(link)
        if url.scheme() in ("http", "https"):
            QDesktopServices.openUrl(url)

    def _request_toggle(self, key: str, completed: bool):
        # the rebuild that follows deletes the clicked button; leave its handler first
        QTimer.singleShot(0, lambda: self.override_toggled.emit(key, completed))
