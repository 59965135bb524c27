# questcompanion/ui/main_window.py
from __future__ import annotations
import os
from typing import Any, Dict, Optional

from PyQt6.QtCore import QThread, Qt
from PyQt6.QtGui import QAction, QIcon, QPalette, QColor
from PyQt6.QtWidgets import (
    QMainWindow, QStatusBar, QFileDialog, QMessageBox, QMenuBar, QMenu,
    QApplication, QSplitter, QWidget, QToolButton, QLineEdit, QPushButton,
    QHBoxLayout, QVBoxLayout, QLabel, QCheckBox, QGraphicsDropShadowEffect
)

from questcompanion.core.catalog import QuestCatalog
from questcompanion.core.errors import SettingsCorruptError
from questcompanion.core.progress import SnapshotError, SnapshotEvent
from questcompanion.core.reconcile import ReconciledView
from questcompanion.core.settings import APP_VERSION
from questcompanion.tabs.quest_tab import QuestTab
from questcompanion.ui.controller import QuestController
from questcompanion.ui.sidenav import GroupNav
from questcompanion.ui.ui_enhancements import BusyMixin, WorkerRunnerMixin
from questcompanion.ui.workers import LoadCatalogWorker
from questcompanion.utils.resources import find_app_icon, find_catalog_dir

WINDOW_TITLE = "Quest Companion"
EMPTY_PATH_MESSAGE = "Enter a quest progress file path first."


class MainWindow(WorkerRunnerMixin, BusyMixin, QMainWindow):
    def __init__(self, controller: QuestController, *, load_catalog: bool = True):
        super().__init__()
        self.setWindowTitle(f"{WINDOW_TITLE} v{APP_VERSION}")
        self.resize(1180, 760)

        # icon
        ico_path = find_app_icon()
        if ico_path and os.path.exists(ico_path):
            self.setWindowIcon(QIcon(ico_path))

        self.controller = controller
        self._prefs = controller.get_preferences()
        self._selected_group: Optional[str] = None
        self._view = ReconciledView()
        self._thread: Optional[QThread] = None
        self._worker: Optional[object] = None

        self._apply_theme("dark" if self._prefs.dark_mode else "light")

        # ---------- Path bar ----------
        central = QWidget(self)
        outer = QVBoxLayout(central)
        outer.setContentsMargins(0, 0, 0, 0)
        outer.setSpacing(0)

        path_bar = QWidget(central)
        pb = QHBoxLayout(path_bar)
        pb.setContentsMargins(10, 8, 10, 8)
        pb.addWidget(QLabel("Progress file:", path_bar))
        self.path_edit = QLineEdit(path_bar)
        self.path_edit.setPlaceholderText("Path to the quest progress JSON written by the game plugin")
        self.path_edit.setText(controller.get_current_progress_path() or "")
        self.btn_browse = QPushButton("Browse…", path_bar)
        self.btn_load = QPushButton("Load", path_bar)
        self.btn_load.setDefault(True)
        pb.addWidget(self.path_edit, 1)
        pb.addWidget(self.btn_browse)
        pb.addWidget(self.btn_load)
        outer.addWidget(path_bar)

        self.btn_browse.clicked.connect(self.browse_progress_file)
        self.btn_load.clicked.connect(self.load_progress_path)
        self.path_edit.returnPressed.connect(self.load_progress_path)

        # ---------- Groups + quests ----------
        self.quest_tab = QuestTab(central)
        self.quest_tab.override_toggled.connect(self._on_override_toggled)

        self._nav_expanded_width = 236
        self.nav = GroupNav(expanded_width=self._nav_expanded_width, collapsed_width=0, parent=central)
        self.nav.activated.connect(self._on_nav_activated)
        self.nav.expandedChanged.connect(self._on_nav_expanded_changed)
        self.nav.apply_theme(self._prefs.dark_mode)

        self.splitter = QSplitter(Qt.Orientation.Horizontal, central)
        self.splitter.addWidget(self.nav)
        self.splitter.addWidget(self.quest_tab)
        self.splitter.setStretchFactor(0, 0)
        self.splitter.setStretchFactor(1, 1)
        outer.addWidget(self.splitter, 1)
        self.setCentralWidget(central)

        # floating hamburger when nav hidden
        self.float_toggle = QToolButton(self.quest_tab)
        self.float_toggle.setObjectName("FloatHamburger")
        self.float_toggle.setToolButtonStyle(Qt.ToolButtonStyle.ToolButtonIconOnly)
        self.float_toggle.setArrowType(Qt.ArrowType.NoArrow)
        self.float_toggle.setText("☰")
        self.float_toggle.setCursor(Qt.CursorShape.PointingHandCursor)
        self.float_toggle.setAutoRaise(True)
        self.float_toggle.clicked.connect(lambda: self.nav.set_expanded(True))
        self.float_toggle.setStyleSheet("""
            QToolButton#FloatHamburger {
                background: rgba(10,12,16,0.94);
                border: 1px solid rgba(255,255,255,0.18);
                border-radius: 10px;
                padding: 6px 10px;
                color: #eef3fb;
                font-size: 18px;
            }
            QToolButton#FloatHamburger:hover { background: rgba(25,28,34,0.96); }
        """)
        shadow = QGraphicsDropShadowEffect(self.float_toggle)
        shadow.setBlurRadius(18); shadow.setOffset(0, 2)
        shadow.setColor(QColor(0, 0, 0, 200))
        self.float_toggle.setGraphicsEffect(shadow)
        self.float_toggle.hide()

        # ---------- Menus ----------
        menubar: QMenuBar = self.menuBar()
        file_menu: QMenu = menubar.addMenu("&File")
        open_action   = QAction("&Open Progress File…", self)
        reload_action = QAction("&Reload Progress", self)
        clear_action  = QAction("&Clear Progress Path", self)
        exit_action   = QAction("E&xit", self)
        file_menu.addAction(open_action)
        file_menu.addAction(reload_action)
        file_menu.addAction(clear_action)
        file_menu.addSeparator()
        file_menu.addAction(exit_action)

        open_action.setShortcut("Ctrl+O")
        reload_action.setShortcut("F5")
        open_action.setStatusTip("Choose the quest progress JSON to watch")
        reload_action.setStatusTip("Read the progress file again now")
        clear_action.setStatusTip("Stop watching any progress file")

        open_action.triggered.connect(self.browse_progress_file)
        reload_action.triggered.connect(self.controller.reload)
        clear_action.triggered.connect(self.clear_progress_path)
        exit_action.triggered.connect(self.close)

        # ---------- Status bar ----------
        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
        self.status_lbl = QLabel(self.controller.status_message(), self)
        self.status_bar.addWidget(self.status_lbl, 1)

        self.total_lbl = QLabel("", self)
        self.chk_dark = QCheckBox("Dark mode", self)
        self.chk_hide_completed = QCheckBox("Hide completed", self)
        self.chk_hide_desc = QCheckBox("Hide descriptions", self)
        self.chk_dark.setChecked(self._prefs.dark_mode)
        self.chk_hide_completed.setChecked(self._prefs.hide_completed)
        self.chk_hide_desc.setChecked(self._prefs.hide_descriptions)
        self.chk_dark.toggled.connect(lambda on: self._on_pref_toggled({"darkMode": bool(on)}))
        self.chk_hide_completed.toggled.connect(lambda on: self._on_pref_toggled({"hideCompleted": bool(on)}))
        self.chk_hide_desc.toggled.connect(lambda on: self._on_pref_toggled({"hideDescriptions": bool(on)}))
        self.version_lbl = QLabel(f"v{APP_VERSION}", self)
        for w in (self.total_lbl, self.chk_dark, self.chk_hide_completed, self.chk_hide_desc, self.version_lbl):
            self.status_bar.addPermanentWidget(w)

        self._init_busy(controls=[open_action, reload_action, clear_action, self.btn_browse, self.btn_load])

        # ---------- Controller wiring ----------
        self.controller.view_changed.connect(self._render)
        self.controller.snapshot_updated.connect(self._on_snapshot_updated)
        self.controller.snapshot_error.connect(self._on_snapshot_error)

        self._render(self.controller.current_view())
        if load_catalog:
            self.reload_catalog()

    # ---------- layout helpers ----------
    def resizeEvent(self, e):
        super().resizeEvent(e)
        self._position_float_button()

    def _position_float_button(self):
        margin = 12
        self.float_toggle.move(margin, margin)
        self.float_toggle.raise_()

    def _on_nav_expanded_changed(self, expanded: bool) -> None:
        if expanded:
            self.nav.setVisible(True)
            self.splitter.setSizes([self._nav_expanded_width, max(1, self.width() - self._nav_expanded_width)])
            self.float_toggle.hide()
        else:
            self.splitter.setSizes([0, 1])
            self.nav.setVisible(False)
            self.float_toggle.show()
            self._position_float_button()

    # ---------- Catalog ----------
    def reload_catalog(self):
        if getattr(self, "_busy", False): return
        directory = find_catalog_dir()
        self.status_bar.showMessage(f"Loading quest data from {directory}…")
        self._set_busy(True)
        self._thread, self._worker = self._run_worker(
            LoadCatalogWorker(directory),
            self._on_catalog_loaded,
            self._on_catalog_error,
            progress_cb=lambda pct, note: self.status_bar.showMessage(f"{note} ({pct}%)"),
        )

    def _on_catalog_loaded(self, catalog: QuestCatalog, directory: str):
        try:
            self.controller.set_catalog(catalog)
            self.status_bar.showMessage(f"Loaded {len(catalog.groups)} quest groups", 4000)
        finally:
            self._set_busy(False); self._worker = None; self._thread = None

    def _on_catalog_error(self, msg: str):
        try:
            self.status_bar.clearMessage()
            QMessageBox.critical(self, "Quest Data Error", msg)
        finally:
            self._set_busy(False); self._worker = None; self._thread = None

    # ---------- Progress path ----------
    def browse_progress_file(self):
        if getattr(self, "_busy", False): return
        start = os.path.dirname(self.path_edit.text().strip()) if self.path_edit.text().strip() else ""
        path, _ = QFileDialog.getOpenFileName(
            self, "Select Quest Progress File", start, "JSON Files (*.json);;All Files (*)"
        )
        if path:
            self.path_edit.setText(path)
            self.load_progress_path()

    def load_progress_path(self):
        path = self.path_edit.text().strip()
        if not path:
            self.status_lbl.setText(EMPTY_PATH_MESSAGE)
            return
        active = self.controller.set_progress_path(path)
        if active:
            self.path_edit.setText(active)

    def clear_progress_path(self):
        self.controller.set_progress_path(None)
        self.path_edit.clear()

    def _on_snapshot_updated(self, _event: SnapshotEvent):
        self.status_lbl.setText(self.controller.status_message())

    def _on_snapshot_error(self, _err: SnapshotError):
        self.status_lbl.setText(self.controller.status_message())

    # ---------- Overrides / preferences ----------
    def _on_override_toggled(self, key: str, completed: bool):
        try:
            self.controller.set_override(key, completed)
        except SettingsCorruptError as e:
            self._show_settings_error(e)

    def _on_pref_toggled(self, updates: Dict[str, Any]):
        # update local copy first; set_preferences re-renders synchronously
        self._prefs = self._prefs.merged(updates)
        if "darkMode" in updates:
            self._apply_theme("dark" if self._prefs.dark_mode else "light")
            self.nav.apply_theme(self._prefs.dark_mode)
        try:
            self._prefs = self.controller.set_preferences(updates)
        except SettingsCorruptError as e:
            self._show_settings_error(e)

    def _show_settings_error(self, e: SettingsCorruptError):
        QMessageBox.critical(self, "Settings Error", f"{e}\n\nThe change was not saved.")

    # ---------- Rendering ----------
    def _on_nav_activated(self, group_id: str) -> None:
        self._selected_group = group_id
        self.nav.set_active(group_id)
        self.quest_tab.set_group(self._view.find_group(group_id), self._prefs)

    def _render(self, view: ReconciledView) -> None:
        self._view = view
        self.nav.set_groups(
            (gv.group.id, gv.group.title, gv.completed, gv.total) for gv in view.groups
        )
        if view.find_group(self._selected_group) is None:
            self._selected_group = view.groups[0].group.id if view.groups else None
        self.nav.set_active(self._selected_group)
        self.quest_tab.set_group(view.find_group(self._selected_group), self._prefs)
        self.total_lbl.setText(f"Total: {view.completed} / {view.total}")

    # ---------- Theme ----------
    def _apply_theme(self, mode: str) -> None:
        app = QApplication.instance()
        if app is None:
            return
        app.setStyle("Fusion")
        if mode.lower() == "dark":
            pal = QPalette()
            pal.setColor(QPalette.ColorRole.Window, QColor(34, 36, 41))
            pal.setColor(QPalette.ColorRole.Base, QColor(28, 29, 33))
            pal.setColor(QPalette.ColorRole.AlternateBase, QColor(38, 40, 46))
            pal.setColor(QPalette.ColorRole.WindowText, QColor(230, 230, 235))
            pal.setColor(QPalette.ColorRole.Text, QColor(230, 230, 235))
            pal.setColor(QPalette.ColorRole.ToolTipBase, QColor(255, 255, 220))
            pal.setColor(QPalette.ColorRole.ToolTipText, QColor(20, 20, 20))
            pal.setColor(QPalette.ColorRole.Button, QColor(44, 46, 54))
            pal.setColor(QPalette.ColorRole.ButtonText, QColor(230, 230, 235))
            pal.setColor(QPalette.ColorRole.Highlight, QColor(42, 98, 201))
            pal.setColor(QPalette.ColorRole.HighlightedText, QColor(255, 255, 255))
            pal.setColor(QPalette.ColorRole.Link, QColor(110, 160, 255))
            pal.setColor(QPalette.ColorRole.BrightText, QColor(255, 64, 64))
            app.setPalette(pal)
        else:
            app.setPalette(app.style().standardPalette())

    # ---------- Window lifecycle ----------
    def closeEvent(self, e):
        if getattr(self, "_busy", False):
            if QMessageBox.question(
                self, "Operation in progress",
                "Quest data is still loading. Quit anyway?",
                QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
            ) != QMessageBox.StandardButton.Yes:
                e.ignore(); return
        self.controller.close()
        super().closeEvent(e)
