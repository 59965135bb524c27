from __future__ import annotations
from typing import Dict, Iterable, Optional, Tuple

from PyQt6.QtCore import Qt, pyqtSignal, QPropertyAnimation
from PyQt6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QToolButton,
    QPushButton,
    QSizePolicy,
    QFrame,
    QLabel,
    QScrollArea,
)


class GroupNav(QWidget):
    """
    Collapsible left sidebar listing quest groups. Emits `activated(group_id)`
    when a group button is clicked.
    """

    activated = pyqtSignal(str)
    expandedChanged = pyqtSignal(bool)

    def __init__(
        self,
        *,
        expanded_width: int = 236,
        collapsed_width: int = 0,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)

        self.setObjectName("GroupNav")

        self._expanded = True
        self._expanded_width = int(expanded_width)
        self._collapsed_width = int(collapsed_width)
        self._dark = False
        self._active: Optional[str] = None

        self._buttons: Dict[str, QPushButton] = {}

        self.setMinimumWidth(self._collapsed_width)
        self.setMaximumWidth(self._expanded_width)

        root = QVBoxLayout(self)
        root.setContentsMargins(8, 10, 8, 10)
        root.setSpacing(8)

        # --- Hamburger toggle ---
        self.btn_toggle = QToolButton(self)
        self.btn_toggle.setObjectName("Hamburger")
        self.btn_toggle.setCheckable(True)
        self.btn_toggle.setChecked(True)
        self.btn_toggle.setToolButtonStyle(Qt.ToolButtonStyle.ToolButtonIconOnly)
        self.btn_toggle.setArrowType(Qt.ArrowType.NoArrow)
        self.btn_toggle.setText("☰")
        self.btn_toggle.clicked.connect(self._on_toggle_clicked)
        root.addWidget(self.btn_toggle, 0, Qt.AlignmentFlag.AlignLeft)

        self.heading = QLabel("Quest Groups", self)
        self.heading.setObjectName("NavHeading")
        root.addWidget(self.heading)

        divider = QFrame(self)
        divider.setObjectName("Divider")
        divider.setFrameShape(QFrame.Shape.HLine)
        divider.setFrameShadow(QFrame.Shadow.Sunken)
        root.addWidget(divider)

        # Group buttons live in a scroll area; catalogs can be long
        self.scroll = QScrollArea(self)
        self.scroll.setWidgetResizable(True)
        self.scroll.setFrameShape(QFrame.Shape.NoFrame)
        self.container = QWidget(self.scroll)
        self.container.setObjectName("NavContainer")
        self._vbox = QVBoxLayout(self.container)
        self._vbox.setContentsMargins(0, 0, 0, 0)
        self._vbox.setSpacing(6)
        self._vbox.addStretch(1)
        self.scroll.setWidget(self.container)
        root.addWidget(self.scroll, 1)

        self.empty_lbl = QLabel("No quest data found.", self)
        self.empty_lbl.setObjectName("NavEmpty")
        self.empty_lbl.setWordWrap(True)
        root.addWidget(self.empty_lbl)

        # Width animations
        self._anim_max = QPropertyAnimation(self, b"maximumWidth", self)
        self._anim_max.setDuration(160)
        self._anim_min = QPropertyAnimation(self, b"minimumWidth", self)
        self._anim_min.setDuration(160)

        self.apply_theme(False)

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #
    def set_groups(self, groups: Iterable[Tuple[str, str, int, int]]) -> None:
        """
        Replace the button list.

        :param groups: iterable of (group_id, title, completed, total), already in display order
        """
        for btn in self._buttons.values():
            self._vbox.removeWidget(btn)
            btn.deleteLater()
        self._buttons.clear()

        for group_id, title, completed, total in groups:
            btn = QPushButton(self._label(title, completed, total), self.container)
            btn.setObjectName("NavButton")
            btn.setFlat(True)
            btn.setProperty("active", False)
            btn.setCursor(Qt.CursorShape.PointingHandCursor)
            btn.setMinimumHeight(36)
            btn.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Fixed)
            btn.setToolTip(title)
            btn.clicked.connect(lambda _=False, k=group_id: self.activated.emit(k))
            self._buttons[group_id] = btn
            # keep the trailing stretch last
            self._vbox.insertWidget(self._vbox.count() - 1, btn)

        self.empty_lbl.setVisible(not self._buttons)
        self.set_active(self._active)

    def group_ids(self):
        return list(self._buttons.keys())

    def button(self, group_id: str) -> Optional[QPushButton]:
        return self._buttons.get(group_id)

    def active(self) -> Optional[str]:
        return self._active

    def set_active(self, group_id: Optional[str]) -> None:
        self._active = group_id
        for k, btn in self._buttons.items():
            btn.setProperty("active", bool(k == group_id))
            btn.style().unpolish(btn)
            btn.style().polish(btn)

    def expanded(self) -> bool:
        return self._expanded

    def set_expanded(self, expanded: bool) -> None:
        expanded = bool(expanded)
        if self._expanded == expanded:
            return
        self._expanded = expanded
        self.btn_toggle.setChecked(expanded)
        self._animate_width(self._expanded_width if expanded else self._collapsed_width)
        self.expandedChanged.emit(expanded)

    def apply_theme(self, dark: bool) -> None:
        self._dark = bool(dark)
        self.setStyleSheet(self._stylesheet_dark() if self._dark else self._stylesheet_light())

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #
    @staticmethod
    def _label(title: str, completed: int, total: int) -> str:
        return f"{title}  ({completed} / {total})"

    def _on_toggle_clicked(self) -> None:
        self.set_expanded(not self._expanded)

    def _animate_width(self, target: int) -> None:
        target = int(target)
        for anim in (self._anim_max, self._anim_min):
            anim.stop()
            anim.setStartValue(self.width())
            anim.setEndValue(target)
            anim.start()

    # ------------------------------------------------------------------ #
    # Stylesheets                                                        #
    # ------------------------------------------------------------------ #
    def _stylesheet_dark(self) -> str:
        return """
        QWidget#GroupNav, QWidget#NavContainer {
            background: #1c1f26;
        }
        QWidget#GroupNav {
            border-right: 1px solid #2a2f38;
        }
        QToolButton#Hamburger {
            font-size: 18px;
            color: #dfe6f0;
            background: transparent;
            border: 1px solid rgba(255,255,255,0.06);
            border-radius: 6px;
            padding: 4px 8px;
        }
        QToolButton#Hamburger:hover {
            background: rgba(255,255,255,0.08);
        }
        QLabel#NavHeading {
            color: #8d97a8;
            font-weight: 600;
        }
        QLabel#NavEmpty {
            color: #8d97a8;
        }
        QFrame#Divider {
            color: #2a2f38;
        }
        QPushButton#NavButton {
            text-align: left;
            padding: 8px 10px;
            border-radius: 8px;
            font-size: 14px;
            color: #c9d3e1;
            background: transparent;
        }
        QPushButton#NavButton:hover {
            background: rgba(255,255,255,0.06);
        }
        QPushButton#NavButton[active="true"] {
            background: #2a62c9;
            color: white;
        }
        QPushButton#NavButton[active="true"]:hover {
            background: #2f6fe6;
        }
        """

    def _stylesheet_light(self) -> str:
        return """
        QWidget#GroupNav, QWidget#NavContainer {
            background: #f3f4f7;
        }
        QWidget#GroupNav {
            border-right: 1px solid #d1d4dd;
        }
        QToolButton#Hamburger {
            font-size: 18px;
            color: #22242a;
            background: #ffffff;
            border: 1px solid rgba(0,0,0,0.08);
            border-radius: 6px;
            padding: 4px 8px;
        }
        QToolButton#Hamburger:hover {
            background: #e6e9f0;
        }
        QLabel#NavHeading {
            color: #5a6070;
            font-weight: 600;
        }
        QLabel#NavEmpty {
            color: #9aa0b0;
        }
        QFrame#Divider {
            color: #d1d4dd;
        }
        QPushButton#NavButton {
            text-align: left;
            padding: 8px 10px;
            border-radius: 8px;
            font-size: 14px;
            color: #202229;
            background: transparent;
        }
        QPushButton#NavButton:hover {
            background: #e1e5f0;
        }
        QPushButton#NavButton[active="true"] {
            background: #2a62c9;
            color: #ffffff;
        }
        QPushButton#NavButton[active="true"]:hover {
            background: #2f6fe6;
        }
        """
