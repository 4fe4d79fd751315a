# ui/main_window.py
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QMenu, QMessageBox, QToolButton, QPushButton,
    QListWidget, QListWidgetItem, QLineEdit, QCheckBox, QLabel,
)
from PySide6.QtGui import QAction
from PySide6.QtCore import Qt, QTimer
import logging

from app.config import Settings
from app.state import AttemptRecord, Prompt
from app.themes import THEMES, DEFAULT_THEME_INDEX, theme_at
from app.validation import attempt_user
from core.threads import BackgroundSubmitter, Workers
from services.api_client import ApiClient
from services.typing_engine import TypingEngine
from ui.leaderboard_dialog import LeaderboardDialog
from ui.session_summary import SessionSummary
from ui.typing_view import TypingView
from utils.file_handler import RecordStore

logger = logging.getLogger(__name__)


def make_source(settings: Settings):
    """Problem source + attempt store: the HTTP API when configured, else the local file."""
    if settings.api_url:
        return ApiClient(settings.api_url, timeout=settings.timeout)
    return RecordStore(settings.store_path)


class MainWindow(QMainWindow):
    def __init__(self, settings: Settings, source=None):
        super().__init__()
        self.settings = settings
        self.setWindowTitle("Typecache")
        self.resize(1200, 720)
        self.theme_idx = DEFAULT_THEME_INDEX
        self.source = source if source is not None else make_source(settings)
        self._problems = []

        engine = TypingEngine(
            user=settings.user,
            submitter=BackgroundSubmitter(self.source),
            auto_submit=settings.auto_submit,
        )

        root = QWidget(self)
        root_v = QVBoxLayout(root)
        root_v.setContentsMargins(16, 16, 16, 16)
        root_v.setSpacing(16)
        self._build_top_bar(root_v)

        body = QHBoxLayout()
        body.setSpacing(16)
        self.problem_list = QListWidget(self)
        self.problem_list.setObjectName("ProblemList")
        self.problem_list.setMaximumWidth(260)
        self.problem_list.setFocusPolicy(Qt.NoFocus)
        self.problem_list.currentItemChanged.connect(self._on_problem_selected)
        body.addWidget(self.problem_list)

        self.view = TypingView(engine, self)
        self.view.finished.connect(self._on_finished)
        body.addWidget(self.view, 1)
        root_v.addLayout(body, 1)

        self.setCentralWidget(root)
        self.menuBar().setVisible(False)
        self._apply_theme(DEFAULT_THEME_INDEX)

        self._load_problems()

    # ---------------- Top Bar ----------------
    def _build_top_bar(self, parent_layout):
        bar = QWidget(self)
        bar.setObjectName("TopBar")
        h = QHBoxLayout(bar)
        h.setContentsMargins(14, 12, 14, 12)
        h.setSpacing(10)

        self.theme_menu = QMenu(self)
        for i, t in enumerate(THEMES):
            act = QAction(t.name, self)
            act.triggered.connect(lambda _, idx=i: self._apply_theme(idx))
            self.theme_menu.addAction(act)
        theme_btn = QToolButton(bar)
        theme_btn.setText("Theme")
        theme_btn.setObjectName("TopBtn")
        theme_btn.setMenu(self.theme_menu)
        theme_btn.setPopupMode(QToolButton.InstantPopup)
        theme_btn.setFocusPolicy(Qt.NoFocus)
        h.addWidget(theme_btn)

        h.addWidget(QLabel("Name:", bar))
        self.user_edit = QLineEdit(self.settings.user, bar)
        self.user_edit.setMaximumWidth(180)
        self.user_edit.setMaxLength(24)
        self.user_edit.editingFinished.connect(self._on_user_changed)
        h.addWidget(self.user_edit)

        self.chk_submit = QCheckBox("Save attempts", bar)
        self.chk_submit.setChecked(self.settings.auto_submit)
        self.chk_submit.setFocusPolicy(Qt.NoFocus)
        self.chk_submit.toggled.connect(self._on_auto_submit_toggled)
        h.addWidget(self.chk_submit)

        h.addStretch(1)

        btn_board = QPushButton("Leaderboard…", bar)
        btn_board.clicked.connect(self._open_leaderboard)
        btn_board.setObjectName("TopBtn")
        btn_board.setFocusPolicy(Qt.NoFocus)
        h.addWidget(btn_board)

        btn_reset = QPushButton("Reset", bar)
        btn_reset.clicked.connect(self._reset_test)
        btn_reset.setObjectName("TopBtn")
        btn_reset.setFocusPolicy(Qt.NoFocus)
        h.addWidget(btn_reset)

        parent_layout.addWidget(bar)

        self._topbar_qss = """
        QWidget#TopBar {
            background: rgba(255,255,255,0.04);
            border: 1px solid rgba(255,255,255,0.08);
            border-radius: 10px;
        }
        QPushButton#TopBtn, QToolButton#TopBtn {
            background: transparent;
            border: 1px solid rgba(255,255,255,0.10);
            border-radius: 6px;
            padding: 6px 10px;
        }
        QPushButton#TopBtn:hover, QToolButton#TopBtn:hover {
            border-color: rgba(255,255,255,0.32);
            background: rgba(255,255,255,0.06);
        }
        QToolButton::menu-indicator { image: none; width: 0px; height: 0px; }
        """

    # ---------------- Theme ----------------
    def _apply_theme(self, idx):
        theme = theme_at(idx)
        self.theme_idx = idx
        self.view.set_theme(theme)
        self.setStyleSheet(
            f"""
            QWidget {{ background: {theme.background}; color: {theme.primary}; }}
            QListWidget#ProblemList {{ border: 1px solid rgba(255,255,255,0.08); border-radius: 8px; }}
            QListWidget#ProblemList::item:selected {{ background: {theme.surface}; color: {theme.accent}; }}
            {self._topbar_qss}
            """
        )

    # ---------------- Problems ----------------
    def _load_problems(self):
        Workers.call(self.source.list_problems,
                     on_loaded=self._on_problems_loaded,
                     on_failed=self._on_load_failed)

    def _on_problems_loaded(self, problems):
        self._problems = [p for p in (problems or []) if isinstance(p, dict)]
        self.problem_list.clear()
        for p in self._problems:
            label = p.get("title") or p.get("id") or "Untitled"
            if p.get("difficulty"):
                label = f"{label}  ·  {p['difficulty']}"
            item = QListWidgetItem(label)
            item.setData(Qt.UserRole, p)
            self.problem_list.addItem(item)
        if self._problems:
            self.problem_list.setCurrentRow(0)

    def _on_load_failed(self, msg):
        logger.warning("Problem list unavailable: %s", msg)
        QMessageBox.warning(self, "Problems", f"Could not load problems:\n{msg}")

    def _on_problem_selected(self, current, _previous):
        if current is None:
            return
        problem = current.data(Qt.UserRole) or {}
        self.view.load_prompt(Prompt.from_problem(problem))

    def _current_problem_id(self):
        return self.view.engine.prompt.id or None

    # ---------------- Session ----------------
    def _on_user_changed(self):
        user = attempt_user(self.user_edit.text())
        self.user_edit.setText(user)
        self.view.engine.user = user
        self.view.setFocus()

    def _on_auto_submit_toggled(self, checked):
        self.view.engine.auto_submit = bool(checked)

    def _reset_test(self):
        self.view.reset()

    def _on_finished(self, attempt: AttemptRecord):
        self.setWindowTitle(f"Typecache - {attempt.wpm} WPM")
        # let the key handler return before opening a modal dialog
        QTimer.singleShot(0, lambda: self._show_summary(attempt))

    def _show_summary(self, attempt: AttemptRecord):
        dlg = SessionSummary(
            attempt,
            samples=list(self.view.engine.samples),
            line_color=theme_at(self.theme_idx).accent,
            parent=self,
        )
        dlg.exec()
        if dlg.retry:
            self.view.reset()
        else:
            self.view.setFocus()

    # ---------------- Leaderboard ----------------
    def _open_leaderboard(self):
        Workers.call(self.source.leaderboard, self._current_problem_id(),
                     on_loaded=self._on_leaderboard_loaded,
                     on_failed=self._on_leaderboard_failed)

    def _on_leaderboard_loaded(self, rows):
        LeaderboardDialog(rows or [], self.view.engine.prompt.title, self).exec()
        self.view.setFocus()

    def _on_leaderboard_failed(self, msg):
        QMessageBox.warning(self, "Leaderboard", f"Could not load leaderboard:\n{msg}")
