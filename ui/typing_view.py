from __future__ import annotations

from PySide6.QtCore import Qt, QTimer, Signal, Slot
from PySide6.QtGui import QKeySequence
from PySide6.QtWidgets import QWidget, QLabel, QVBoxLayout, QHBoxLayout, QScrollArea, QFrame

from app.state import AttemptRecord, Prompt
from app.themes import Theme
from core.layout_cache import scroll_target
from services.input_reducer import BACKSPACE, ENTER, ESCAPE, PASTE, TAB
from services.typing_engine import TypingEngine
from ui.widgets.typing_area import TypingArea


class TypingView(QWidget):
    """Prompt display, live metrics and keyboard input for one typing session."""

    finished = Signal(object)  # AttemptRecord

    def __init__(self, engine: TypingEngine, parent=None):
        super().__init__(parent)
        self.setFocusPolicy(Qt.StrongFocus)
        self.engine = engine
        self.engine.on_finish = self._on_engine_finished

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 12, 0, 12)
        root.setSpacing(16)

        self.lblTitle = QLabel("", self)
        self.lblTitle.setObjectName("lblTitle")
        root.addWidget(self.lblTitle)

        self.area = TypingArea()
        self.area.caretMoved.connect(self._ensure_caret_visible)

        self.scroll = QScrollArea(self)
        self.scroll.setObjectName("promptScroll")
        self.scroll.setWidgetResizable(True)
        self.scroll.setFrameShape(QFrame.NoFrame)
        self.scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        self.scroll.setMaximumHeight(380)
        self.scroll.setFocusPolicy(Qt.NoFocus)
        self.scroll.setWidget(self.area)
        root.addWidget(self.scroll, stretch=1)

        stats = QHBoxLayout()
        stats.setSpacing(24)
        self.lblTimer = QLabel("Elapsed: 0s", self)
        self.lblTimer.setObjectName("lblTimer")
        self.lblWPM = QLabel("WPM: 0", self)
        self.lblWPM.setObjectName("lblWPM")
        self.lblAcc = QLabel("Accuracy: 100%", self)
        self.lblAcc.setObjectName("lblAcc")
        for lab in (self.lblTimer, self.lblWPM, self.lblAcc):
            stats.addWidget(lab)
        stats.addStretch(1)
        root.addLayout(stats)

        self._ui_tick = QTimer(self)
        self._ui_tick.setInterval(100)
        self._ui_tick.timeout.connect(self.refresh_metrics)
        self._ui_tick.start()

    # ---------- session ----------
    def load_prompt(self, prompt: Prompt):
        self.lblTitle.setText(prompt.title)
        self.engine.load(prompt)
        # measure only after the new prompt is in place
        self.area.set_prompt(prompt, self.engine.state)
        self.refresh_metrics()
        self.setFocus()

    def reset(self):
        self.engine.reset()
        self.area.set_prompt(self.engine.prompt, self.engine.state)
        self.refresh_metrics()
        self.setFocus()

    def set_theme(self, theme: Theme):
        self.area.set_theme(theme)
        self.setStyleSheet(
            f"""
            QLabel#lblTitle {{ color: {theme.primary}; font-size: 18px; }}
            QLabel#lblTimer {{ color: {theme.secondary}; }}
            QLabel#lblWPM   {{ color: {theme.accent}; }}
            QLabel#lblAcc   {{ color: {theme.secondary}; }}
            """
        )

    def refresh_metrics(self):
        m = self.engine.live_metrics()
        self.lblTimer.setText(f"Elapsed: {m.elapsed_ms // 1000}s")
        self.lblWPM.setText(f"WPM: {m.wpm}")
        self.lblAcc.setText(f"Accuracy: {m.accuracy}%")

    def _on_engine_finished(self, attempt: AttemptRecord):
        self.finished.emit(attempt)

    # ---------- scrolling ----------
    @Slot(float, float, float)
    def _ensure_caret_visible(self, x: float, y: float, height: float):
        bar = self.scroll.verticalScrollBar()
        target = scroll_target(y, y + height, bar.value(), self.scroll.viewport().height())
        if target is not None:
            bar.setValue(target)

    # ---------- keyboard ----------
    def focusNextPrevChild(self, next):
        # Tab is typed, not used for focus traversal
        return False

    def keyPressEvent(self, ev):
        nk = self._normalize_key(ev)
        if nk is None:
            return super().keyPressEvent(ev)

        result = self.engine.handle_key(nk)
        ev.accept()
        if result.reset:
            # reset may follow a remount: re-measure and snap the caret
            self.area.set_prompt(self.engine.prompt, self.engine.state)
        elif result.consumed:
            self.area.set_state(self.engine.state, result.changed)
        if result.consumed:
            self.refresh_metrics()

    def _normalize_key(self, ev) -> str | None:
        if ev.matches(QKeySequence.Paste):
            return PASTE
        if ev.modifiers() & (Qt.ControlModifier | Qt.AltModifier | Qt.MetaModifier):
            return None
        key = ev.key()
        if key == Qt.Key_Backspace:
            return BACKSPACE
        if key in (Qt.Key_Return, Qt.Key_Enter):
            return ENTER
        if key == Qt.Key_Tab:
            return TAB
        if key == Qt.Key_Escape:
            return ESCAPE
        t = ev.text()
        if len(t) == 1 and t.isprintable():
            return t
        return None
