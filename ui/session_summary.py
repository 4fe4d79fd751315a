# ui/session_summary.py
from __future__ import annotations
from typing import Sequence, Tuple

from PySide6.QtWidgets import QDialog, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QPlainTextEdit
import pyqtgraph as pg

from app.calculation import rolling_wpm
from app.state import AttemptRecord
from utils.graph_helper import setup_wpm_plot, update_curve


class SessionSummary(QDialog):
    """
    Final stats for one attempt plus a WPM-over-time graph.
    ``retry`` is True when the dialog was closed with "Try again".
    """

    def __init__(
        self,
        attempt: AttemptRecord,
        samples: Sequence[Tuple[float, int]] = (),
        line_color: str = "#7dd3fc",
        parent=None,
    ):
        super().__init__(parent)
        self.setWindowTitle("Session Summary")
        self.resize(720, 480)
        self.retry = False

        root = QVBoxLayout(self)
        root.addWidget(QLabel(f"WPM: {attempt.wpm}"))
        root.addWidget(QLabel(f"Accuracy: {attempt.accuracy}%"))
        root.addWidget(QLabel(f"Time: {attempt.duration_ms / 1000.0:.1f}s"))

        if samples:
            plot = pg.PlotWidget()
            curve = setup_wpm_plot(plot, line_color)
            update_curve(curve, [t for t, _ in samples], rolling_wpm(samples))
            root.addWidget(plot, stretch=1)

        root.addWidget(QLabel("Your typed text:"))
        typed = QPlainTextEdit(self)
        typed.setReadOnly(True)
        typed.setPlainText(attempt.raw_text)
        typed.setMaximumHeight(120)
        root.addWidget(typed)

        buttons = QHBoxLayout()
        buttons.addStretch(1)
        btn_retry = QPushButton("Try again", self)
        btn_retry.clicked.connect(self._on_retry)
        buttons.addWidget(btn_retry)
        btn_ok = QPushButton("OK", self)
        btn_ok.clicked.connect(self.accept)
        btn_ok.setDefault(True)
        buttons.addWidget(btn_ok)
        root.addLayout(buttons)

    def _on_retry(self):
        self.retry = True
        self.accept()
