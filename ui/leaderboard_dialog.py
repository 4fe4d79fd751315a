# ui/leaderboard_dialog.py
from PySide6.QtWidgets import (
    QDialog,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QFileDialog,
)
from datetime import datetime
import csv
import pyqtgraph as pg

from utils.graph_helper import setup_bar_plot

COLUMNS = ["#", "User", "WPM", "Accuracy", "When"]


def _when(created_at) -> str:
    if not isinstance(created_at, (int, float)):
        return ""
    return datetime.fromtimestamp(created_at / 1000.0).strftime("%Y-%m-%d %H:%M")


class LeaderboardDialog(QDialog):
    def __init__(self, rows, title: str = "", parent=None):
        """
        rows: attempt dicts already ranked (wpm desc, accuracy desc)
        """
        super().__init__(parent)
        self.setWindowTitle(f"Leaderboard - {title}" if title else "Leaderboard")
        self.resize(680, 520)
        self._rows = list(rows)

        root = QVBoxLayout(self)

        # --- controls ---
        ctrl = QHBoxLayout()
        ctrl.addWidget(QLabel(f"Top {len(self._rows)} attempts"))
        ctrl.addStretch(1)
        self.btn_export = QPushButton("Export CSV…")
        self.btn_export.clicked.connect(self._export_csv)
        self.btn_export.setEnabled(bool(self._rows))
        ctrl.addWidget(self.btn_export)
        root.addLayout(ctrl)

        # --- plot ---
        self.plot = pg.PlotWidget()
        self._bar = setup_bar_plot(self.plot, "WPM")
        root.addWidget(self.plot, stretch=2)

        # --- table ---
        self.table = QTableWidget(0, len(COLUMNS))
        self.table.setHorizontalHeaderLabels(COLUMNS)
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.verticalHeader().setVisible(False)
        root.addWidget(self.table, stretch=1)

        self._render()

    def _render(self):
        wpms = [a.get("wpm") or 0 for a in self._rows]
        self._bar.setOpts(x=list(range(1, len(wpms) + 1)), height=wpms, width=0.8)

        self.table.setRowCount(len(self._rows))
        for i, a in enumerate(self._rows):
            self.table.setItem(i, 0, QTableWidgetItem(str(i + 1)))
            self.table.setItem(i, 1, QTableWidgetItem(str(a.get("user", "anon"))))
            self.table.setItem(i, 2, QTableWidgetItem(str(a.get("wpm", 0))))
            self.table.setItem(i, 3, QTableWidgetItem(f"{a.get('accuracy', 0)}%"))
            self.table.setItem(i, 4, QTableWidgetItem(_when(a.get("createdAt"))))

    def _export_csv(self):
        path, _ = QFileDialog.getSaveFileName(
            self, "Export Leaderboard", "leaderboard.csv", "CSV (*.csv)"
        )
        if not path:
            return
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["Rank", "User", "WPM", "Accuracy", "DurationMs", "CreatedAt"])
            for i, a in enumerate(self._rows, start=1):
                w.writerow([i, a.get("user", ""), a.get("wpm", ""), a.get("accuracy", ""),
                            a.get("durationMs", ""), a.get("createdAt", "")])
