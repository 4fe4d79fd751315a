# ui/widgets/typing_area.py
from __future__ import annotations
from typing import Iterable, List, Optional

from PySide6.QtWidgets import QWidget
from PySide6.QtGui import QPainter, QFont, QColor, QPen, QPaintEvent, QFontMetricsF
from PySide6.QtCore import Qt, QTimer, QRectF, QPointF, QPoint, QPropertyAnimation, QEasingCurve, Signal

from app.config import CARET_ANIMATION_MS, TAB_WIDTH
from app.state import Prompt, SessionState, VerdictStatus
from app.themes import THEMES, Theme
from core.layout_cache import CaretBox, LayoutCache, Rect


class Caret(QWidget):
    """Thin bar moved over the prompt; never takes focus or mouse input."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setAttribute(Qt.WA_TransparentForMouseEvents, True)
        self.setFocusPolicy(Qt.NoFocus)
        self._color = QColor("#7dd3fc")
        self.resize(2, 18)

    def set_color(self, color: str):
        self._color = QColor(color)
        self.update()

    def paintEvent(self, e: QPaintEvent):
        p = QPainter(self)
        p.fillRect(self.rect(), self._color)


class TypingArea(QWidget):
    """
    Renders the prompt as a pure function of the session state.

    Character rectangles are measured only in ``rebuild()`` (prompt change,
    reset, resize); painting and caret placement read the cache.
    """

    caretMoved = Signal(float, float, float)  # x, y, height in widget coords

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setFocusPolicy(Qt.NoFocus)

        # Visuals
        self._font = QFont("JetBrains Mono, Menlo, Consolas, Courier New", 15)
        self._font.setStyleHint(QFont.Monospace)
        self._line_factor = 1.5
        self._pad_x = 12.0
        self._pad_y = 12.0
        self._theme: Theme = THEMES[0]

        self._prompt = Prompt()
        self._state = SessionState()
        self.cache = LayoutCache()

        self.caret = Caret(self)
        self._caret_anim = QPropertyAnimation(self.caret, b"pos", self)
        self._caret_anim.setDuration(CARET_ANIMATION_MS)
        self._caret_anim.setEasingCurve(QEasingCurve.Linear)
        self._caret_target: Optional[CaretBox] = None
        self._caret_pending = False

        self._resize_pending = False

    # ---------- public ----------
    @property
    def prompt(self) -> Prompt:
        return self._prompt

    def set_theme(self, theme: Theme):
        self._theme = theme
        self.caret.set_color(theme.caret)
        self.update()

    def set_prompt(self, prompt: Prompt, state: SessionState):
        """New prompt (or reset): swap content first, then measure, then snap the caret."""
        self._prompt = prompt
        self._state = state
        self.rebuild()
        self.place_caret(instant=True)
        self.update()

    def set_state(self, state: SessionState, changed: Iterable[int] = ()):
        moved = state.position != self._state.position
        self._state = state
        for i in changed:
            r = self.cache.rect_at(i)
            if r is not None:
                self.update(QRectF(r.x, r.y, r.width, r.height).toAlignedRect().adjusted(-1, -1, 2, 3))
        if moved:
            self.place_caret(instant=False)

    def rebuild(self):
        self.cache.rebuild(self.measure, self._prompt.length())
        bottom = max((r.bottom for r in self.cache.rects if r is not None), default=0.0)
        self.setMinimumHeight(int(bottom + 2 * self._pad_y))

    # ---------- measurement ----------
    def _line_height(self, fm: QFontMetricsF) -> float:
        return fm.height() * self._line_factor

    def measure(self) -> List[Rect]:
        """
        Lay out every character with word wrapping (words stay whole unless
        longer than a line). Newlines end the line, tabs take TAB_WIDTH spaces.
        """
        fm = QFontMetricsF(self._font)
        chars = self._prompt.chars
        line_h = self._line_height(fm)
        glyph_h = fm.height()
        space_w = fm.horizontalAdvance(" ")
        left = self._pad_x
        right = max(left + space_w, self.width() - self._pad_x)

        def advance(ch: str) -> float:
            if ch == "\t":
                return space_w * TAB_WIDTH
            if ch == "\n":
                return space_w
            return fm.horizontalAdvance(ch)

        rects: List[Rect] = []
        x = left
        line_top = self._pad_y
        glyph_off = (line_h - glyph_h) / 2.0
        i = 0
        n = len(chars)
        while i < n:
            ch = chars[i]
            if ch.isspace():
                rects.append(Rect(x, line_top + glyph_off, advance(ch), glyph_h))
                if ch == "\n":
                    x = left
                    line_top += line_h
                else:
                    x += advance(ch)
                i += 1
                continue

            j = i
            while j < n and not chars[j].isspace():
                j += 1
            widths = [advance(c) for c in chars[i:j]]
            if x > left and x + sum(widths) > right:
                x = left
                line_top += line_h
            for w in widths:
                if x > left and x + w > right:
                    x = left
                    line_top += line_h
                rects.append(Rect(x, line_top + glyph_off, w, glyph_h))
                x += w
            i = j
        return rects

    # ---------- caret ----------
    def place_caret(self, instant: bool):
        box = self.cache.locate(self._state.position)
        self._caret_target = box
        self.caret.resize(2, int(round(box.height)))
        self.caretMoved.emit(box.x, box.y, box.height)
        if instant:
            self._caret_pending = False
            self._caret_anim.stop()
            self.caret.move(QPoint(int(round(box.x)), int(round(box.y))))
            return
        if not self._caret_pending:
            self._caret_pending = True
            QTimer.singleShot(0, self._animate_caret)

    def _animate_caret(self):
        if not self._caret_pending or self._caret_target is None:
            return
        self._caret_pending = False
        box = self._caret_target
        target = QPoint(int(round(box.x)), int(round(box.y)))
        self._caret_anim.stop()
        if self.caret.pos() == target:
            return
        self._caret_anim.setStartValue(self.caret.pos())
        self._caret_anim.setEndValue(target)
        self._caret_anim.start()

    # ---------- resize ----------
    def resizeEvent(self, event):
        super().resizeEvent(event)
        if event.oldSize().width() == event.size().width():
            return
        # coalesce bursts of resize events into one rebuild
        if not self._resize_pending:
            self._resize_pending = True
            QTimer.singleShot(0, self._on_resized)

    def _on_resized(self):
        self._resize_pending = False
        self.rebuild()
        self.place_caret(instant=True)
        self.update()

    # ---------- painting ----------
    def paintEvent(self, e: QPaintEvent):
        theme = self._theme
        p = QPainter(self)
        p.setRenderHint(QPainter.Antialiasing)
        p.fillRect(self.rect(), QColor(theme.surface))
        p.setFont(self._font)
        fm = QFontMetricsF(self._font)
        ascent = fm.ascent()
        clip = QRectF(e.rect())

        col_ok = QColor(theme.correct)
        col_err = QColor(theme.error)
        col_mut = QColor(theme.muted)
        err_bg = QColor(theme.error)
        err_bg.setAlpha(40)

        verdicts = self._state.verdicts
        for i, ch in enumerate(self._prompt.chars):
            r = self.cache.rect_at(i)
            if r is None:
                continue
            box = QRectF(r.x, r.y, r.width, r.height)
            if not box.intersects(clip):
                continue
            status = verdicts[i].status if i < len(verdicts) else VerdictStatus.UNTYPED
            if status is VerdictStatus.CORRECT:
                pen_color = col_ok
            elif status is VerdictStatus.INCORRECT:
                pen_color = col_err
                p.fillRect(box, err_bg)
            else:
                pen_color = col_mut

            if not ch.isspace():
                p.setPen(pen_color)
                p.drawText(QPointF(r.x, r.y + ascent), ch)
            if status is VerdictStatus.INCORRECT:
                pen = QPen(col_err)
                pen.setWidth(1)
                p.setPen(pen)
                uy = r.y + r.height - 1
                p.drawLine(QPointF(r.x, uy), QPointF(r.x + r.width - 1, uy))
