# core/layout_cache.py
"""
Per-character geometry cache for caret placement.

Rectangles are measured once per layout-affecting event (mount, prompt
change, resize, reset) and then read in O(1) on every keystroke. ``locate``
never measures anything itself.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple
import logging

logger = logging.getLogger(__name__)

FALLBACK_X = 4.0
FALLBACK_Y = 4.0
FALLBACK_HEIGHT = 18.0
MIN_CARET_HEIGHT = 12.0
SCROLL_MARGIN = 8


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass(frozen=True)
class CaretBox:
    x: float
    y: float
    height: float

    @property
    def bottom(self) -> float:
        return self.y + self.height


FALLBACK_CARET = CaretBox(FALLBACK_X, FALLBACK_Y, FALLBACK_HEIGHT)

Measure = Callable[[], Sequence[Optional[Rect]]]


class LayoutCache:
    def __init__(self):
        self._rects: Tuple[Optional[Rect], ...] = ()
        self.generation = 0

    def __len__(self) -> int:
        return len(self._rects)

    @property
    def rects(self) -> Tuple[Optional[Rect], ...]:
        return self._rects

    def clear(self) -> None:
        self._rects = ()
        self.generation += 1

    def rebuild(self, measure: Measure, expected: int) -> bool:
        """
        Replace every cached rectangle with a fresh measurement.
        A failing measurement, or one for a different number of characters
        (stale prompt), leaves the cache empty so lookups use the fallback.
        """
        try:
            rects = tuple(measure())
        except Exception:
            logger.warning("Layout measurement failed; caret falls back to origin", exc_info=True)
            self.clear()
            return False
        if len(rects) != expected:
            logger.warning("Measured %d rects for a %d-char prompt; discarding", len(rects), expected)
            self.clear()
            return False
        self._rects = rects
        self.generation += 1
        return True

    def rect_at(self, position: int) -> Optional[Rect]:
        if 0 <= position < len(self._rects):
            return self._rects[position]
        return None

    def locate(self, position: int) -> CaretBox:
        rects = self._rects
        if not rects:
            return FALLBACK_CARET
        position = max(0, position)
        if position < len(rects):
            r = rects[position]
            if r is None:
                return FALLBACK_CARET
            return CaretBox(r.x, r.y, max(MIN_CARET_HEIGHT, r.height))
        # caret after the last character
        last = rects[-1]
        if last is None:
            return FALLBACK_CARET
        return CaretBox(last.right, last.y, max(MIN_CARET_HEIGHT, last.height))


def scroll_target(
    top: float,
    bottom: float,
    scroll_top: float,
    viewport_height: float,
    margin: int = SCROLL_MARGIN,
) -> Optional[int]:
    """New scroll offset that brings [top, bottom] into view, or None if visible."""
    if top < scroll_top:
        return max(0, int(top - margin))
    if bottom > scroll_top + viewport_height:
        return max(0, int(bottom - viewport_height + margin))
    return None
