# app/themes.py
from __future__ import annotations
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Theme:
    name: str
    background: str
    primary: str
    secondary: str
    accent: str
    correct: str = "#22c55e"
    error: str = "#ef4444"
    caret: str = "#7dd3fc"
    muted: str = "#6b7280"
    surface: str = "#0f1720"


# -------- Built-in themes --------
THEMES: List[Theme] = [
    Theme(
        name="Slate",
        background="#0b1120",
        primary="#e6eef3",
        secondary="#9aa6b2",
        accent="#7dd3fc",
        correct="#86efac",
        error="#ffb4b4",
        caret="#7dd3fc",
        muted="#9aa6b2",
        surface="#0f1720",
    ),
    Theme(
        name="Paper",
        background="#fafafa",
        primary="#111111",
        secondary="#6b6b6b",
        accent="#eab308",
        correct="#15803d",
        error="#b91c1c",
        caret="#eab308",
        muted="#9ca3af",
        surface="#ffffff",
    ),
    Theme(
        name="Nord",
        background="#2e3440",
        primary="#eceff4",
        secondary="#88c0d0",
        accent="#bf616a",
        correct="#a3be8c",
        error="#bf616a",
        caret="#ebcb8b",
        muted="#4c566a",
        surface="#3b4252",
    ),
]

DEFAULT_THEME_INDEX = 0


def theme_at(idx: int) -> Theme:
    if 0 <= idx < len(THEMES):
        return THEMES[idx]
    return THEMES[DEFAULT_THEME_INDEX]
