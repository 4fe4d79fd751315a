# services/input_reducer.py
"""
Pure state transitions for one logical key event.

Keys arrive as tokens: a single character for printable input, or one of the
named tokens below. Anything else is ignored.
"""
from __future__ import annotations
from dataclasses import replace
from typing import Optional, Tuple

from app.config import TAB_WIDTH
from app.state import Prompt, SessionState, Verdict, VerdictStatus, UNTYPED

BACKSPACE = "<BACKSPACE>"
ENTER = "<ENTER>"
TAB = "<TAB>"
ESCAPE = "<ESCAPE>"
PASTE = "<PASTE>"

NAMED_KEYS = frozenset({BACKSPACE, ENTER, TAB, ESCAPE, PASTE})


def is_printable(key: Optional[str]) -> bool:
    if not isinstance(key, str) or len(key) != 1:
        return False
    return key.isprintable() or key.isspace()


def expand(key: Optional[str]) -> Optional[Tuple[str, ...]]:
    """Characters a key types, or None when it does not type anything."""
    if key == ENTER:
        return ("\n",)
    if key == TAB:
        return (" ",) * TAB_WIDTH
    if is_printable(key):
        return (key,)
    return None


def type_char(prompt: Prompt, state: SessionState, ch: str) -> SessionState:
    pos = state.position
    if pos >= prompt.length():
        # overflow keystrokes are dropped
        return state
    status = VerdictStatus.CORRECT if ch == prompt.character_at(pos) else VerdictStatus.INCORRECT
    verdicts = state.verdicts[:pos] + (Verdict(status, ch),) + state.verdicts[pos + 1:]
    return replace(state, position=pos + 1, verdicts=verdicts)


def backspace(state: SessionState) -> SessionState:
    if state.position == 0:
        return state
    pos = state.position - 1
    verdicts = state.verdicts[:pos] + (UNTYPED,) + state.verdicts[pos + 1:]
    return replace(state, position=pos, verdicts=verdicts)


def reduce(prompt: Prompt, state: SessionState, key: Optional[str], now_ms: float) -> SessionState:
    """
    Next state for ``key``. Escape returns a fresh state; paste, unknown keys
    and anything after completion return ``state`` unchanged (same object).
    """
    if key == ESCAPE:
        return SessionState.fresh(prompt)
    if state.finished or key == PASTE:
        return state
    if key == BACKSPACE:
        return backspace(state)

    chars = expand(key)
    if chars is None:
        return state

    nxt = state
    for ch in chars:
        nxt = type_char(prompt, nxt, ch)
    if nxt is state:
        return state
    if nxt.start_ms is None:
        nxt = replace(nxt, start_ms=now_ms)
    return nxt


def changed_positions(before: SessionState, after: SessionState) -> Tuple[int, ...]:
    if before.verdicts is after.verdicts:
        return ()
    if len(before.verdicts) != len(after.verdicts):
        return tuple(range(len(after.verdicts)))
    return tuple(
        i for i, (a, b) in enumerate(zip(before.verdicts, after.verdicts)) if a != b
    )
