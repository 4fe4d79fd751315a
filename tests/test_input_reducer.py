import random

import pytest

from app.state import Prompt, SessionState, Verdict, VerdictStatus, UNTYPED
from services.input_reducer import (
    BACKSPACE, ENTER, ESCAPE, PASTE, TAB,
    changed_positions, expand, is_printable, reduce,
)


def _fresh(text):
    p = Prompt.from_text(text)
    return p, SessionState.fresh(p)


def _position_counts_verdicts(state):
    return state.position == sum(1 for v in state.verdicts if v.status is not VerdictStatus.UNTYPED)


def test_correct_and_incorrect_characters():
    p, s = _fresh("ab")
    s = reduce(p, s, "a", 10.0)
    assert s.position == 1
    assert s.verdicts[0] == Verdict(VerdictStatus.CORRECT, "a")
    s = reduce(p, s, "c", 20.0)
    assert s.position == 2
    assert s.verdicts[1] == Verdict(VerdictStatus.INCORRECT, "c")


def test_first_keystroke_sets_start_once():
    p, s = _fresh("abc")
    s = reduce(p, s, "x", 10.0)
    s = reduce(p, s, "b", 99.0)
    assert s.start_ms == 10.0


def test_enter_types_a_newline():
    p, s = _fresh("a\nb")
    s = reduce(p, s, "a", 0.0)
    s = reduce(p, s, ENTER, 0.0)
    assert s.position == 2
    assert s.verdicts[1] == Verdict(VerdictStatus.CORRECT, "\n")


def test_tab_applies_four_spaces_atomically():
    p, s = _fresh("    x")
    s = reduce(p, s, TAB, 5.0)
    assert s.position == 4
    assert all(v == Verdict(VerdictStatus.CORRECT, " ") for v in s.verdicts[:4])
    assert s.verdicts[4] == UNTYPED
    assert s.start_ms == 5.0


def test_tab_near_the_end_drops_the_overflowing_spaces():
    p, s = _fresh("a  ")
    s = reduce(p, s, "a", 0.0)
    s = reduce(p, s, TAB, 0.0)
    assert s.position == 3
    assert len(s.verdicts) == 3


def test_backspace_at_zero_is_a_no_op():
    p, s = _fresh("abc")
    assert reduce(p, s, BACKSPACE, 1.0) is s


def test_backspace_is_inverse_of_a_keystroke():
    p, s = _fresh("abc")
    s = reduce(p, s, "a", 1.0)
    before = s
    s = reduce(p, s, "z", 2.0)
    s = reduce(p, s, BACKSPACE, 3.0)
    assert s.position == before.position
    assert s.verdicts == before.verdicts
    assert s.start_ms == before.start_ms


def test_overflow_keystrokes_are_ignored():
    p, s = _fresh("a")
    s = reduce(p, s, "a", 1.0)
    assert reduce(p, s, "b", 2.0) is s
    assert s.position == 1
    assert len(s.verdicts) == 1


def test_paste_and_unknown_keys_leave_state_untouched():
    p, s = _fresh("abc")
    for key in (PASTE, "<LEFT>", None, "", "\x1b", "ab"):
        assert reduce(p, s, key, 1.0) is s
    assert s.start_ms is None


def test_escape_reinitialises_everything():
    p, s = _fresh("abc")
    s = reduce(p, s, "a", 1.0)
    s = reduce(p, s, "x", 2.0)
    r = reduce(p, s, ESCAPE, 3.0)
    assert r == SessionState.fresh(p)
    assert reduce(p, r, ESCAPE, 4.0) == r


def test_finished_state_ignores_everything_but_escape():
    p, s = _fresh("ab")
    s = SessionState(position=1, verdicts=(Verdict(VerdictStatus.CORRECT, "a"), UNTYPED),
                     start_ms=0.0, finished=True)
    for key in ("b", BACKSPACE, TAB, ENTER):
        assert reduce(p, s, key, 1.0) is s
    assert reduce(p, s, ESCAPE, 1.0).position == 0


def test_expand_and_printable():
    assert expand(TAB) == (" ", " ", " ", " ")
    assert expand(ENTER) == ("\n",)
    assert expand("q") == ("q",)
    assert expand(BACKSPACE) is None
    assert is_printable(" ")
    assert not is_printable("\x07")


def test_changed_positions():
    p, s = _fresh("abc")
    t = reduce(p, s, "a", 0.0)
    assert changed_positions(s, t) == (0,)
    u = reduce(p, t, TAB, 0.0)
    assert changed_positions(t, u) == (1, 2)
    assert changed_positions(u, u) == ()


@pytest.mark.parametrize("seed", range(5))
def test_position_matches_typed_verdicts_for_random_input(seed):
    rng = random.Random(seed)
    p, s = _fresh("def f(x):\n\treturn x  # ok")
    keys = list("abcdefx():# ") + [BACKSPACE, ENTER, TAB, PASTE, ESCAPE, "<UP>"]
    for step in range(300):
        s = reduce(p, s, rng.choice(keys), float(step))
        assert _position_counts_verdicts(s)
        assert 0 <= s.position <= p.length()
        assert len(s.verdicts) == p.length()
