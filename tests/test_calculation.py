import math

from app.calculation import accuracy, rolling_wpm, words_per_minute
from app.state import Verdict, VerdictStatus, UNTYPED

OK = Verdict(VerdictStatus.CORRECT, "a")
BAD = Verdict(VerdictStatus.INCORRECT, "b")


def test_25_chars_in_a_minute_is_5_wpm():
    assert words_per_minute(25, 60000) == 5


def test_wpm_guards_zero_inputs():
    assert words_per_minute(0, 60000) == 0
    assert words_per_minute(10, 0) == 0
    assert words_per_minute(10, -5) == 0


def test_wpm_rounds_half_up():
    # 5 chars in 24s: 1 word / 0.4 min = 2.5
    assert words_per_minute(5, 24000) == 3


def test_accuracy_defaults_to_100_before_typing():
    assert accuracy(()) == 100
    assert accuracy((UNTYPED, UNTYPED)) == 100


def test_accuracy_counts_only_typed_positions():
    assert accuracy((OK, BAD, UNTYPED)) == 50
    assert accuracy((OK, OK, BAD)) == 67
    assert accuracy((OK,) * 4) == 100


def test_rolling_wpm_steady_typing():
    # one char every 0.2s = 300 chars/min = 60 wpm
    samples = [(0.2 * i, i) for i in range(1, 101)]
    series = rolling_wpm(samples, window_sec=5.0)
    assert len(series) == len(samples)
    assert math.isclose(series[-1], 60.0, rel_tol=0.05)
    assert all(math.isfinite(v) for v in series)


def test_rolling_wpm_empty():
    assert rolling_wpm([]) == []
