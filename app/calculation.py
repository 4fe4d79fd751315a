import math
from typing import List, Sequence, Tuple

from app.state import VerdictStatus, Verdict

CHARS_PER_WORD = 5


def _round(x: float) -> int:
    # half-up, not banker's rounding: 2.5 -> 3
    return int(math.floor(x + 0.5))


def words_per_minute(typed_count: int, elapsed_ms: float) -> int:
    """
    WPM = (typed chars / 5) / minutes, rounded.
    Zero elapsed time or nothing typed gives 0 (never inf/NaN).
    """
    if typed_count <= 0 or elapsed_ms <= 0:
        return 0
    minutes = elapsed_ms / 60000.0
    return _round((typed_count / CHARS_PER_WORD) / minutes)


def accuracy(verdicts: Sequence[Verdict]) -> int:
    typed = 0
    correct = 0
    for v in verdicts:
        if v.status is VerdictStatus.UNTYPED:
            continue
        typed += 1
        if v.status is VerdictStatus.CORRECT:
            correct += 1
    if typed == 0:
        return 100
    return _round(100.0 * correct / typed)


def rolling_wpm(samples: Sequence[Tuple[float, int]], window_sec: float = 5.0) -> List[float]:
    """
    WPM over a sliding window, one value per sample.
    samples: (elapsed seconds, typed count) in time order.
    WPM = (chars gained since window start / 5) / (window / 60)
    """
    out: List[float] = []
    start_idx = 0
    for i, (t_now, count_now) in enumerate(samples):
        # move start index to keep window within [t_now - window_sec, t_now]
        while start_idx < i and samples[start_idx][0] < t_now - window_sec:
            start_idx += 1
        t_base, count_base = samples[start_idx - 1] if start_idx > 0 else (0.0, 0)
        gained = max(0, count_now - count_base)
        dur = max(0.5, t_now - t_base)  # avoid spikes
        out.append((gained / float(CHARS_PER_WORD)) / (dur / 60.0))
    return out
