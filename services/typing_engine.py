# services/typing_engine.py
from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Protocol, Tuple
import logging
import time

from app.calculation import accuracy, words_per_minute
from app.state import AttemptRecord, LiveMetrics, Prompt, SessionState, SubmissionOutcome
from app.validation import attempt_user
from services.input_reducer import ESCAPE, changed_positions, reduce

logger = logging.getLogger(__name__)


class AttemptSubmitter(Protocol):
    def submit_attempt(self, attempt: AttemptRecord) -> Optional[SubmissionOutcome]:
        ...


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


@dataclass
class KeyResult:
    consumed: bool = False
    reset: bool = False
    changed: Tuple[int, ...] = ()
    attempt: Optional[AttemptRecord] = None


class TypingEngine:
    """
    Owns the prompt and session state for the currently displayed problem.

    Every public method returns normally: reducer transitions are total, and
    submitter/callback failures are logged rather than raised.
    """

    def __init__(
        self,
        prompt: Optional[Prompt] = None,
        user: str = "anon",
        submitter: Optional[AttemptSubmitter] = None,
        on_finish: Optional[Callable[[AttemptRecord], None]] = None,
        auto_submit: bool = True,
        clock: Callable[[], float] = monotonic_ms,
    ):
        self.user = attempt_user(user)
        self.submitter = submitter
        self.on_finish = on_finish
        self.auto_submit = auto_submit
        self.clock = clock
        self.prompt = Prompt()
        self.state = SessionState()
        self.samples: List[Tuple[float, int]] = []
        self.last_attempt: Optional[AttemptRecord] = None
        if prompt is not None:
            self.load(prompt)

    # ---------- lifecycle ----------
    def load(self, prompt: Prompt) -> Optional[AttemptRecord]:
        """Replace the prompt wholesale; the previous session is discarded."""
        self.prompt = prompt
        return self._start_fresh()

    def reset(self) -> Optional[AttemptRecord]:
        return self._start_fresh()

    def _start_fresh(self) -> Optional[AttemptRecord]:
        self.state = SessionState.fresh(self.prompt)
        self.samples = []
        self.last_attempt = None
        if self.prompt.length() == 0:
            # nothing to type: done at once, but never submitted
            return self._complete(submit=False)
        return None

    # ---------- input ----------
    def handle_key(self, key: Optional[str]) -> KeyResult:
        if key == ESCAPE:
            before = self.state
            attempt = self.reset()
            return KeyResult(
                consumed=True,
                reset=True,
                changed=changed_positions(before, self.state),
                attempt=attempt,
            )

        before = self.state
        now = self.clock()
        after = reduce(self.prompt, before, key, now)
        if after is before:
            return KeyResult()

        self.state = after
        if after.start_ms is not None:
            self.samples.append(((now - after.start_ms) / 1000.0, after.position))

        attempt = None
        if not after.finished and after.position == self.prompt.length():
            attempt = self._complete(submit=True, now=now)
        return KeyResult(consumed=True, changed=changed_positions(before, after), attempt=attempt)

    # ---------- metrics ----------
    @property
    def finished(self) -> bool:
        return self.state.finished

    def elapsed_ms(self, now: Optional[float] = None) -> float:
        start = self.state.start_ms
        if start is None:
            return 0.0
        if self.last_attempt is not None:
            return float(self.last_attempt.duration_ms)
        now = self.clock() if now is None else now
        return max(0.0, now - start)

    def live_metrics(self) -> LiveMetrics:
        elapsed = self.elapsed_ms()
        typed = self.state.typed_count
        return LiveMetrics(
            wpm=words_per_minute(typed, elapsed),
            accuracy=accuracy(self.state.verdicts),
            elapsed_ms=int(elapsed),
            typed=typed,
        )

    # ---------- completion ----------
    def _complete(self, submit: bool, now: Optional[float] = None) -> AttemptRecord:
        state = self.state
        end = self.clock() if now is None else now
        duration = int(end - state.start_ms) if state.start_ms is not None else 0
        raw = state.typed_text()
        record = AttemptRecord(
            user=self.user,
            problem_id=self.prompt.id,
            wpm=words_per_minute(len(raw), duration),
            accuracy=accuracy(state.verdicts),
            raw_text=raw,
            duration_ms=duration,
        )
        self.state = replace(state, finished=True)
        self.last_attempt = record
        logger.info("Session finished: problem=%s wpm=%d acc=%d%% duration=%dms",
                    record.problem_id or "-", record.wpm, record.accuracy, record.duration_ms)
        if submit and self.auto_submit:
            self._submit(record)
        self._notify(record)
        return record

    def _submit(self, record: AttemptRecord) -> None:
        if self.submitter is None:
            return
        try:
            outcome = self.submitter.submit_attempt(record)
        except Exception:
            logger.exception("Submitting attempt for %s failed", record.problem_id)
            return
        if outcome is not None and not outcome.success:
            logger.warning("Attempt for %s rejected: %s", record.problem_id, outcome.error)

    def _notify(self, record: AttemptRecord) -> None:
        if self.on_finish is None:
            return
        try:
            self.on_finish(record)
        except Exception:
            logger.exception("Finish callback raised")
