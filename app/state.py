# app/state.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


class VerdictStatus(str, Enum):
    UNTYPED = "untyped"
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass(frozen=True)
class Verdict:
    status: VerdictStatus = VerdictStatus.UNTYPED
    typed: Optional[str] = None

    @property
    def is_typed(self) -> bool:
        return self.status is not VerdictStatus.UNTYPED


UNTYPED = Verdict()


@dataclass(frozen=True)
class Prompt:
    """
    Immutable target text. Every code point is kept as-is: spaces, tabs and
    newlines are ordinary characters, nothing is trimmed or collapsed.
    """
    id: str = ""
    title: str = ""
    chars: Tuple[str, ...] = ()

    @classmethod
    def from_text(cls, text: Any, id: str = "", title: str = "") -> "Prompt":
        if not isinstance(text, str):
            if text is not None:
                logger.warning("Prompt %r has non-text content (%s); using empty prompt",
                               id, type(text).__name__)
            text = ""
        return cls(id=str(id or ""), title=str(title or ""), chars=tuple(text))

    @classmethod
    def from_problem(cls, problem: Mapping[str, Any]) -> "Prompt":
        # some problem sources ship the body under "code" instead of "text"
        text = problem.get("code") or problem.get("text")
        return cls.from_text(text, id=problem.get("id", ""), title=problem.get("title", ""))

    def length(self) -> int:
        return len(self.chars)

    def character_at(self, i: int) -> str:
        return self.chars[i]

    @property
    def text(self) -> str:
        return "".join(self.chars)

    def __len__(self) -> int:
        return len(self.chars)


@dataclass(frozen=True)
class SessionState:
    position: int = 0
    verdicts: Tuple[Verdict, ...] = ()
    start_ms: Optional[float] = None
    finished: bool = False

    @classmethod
    def fresh(cls, prompt: Prompt) -> "SessionState":
        return cls(verdicts=(UNTYPED,) * prompt.length())

    @property
    def typed_count(self) -> int:
        return sum(1 for v in self.verdicts if v.is_typed)

    @property
    def correct_count(self) -> int:
        return sum(1 for v in self.verdicts if v.status is VerdictStatus.CORRECT)

    def typed_text(self) -> str:
        return "".join(v.typed or "" for v in self.verdicts if v.is_typed)


@dataclass(frozen=True)
class AttemptRecord:
    user: str
    problem_id: str
    wpm: int
    accuracy: int
    raw_text: str
    duration_ms: int

    def to_payload(self) -> dict:
        return {
            "user": self.user,
            "problemId": self.problem_id,
            "wpm": self.wpm,
            "accuracy": self.accuracy,
            "rawText": self.raw_text,
            "durationMs": self.duration_ms,
        }


@dataclass(frozen=True)
class LiveMetrics:
    wpm: int = 0
    accuracy: int = 100
    elapsed_ms: int = 0
    typed: int = 0


@dataclass
class SubmissionOutcome:
    success: bool
    attempt: dict = field(default_factory=dict)
    error: str = ""
