from __future__ import annotations

import json
import logging
import os
import threading
import time
import uuid
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from app.config import LEADERBOARD_LIMIT, MAX_PLAUSIBLE_WPM
from app.errors import StoreError, ValidationError
from app.state import AttemptRecord, SubmissionOutcome
from app.validation import attempt_user

logger = logging.getLogger(__name__)

SEED_PROBLEMS: List[Dict[str, str]] = [
    {
        "id": "p1",
        "title": "Reverse String",
        "text": "Write a function to reverse a string.",
        "difficulty": "easy",
    },
    {
        "id": "p2",
        "title": "Two Sum",
        "text": (
            "Given array nums and target, return indices of the two numbers "
            "such that they add up to target."
        ),
        "difficulty": "easy",
    },
    {
        "id": "p3",
        "title": "FizzBuzz",
        "text": (
            "Write a program that prints the numbers from 1 to n. For multiples "
            "of three print 'Fizz' instead of the number and for the multiples "
            "of five print 'Buzz'."
        ),
        "difficulty": "easy",
    },
]


def _empty() -> Dict[str, list]:
    return {"problems": [], "attempts": []}


def rank_attempts(
    attempts: Iterable[Dict[str, Any]],
    problem_id: Optional[str] = None,
    limit: int = LEADERBOARD_LIMIT,
) -> List[Dict[str, Any]]:
    """Top attempts by wpm, ties broken by accuracy (both descending)."""
    pool = [a for a in attempts if problem_id is None or a.get("problemId") == problem_id]
    pool.sort(key=lambda a: (-(a.get("wpm") or 0), -(a.get("accuracy") or 0)))
    return pool[:limit]


class RecordStore:
    """
    Flat JSON file holding ``problems`` and ``attempts``.
    Applies the same acceptance rules as the attempts API so the app works
    offline with identical results.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        # load/modify/save cycles run on pool threads
        self._lock = threading.RLock()

    # ---------- file ----------
    def load(self) -> Dict[str, list]:
        with self._lock:
            data = self._read()
            data.setdefault("problems", [])
            data.setdefault("attempts", [])
            if not data["problems"]:
                data["problems"] = [dict(p) for p in SEED_PROBLEMS]
                self._save(data)
            return data

    def _read(self) -> Dict[str, list]:
        if not self.path.exists():
            return _empty()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            self._quarantine()
            return _empty()
        except OSError as e:
            raise StoreError(f"cannot read {self.path}: {e}") from e
        if not isinstance(data, dict):
            self._quarantine()
            return _empty()
        return data

    def _quarantine(self) -> None:
        """Move an unreadable store aside so seeding never overwrites it."""
        bad = self.path.with_name(self.path.name + ".bad")
        try:
            os.replace(self.path, bad)
        except OSError as e:
            raise StoreError(f"cannot move unreadable {self.path} aside: {e}") from e
        logger.warning("Record store %s is not valid; moved to %s and starting empty", self.path, bad)

    def _save(self, data: Dict[str, list]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StoreError(f"cannot write {self.path}: {e}") from e

    # ---------- problems ----------
    def list_problems(self) -> List[Dict[str, Any]]:
        return list(self.load()["problems"])

    def get_problem(self, problem_id: str) -> Optional[Dict[str, Any]]:
        for p in self.load()["problems"]:
            if p.get("id") == problem_id:
                return p
        return None

    # ---------- attempts ----------
    def add_attempt(self, body: Dict[str, Any]) -> Dict[str, Any]:
        if not body or not body.get("problemId"):
            raise ValidationError("invalid")
        wpm = body.get("wpm")
        if isinstance(wpm, (int, float)) and wpm > MAX_PLAUSIBLE_WPM:
            raise ValidationError("cheat_detected")

        with self._lock:
            data = self.load()
            attempt = {
                "id": uuid.uuid4().hex[:21],
                "user": attempt_user(body.get("user")),
                "problemId": body["problemId"],
                "wpm": wpm,
                "accuracy": body.get("accuracy"),
                "rawText": body.get("rawText") or "",
                "durationMs": body.get("durationMs"),
                "createdAt": int(time.time() * 1000),
            }
            data["attempts"].append(attempt)
            self._save(data)
        return attempt

    def submit_attempt(self, attempt: AttemptRecord) -> SubmissionOutcome:
        try:
            saved = self.add_attempt(attempt.to_payload())
        except ValidationError as e:
            return SubmissionOutcome(success=False, error=e.code)
        return SubmissionOutcome(success=True, attempt=saved)

    def leaderboard(self, problem_id: Optional[str] = None,
                    limit: int = LEADERBOARD_LIMIT) -> List[Dict[str, Any]]:
        return rank_attempts(self.load()["attempts"], problem_id, limit)
