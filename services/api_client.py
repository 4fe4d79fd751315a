from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from app.config import LEADERBOARD_LIMIT
from app.errors import ApiError
from app.state import AttemptRecord, SubmissionOutcome

logger = logging.getLogger(__name__)

USER_AGENT = "typecache/0.1 (python requests)"


class ApiClient:
    """Talks to the problems/attempts REST API."""

    def __init__(self, base_url: str, timeout: float = 8.0,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
        })

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = self.session.get(self._url(path), params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise ApiError(f"GET {path} failed: {e}", status=status) from e
        except (requests.RequestException, ValueError) as e:
            raise ApiError(f"GET {path} failed: {e}") from e

    def list_problems(self) -> List[Dict[str, Any]]:
        data = self._get("/api/problems")
        return data if isinstance(data, list) else []

    def get_problem(self, problem_id: str) -> Optional[Dict[str, Any]]:
        try:
            return self._get(f"/api/problems/{problem_id}")
        except ApiError as e:
            if e.status == 404:
                return None
            raise

    def leaderboard(self, problem_id: Optional[str] = None,
                    limit: int = LEADERBOARD_LIMIT) -> List[Dict[str, Any]]:
        params = {"problemId": problem_id} if problem_id else None
        data = self._get("/api/leaderboard", params=params)
        return list(data)[:limit] if isinstance(data, list) else []

    def submit_attempt(self, attempt: AttemptRecord) -> SubmissionOutcome:
        """
        POST /api/attempts. A 400 answer is a rejection (bad payload or the
        server's anti-cheat check), not a transport failure.
        """
        try:
            response = self.session.post(
                self._url("/api/attempts"),
                json=attempt.to_payload(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ApiError(f"POST /api/attempts failed: {e}") from e

        if response.status_code == 400:
            try:
                payload = response.json()
            except ValueError:
                payload = {}
            code = payload.get("error", "invalid") if isinstance(payload, dict) else "invalid"
            return SubmissionOutcome(success=False, error=str(code))
        try:
            response.raise_for_status()
            body = response.json()
        except requests.HTTPError as e:
            raise ApiError(f"POST /api/attempts failed: {e}", status=response.status_code) from e
        except ValueError as e:
            raise ApiError(f"POST /api/attempts returned non-JSON: {e}") from e

        if not isinstance(body, dict) or not body.get("success"):
            error = body.get("error", "unknown") if isinstance(body, dict) else "unknown"
            return SubmissionOutcome(success=False, error=str(error))
        logger.info("Attempt saved for %s", attempt.problem_id)
        return SubmissionOutcome(success=True, attempt=body.get("attempt") or {})
