"""Runtime settings for Typecache.

Values come from environment variables so the same build can point at a
remote attempts API or fall back to the local flat-file store.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from app.validation import ANONYMOUS, attempt_user

logger = logging.getLogger(__name__)

TAB_WIDTH: int = 4
MAX_PLAUSIBLE_WPM: int = 300
LEADERBOARD_LIMIT: int = 50
CARET_ANIMATION_MS: int = 80

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    api_url: Optional[str] = None
    data_dir: Path = Path("data")
    user: str = ANONYMOUS
    auto_submit: bool = True
    log_level: str = "INFO"
    timeout: float = 8.0

    @property
    def store_path(self) -> Path:
        return self.data_dir / "db.json"


def _parse_bool(raw: Optional[str], default: bool) -> bool:
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    logger.warning("Ignoring invalid boolean setting %r", raw)
    return default


def _parse_float(raw: Optional[str], default: float) -> float:
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid number setting %r", raw)
        return default
    return value if value > 0 else default


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ

    api_url = (env.get("TYPECACHE_API_URL") or "").strip().rstrip("/") or None
    user = attempt_user(env.get("TYPECACHE_USER"))

    level = (env.get("TYPECACHE_LOG_LEVEL") or "INFO").strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        logger.warning("Unknown log level %r, using INFO", level)
        level = "INFO"

    return Settings(
        api_url=api_url,
        data_dir=Path(env.get("TYPECACHE_DATA_DIR") or "data"),
        user=user,
        auto_submit=_parse_bool(env.get("TYPECACHE_AUTO_SUBMIT"), True),
        log_level=level,
        timeout=_parse_float(env.get("TYPECACHE_TIMEOUT"), 8.0),
    )
