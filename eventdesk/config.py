"""
Runtime configuration.

Values come from the process environment; a ``.env`` file in the working
directory is loaded first (variables already set in the environment win):

    EVENTDESK_API_URL       backend base URL       (default http://localhost:5000/api)
    EVENTDESK_SESSION_FILE  where the token lives  (default ~/.eventdesk/session.json)
    EVENTDESK_TIMEOUT       request timeout, secs  (default: none)
    EVENTDESK_LOG_LEVEL     logging level          (default WARNING)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from eventdesk.errors import ConfigError

DEFAULT_API_URL = "http://localhost:5000/api"


def _default_session_path() -> Path:
    """
    Return the default location of the persisted credential.

    Using a function instead of a constant keeps the home directory lookup
    out of import time, so tests can point HOME somewhere else.
    """
    return Path.home() / ".eventdesk" / "session.json"


@dataclass(frozen=True)
class Settings:
    api_url: str = DEFAULT_API_URL
    session_file: Path = field(default_factory=_default_session_path)
    timeout: Optional[float] = None
    log_level: str = "WARNING"


def _parse_timeout(raw: Optional[str]) -> Optional[float]:
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"EVENTDESK_TIMEOUT must be a number, got {raw!r}") from None
    return value if value > 0 else None


def _parse_log_level(raw: Optional[str]) -> str:
    level = (raw or "WARNING").strip().upper() or "WARNING"
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"EVENTDESK_LOG_LEVEL must be a logging level name, got {raw!r}")
    return level


def load_settings(env: Optional[Mapping[str, str]] = None, dotenv: bool = True) -> Settings:
    """
    Build Settings from ``env`` (defaults to os.environ).

    Pass an explicit mapping (and dotenv=False) in tests to stay independent
    of the developer's shell.
    """
    if dotenv:
        load_dotenv(override=False)
    source = os.environ if env is None else env

    api_url = (source.get("EVENTDESK_API_URL") or DEFAULT_API_URL).strip().rstrip("/")
    session_raw = (source.get("EVENTDESK_SESSION_FILE") or "").strip()
    session_file = Path(session_raw).expanduser() if session_raw else _default_session_path()

    return Settings(
        api_url=api_url,
        session_file=session_file,
        timeout=_parse_timeout(source.get("EVENTDESK_TIMEOUT")),
        log_level=_parse_log_level(source.get("EVENTDESK_LOG_LEVEL")),
    )
