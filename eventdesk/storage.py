"""
Persistent storage for the bearer credential.

This module manages one small JSON file (by default ~/.eventdesk/session.json):

    {"authToken": "<opaque token>"}

The token is the only thing persisted. The identity is always re-fetched from
the backend on startup, so a stale profile can never outlive a revoked token.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

TOKEN_KEY = "authToken"

logger = logging.getLogger(__name__)


class TokenStore:
    """
    Durable home of the credential, outside any in-memory state.

    The transport layer reads the token through ``load`` on every request;
    only SessionStore writes it.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> Optional[str]:
        """
        Return the stored token, or None if there is none.

        A missing, unreadable or corrupted file counts as "no token": the
        session then simply starts anonymous.
        """
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, exc)
            return None
        if not isinstance(data, dict):
            return None
        token = data.get(TOKEN_KEY)
        if isinstance(token, str) and token.strip():
            return token.strip()
        return None

    def save(self, token: str) -> None:
        """
        Persist ``token``, creating parent directories if needed.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {TOKEN_KEY: token}
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        try:
            self.path.chmod(0o600)
        except OSError:
            # not supported everywhere (e.g. some Windows filesystems)
            logger.debug("Could not restrict permissions on %s", self.path)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
