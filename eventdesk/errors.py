"""
Error taxonomy shared by every layer.

All failures surfaced to a user action derive from EventDeskError, so callers
(the CLI and the interactive views) can catch a single type and print
``str(exc)``:

- ApiError            backend answered non-2xx, or the network failed
- AuthError           login / signup rejected
- AuthorizationError  acting outside one's role (incl. deleting yourself)
- ValidationError     input rejected locally, before any request is sent
- ConfigError         a bad setting in the environment or .env file
"""

from __future__ import annotations

from typing import Optional


class EventDeskError(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ApiError(EventDeskError):
    """
    Normalized transport failure.

    ``status`` is the HTTP status code, or None when no response arrived.
    """

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class AuthError(EventDeskError):
    pass


class AuthorizationError(EventDeskError):
    pass


class ValidationError(EventDeskError):
    pass


class ConfigError(EventDeskError, ValueError):
    pass
