"""
Session store: who is logged in.

States:

    RESTORING ──(no token / token rejected)──> ANONYMOUS
    RESTORING ──(token accepted)─────────────> AUTHENTICATED
    ANONYMOUS ──(login / signup)─────────────> AUTHENTICATED
    AUTHENTICATED ──(logout)─────────────────> ANONYMOUS

The store owns the identity and the credential. The credential lives in the
TokenStore (on disk), never only in memory, so a restart can restore it.
"""

from __future__ import annotations

import dataclasses
import logging
from enum import Enum
from typing import Any, Callable, Optional

from eventdesk.api import ApiClient
from eventdesk.errors import ApiError, AuthError, EventDeskError, ValidationError
from eventdesk.model import User
from eventdesk.storage import TokenStore

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

# fields a client may never change locally
_IMMUTABLE_FIELDS = ("id", "role")


class SessionState(Enum):
    RESTORING = "restoring"
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


class SessionStore:
    def __init__(self, api: ApiClient, tokens: TokenStore) -> None:
        self._api = api
        self._tokens = tokens
        self._state = SessionState.RESTORING
        self._identity: Optional[User] = None
        self._logout_listeners: list[Callable[[], None]] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def identity(self) -> Optional[User]:
        return self._identity

    @property
    def loading(self) -> bool:
        return self._state is SessionState.RESTORING

    @property
    def is_authenticated(self) -> bool:
        return self._state is SessionState.AUTHENTICATED

    def add_logout_listener(self, callback: Callable[[], None]) -> None:
        self._logout_listeners.append(callback)

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------

    def restore(self) -> None:
        """
        Re-establish the identity from the persisted token, if any.

        A rejected token (or a network failure while checking it) is deleted
        and the session falls back to anonymous. Nothing is raised: there is
        no user action to report the failure against.
        """
        token = self._tokens.load()
        if not token:
            self._set_anonymous()
            return
        try:
            user = self._api.get_profile()
        except EventDeskError as exc:
            logger.warning("Stored session could not be restored (%s); signing out.", exc)
            self._tokens.clear()
            self._set_anonymous()
            return
        self._set_authenticated(user)

    def login(self, email: str, password: str, institution: str) -> User:
        return self._authenticate("login", email, password, institution)

    def signup(self, email: str, password: str, institution: str) -> User:
        """
        Self-service signup. Only administrators onboard themselves this way;
        lecturers and students are created by an administrator.
        """
        return self._authenticate("signup", email, password, institution)

    def _authenticate(self, mode: str, email: str, password: str, institution: str) -> User:
        email = (email or "").strip()
        institution = (institution or "").strip()
        if not email or not password or not institution:
            raise AuthError("Email, password and institution are required.")

        call = self._api.login if mode == "login" else self._api.signup
        try:
            token, user = call(email, password, institution)
        except ApiError as exc:
            raise AuthError(exc.message) from exc

        self._tokens.save(token)
        self._set_authenticated(user)
        return user

    def logout(self) -> None:
        """
        Forget the credential and the identity. Local only, idempotent.
        """
        self._tokens.clear()
        was_authenticated = self._identity is not None
        self._set_anonymous()
        for callback in self._logout_listeners:
            callback()
        if was_authenticated:
            logger.info("Logged out.")

    # -----------------------------------------------------------------------
    # Identity changes
    # -----------------------------------------------------------------------

    def update_identity(self, **changes: Any) -> None:
        """
        Mirror a change the backend already confirmed into the local identity.

        Does not call the backend. No-op while anonymous.
        """
        if self._identity is None:
            return
        forbidden = [k for k in changes if k in _IMMUTABLE_FIELDS]
        if forbidden:
            raise ValidationError(f"Cannot change {', '.join(forbidden)} of a user.")
        self._identity = dataclasses.replace(self._identity, **changes)

    def update_profile(
        self,
        username: Optional[str] = None,
        current_password: Optional[str] = None,
        new_password: Optional[str] = None,
        confirm_password: Optional[str] = None,
    ) -> User:
        """
        Change the display name and/or password.

        Checks run before anything is sent; the local identity only changes
        after the backend accepted the update.
        """
        if self._identity is None:
            raise AuthError("You are not logged in.")

        if new_password:
            if new_password != confirm_password:
                raise ValidationError("Passwords do not match!")
            if len(new_password) < MIN_PASSWORD_LENGTH:
                raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
            if not current_password:
                raise ValidationError("Current password is required to change password")

        new_name = (username or "").strip() or None
        if new_name == self._identity.username:
            new_name = None
        if new_name is None and not new_password:
            raise ValidationError("Nothing to update.")

        self._api.update_profile(
            username=new_name,
            current_password=current_password if new_password else None,
            new_password=new_password or None,
        )
        if new_name is not None:
            self.update_identity(username=new_name)
        return self._identity

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------

    def _set_authenticated(self, user: User) -> None:
        self._identity = user
        self._state = SessionState.AUTHENTICATED
        logger.info("Signed in as %s (%s).", user.email, user.role.value)

    def _set_anonymous(self) -> None:
        self._identity = None
        self._state = SessionState.ANONYMOUS
