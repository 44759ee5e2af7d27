"""
Domain collections store.

Holds the client's snapshot of events (every role) and users (administrators
only). The snapshot only ever changes in two ways:

- wholesale replacement by a fresh backend read (refresh_*)
- being emptied on logout (clear)

Every mutation is: send the request, and only if it succeeded, re-read the
whole matching collection. A failed request leaves the snapshot untouched and
propagates the error; nothing is ever patched optimistically.
"""

from __future__ import annotations

import logging
from typing import Optional

from eventdesk.api import ApiClient
from eventdesk.errors import AuthorizationError, ValidationError
from eventdesk.model import Event, EventDraft, Registration, Role, User
from eventdesk.session import SessionStore

logger = logging.getLogger(__name__)

# roles an administrator may onboard
ONBOARDABLE_ROLES = (Role.LECTURER, Role.STUDENT)
EVENT_MANAGERS = (Role.ADMIN, Role.LECTURER)


class DomainStore:
    def __init__(self, api: ApiClient, session: SessionStore) -> None:
        self._api = api
        self._session = session
        self._events: list[Event] = []
        self._users: list[User] = []
        # bumped by every refresh start; a response is applied only if it
        # belongs to the newest refresh of its collection
        self._events_seq = 0
        self._users_seq = 0
        session.add_logout_listener(self.clear)

    @property
    def events(self) -> list[Event]:
        return self._events

    @property
    def users(self) -> list[User]:
        return self._users

    # -----------------------------------------------------------------------
    # Refresh
    # -----------------------------------------------------------------------

    def refresh_events(self, filter: Optional[str] = None) -> None:
        self._require_login()
        self._events_seq += 1
        seq = self._events_seq
        events = self._api.list_events(filter)
        if seq != self._events_seq:
            logger.debug("Dropping stale event list (refresh #%d superseded by #%d)", seq, self._events_seq)
            return
        self._events = events

    def refresh_users(self) -> None:
        user = self._require_role(Role.ADMIN)
        self._users_seq += 1
        seq = self._users_seq
        users = self._api.list_users(institution=user.institution)
        if seq != self._users_seq:
            logger.debug("Dropping stale user list (refresh #%d superseded by #%d)", seq, self._users_seq)
            return
        self._users = users

    def refresh_all(self) -> None:
        """
        Load everything the current role is allowed to see.
        """
        user = self._require_login()
        self.refresh_events()
        if user.role == Role.ADMIN:
            self.refresh_users()

    def clear(self) -> None:
        # new refresh generations, so a response still in flight is dropped
        self._events_seq += 1
        self._users_seq += 1
        self._events = []
        self._users = []

    # -----------------------------------------------------------------------
    # Event mutations
    # -----------------------------------------------------------------------

    def create_event(self, draft: EventDraft) -> None:
        self._require_role(*EVENT_MANAGERS)
        draft.validate()
        self._api.create_event(draft)
        self.refresh_events()

    def delete_event(self, event_id: str) -> None:
        self._require_role(*EVENT_MANAGERS)
        self._api.delete_event(event_id)
        self.refresh_events()

    def register(self, event_id: str) -> None:
        """
        Register the current student. The event list is re-read afterwards so
        the registered flag comes from the server, not from a local guess.
        """
        self._require_role(Role.STUDENT)
        self._api.register_for_event(event_id)
        self.refresh_events()

    def submit_feedback(self, event_id: str, rating: int, comment: str) -> None:
        self._require_role(Role.STUDENT)
        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise ValidationError("Please select a rating between 1 and 5")
        if not (comment or "").strip():
            raise ValidationError("Please provide a comment")
        self._api.submit_feedback(event_id, rating, comment.strip())

    def registrations(self, event_id: str) -> list[Registration]:
        """
        Fetch who registered for one event. Not stored: always a fresh read.
        """
        self._require_role(*EVENT_MANAGERS)
        return self._api.get_registrations(event_id)

    # -----------------------------------------------------------------------
    # User mutations (administrators)
    # -----------------------------------------------------------------------

    def create_user(
        self,
        email: str,
        role: Role,
        department: Optional[str] = None,
        class_level: Optional[str] = None,
    ) -> None:
        self._require_role(Role.ADMIN)
        email = (email or "").strip()
        if not email:
            raise ValidationError("Email is required.")
        if role not in ONBOARDABLE_ROLES:
            raise ValidationError("New users must be lecturers or students.")
        if role != Role.STUDENT:
            department = class_level = None
        self._api.create_user(email, role, department or None, class_level or None)
        self.refresh_users()

    def delete_user(self, user_id: str) -> None:
        me = self._session.identity
        if me is not None and me.id == user_id:
            raise AuthorizationError("You cannot delete your own account.")
        self._require_role(Role.ADMIN)
        self._api.delete_user(user_id)
        self.refresh_users()

    # -----------------------------------------------------------------------
    # Guards
    # -----------------------------------------------------------------------

    def _require_login(self) -> User:
        user = self._session.identity
        if user is None:
            raise AuthorizationError("You are not logged in.")
        return user

    def _require_role(self, *roles: Role) -> User:
        user = self._require_login()
        if user.role not in roles:
            allowed = " or ".join(r.value for r in roles)
            raise AuthorizationError(f"Only {allowed} users can do this.")
        return user
