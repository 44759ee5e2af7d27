"""
In-memory stand-in for ApiClient, used by the store/session/CLI tests.

It keeps a canonical server-side state (events, users) and logs every call,
so tests can assert both on the resulting client state and on which
requests were (or were not) sent.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from eventdesk.errors import ApiError
from eventdesk.model import Audience, Event, EventDraft, Institution, Registration, Role, User

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_user(uid: str = "u1", role: Role = Role.ADMIN, **kw: Any) -> User:
    kw.setdefault("email", f"{uid}@uni.edu")
    kw.setdefault("institution", "Uni")
    return User(id=uid, role=role, **kw)


def make_event(eid: str = "e1", days: int = 1, audience: Optional[Audience] = None, **kw: Any) -> Event:
    kw.setdefault("title", f"Event {eid}")
    kw.setdefault("description", "")
    kw.setdefault("location", "Hall A")
    kw.setdefault("creator_id", "u1")
    kw.setdefault("creator_name", "Admin")
    kw.setdefault("institution", "Uni")
    return Event(
        id=eid,
        date=NOW + timedelta(days=days),
        audience=audience or Audience.general(),
        **kw,
    )


class FakeApi:
    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.events: list[Event] = []
        self.users: list[User] = []
        self.registrations: dict[str, list[Registration]] = {}
        self.institutions = [Institution(id="1", name="Uni")]
        self.profile: Optional[User] = None
        self.accounts: dict[tuple[str, str, str], tuple[str, User]] = {}
        # method name -> exception to raise
        self.fail: dict[str, Exception] = {}
        self._next_id = 100

    def names(self) -> list[str]:
        return [c[0] for c in self.calls]

    def _call(self, name: str, *args: Any) -> None:
        self.calls.append((name, *args))
        exc = self.fail.get(name)
        if exc is not None:
            raise exc

    def _new_id(self) -> str:
        self._next_id += 1
        return str(self._next_id)

    # auth
    def login(self, email: str, password: str, institution: str) -> tuple[str, User]:
        self._call("login", email, institution)
        try:
            return self.accounts[(email, password, institution)]
        except KeyError:
            raise ApiError("Invalid credentials", status=401) from None

    def signup(self, email: str, password: str, institution: str) -> tuple[str, User]:
        self._call("signup", email, institution)
        user = make_user(self._new_id(), Role.ADMIN, email=email, institution=institution)
        return "signup-token", user

    def get_profile(self) -> User:
        self._call("get_profile")
        if self.profile is None:
            raise ApiError("Invalid token", status=401)
        return self.profile

    def update_profile(self, username=None, current_password=None, new_password=None) -> dict:
        self._call("update_profile", username, current_password, new_password)
        return {}

    def list_institutions(self) -> list[Institution]:
        self._call("list_institutions")
        return list(self.institutions)

    # users
    def list_users(self, institution: Optional[str] = None) -> list[User]:
        self._call("list_users", institution)
        return list(self.users)

    def create_user(self, email, role, department=None, class_level=None) -> dict:
        self._call("create_user", email, role, department, class_level)
        self.users.append(make_user(self._new_id(), role, email=email, department=department, class_level=class_level))
        return {}

    def delete_user(self, user_id: str) -> None:
        self._call("delete_user", user_id)
        self.users = [u for u in self.users if u.id != user_id]

    # events
    def list_events(self, filter: Optional[str] = None) -> list[Event]:
        self._call("list_events", filter)
        return list(self.events)

    def get_registrations(self, event_id: str) -> list[Registration]:
        self._call("get_registrations", event_id)
        return list(self.registrations.get(event_id, []))

    def create_event(self, draft: EventDraft) -> dict:
        self._call("create_event", draft)
        self.events.append(make_event(self._new_id(), title=draft.title, audience=draft.audience))
        return {}

    def delete_event(self, event_id: str) -> None:
        self._call("delete_event", event_id)
        self.events = [e for e in self.events if e.id != event_id]

    def register_for_event(self, event_id: str) -> None:
        self._call("register_for_event", event_id)
        self.events = [
            replace(ev, is_registered=True, registration_count=ev.registration_count + 1) if ev.id == event_id else ev
            for ev in self.events
        ]

    def submit_feedback(self, event_id: str, rating: int, comment: str) -> None:
        self._call("submit_feedback", event_id, rating, comment)
