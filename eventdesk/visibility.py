"""
Who sees which event.

- administrators: every event of the institution
- lecturers: the events they created
- students: events whose audience matches their department or class

The audience rule is exact string matching (case-sensitive, no trimming):
department names and class sections are picked from fixed lists, so any
difference is a real difference.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from eventdesk.model import Audience, AudienceType, Event, Role, User


def is_visible(audience: Audience, viewer_department: Optional[str], viewer_class: Optional[str]) -> bool:
    if audience.unresolved:
        return False
    if audience.type == AudienceType.GENERAL:
        return True
    if audience.type == AudienceType.DEPARTMENT:
        return audience.value == viewer_department
    if audience.type == AudienceType.CLASS:
        return audience.value == viewer_class
    # unknown tag from the backend
    return False


def _all_events(events: list[Event], viewer: User) -> list[Event]:
    return list(events)


def _own_events(events: list[Event], viewer: User) -> list[Event]:
    return [e for e in events if e.creator_id == viewer.id]


def _audience_events(events: list[Event], viewer: User) -> list[Event]:
    return [e for e in events if is_visible(e.audience, viewer.department, viewer.class_level)]


_ROLE_FILTERS: dict[Role, Callable[[list[Event], User], list[Event]]] = {
    Role.ADMIN: _all_events,
    Role.LECTURER: _own_events,
    Role.STUDENT: _audience_events,
}


def events_for_viewer(events: Iterable[Event], viewer: User) -> list[Event]:
    return _ROLE_FILTERS[viewer.role](list(events), viewer)


def partition_by_time(
    events: Iterable[Event], now: Optional[datetime] = None
) -> tuple[list[Event], list[Event]]:
    """
    Split events into (upcoming, past). Upcoming means strictly after ``now``.

    Call it on every render: "now" moves, so the split must not be cached.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    upcoming: list[Event] = []
    past: list[Event] = []
    for ev in events:
        (upcoming if ev.date > now else past).append(ev)
    return upcoming, past
