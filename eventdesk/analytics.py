"""
Administrator analytics, computed from the in-memory collections.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from eventdesk.model import Event, Role, User

CHART_EVENTS = 5
LABEL_MAX = 15
LABEL_CUT = 12


@dataclass
class Summary:
    total_events: int
    total_users: int
    total_registrations: int
    users_by_role: dict[str, int] = field(default_factory=dict)
    # (label, registrations) for the first CHART_EVENTS events
    chart: list[tuple[str, int]] = field(default_factory=list)


def _chart_label(title: str) -> str:
    if len(title) > LABEL_MAX:
        return title[:LABEL_CUT] + "..."
    return title


def summarize(events: list[Event], users: list[User]) -> Summary:
    roles: Counter[str] = Counter(u.role.value for u in users)
    by_role: dict[str, int] = {r.value: roles.get(r.value, 0) for r in Role}

    return Summary(
        total_events=len(events),
        total_users=len(users),
        total_registrations=sum(e.registration_count for e in events),
        users_by_role=by_role,
        chart=[(_chart_label(e.title), e.registration_count) for e in events[:CHART_EVENTS]],
    )
